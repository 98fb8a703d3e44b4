"""Bearer-token resolution of the calling actor.

Tokens are issued by the external auth subsystem and carry ``sub`` (actor id)
and ``role`` (client, restaurant or deliverer).
"""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from marketplace.core.config import settings
from marketplace.core.errors import ForbiddenOperationError
from marketplace.models import ActorRole
from marketplace.schemas.auth import CurrentActor

bearer_scheme: HTTPBearer = HTTPBearer(auto_error=False)


def create_access_token(data: dict[str, Any]) -> str:
    """Create a signed JWT access token from payload data.

    Production tokens come from the external auth subsystem; this is used to
    mint tokens for local runs and tests with the same secret and algorithm.
    """
    to_encode: dict[str, Any] = data.copy()
    expire: datetime = datetime.now(timezone.utc) + timedelta(
        minutes=settings.jwt_expire_minutes
    )
    to_encode.update({"exp": expire})
    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def verify_token(token: str) -> dict[str, Any]:
    """Decode and validate a JWT token payload."""
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from exc

    return payload


def get_current_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> CurrentActor:
    """Resolve the authenticated actor from the Authorization header."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    payload: dict[str, Any] = verify_token(credentials.credentials)
    try:
        actor_id: int = int(payload["sub"])
        role: ActorRole = ActorRole(str(payload["role"]).lower())
    except (KeyError, TypeError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
        ) from exc

    return CurrentActor(role=role, actor_id=actor_id)


def require_role(*roles: ActorRole) -> Callable[[CurrentActor], CurrentActor]:
    """Build a dependency that admits only the given actor roles."""

    allowed = set(roles)

    def _checker(actor: CurrentActor = Depends(get_current_actor)) -> CurrentActor:
        if actor.role not in allowed:
            raise ForbiddenOperationError(
                "Actor role may not perform this operation",
                details={"role": actor.role.value},
            )
        return actor

    return _checker
