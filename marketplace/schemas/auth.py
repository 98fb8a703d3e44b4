"""Caller identity schemas."""

from pydantic import BaseModel, ConfigDict

from marketplace.models import ActorRole


class CurrentActor(BaseModel):
    """Authenticated caller resolved from the bearer token."""

    role: ActorRole
    actor_id: int

    model_config = ConfigDict(frozen=True)
