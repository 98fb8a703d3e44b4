"""Order event trail, modelled on an append-only audit log."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace.models import ActorRole, OrderEvent, OrderStatus


class SqlOrderEventLog:
    def __init__(self, db: Session) -> None:
        self.db = db

    def record(
        self,
        *,
        order_id: int,
        event_type: str,
        actor_role: ActorRole,
        actor_id: int,
        from_status: OrderStatus | None = None,
        to_status: OrderStatus | None = None,
        deliverer_id: int | None = None,
    ) -> None:
        self.db.add(
            OrderEvent(
                order_id=order_id,
                event_type=event_type,
                actor_role=actor_role.value,
                actor_id=actor_id,
                from_status=from_status.value if from_status is not None else None,
                to_status=to_status.value if to_status is not None else None,
                deliverer_id=deliverer_id,
            )
        )

    def list_for_order(self, order_id: int) -> Sequence[OrderEvent]:
        return self.db.scalars(
            select(OrderEvent).where(OrderEvent.order_id == order_id).order_by(OrderEvent.id.asc())
        ).all()
