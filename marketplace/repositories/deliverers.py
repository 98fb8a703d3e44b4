"""SQLAlchemy-backed deliverer repository."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from marketplace.models import Deliverer, DelivererAvailability


class SqlDelivererRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, deliverer_id: int) -> Deliverer | None:
        return self.db.get(Deliverer, deliverer_id)

    def compare_and_set_availability(
        self,
        deliverer_id: int,
        expected: DelivererAvailability,
        new: DelivererAvailability,
    ) -> bool:
        """Move availability ``expected -> new``; False when the row no longer matches."""
        result = self.db.execute(
            update(Deliverer)
            .where(Deliverer.id == deliverer_id, Deliverer.availability == expected)
            .values(availability=new)
        )
        return result.rowcount == 1

    def list_by_availability(self, availability: DelivererAvailability) -> Sequence[Deliverer]:
        return self.db.scalars(
            select(Deliverer).where(Deliverer.availability == availability).order_by(Deliverer.name.asc(), Deliverer.id.asc())
        ).all()
