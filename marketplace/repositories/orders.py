"""SQLAlchemy-backed order repository."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from marketplace.models import Order, OrderStatus


class SqlOrderRepository:
    """Order persistence over a request-scoped session.

    Writes only flush; the surrounding ``TransactionScope`` commits.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def add(self, order: Order) -> Order:
        self.db.add(order)
        self.db.flush()
        return order

    def get(self, order_id: int) -> Order | None:
        return self.db.scalar(
            select(Order).options(selectinload(Order.lines)).where(Order.id == order_id).limit(1)
        )

    def compare_and_set_status(
        self,
        order_id: int,
        expected: OrderStatus,
        new: OrderStatus,
        now: datetime,
    ) -> bool:
        """Write ``new`` only if the stored status is still ``expected``."""
        result = self.db.execute(
            update(Order)
            .where(Order.id == order_id, Order.status == expected)
            .values(status=new, status_updated_at=now)
        )
        return result.rowcount == 1

    def compare_and_set_deliverer(
        self,
        order_id: int,
        expected_status: OrderStatus,
        expected_deliverer_id: int | None,
        deliverer_id: int,
    ) -> bool:
        """Bind a deliverer only if status and previous deliverer are unchanged."""
        if expected_deliverer_id is None:
            deliverer_clause = Order.deliverer_id.is_(None)
        else:
            deliverer_clause = Order.deliverer_id == expected_deliverer_id
        result = self.db.execute(
            update(Order)
            .where(Order.id == order_id, Order.status == expected_status, deliverer_clause)
            .values(deliverer_id=deliverer_id)
        )
        return result.rowcount == 1

    def current_deliverer_id(self, order_id: int) -> int | None:
        """Read the stored deliverer, bypassing objects cached in the session."""
        return self.db.scalar(select(Order.deliverer_id).where(Order.id == order_id))

    def list_by_client(self, client_id: int) -> Sequence[Order]:
        return self.db.scalars(
            select(Order)
            .options(selectinload(Order.lines))
            .where(Order.client_id == client_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        ).all()

    def list_by_restaurant(self, restaurant_id: int, status: OrderStatus | None = None) -> Sequence[Order]:
        stmt = select(Order).options(selectinload(Order.lines)).where(Order.restaurant_id == restaurant_id)
        if status is not None:
            stmt = stmt.where(Order.status == status)
        return self.db.scalars(stmt.order_by(Order.created_at.desc(), Order.id.desc())).all()

    def list_by_deliverer(self, deliverer_id: int) -> Sequence[Order]:
        return self.db.scalars(
            select(Order)
            .options(selectinload(Order.lines))
            .where(Order.deliverer_id == deliverer_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        ).all()
