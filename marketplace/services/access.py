"""Order query gate: the single place where order ownership is decided."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from marketplace.core.errors import ForbiddenOperationError, NotFoundError
from marketplace.models import ActorRole, Order, OrderEvent, OrderStatus
from marketplace.repositories.ports import OrderEventLog, OrderRepository

logger = logging.getLogger(__name__)


def order_owner_id(order: Order, actor_role: ActorRole) -> int | None:
    """Return the id that must match the actor for the given role."""
    if actor_role == ActorRole.CLIENT:
        return order.client_id
    if actor_role == ActorRole.RESTAURANT:
        return order.restaurant_id
    return order.deliverer_id


def ensure_order_access(order: Order, actor_role: ActorRole, actor_id: int) -> None:
    """Raise ``ForbiddenOperationError`` unless the actor owns the order."""
    owner_id = order_owner_id(order, actor_role)
    if owner_id is None or owner_id != actor_id:
        logger.warning(
            "Rejected access to order_id=%s for %s actor_id=%s",
            order.id,
            actor_role.value,
            actor_id,
        )
        raise ForbiddenOperationError(
            "Order does not belong to this actor",
            resource="order",
            resource_id=order.id,
        )


class OrderAccessGate:
    """Resolve orders for an actor, enforcing ownership before returning data."""

    def __init__(self, *, orders: OrderRepository, events: OrderEventLog) -> None:
        self.orders = orders
        self.events = events

    def get_order(self, order_id: int, actor_id: int, actor_role: ActorRole) -> Order:
        order: Order | None = self.orders.get(order_id)
        if order is None:
            raise NotFoundError("order", order_id)
        ensure_order_access(order, actor_role, actor_id)
        return order

    def list_orders(
        self,
        actor_id: int,
        actor_role: ActorRole,
        status: OrderStatus | None = None,
    ) -> Sequence[Order]:
        """List the actor's own orders, newest first."""
        if actor_role == ActorRole.CLIENT:
            orders = self.orders.list_by_client(actor_id)
        elif actor_role == ActorRole.RESTAURANT:
            return self.orders.list_by_restaurant(actor_id, status)
        else:
            orders = self.orders.list_by_deliverer(actor_id)
        if status is None:
            return orders
        return [order for order in orders if order.status == status]

    def history(self, order_id: int, actor_id: int, actor_role: ActorRole) -> Sequence[OrderEvent]:
        order = self.get_order(order_id, actor_id, actor_role)
        return self.events.list_for_order(order.id)
