"""Order status transitions and the actors allowed to request them."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from marketplace.core.errors import ConcurrentModificationError, InvalidTransitionError, NotFoundError
from marketplace.db.transaction import TransactionScope
from marketplace.models import TERMINAL_STATUSES, ActorRole, Order, OrderStatus
from marketplace.models.order_event import EVENT_STATUS_CHANGED
from marketplace.repositories.ports import OrderEventLog, OrderRepository
from marketplace.services.access import ensure_order_access
from marketplace.services.assignment import AssignmentCoordinator

logger = logging.getLogger(__name__)

CLIENT = ActorRole.CLIENT
RESTAURANT = ActorRole.RESTAURANT
DELIVERER = ActorRole.DELIVERER

# current status -> {next status: actors allowed to request it}
ALLOWED_TRANSITIONS: dict[OrderStatus, dict[OrderStatus, frozenset[ActorRole]]] = {
    OrderStatus.PENDING: {
        OrderStatus.CONFIRMED: frozenset({RESTAURANT}),
        OrderStatus.CANCELLED: frozenset({RESTAURANT, CLIENT}),
    },
    OrderStatus.CONFIRMED: {
        OrderStatus.IN_PREPARATION: frozenset({RESTAURANT}),
        OrderStatus.CANCELLED: frozenset({RESTAURANT}),
    },
    OrderStatus.IN_PREPARATION: {
        OrderStatus.READY: frozenset({RESTAURANT}),
        OrderStatus.CANCELLED: frozenset({RESTAURANT}),
    },
    OrderStatus.READY: {
        OrderStatus.OUT_FOR_DELIVERY: frozenset({RESTAURANT}),
        OrderStatus.CANCELLED: frozenset({RESTAURANT}),
    },
    OrderStatus.OUT_FOR_DELIVERY: {
        OrderStatus.AWAITING_CLIENT_CONFIRMATION: frozenset({DELIVERER}),
        OrderStatus.DELIVERED: frozenset({DELIVERER}),
        OrderStatus.CANCELLED: frozenset({DELIVERER}),
    },
    OrderStatus.AWAITING_CLIENT_CONFIRMATION: {
        OrderStatus.DELIVERED: frozenset({DELIVERER, CLIENT}),
        # Clients may cancel only while Pending.
        OrderStatus.CANCELLED: frozenset({DELIVERER}),
    },
    OrderStatus.DELIVERED: {},
    OrderStatus.CANCELLED: {},
}


def can_transition(current: OrderStatus, new: OrderStatus, actor_role: ActorRole) -> bool:
    """Return whether ``actor_role`` may move an order from current to new status."""
    return actor_role in ALLOWED_TRANSITIONS.get(current, {}).get(new, frozenset())


def next_statuses(current: OrderStatus, actor_role: ActorRole) -> list[OrderStatus]:
    """Statuses the actor may request from ``current``, in workflow order."""
    return [status for status in OrderStatus if can_transition(current, status, actor_role)]


class OrderStateMachine:
    """Apply status changes with ownership checks and compare-and-set writes."""

    def __init__(
        self,
        *,
        orders: OrderRepository,
        events: OrderEventLog,
        assignments: AssignmentCoordinator,
        transaction: TransactionScope,
    ) -> None:
        self.orders = orders
        self.events = events
        self.assignments = assignments
        self.transaction = transaction

    def transition(
        self,
        order_id: int,
        actor: ActorRole,
        actor_id: int,
        requested_status: OrderStatus,
    ) -> Order:
        order: Order | None = self.orders.get(order_id)
        if order is None:
            raise NotFoundError("order", order_id)
        ensure_order_access(order, actor, actor_id)

        current: OrderStatus = order.status
        if not can_transition(current, requested_status, actor):
            raise InvalidTransitionError(order_id, current.value, requested_status.value, actor.value)

        now = datetime.now(timezone.utc)
        with self.transaction.begin():
            if not self.orders.compare_and_set_status(order_id, current, requested_status, now):
                logger.warning(
                    "Lost update on order_id=%s: expected %s while applying %s",
                    order_id,
                    current.value,
                    requested_status.value,
                )
                raise ConcurrentModificationError("order", order_id, expected=current.value)
            self.events.record(
                order_id=order_id,
                event_type=EVENT_STATUS_CHANGED,
                actor_role=actor,
                actor_id=actor_id,
                from_status=current,
                to_status=requested_status,
            )
            if requested_status in TERMINAL_STATUSES:
                deliverer_id = self.orders.current_deliverer_id(order_id)
                if deliverer_id is not None:
                    self.assignments.release_within(deliverer_id)

        logger.info(
            "Order order_id=%s moved %s -> %s by %s actor_id=%s",
            order_id,
            current.value,
            requested_status.value,
            actor.value,
            actor_id,
        )
        updated = self.orders.get(order_id)
        if updated is None:
            raise NotFoundError("order", order_id)
        return updated
