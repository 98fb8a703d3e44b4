"""Deliverer assignment and release."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from marketplace.core.errors import (
    ConcurrentModificationError,
    DelivererUnavailableError,
    ForbiddenOperationError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from marketplace.db.transaction import TransactionScope
from marketplace.models import ActorRole, Deliverer, DelivererAvailability, Order, OrderStatus
from marketplace.models.order_event import EVENT_DELIVERER_ASSIGNED
from marketplace.repositories.ports import DelivererRepository, OrderEventLog, OrderRepository

logger = logging.getLogger(__name__)

# Re-assignment while already en route is allowed; the previous deliverer is released.
ASSIGNABLE_STATUSES: frozenset[OrderStatus] = frozenset({OrderStatus.READY, OrderStatus.OUT_FOR_DELIVERY})
SELF_SERVICE_AVAILABILITY: frozenset[DelivererAvailability] = frozenset(
    {DelivererAvailability.AVAILABLE, DelivererAvailability.UNAVAILABLE}
)


class AssignmentCoordinator:
    """Bind deliverers to orders and return them to the pool."""

    def __init__(
        self,
        *,
        orders: OrderRepository,
        deliverers: DelivererRepository,
        events: OrderEventLog,
        transaction: TransactionScope,
    ) -> None:
        self.orders = orders
        self.deliverers = deliverers
        self.events = events
        self.transaction = transaction

    def assign(self, order_id: int, restaurant_id: int, deliverer_id: int) -> Order:
        """Set the order's deliverer and mark the deliverer ``OnDelivery`` atomically."""
        order: Order | None = self.orders.get(order_id)
        if order is None:
            raise NotFoundError("order", order_id)
        if order.restaurant_id != restaurant_id:
            raise ForbiddenOperationError(
                "Order belongs to another restaurant",
                resource="order",
                resource_id=order_id,
            )
        if order.status not in ASSIGNABLE_STATUSES:
            raise InvalidStateError(
                f"Deliverer can only be assigned when the order is Ready or OutForDelivery, not {order.status.value}",
                resource="order",
                resource_id=order_id,
                details={"current_status": order.status.value},
            )
        deliverer: Deliverer | None = self.deliverers.get(deliverer_id)
        if deliverer is None:
            raise NotFoundError("deliverer", deliverer_id)
        if deliverer.availability != DelivererAvailability.AVAILABLE:
            raise DelivererUnavailableError(deliverer_id, deliverer.availability.value)

        expected_status = order.status
        previous_deliverer_id = order.deliverer_id
        with self.transaction.begin():
            if not self.deliverers.compare_and_set_availability(
                deliverer_id,
                DelivererAvailability.AVAILABLE,
                DelivererAvailability.ON_DELIVERY,
            ):
                raise DelivererUnavailableError(deliverer_id)
            if not self.orders.compare_and_set_deliverer(
                order_id,
                expected_status,
                previous_deliverer_id,
                deliverer_id,
            ):
                logger.warning("Concurrent change while assigning deliverer to order_id=%s", order_id)
                raise ConcurrentModificationError("order", order_id, expected=expected_status.value)
            if previous_deliverer_id is not None:
                self.release_within(previous_deliverer_id)
            self.events.record(
                order_id=order_id,
                event_type=EVENT_DELIVERER_ASSIGNED,
                actor_role=ActorRole.RESTAURANT,
                actor_id=restaurant_id,
                from_status=expected_status,
                to_status=expected_status,
                deliverer_id=deliverer_id,
            )

        logger.info(
            "Assigned deliverer_id=%s to order_id=%s (previous=%s)",
            deliverer_id,
            order_id,
            previous_deliverer_id,
        )
        assigned = self.orders.get(order_id)
        if assigned is None:
            raise NotFoundError("order", order_id)
        return assigned

    def release(self, deliverer_id: int) -> None:
        """Return a deliverer to ``Available``; a no-op when already released."""
        with self.transaction.begin():
            self.release_within(deliverer_id)

    def release_within(self, deliverer_id: int) -> None:
        """Release inside a transaction owned by the caller."""
        if self.deliverers.compare_and_set_availability(
            deliverer_id,
            DelivererAvailability.ON_DELIVERY,
            DelivererAvailability.AVAILABLE,
        ):
            logger.info("Released deliverer_id=%s", deliverer_id)
            return
        if self.deliverers.get(deliverer_id) is None:
            raise NotFoundError("deliverer", deliverer_id)

    def set_availability(self, deliverer_id: int, availability: DelivererAvailability) -> Deliverer:
        """Let a deliverer go online or offline while not on a delivery."""
        if availability not in SELF_SERVICE_AVAILABILITY:
            raise ValidationError(
                "Availability can only be set to Available or Unavailable",
                field="availability",
            )
        deliverer: Deliverer | None = self.deliverers.get(deliverer_id)
        if deliverer is None:
            raise NotFoundError("deliverer", deliverer_id)
        current = deliverer.availability
        if current == DelivererAvailability.ON_DELIVERY:
            raise InvalidStateError(
                "Deliverer is on a delivery",
                resource="deliverer",
                resource_id=deliverer_id,
                details={"availability": current.value},
            )
        if current == availability:
            return deliverer

        with self.transaction.begin():
            if not self.deliverers.compare_and_set_availability(deliverer_id, current, availability):
                raise ConcurrentModificationError("deliverer", deliverer_id)

        logger.info("deliverer_id=%s is now %s", deliverer_id, availability.value)
        updated = self.deliverers.get(deliverer_id)
        if updated is None:
            raise NotFoundError("deliverer", deliverer_id)
        return updated

    def list_available(self) -> Sequence[Deliverer]:
        return self.deliverers.list_by_availability(DelivererAvailability.AVAILABLE)
