"""Access gate tests against in-memory repositories."""

from decimal import Decimal

import pytest

from marketplace.core.errors import ForbiddenOperationError, NotFoundError
from marketplace.models import ActorRole, Order, OrderEvent, OrderStatus, PaymentMethod
from marketplace.services.access import OrderAccessGate, order_owner_id


def _order(order_id: int, status: OrderStatus = OrderStatus.PENDING, deliverer_id: int | None = None) -> Order:
    return Order(
        id=order_id,
        client_id=3,
        restaurant_id=1,
        address_id=7,
        deliverer_id=deliverer_id,
        status=status,
        total=Decimal("29.00"),
        payment_method=PaymentMethod.CASH,
    )


class InMemoryOrders:
    def __init__(self, orders: list[Order]) -> None:
        self.orders = {order.id: order for order in orders}

    def get(self, order_id: int) -> Order | None:
        return self.orders.get(order_id)

    def list_by_client(self, client_id: int) -> list[Order]:
        return [order for order in self.orders.values() if order.client_id == client_id]

    def list_by_restaurant(self, restaurant_id: int, status: OrderStatus | None = None) -> list[Order]:
        return [
            order
            for order in self.orders.values()
            if order.restaurant_id == restaurant_id and (status is None or order.status == status)
        ]

    def list_by_deliverer(self, deliverer_id: int) -> list[Order]:
        return [order for order in self.orders.values() if order.deliverer_id == deliverer_id]


class InMemoryEvents:
    def __init__(self, events: list[OrderEvent]) -> None:
        self.events = events

    def list_for_order(self, order_id: int) -> list[OrderEvent]:
        return [event for event in self.events if event.order_id == order_id]


def _gate(*orders: Order, events: list[OrderEvent] | None = None) -> OrderAccessGate:
    return OrderAccessGate(orders=InMemoryOrders(list(orders)), events=InMemoryEvents(events or []))


def test_owner_id_follows_actor_role() -> None:
    order = _order(1, deliverer_id=20)

    assert order_owner_id(order, ActorRole.CLIENT) == 3
    assert order_owner_id(order, ActorRole.RESTAURANT) == 1
    assert order_owner_id(order, ActorRole.DELIVERER) == 20


@pytest.mark.parametrize(
    ("role", "actor_id"),
    [(ActorRole.CLIENT, 3), (ActorRole.RESTAURANT, 1), (ActorRole.DELIVERER, 20)],
)
def test_owners_can_read_order(role: ActorRole, actor_id: int) -> None:
    gate = _gate(_order(1, deliverer_id=20))

    assert gate.get_order(1, actor_id, role).id == 1


@pytest.mark.parametrize(
    ("role", "actor_id"),
    [(ActorRole.CLIENT, 4), (ActorRole.RESTAURANT, 2), (ActorRole.DELIVERER, 21)],
)
def test_non_owners_are_forbidden(role: ActorRole, actor_id: int) -> None:
    gate = _gate(_order(1, deliverer_id=20))

    with pytest.raises(ForbiddenOperationError) as exc_info:
        gate.get_order(1, actor_id, role)

    assert exc_info.value.resource_id == 1


def test_missing_order_is_not_found() -> None:
    with pytest.raises(NotFoundError):
        _gate().get_order(1, 3, ActorRole.CLIENT)


def test_listing_filters_by_status_for_every_role() -> None:
    gate = _gate(
        _order(1, OrderStatus.PENDING),
        _order(2, OrderStatus.OUT_FOR_DELIVERY, deliverer_id=20),
        _order(3, OrderStatus.DELIVERED, deliverer_id=20),
    )

    assert [order.id for order in gate.list_orders(3, ActorRole.CLIENT, OrderStatus.PENDING)] == [1]
    assert [order.id for order in gate.list_orders(1, ActorRole.RESTAURANT, OrderStatus.DELIVERED)] == [3]
    assert [order.id for order in gate.list_orders(20, ActorRole.DELIVERER)] == [2, 3]
    assert gate.list_orders(21, ActorRole.DELIVERER) == []


def test_history_is_guarded_by_ownership() -> None:
    events = [
        OrderEvent(id=1, order_id=1, event_type="created", actor_role="client", actor_id=3, to_status="Pending"),
        OrderEvent(id=2, order_id=2, event_type="created", actor_role="client", actor_id=3, to_status="Pending"),
    ]
    gate = _gate(_order(1), events=events)

    assert [event.id for event in gate.history(1, 3, ActorRole.CLIENT)] == [1]
    with pytest.raises(ForbiddenOperationError):
        gate.history(1, 4, ActorRole.CLIENT)
