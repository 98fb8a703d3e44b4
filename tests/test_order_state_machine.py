"""Order state machine tests: transition table, ownership and lost updates."""

from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from marketplace.core.errors import (
    ConcurrentModificationError,
    ErrorCode,
    ForbiddenOperationError,
    InvalidTransitionError,
    NotFoundError,
)
from marketplace.db.base import Base
from marketplace.models import (
    ActorRole,
    ClientAddress,
    Deliverer,
    DelivererAvailability,
    MenuItem,
    Order,
    OrderEvent,
    OrderLine,
    OrderStatus,
    PaymentMethod,
    Restaurant,
)
from marketplace.services.container import OrderServices
from marketplace.services.state_machine import ALLOWED_TRANSITIONS, can_transition, next_statuses

CLIENT_ID = 3
OTHER_CLIENT_ID = 4
RESTAURANT_ID = 1
OTHER_RESTAURANT_ID = 2
DELIVERER_ID = 20
OTHER_DELIVERER_ID = 21


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )


def _prepare_db(tmp_path: Path) -> sessionmaker:
    engine = _build_test_engine(tmp_path / "state_machine.db")
    Base.metadata.create_all(bind=engine)
    session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    with session_local() as db:
        db.add_all(
            [
                Restaurant(id=RESTAURANT_ID, name="Cantina", is_open=True, delivery_fee=Decimal("4.00")),
                Restaurant(id=OTHER_RESTAURANT_ID, name="Rival", is_open=True, delivery_fee=Decimal("2.00")),
                MenuItem(id=5, restaurant_id=RESTAURANT_ID, name="Feijoada", price=Decimal("12.50"), is_available=True),
                ClientAddress(id=7, client_id=CLIENT_ID, label="Home"),
                Deliverer(id=DELIVERER_ID, name="Ana", availability=DelivererAvailability.AVAILABLE),
                Deliverer(id=OTHER_DELIVERER_ID, name="Bruno", availability=DelivererAvailability.AVAILABLE),
            ]
        )
        db.commit()
    return session_local


def _create_order(
    session_local: sessionmaker,
    status: OrderStatus,
    deliverer_id: int | None = None,
) -> int:
    with session_local() as db:
        order = Order(
            client_id=CLIENT_ID,
            restaurant_id=RESTAURANT_ID,
            address_id=7,
            deliverer_id=deliverer_id,
            status=status,
            total=Decimal("29.00"),
            payment_method=PaymentMethod.CASH,
            lines=[OrderLine(menu_item_id=5, quantity=2, unit_price_frozen=Decimal("12.50"))],
        )
        db.add(order)
        if deliverer_id is not None and status not in (OrderStatus.DELIVERED, OrderStatus.CANCELLED):
            db.get(Deliverer, deliverer_id).availability = DelivererAvailability.ON_DELIVERY
        db.commit()
        return order.id


def _actor_id(role: ActorRole) -> int:
    return {ActorRole.CLIENT: CLIENT_ID, ActorRole.RESTAURANT: RESTAURANT_ID, ActorRole.DELIVERER: DELIVERER_ID}[role]


def _status_of(session_local: sessionmaker, order_id: int) -> OrderStatus:
    with session_local() as db:
        return db.get(Order, order_id).status


def _availability_of(session_local: sessionmaker, deliverer_id: int) -> DelivererAvailability:
    with session_local() as db:
        return db.get(Deliverer, deliverer_id).availability


def test_transition_table_grants_each_step_to_one_side() -> None:
    assert next_statuses(OrderStatus.PENDING, ActorRole.CLIENT) == [OrderStatus.CANCELLED]
    assert next_statuses(OrderStatus.PENDING, ActorRole.RESTAURANT) == [OrderStatus.CONFIRMED, OrderStatus.CANCELLED]
    assert next_statuses(OrderStatus.OUT_FOR_DELIVERY, ActorRole.RESTAURANT) == []
    assert next_statuses(OrderStatus.AWAITING_CLIENT_CONFIRMATION, ActorRole.CLIENT) == [OrderStatus.DELIVERED]
    assert ALLOWED_TRANSITIONS[OrderStatus.DELIVERED] == {}
    assert ALLOWED_TRANSITIONS[OrderStatus.CANCELLED] == {}


def test_restaurant_moves_order_through_kitchen_workflow(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    order_id = _create_order(session_local, OrderStatus.PENDING)
    steps = [OrderStatus.CONFIRMED, OrderStatus.IN_PREPARATION, OrderStatus.READY, OrderStatus.OUT_FOR_DELIVERY]

    with session_local() as db:
        machine = OrderServices(db).state_machine
        for step in steps:
            order = machine.transition(order_id, ActorRole.RESTAURANT, RESTAURANT_ID, step)
            assert order.status == step
            assert order.status_updated_at is not None

    with session_local() as db:
        events = db.scalars(select(OrderEvent).where(OrderEvent.order_id == order_id).order_by(OrderEvent.id)).all()
        assert [(event.from_status, event.to_status) for event in events] == [
            ("Pending", "Confirmed"),
            ("Confirmed", "InPreparation"),
            ("InPreparation", "Ready"),
            ("Ready", "OutForDelivery"),
        ]
        assert {event.actor_role for event in events} == {"restaurant"}


def test_client_can_cancel_pending_order(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    order_id = _create_order(session_local, OrderStatus.PENDING)

    with session_local() as db:
        order = OrderServices(db).state_machine.transition(order_id, ActorRole.CLIENT, CLIENT_ID, OrderStatus.CANCELLED)

    assert order.status == OrderStatus.CANCELLED


def test_client_cannot_cancel_once_restaurant_confirmed(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    order_id = _create_order(session_local, OrderStatus.CONFIRMED)

    with session_local() as db:
        with pytest.raises(InvalidTransitionError):
            OrderServices(db).state_machine.transition(order_id, ActorRole.CLIENT, CLIENT_ID, OrderStatus.CANCELLED)

    assert _status_of(session_local, order_id) == OrderStatus.CONFIRMED


def test_client_cannot_mark_pending_order_delivered(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    order_id = _create_order(session_local, OrderStatus.PENDING)

    with session_local() as db:
        with pytest.raises(InvalidTransitionError) as exc_info:
            OrderServices(db).state_machine.transition(order_id, ActorRole.CLIENT, CLIENT_ID, OrderStatus.DELIVERED)

    error = exc_info.value
    assert error.code == ErrorCode.INVALID_TRANSITION
    assert error.details["current_status"] == "Pending"
    assert error.details["requested_status"] == "Delivered"
    assert _status_of(session_local, order_id) == OrderStatus.PENDING


@pytest.mark.parametrize("current", list(OrderStatus))
def test_transitions_outside_the_table_leave_status_unchanged(tmp_path: Path, current: OrderStatus) -> None:
    session_local = _prepare_db(tmp_path)
    order_id = _create_order(session_local, current, deliverer_id=DELIVERER_ID)

    rejected = 0
    for role in ActorRole:
        for requested in OrderStatus:
            if can_transition(current, requested, role):
                continue
            with session_local() as db:
                with pytest.raises(InvalidTransitionError):
                    OrderServices(db).state_machine.transition(order_id, role, _actor_id(role), requested)
            rejected += 1

    assert rejected > 0
    assert _status_of(session_local, order_id) == current
    with session_local() as db:
        assert db.scalars(select(OrderEvent).where(OrderEvent.order_id == order_id)).all() == []


@pytest.mark.parametrize("terminal", [OrderStatus.DELIVERED, OrderStatus.CANCELLED])
def test_terminal_orders_accept_no_transition(tmp_path: Path, terminal: OrderStatus) -> None:
    session_local = _prepare_db(tmp_path)
    order_id = _create_order(session_local, terminal, deliverer_id=DELIVERER_ID)

    for role in ActorRole:
        for requested in OrderStatus:
            with session_local() as db:
                with pytest.raises(InvalidTransitionError):
                    OrderServices(db).state_machine.transition(order_id, role, _actor_id(role), requested)

    assert _status_of(session_local, order_id) == terminal


@pytest.mark.parametrize(
    ("status", "role", "actor_id", "requested"),
    [
        (OrderStatus.PENDING, ActorRole.CLIENT, OTHER_CLIENT_ID, OrderStatus.CANCELLED),
        (OrderStatus.PENDING, ActorRole.RESTAURANT, OTHER_RESTAURANT_ID, OrderStatus.CONFIRMED),
        (OrderStatus.OUT_FOR_DELIVERY, ActorRole.DELIVERER, OTHER_DELIVERER_ID, OrderStatus.DELIVERED),
    ],
)
def test_actor_must_own_order_to_transition_it(
    tmp_path: Path,
    status: OrderStatus,
    role: ActorRole,
    actor_id: int,
    requested: OrderStatus,
) -> None:
    session_local = _prepare_db(tmp_path)
    order_id = _create_order(session_local, status, deliverer_id=DELIVERER_ID)

    with session_local() as db:
        with pytest.raises(ForbiddenOperationError):
            OrderServices(db).state_machine.transition(order_id, role, actor_id, requested)

    assert _status_of(session_local, order_id) == status


def test_deliverer_without_assignment_cannot_act(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    order_id = _create_order(session_local, OrderStatus.OUT_FOR_DELIVERY)

    with session_local() as db:
        with pytest.raises(ForbiddenOperationError):
            OrderServices(db).state_machine.transition(
                order_id, ActorRole.DELIVERER, DELIVERER_ID, OrderStatus.DELIVERED
            )


def test_unknown_order_is_not_found(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)

    with session_local() as db:
        with pytest.raises(NotFoundError) as exc_info:
            OrderServices(db).state_machine.transition(404, ActorRole.RESTAURANT, RESTAURANT_ID, OrderStatus.CONFIRMED)

    assert exc_info.value.resource == "order"


def test_delivery_releases_deliverer(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    order_id = _create_order(session_local, OrderStatus.OUT_FOR_DELIVERY, deliverer_id=DELIVERER_ID)
    assert _availability_of(session_local, DELIVERER_ID) == DelivererAvailability.ON_DELIVERY

    with session_local() as db:
        order = OrderServices(db).state_machine.transition(
            order_id, ActorRole.DELIVERER, DELIVERER_ID, OrderStatus.DELIVERED
        )

    assert order.status == OrderStatus.DELIVERED
    assert order.deliverer_id == DELIVERER_ID
    assert _availability_of(session_local, DELIVERER_ID) == DelivererAvailability.AVAILABLE


def test_client_confirms_delivery_after_deliverer_hands_over(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    order_id = _create_order(session_local, OrderStatus.OUT_FOR_DELIVERY, deliverer_id=DELIVERER_ID)

    with session_local() as db:
        services = OrderServices(db)
        services.state_machine.transition(
            order_id, ActorRole.DELIVERER, DELIVERER_ID, OrderStatus.AWAITING_CLIENT_CONFIRMATION
        )
        assert _availability_of(session_local, DELIVERER_ID) == DelivererAvailability.ON_DELIVERY
        order = services.state_machine.transition(order_id, ActorRole.CLIENT, CLIENT_ID, OrderStatus.DELIVERED)

    assert order.status == OrderStatus.DELIVERED
    assert _availability_of(session_local, DELIVERER_ID) == DelivererAvailability.AVAILABLE


def test_cancellation_en_route_returns_deliverer_to_pool(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    order_id = _create_order(session_local, OrderStatus.OUT_FOR_DELIVERY, deliverer_id=DELIVERER_ID)

    with session_local() as db:
        OrderServices(db).state_machine.transition(order_id, ActorRole.DELIVERER, DELIVERER_ID, OrderStatus.CANCELLED)

    assert _status_of(session_local, order_id) == OrderStatus.CANCELLED
    assert _availability_of(session_local, DELIVERER_ID) == DelivererAvailability.AVAILABLE


def test_concurrent_transitions_let_exactly_one_win(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    order_id = _create_order(session_local, OrderStatus.OUT_FOR_DELIVERY, deliverer_id=DELIVERER_ID)

    slow_db = session_local()
    try:
        # The slow request has already read the order while it was OutForDelivery.
        assert slow_db.get(Order, order_id).status == OrderStatus.OUT_FOR_DELIVERY

        with session_local() as fast_db:
            OrderServices(fast_db).state_machine.transition(
                order_id, ActorRole.DELIVERER, DELIVERER_ID, OrderStatus.DELIVERED
            )

        with pytest.raises(ConcurrentModificationError) as exc_info:
            OrderServices(slow_db).state_machine.transition(
                order_id, ActorRole.DELIVERER, DELIVERER_ID, OrderStatus.CANCELLED
            )
    finally:
        slow_db.close()

    assert exc_info.value.retryable is True
    assert exc_info.value.details == {"expected_status": "OutForDelivery"}
    assert _status_of(session_local, order_id) == OrderStatus.DELIVERED
    assert _availability_of(session_local, DELIVERER_ID) == DelivererAvailability.AVAILABLE
    with session_local() as db:
        events = db.scalars(select(OrderEvent).where(OrderEvent.order_id == order_id)).all()
        assert [event.to_status for event in events] == ["Delivered"]
