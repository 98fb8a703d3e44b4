"""Repository interfaces the order services depend on.

Services receive implementations of these through their constructors, so
tests and other storage backends can substitute them freely.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from marketplace.models import (
    ActorRole,
    Deliverer,
    DelivererAvailability,
    Order,
    OrderEvent,
    OrderStatus,
)


class RestaurantSnapshot(BaseModel):
    """Point-in-time view of a restaurant from the menu subsystem."""

    id: int
    is_open: bool
    delivery_fee: Decimal | None = None

    model_config = ConfigDict(frozen=True, from_attributes=True)


class MenuItemSnapshot(BaseModel):
    """Point-in-time view of a menu item from the menu subsystem."""

    id: int
    restaurant_id: int
    price: Decimal
    is_available: bool

    model_config = ConfigDict(frozen=True, from_attributes=True)


class AddressSnapshot(BaseModel):
    """Ownership view of a client address from the address subsystem."""

    id: int
    client_id: int

    model_config = ConfigDict(frozen=True, from_attributes=True)


class CatalogReader(Protocol):
    def get_restaurant(self, restaurant_id: int) -> RestaurantSnapshot | None: ...

    def get_menu_item(self, menu_item_id: int) -> MenuItemSnapshot | None: ...


class AddressBook(Protocol):
    def get_client_address(self, address_id: int) -> AddressSnapshot | None: ...


class OrderRepository(Protocol):
    def add(self, order: Order) -> Order: ...

    def get(self, order_id: int) -> Order | None: ...

    def compare_and_set_status(
        self,
        order_id: int,
        expected: OrderStatus,
        new: OrderStatus,
        now: datetime,
    ) -> bool: ...

    def compare_and_set_deliverer(
        self,
        order_id: int,
        expected_status: OrderStatus,
        expected_deliverer_id: int | None,
        deliverer_id: int,
    ) -> bool: ...

    def current_deliverer_id(self, order_id: int) -> int | None: ...

    def list_by_client(self, client_id: int) -> Sequence[Order]: ...

    def list_by_restaurant(self, restaurant_id: int, status: OrderStatus | None = None) -> Sequence[Order]: ...

    def list_by_deliverer(self, deliverer_id: int) -> Sequence[Order]: ...


class DelivererRepository(Protocol):
    def get(self, deliverer_id: int) -> Deliverer | None: ...

    def compare_and_set_availability(
        self,
        deliverer_id: int,
        expected: DelivererAvailability,
        new: DelivererAvailability,
    ) -> bool: ...

    def list_by_availability(self, availability: DelivererAvailability) -> Sequence[Deliverer]: ...


class OrderEventLog(Protocol):
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
    ) -> None: ...

    def list_for_order(self, order_id: int) -> Sequence[OrderEvent]: ...
