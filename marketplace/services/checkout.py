"""Cart-to-order checkout with price freezing."""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from marketplace.core.errors import (
    EmptyCartError,
    ForeignRestaurantError,
    InvalidAddressError,
    ItemUnavailableError,
    NotFoundError,
    RestaurantClosedError,
    ValidationError,
)
from marketplace.db.transaction import TransactionScope
from marketplace.models import ActorRole, Order, OrderLine, OrderStatus, PaymentMethod
from marketplace.models.order_event import EVENT_CREATED
from marketplace.repositories.ports import (
    AddressBook,
    CatalogReader,
    MenuItemSnapshot,
    OrderEventLog,
    OrderRepository,
    RestaurantSnapshot,
)
from marketplace.schemas.order import Cart

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def to_money(value: Decimal) -> Decimal:
    """Quantize an amount to cents."""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_payment_method(value: str | None) -> PaymentMethod:
    if not value:
        raise ValidationError("Payment method is required", field="payment_method")
    try:
        return PaymentMethod(value)
    except ValueError as exc:
        allowed = ", ".join(method.value for method in PaymentMethod)
        raise ValidationError(
            f"Unknown payment method; expected one of: {allowed}",
            field="payment_method",
        ) from exc


class CheckoutService:
    """Turn a cart into a persisted ``Pending`` order, all-or-nothing."""

    def __init__(
        self,
        *,
        catalog: CatalogReader,
        addresses: AddressBook,
        orders: OrderRepository,
        events: OrderEventLog,
        transaction: TransactionScope,
    ) -> None:
        self.catalog = catalog
        self.addresses = addresses
        self.orders = orders
        self.events = events
        self.transaction = transaction

    def checkout(self, client_id: int, cart: Cart) -> Order:
        if not cart.items:
            raise EmptyCartError()
        if cart.restaurant_id is None:
            raise ValidationError("Restaurant is required", field="restaurant_id")
        if cart.address_id is None:
            raise ValidationError("Delivery address is required", field="address_id")
        payment_method = parse_payment_method(cart.payment_method)

        restaurant = self._resolve_restaurant(cart.restaurant_id)
        self._ensure_address_owned(cart.address_id, client_id)

        lines: list[OrderLine] = []
        subtotal = Decimal("0")
        for index, cart_item in enumerate(cart.items):
            if cart_item.menu_item_id is None:
                raise ValidationError("Menu item is required", field=f"items[{index}].menu_item_id")
            if cart_item.quantity is None or cart_item.quantity < 1:
                raise ValidationError(
                    "Quantity must be at least 1",
                    field=f"items[{index}].quantity",
                    resource="menu_item",
                    resource_id=cart_item.menu_item_id,
                )
            item = self._resolve_menu_item(cart_item.menu_item_id, restaurant.id)
            unit_price = to_money(item.price)
            subtotal += unit_price * cart_item.quantity
            lines.append(
                OrderLine(
                    menu_item_id=item.id,
                    quantity=cart_item.quantity,
                    unit_price_frozen=unit_price,
                )
            )

        delivery_fee = to_money(restaurant.delivery_fee or Decimal("0"))
        total = to_money(subtotal + delivery_fee)

        with self.transaction.begin():
            order = self.orders.add(
                Order(
                    client_id=client_id,
                    restaurant_id=restaurant.id,
                    address_id=cart.address_id,
                    status=OrderStatus.PENDING,
                    total=total,
                    payment_method=payment_method,
                    lines=lines,
                )
            )
            self.events.record(
                order_id=order.id,
                event_type=EVENT_CREATED,
                actor_role=ActorRole.CLIENT,
                actor_id=client_id,
                to_status=OrderStatus.PENDING,
            )
            order_id = order.id

        logger.info(
            "Created order_id=%s client_id=%s restaurant_id=%s lines=%s total=%s",
            order_id,
            client_id,
            restaurant.id,
            len(lines),
            total,
        )
        created = self.orders.get(order_id)
        if created is None:
            raise NotFoundError("order", order_id)
        return created

    def _resolve_restaurant(self, restaurant_id: int) -> RestaurantSnapshot:
        restaurant = self.catalog.get_restaurant(restaurant_id)
        if restaurant is None:
            raise NotFoundError("restaurant", restaurant_id)
        if not restaurant.is_open:
            raise RestaurantClosedError(restaurant_id)
        return restaurant

    def _ensure_address_owned(self, address_id: int, client_id: int) -> None:
        address = self.addresses.get_client_address(address_id)
        if address is None or address.client_id != client_id:
            raise InvalidAddressError(address_id)

    def _resolve_menu_item(self, menu_item_id: int, restaurant_id: int) -> MenuItemSnapshot:
        item = self.catalog.get_menu_item(menu_item_id)
        if item is None:
            raise NotFoundError("menu_item", menu_item_id)
        if item.restaurant_id != restaurant_id:
            raise ForeignRestaurantError(menu_item_id, restaurant_id)
        if not item.is_available:
            raise ItemUnavailableError(menu_item_id)
        return item
