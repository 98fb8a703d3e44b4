"""Order API schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from marketplace.models import OrderStatus, PaymentMethod


class CartItem(BaseModel):
    """Single cart line; quantity is checked by the checkout engine."""

    menu_item_id: int | None = None
    quantity: int | None = None


class Cart(BaseModel):
    """Client cart submitted once to checkout."""

    restaurant_id: int | None = None
    address_id: int | None = None
    payment_method: str | None = None
    items: list[CartItem] = Field(default_factory=list)


class TransitionRequest(BaseModel):
    """Requested next status for an order."""

    requested_status: OrderStatus


class AssignDelivererRequest(BaseModel):
    deliverer_id: int


class OrderLineResponse(BaseModel):
    """Serialized order line with its frozen price."""

    id: int
    menu_item_id: int
    quantity: int
    unit_price_frozen: Decimal
    subtotal: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    """Serialized order including its lines."""

    id: int
    client_id: int
    restaurant_id: int
    address_id: int
    deliverer_id: int | None
    created_at: datetime
    status: OrderStatus
    status_updated_at: datetime | None
    total: Decimal
    payment_method: PaymentMethod
    lines: list[OrderLineResponse]

    model_config = ConfigDict(from_attributes=True)


class OrderEventResponse(BaseModel):
    """Serialized lifecycle event."""

    id: int
    event_type: str
    from_status: str | None
    to_status: str | None
    actor_role: str
    actor_id: int
    deliverer_id: int | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
