"""Schema exports."""

from marketplace.schemas.auth import CurrentActor
from marketplace.schemas.deliverer import AvailabilityRequest, DelivererResponse
from marketplace.schemas.error import ErrorBody, ErrorResponse
from marketplace.schemas.order import (
    AssignDelivererRequest,
    Cart,
    CartItem,
    OrderEventResponse,
    OrderLineResponse,
    OrderResponse,
    TransitionRequest,
)

__all__ = [
    "CurrentActor",
    "AvailabilityRequest",
    "DelivererResponse",
    "ErrorBody",
    "ErrorResponse",
    "AssignDelivererRequest",
    "Cart",
    "CartItem",
    "OrderEventResponse",
    "OrderLineResponse",
    "OrderResponse",
    "TransitionRequest",
]
