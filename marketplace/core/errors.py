"""Business error family for the order lifecycle.

Every error raised by the order services is a ``MarketplaceError`` carrying a
stable ``ErrorCode``. Callers branch on ``code``, never on the message text.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Machine-readable error kinds exposed to API clients."""

    VALIDATION = "validation_error"
    NOT_FOUND = "not_found"
    FORBIDDEN_OPERATION = "forbidden_operation"
    INVALID_STATE = "invalid_state"
    INVALID_TRANSITION = "invalid_transition"
    CONCURRENT_MODIFICATION = "concurrent_modification"
    RESTAURANT_CLOSED = "restaurant_closed"
    ITEM_UNAVAILABLE = "item_unavailable"
    FOREIGN_RESTAURANT = "foreign_restaurant"
    DELIVERER_UNAVAILABLE = "deliverer_unavailable"
    EMPTY_CART = "empty_cart"
    INVALID_ADDRESS = "invalid_address"
    TRANSIENT_FAILURE = "transient_failure"


RETRYABLE_CODES: frozenset[ErrorCode] = frozenset(
    {ErrorCode.CONCURRENT_MODIFICATION, ErrorCode.TRANSIENT_FAILURE}
)


class MarketplaceError(Exception):
    """Base class for expected business outcomes."""

    code: ErrorCode = ErrorCode.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        resource: str | None = None,
        resource_id: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.resource = resource
        self.resource_id = resource_id
        self.details: dict[str, Any] = details or {}

    @property
    def retryable(self) -> bool:
        return self.code in RETRYABLE_CODES

    def to_dict(self) -> dict[str, Any]:
        """Serialize into the public error payload."""
        return {
            "code": self.code.value,
            "message": self.message,
            "field": self.field,
            "resource": self.resource,
            "resource_id": self.resource_id,
            "details": self.details,
            "retryable": self.retryable,
        }


class ValidationError(MarketplaceError):
    code = ErrorCode.VALIDATION


class EmptyCartError(MarketplaceError):
    code = ErrorCode.EMPTY_CART

    def __init__(self) -> None:
        super().__init__("Cart has no items", field="items")


class NotFoundError(MarketplaceError):
    code = ErrorCode.NOT_FOUND

    def __init__(self, resource: str, resource_id: int | None) -> None:
        super().__init__(f"{resource.replace('_', ' ').capitalize()} not found", resource=resource, resource_id=resource_id)


class ForbiddenOperationError(MarketplaceError):
    code = ErrorCode.FORBIDDEN_OPERATION


class InvalidStateError(MarketplaceError):
    code = ErrorCode.INVALID_STATE


class InvalidTransitionError(MarketplaceError):
    """Requested status change is not allowed from the current status."""

    code = ErrorCode.INVALID_TRANSITION

    def __init__(self, order_id: int, current: str, requested: str, actor: str) -> None:
        super().__init__(
            f"Cannot change order status from {current} to {requested} as {actor}",
            field="requested_status",
            resource="order",
            resource_id=order_id,
            details={"current_status": current, "requested_status": requested, "actor": actor},
        )


class ConcurrentModificationError(MarketplaceError):
    """The row changed between read and conditional write; safe to retry."""

    code = ErrorCode.CONCURRENT_MODIFICATION

    def __init__(self, resource: str, resource_id: int, expected: str | None = None) -> None:
        details: dict[str, Any] = {}
        if expected is not None:
            details["expected_status"] = expected
        super().__init__(
            f"{resource.capitalize()} was modified by another request",
            resource=resource,
            resource_id=resource_id,
            details=details,
        )


class RestaurantClosedError(MarketplaceError):
    code = ErrorCode.RESTAURANT_CLOSED

    def __init__(self, restaurant_id: int) -> None:
        super().__init__("Restaurant is closed", resource="restaurant", resource_id=restaurant_id)


class ItemUnavailableError(MarketplaceError):
    code = ErrorCode.ITEM_UNAVAILABLE

    def __init__(self, menu_item_id: int) -> None:
        super().__init__("Menu item is not available", resource="menu_item", resource_id=menu_item_id)


class ForeignRestaurantError(MarketplaceError):
    code = ErrorCode.FOREIGN_RESTAURANT

    def __init__(self, menu_item_id: int, restaurant_id: int) -> None:
        super().__init__(
            "Menu item belongs to another restaurant",
            resource="menu_item",
            resource_id=menu_item_id,
            details={"restaurant_id": restaurant_id},
        )


class DelivererUnavailableError(MarketplaceError):
    code = ErrorCode.DELIVERER_UNAVAILABLE

    def __init__(self, deliverer_id: int, availability: str | None = None) -> None:
        details = {"availability": availability} if availability is not None else {}
        super().__init__(
            "Deliverer is not available",
            resource="deliverer",
            resource_id=deliverer_id,
            details=details,
        )


class InvalidAddressError(MarketplaceError):
    code = ErrorCode.INVALID_ADDRESS

    def __init__(self, address_id: int) -> None:
        super().__init__(
            "Address does not exist or does not belong to the client",
            field="address_id",
            resource="address",
            resource_id=address_id,
        )


class TransientFailureError(MarketplaceError):
    """Infrastructure failure (store unavailable, timeout)."""

    code = ErrorCode.TRANSIENT_FAILURE

    def __init__(self, message: str = "Service temporarily unavailable") -> None:
        super().__init__(message)
