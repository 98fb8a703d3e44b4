"""Application models package."""

from marketplace.models.address import ClientAddress
from marketplace.models.catalog import MenuItem, Restaurant
from marketplace.models.deliverer import Deliverer, DelivererAvailability
from marketplace.models.order import ActorRole, Order, OrderLine, OrderStatus, PaymentMethod, TERMINAL_STATUSES
from marketplace.models.order_event import OrderEvent

__all__ = [
    "ClientAddress", "MenuItem", "Restaurant", "Deliverer", "DelivererAvailability",
    "ActorRole", "Order", "OrderLine", "OrderStatus", "PaymentMethod", "TERMINAL_STATUSES", "OrderEvent",
]
