"""Order models for marketplace deliveries."""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Numeric
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from marketplace.db.base import Base


class OrderStatus(str, Enum):
    """Workflow states of an order."""

    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    IN_PREPARATION = "InPreparation"
    READY = "Ready"
    OUT_FOR_DELIVERY = "OutForDelivery"
    AWAITING_CLIENT_CONFIRMATION = "AwaitingClientConfirmation"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


TERMINAL_STATUSES: frozenset[OrderStatus] = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})


class PaymentMethod(str, Enum):
    """Payment methods accepted at checkout."""

    CASH = "Cash"
    CREDIT_CARD = "CreditCard"
    DEBIT_CARD = "DebitCard"
    PIX = "PIX"
    MEAL_VOUCHER = "MealVoucher"


class ActorRole(str, Enum):
    """Identities with scoped permissions over an order."""

    CLIENT = "client"
    RESTAURANT = "restaurant"
    DELIVERER = "deliverer"


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Order(Base):
    """Priced order created at checkout; status moves only through the state machine."""

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    client_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    restaurant_id: Mapped[int] = mapped_column(ForeignKey("restaurants.id"), nullable=False, index=True)
    address_id: Mapped[int] = mapped_column(ForeignKey("client_addresses.id"), nullable=False)
    deliverer_id: Mapped[int | None] = mapped_column(ForeignKey("deliverers.id"), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    status: Mapped[OrderStatus] = mapped_column(
        SAEnum(OrderStatus, name="order_status", values_callable=_enum_values, native_enum=False, length=32),
        nullable=False,
        default=OrderStatus.PENDING,
    )
    status_updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        SAEnum(PaymentMethod, name="payment_method", values_callable=_enum_values, native_enum=False, length=16),
        nullable=False,
    )

    lines: Mapped[list["OrderLine"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLine.id",
    )

    __table_args__ = (
        Index("ix_orders_restaurant_status", "restaurant_id", "status"),
    )


class OrderLine(Base):
    """Order line with the menu price frozen at checkout."""

    __tablename__ = "order_lines"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"), nullable=False, index=True)
    menu_item_id: Mapped[int] = mapped_column(ForeignKey("menu_items.id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price_frozen: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    order: Mapped[Order] = relationship(back_populates="lines")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_lines_quantity_positive"),
    )

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price_frozen * self.quantity
