"""Read-only catalog tables owned by the menu subsystem."""

from decimal import Decimal

from sqlalchemy import Boolean, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from marketplace.db.base import Base


class Restaurant(Base):
    """Marketplace restaurant with its operating status and delivery fee."""

    __tablename__ = "restaurants"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_open: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    delivery_fee: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)


class MenuItem(Base):
    """Dish with its live price; orders copy the price at checkout."""

    __tablename__ = "menu_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(ForeignKey("restaurants.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
