"""Deliverer ORM model."""

from enum import Enum

from sqlalchemy import Enum as SAEnum
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from marketplace.db.base import Base


class DelivererAvailability(str, Enum):
    AVAILABLE = "Available"
    UNAVAILABLE = "Unavailable"
    ON_DELIVERY = "OnDelivery"


class Deliverer(Base):
    """Courier whose availability is mutated only by the assignment coordinator."""

    __tablename__ = "deliverers"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    availability: Mapped[DelivererAvailability] = mapped_column(
        SAEnum(
            DelivererAvailability,
            name="deliverer_availability",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            native_enum=False,
            length=16,
        ),
        nullable=False,
        default=DelivererAvailability.UNAVAILABLE,
    )
