"""Client address table owned by the address subsystem."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from marketplace.db.base import Base


class ClientAddress(Base):
    """Delivery address registered by a client."""

    __tablename__ = "client_addresses"

    id: Mapped[int] = mapped_column(primary_key=True)
    client_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    label: Mapped[str | None] = mapped_column(String(255), nullable=True)
