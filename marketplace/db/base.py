"""Shared SQLAlchemy base declarative class and model imports."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""


# Import model modules so metadata is populated before create_all.
from marketplace.models import address as _address  # noqa: E402,F401
from marketplace.models import catalog as _catalog  # noqa: E402,F401
from marketplace.models import deliverer as _deliverer  # noqa: E402,F401
from marketplace.models import order as _order  # noqa: E402,F401
from marketplace.models import order_event as _order_event  # noqa: E402,F401
