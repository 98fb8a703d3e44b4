"""Shared FastAPI dependencies."""

from fastapi import Depends
from sqlalchemy.orm import Session

from marketplace.db.session import get_db
from marketplace.services.container import OrderServices


def get_order_services(db: Session = Depends(get_db)) -> OrderServices:
    """Build order services bound to the request's session."""
    return OrderServices(db)
