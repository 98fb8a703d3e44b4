"""Scoped transaction boundary shared by the mutating order services."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class TransactionScope:
    """Commit everything written through the session, or nothing.

    Repositories built on the same session only ``flush``; the scope owns
    ``commit`` and ``rollback``.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    @contextmanager
    def begin(self) -> Iterator[Session]:
        try:
            yield self.db
            self.db.commit()
        except Exception:
            logger.debug("Rolling back transaction")
            self.db.rollback()
            raise
