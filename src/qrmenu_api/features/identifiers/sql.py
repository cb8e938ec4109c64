"""SQLAlchemy adapter answering "does this identifier already exist?"."""

from __future__ import annotations

from sqlalchemy import exists, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from .allocator import ExistsCheck


def column_exists_check(session: Session, column: InstrumentedAttribute[str]) -> ExistsCheck:
    """Return a predicate testing ``column`` for an exact candidate match.

    Example::

        allocator.allocate(column_exists_check(session, Payment.order_number))
    """

    def _exists(candidate: str) -> bool:
        stmt = select(exists().where(column == candidate))
        return bool(session.execute(stmt).scalar())

    return _exists


__all__ = ["column_exists_check"]
