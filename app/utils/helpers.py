"""Shared utility functions for services and blueprints.

get_or_raise:   primary-key lookup that raises NotFoundError
get_for_update: same, holding a row lock for read-modify-write
atomic:         explicit transaction scope yielding the session
parse_date:     lenient date parsing (None on bad input)
parse_int:      lenient int coercion for JSON / form payloads
"""
import logging
from contextlib import contextmanager
from datetime import date, datetime

from sqlalchemy import select

from app.core.exceptions import NotFoundError
from app.models import db

logger = logging.getLogger(__name__)


def get_or_raise(model, pk, label=None, session=None):
    """Fetch a model instance by primary key or raise NotFoundError."""
    session = session or db.session
    obj = session.get(model, pk) if pk is not None else None
    if obj is None:
        raise NotFoundError(resource=label or model.__name__, resource_id=pk)
    return obj


def get_for_update(model, pk, label=None, session=None):
    """Fetch a row with ``SELECT … FOR UPDATE``.

    The lock is held until the surrounding transaction ends, so concurrent
    writers on the same row are serialized. SQLite ignores the clause and
    relies on its database-level write lock instead.
    """
    session = session or db.session
    obj = session.execute(
        select(model).where(model.id == pk).with_for_update()
    ).scalar_one_or_none()
    if obj is None:
        raise NotFoundError(resource=label or model.__name__, resource_id=pk)
    return obj


@contextmanager
def atomic(session=None):
    """Run a block inside one transaction and hand it the session explicitly.

    Usage::

        with atomic() as session:
            session.add(project)
            session.flush()
            ...

    Commits on normal exit. Any exception rolls back everything issued in
    the block and is re-raised for the caller's error handler.
    """
    session = session or db.session
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("Transaction rolled back", exc_info=True)
        raise


def parse_date(value):
    """Parse a date string (ISO or DD.MM.YYYY) to a date object.

    Returns None for empty/invalid input. Supports:
    - YYYY-MM-DD (ISO format)
    - YYYY-MM-DDTHH:MM:SS (datetime ISO → .date())
    - DD.MM.YYYY (European format)
    """
    if not value:
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except (ValueError, TypeError):
        pass
    try:
        return datetime.fromisoformat(str(value)).date()
    except (ValueError, TypeError):
        pass
    try:
        return datetime.strptime(str(value), "%d.%m.%Y").date()
    except (ValueError, TypeError):
        return None


def parse_int(value, default=None):
    """Coerce *value* to int; return *default* for None/''/garbage."""
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
