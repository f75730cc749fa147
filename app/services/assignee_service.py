"""Assignee service — list and get-or-create by name."""

from __future__ import annotations

import logging

from sqlalchemy import func, select

from app.core.exceptions import ValidationError
from app.models import db
from app.models.assignee import Assignee

logger = logging.getLogger(__name__)


def list_assignees() -> list[Assignee]:
    return db.session.execute(select(Assignee).order_by(Assignee.name.asc())).scalars().all()


def get_or_create_assignee(name) -> tuple[Assignee, bool]:
    """Find an assignee by case-insensitive name, creating it when missing.

    Returns:
        ``(assignee, created)``
    """
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Assignee name is required")
    name = name.strip()

    existing = db.session.execute(
        select(Assignee).where(func.lower(Assignee.name) == name.lower())
    ).scalars().first()
    if existing:
        return existing, False

    assignee = Assignee(name=name)
    db.session.add(assignee)
    db.session.commit()
    logger.info("Assignee created id=%s name=%s", assignee.id, name)
    return assignee, True
