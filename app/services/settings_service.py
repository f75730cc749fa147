"""Workspace settings service — task identifier prefix and numbering."""

from __future__ import annotations

import logging
import re

from flask import current_app, has_app_context
from sqlalchemy import select

from app.core.exceptions import ValidationError
from app.models import db
from app.models.settings import DEFAULT_PROJECT_PREFIX, ProjectSettings

logger = logging.getLogger(__name__)

PREFIX_PATTERN = re.compile(r"^[A-Z]{3}$")


def _default_prefix() -> str:
    if has_app_context():
        return current_app.config.get("DEFAULT_TASK_PREFIX", DEFAULT_PROJECT_PREFIX)
    return DEFAULT_PROJECT_PREFIX


def get_settings(session=None) -> ProjectSettings:
    """Return the settings row, creating the default one on first access.

    Without an explicit *session* the new row is committed; inside a
    caller's transaction it is only flushed.
    """
    own_transaction = session is None
    session = session or db.session
    settings = session.execute(
        select(ProjectSettings).order_by(ProjectSettings.id).limit(1)
    ).scalar_one_or_none()
    if settings is None:
        settings = ProjectSettings(project_prefix=_default_prefix(), next_task_number=1)
        session.add(settings)
        if own_transaction:
            session.commit()
        else:
            session.flush()
        logger.info("Default project settings created prefix=%s", settings.project_prefix)
    return settings


def current_prefix() -> str:
    settings = db.session.execute(
        select(ProjectSettings.project_prefix).order_by(ProjectSettings.id).limit(1)
    ).scalar_one_or_none()
    return settings or _default_prefix()


def update_prefix(prefix) -> ProjectSettings:
    """Change the task prefix. Existing task identifiers follow the new prefix.

    Raises:
        ValidationError: prefix is not exactly three uppercase letters.
    """
    if not isinstance(prefix, str) or not PREFIX_PATTERN.match(prefix):
        raise ValidationError(
            "Invalid prefix format. Must be exactly 3 uppercase letters (e.g., SDL, PRJ, ABC)",
            details={"project_prefix": prefix},
        )
    settings = get_settings()
    old = settings.project_prefix
    settings.project_prefix = prefix
    db.session.commit()
    logger.info("Project prefix changed %s -> %s", old, prefix)
    return settings


def allocate_task_number(session) -> int:
    """Reserve the next task number inside the caller's transaction."""
    settings = session.execute(
        select(ProjectSettings).order_by(ProjectSettings.id).limit(1).with_for_update()
    ).scalar_one_or_none()
    if settings is None:
        settings = get_settings(session)
    number = settings.next_task_number
    settings.next_task_number = number + 1
    return number
