"""
Key result service.

Key result descriptions are unique per objective, compared trimmed and
case-insensitively, at creation time. The objective row is locked before
the duplicate check and the display_order computation so two concurrent
creates on the same objective are serialized.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select

from app.core.exceptions import DuplicateError, ValidationError
from app.models import db
from app.models.okr import KeyResult, Objective
from app.utils.helpers import atomic, get_for_update, get_or_raise, parse_int

logger = logging.getLogger(__name__)

DEFAULT_TARGET_VALUE = 100
DEFAULT_CURRENT_VALUE = 0


def _as_number(value, field):
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number", details={field: "invalid"})


def _normalise(description: str) -> str:
    return (description or "").strip().casefold()


def list_key_results(objective_id: int) -> list[KeyResult]:
    get_or_raise(Objective, objective_id)
    stmt = (
        select(KeyResult)
        .where(KeyResult.objective_id == objective_id)
        .order_by(KeyResult.display_order, KeyResult.created_at, KeyResult.id)
    )
    return db.session.execute(stmt).scalars().all()


def create_key_result(data: dict) -> KeyResult:
    """Create a key result at the end of its objective's list.

    Raises:
        ValidationError: objective_id or description missing.
        NotFoundError: objective does not exist.
        DuplicateError: a sibling already has the same description.
    """
    objective_id = parse_int(data.get("objective_id"))
    if objective_id is None:
        raise ValidationError("objective_id is required", details={"objective_id": "required"})
    description = str(data.get("description", "") or "").strip()
    if not description:
        raise ValidationError("description is required", details={"description": "required"})

    target = data.get("target_value")
    current = data.get("current_value")
    target = DEFAULT_TARGET_VALUE if target is None else _as_number(target, "target_value")
    current = DEFAULT_CURRENT_VALUE if current is None else _as_number(current, "current_value")

    with atomic() as session:
        get_for_update(Objective, objective_id, session=session)

        # Compared in Python: SQLite lower() only folds ASCII
        siblings = session.execute(
            select(KeyResult.description).where(KeyResult.objective_id == objective_id)
        ).scalars().all()
        wanted = _normalise(description)
        if any(_normalise(existing) == wanted for existing in siblings):
            raise DuplicateError(
                "Key result", "description", description,
                message="A key result with this description already exists for this objective",
            )

        current_max = session.execute(
            select(func.max(KeyResult.display_order)).where(KeyResult.objective_id == objective_id)
        ).scalar()
        kr = KeyResult(
            objective_id=objective_id,
            description=description,
            target_value=target,
            current_value=current,
            display_order=(current_max if current_max is not None else -1) + 1,
        )
        session.add(kr)

    logger.info(
        "Key result created id=%s objective_id=%s order=%s", kr.id, objective_id, kr.display_order,
    )
    return kr


def update_key_result(kr_id: int, data: dict) -> KeyResult:
    """Partial update; only keys present in *data* change."""
    kr = get_or_raise(KeyResult, kr_id, label="Key result")
    if "description" in data:
        description = str(data.get("description") or "").strip()
        if not description:
            raise ValidationError("description cannot be empty", details={"description": "required"})
        kr.description = description
    for attr in ("target_value", "current_value"):
        if attr in data and data.get(attr) is not None:
            setattr(kr, attr, _as_number(data[attr], attr))
    db.session.commit()
    logger.info("Key result updated id=%s", kr_id)
    return kr


def update_key_result_order(kr_id: int, new_order) -> KeyResult:
    order = parse_int(new_order)
    if order is None or order < 0:
        raise ValidationError("display_order must be a non-negative integer")
    kr = get_or_raise(KeyResult, kr_id, label="Key result")
    kr.display_order = order
    db.session.commit()
    logger.info("Key result reordered id=%s order=%s", kr_id, order)
    return kr


def delete_key_result(kr_id: int) -> None:
    kr = get_or_raise(KeyResult, kr_id, label="Key result")
    db.session.delete(kr)
    db.session.commit()
    logger.info("Key result deleted id=%s", kr_id)
