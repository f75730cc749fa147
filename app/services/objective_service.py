"""
Objective service.

Node slots:
    Every node owns one annual objective and one objective per quarter for
    the current year. They are created with the node and re-created lazily
    when a node's objectives are listed and a slot is missing.

Ordering:
    ``display_order`` is dense per sibling set (same period, or same node
    for objectives without a period). A new objective goes after the current
    maximum; the parent row is locked first so concurrent creates cannot
    pick the same value. Reordering writes the value as given.
"""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import func, select

from app.core.exceptions import ValidationError
from app.models import db
from app.models.node import Node
from app.models.okr import QUARTERS, Objective, ObjectiveGroup
from app.utils.helpers import get_for_update, get_or_raise, parse_int

logger = logging.getLogger(__name__)

_UPDATABLE_NUMERIC = ("target_value", "current_value")


def create_node_slots(session, node: Node, year: int | None = None) -> list[Objective]:
    """Add the annual + Q1..Q4 objectives a node is missing. Does not commit."""
    year = year or date.today().year
    existing = session.execute(
        select(Objective.type, Objective.quarter).where(
            Objective.node_id == node.id,
            Objective.group_id.is_(None),
        )
    ).all()
    has_annual = any(t == "annual" for t, _ in existing)
    quarters = {q for t, q in existing if t == "quarterly"}

    created = []
    if not has_annual:
        created.append(Objective(
            node_id=node.id, description=f"Annual Objective {year}", type="annual", year=year,
        ))
    for quarter in QUARTERS:
        if quarter not in quarters:
            created.append(Objective(
                node_id=node.id, description=f"{quarter} Objective {year}",
                type="quarterly", quarter=quarter, year=year,
            ))
    start = _next_display_order(session, node.id, None)
    for order, objective in enumerate(created, start=start):
        objective.display_order = order
        session.add(objective)
    if created:
        session.flush()
    return created


def _slot_sort_key(objective: Objective):
    kind = {"annual": 0, "quarterly": 1}.get(objective.type, 2)
    return (kind, objective.quarter or "", objective.display_order, objective.id)


def list_objectives_by_node(node_id: int) -> list[Objective]:
    """All objectives of a node, annual first, then quarters, then the rest."""
    node = get_or_raise(Node, node_id)
    created = create_node_slots(db.session, node)
    if created:
        db.session.commit()
        logger.info("Restored %d missing objective slot(s) for node_id=%s", len(created), node_id)

    objectives = db.session.execute(
        select(Objective).where(Objective.node_id == node_id)
    ).scalars().all()
    return sorted(objectives, key=_slot_sort_key)


def _next_display_order(session, node_id: int | None, group_id: int | None) -> int:
    stmt = select(func.max(Objective.display_order))
    if group_id is not None:
        stmt = stmt.where(Objective.group_id == group_id)
    else:
        stmt = stmt.where(Objective.node_id == node_id, Objective.group_id.is_(None))
    current = session.execute(stmt).scalar()
    return (current if current is not None else -1) + 1


def create_objective(data: dict) -> Objective:
    """Create an objective under a period or directly under a node.

    With ``group_id`` the node is always the period's node; a conflicting
    ``node_id`` is rejected.
    """
    description = str(data.get("description", "") or "").strip()
    if not description:
        raise ValidationError("description is required", details={"description": "required"})

    group_id = parse_int(data.get("group_id"))
    node_id = parse_int(data.get("node_id"))
    if group_id is None and node_id is None:
        raise ValidationError("group_id or node_id is required")

    if group_id is not None:
        group = get_for_update(ObjectiveGroup, group_id, label="Objective period")
        if node_id is not None and node_id != group.node_id:
            db.session.rollback()
            raise ValidationError(
                "node_id does not match the period's node",
                details={"node_id": node_id, "group_node_id": group.node_id},
            )
        node_id = group.node_id
    else:
        get_for_update(Node, node_id)

    objective = Objective(
        node_id=node_id,
        group_id=group_id,
        description=description,
        type=data.get("type") or None,
        quarter=data.get("quarter") or None,
        year=parse_int(data.get("year")),
        display_order=_next_display_order(db.session, node_id, group_id),
    )
    for attr in _UPDATABLE_NUMERIC:
        if data.get(attr) is not None:
            setattr(objective, attr, _as_number(data[attr], attr))
    db.session.add(objective)
    db.session.commit()
    logger.info(
        "Objective created id=%s node_id=%s group_id=%s order=%s",
        objective.id, node_id, group_id, objective.display_order,
    )
    return objective


def _as_number(value, field):
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number", details={field: "invalid"})


def update_objective(objective_id: int, data: dict) -> Objective:
    objective = get_or_raise(Objective, objective_id)
    if "description" in data:
        description = str(data.get("description") or "").strip()
        if not description:
            raise ValidationError("description cannot be empty", details={"description": "required"})
        objective.description = description
    if "quarter" in data:
        objective.quarter = data.get("quarter") or None
    if "year" in data:
        objective.year = parse_int(data.get("year"))
    for attr in _UPDATABLE_NUMERIC:
        if attr in data and data.get(attr) is not None:
            setattr(objective, attr, _as_number(data[attr], attr))
    db.session.commit()
    logger.info("Objective updated id=%s", objective_id)
    return objective


def update_objective_order(objective_id: int, new_order) -> Objective:
    """Set display_order verbatim. Callers keep the sibling set dense."""
    order = parse_int(new_order)
    if order is None or order < 0:
        raise ValidationError("display_order must be a non-negative integer")
    objective = get_or_raise(Objective, objective_id)
    objective.display_order = order
    db.session.commit()
    logger.info("Objective reordered id=%s order=%s", objective_id, order)
    return objective


def delete_objective(objective_id: int) -> None:
    objective = get_or_raise(Objective, objective_id)
    db.session.delete(objective)
    db.session.commit()
    logger.info("Objective deleted id=%s", objective_id)
