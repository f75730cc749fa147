"""
Objective group (period) service.

Business context:
    A period ("Q1", "FY26 H1") is defined per node. Central planning usually
    defines periods once and pushes them to every other node.

Replication:
    Only the period shell (alias, target_date) is copied; objectives and key
    results are not. A target node that already has a period with the same
    alias is skipped, keyed on (node_id, alias). Each insertion is committed
    on its own, so an interrupted run can simply be repeated: pairs created
    the first time are skipped the second time.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select

from app.core.exceptions import NotFoundError, ReplicationError, ValidationError
from app.models import db
from app.models.node import Node
from app.models.okr import ObjectiveGroup
from app.utils.helpers import get_or_raise, parse_date, parse_int

logger = logging.getLogger(__name__)


# ── CRUD ──────────────────────────────────────────────────────────────────────


def list_groups_by_node(node_id: int) -> list[ObjectiveGroup]:
    """Periods of a node: dated ones first by date, undated last, newest first."""
    get_or_raise(Node, node_id)
    stmt = (
        select(ObjectiveGroup)
        .where(ObjectiveGroup.node_id == node_id)
        .order_by(
            ObjectiveGroup.target_date.is_(None),
            ObjectiveGroup.target_date.asc(),
            ObjectiveGroup.created_at.desc(),
            ObjectiveGroup.id.desc(),
        )
    )
    return db.session.execute(stmt).scalars().all()


def create_group(data: dict) -> ObjectiveGroup:
    node_id = parse_int(data.get("node_id"))
    if node_id is None:
        raise ValidationError("node_id is required", details={"node_id": "required"})
    alias = str(data.get("alias", "") or "").strip()
    if not alias:
        raise ValidationError("alias is required", details={"alias": "required"})
    get_or_raise(Node, node_id)

    group = ObjectiveGroup(
        node_id=node_id,
        alias=alias,
        target_date=parse_date(data.get("target_date")),
    )
    db.session.add(group)
    db.session.commit()
    logger.info("Objective group created id=%s node_id=%s alias=%s", group.id, node_id, alias)
    return group


def update_group(group_id: int, data: dict) -> ObjectiveGroup:
    group = get_or_raise(ObjectiveGroup, group_id, label="Objective period")
    if "alias" in data:
        alias = str(data.get("alias", "") or "").strip()
        if not alias:
            raise ValidationError("alias cannot be empty", details={"alias": "required"})
        group.alias = alias
    if "target_date" in data:
        group.target_date = parse_date(data.get("target_date"))
    db.session.commit()
    logger.info("Objective group updated id=%s", group_id)
    return group


def delete_group(group_id: int) -> None:
    """Delete a period; its objectives, key results and tasks cascade."""
    group = get_or_raise(ObjectiveGroup, group_id, label="Objective period")
    db.session.delete(group)
    db.session.commit()
    logger.info("Objective group deleted id=%s", group_id)


def delete_all_groups(node_id: int) -> int:
    """Delete every period of a node and return how many were removed."""
    groups = db.session.execute(
        select(ObjectiveGroup).where(ObjectiveGroup.node_id == node_id)
    ).scalars().all()
    if not groups:
        raise NotFoundError(resource="Objective periods for node", resource_id=node_id)
    for group in groups:
        db.session.delete(group)
    db.session.commit()
    logger.info("Deleted %d objective group(s) from node_id=%s", len(groups), node_id)
    return len(groups)


# ── Replication ───────────────────────────────────────────────────────────────


def _other_node_ids(node_id: int) -> list[int]:
    return db.session.execute(
        select(Node.id).where(Node.id != node_id).order_by(Node.id)
    ).scalars().all()


def _insert_if_absent(node_id: int, alias: str, target_date) -> ObjectiveGroup | None:
    """Create (node_id, alias) unless the node already has that alias.

    Commits on its own so the insertion stands independently of the caller's
    loop.
    """
    exists = db.session.execute(
        select(func.count(ObjectiveGroup.id)).where(
            ObjectiveGroup.node_id == node_id,
            ObjectiveGroup.alias == alias,
        )
    ).scalar_one()
    if exists:
        return None
    group = ObjectiveGroup(node_id=node_id, alias=alias, target_date=target_date)
    db.session.add(group)
    db.session.commit()
    return group


def replicate_group(group_id: int) -> dict:
    """Copy one period to every other node that lacks its alias.

    Returns:
        ``{"message", "createdGroups": [...], "count"}``

    Raises:
        NotFoundError: source period does not exist.
        ReplicationError: there are no other nodes.
    """
    source = get_or_raise(ObjectiveGroup, group_id, label="Objective period")
    alias, target_date, source_node_id = source.alias, source.target_date, source.node_id

    targets = _other_node_ids(source_node_id)
    if not targets:
        raise ReplicationError("No other nodes to replicate to")

    created = []
    for node_id in targets:
        group = _insert_if_absent(node_id, alias, target_date)
        if group is not None:
            created.append(group)

    logger.info(
        "Replicated period id=%s alias=%s to %d of %d node(s)",
        group_id, alias, len(created), len(targets),
    )
    return {
        "message": f"Period replicated to {len(created)} node(s)",
        "createdGroups": [g.to_dict() for g in created],
        "count": len(created),
    }


def replicate_all_groups(node_id: int) -> dict:
    """Copy every period of *node_id* to every other node.

    Returns:
        ``{"message", "totalCreated"}``

    Raises:
        NotFoundError: the node has no periods.
        ReplicationError: there are no other nodes.
    """
    groups = db.session.execute(
        select(ObjectiveGroup.alias, ObjectiveGroup.target_date)
        .where(ObjectiveGroup.node_id == node_id)
        .order_by(ObjectiveGroup.id)
    ).all()
    if not groups:
        raise NotFoundError(resource="Objective periods for node", resource_id=node_id)

    targets = _other_node_ids(node_id)
    if not targets:
        raise ReplicationError("No other nodes to replicate to")

    total_created = 0
    for target_id in targets:
        for alias, target_date in groups:
            if _insert_if_absent(target_id, alias, target_date) is not None:
                total_created += 1

    logger.info(
        "Replicated %d period(s) from node_id=%s to %d node(s), created=%d",
        len(groups), node_id, len(targets), total_created,
    )
    return {
        "message": f"Replicated {len(groups)} period(s) to {len(targets)} node(s).",
        "totalCreated": total_created,
    }
