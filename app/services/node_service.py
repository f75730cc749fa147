"""
Node service — organisational units on the flywheel map.

Rules:
    - At most one node is central. Flagging a node central clears the flag
      on every other node in the same transaction.
    - A new node gets its annual + quarterly objective slots in the same
      transaction as the node row.
"""

from __future__ import annotations

import logging

from sqlalchemy import select, update

from app.core.exceptions import ValidationError
from app.models import db
from app.models.assignee import Assignee
from app.models.node import Node
from app.services.objective_service import create_node_slots
from app.utils.helpers import atomic, get_or_raise, parse_int

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("description", "color")
_FLAG_FIELDS = ("is_active", "generates_revenue")


def list_nodes() -> list[Node]:
    return db.session.execute(
        select(Node).order_by(Node.created_at.asc(), Node.id.asc())
    ).scalars().all()


def get_node(node_id: int) -> Node:
    return get_or_raise(Node, node_id)


def _clear_central(session, except_id=None):
    stmt = update(Node).where(Node.is_central.is_(True))
    if except_id is not None:
        stmt = stmt.where(Node.id != except_id)
    session.execute(stmt.values(is_central=False))


def _owner_id(data):
    owner_id = parse_int(data.get("owner_id"))
    if owner_id is not None:
        get_or_raise(Assignee, owner_id)
    return owner_id


def create_node(data: dict) -> Node:
    name = str(data.get("name", "") or "").strip()
    if not name:
        raise ValidationError("name is required", details={"name": "required"})
    owner_id = _owner_id(data)
    is_central = bool(data.get("is_central", False))

    with atomic() as session:
        if is_central:
            _clear_central(session)
        node = Node(
            name=name,
            description=data.get("description") or "",
            color=data.get("color") or None,
            owner_id=owner_id,
            is_active=bool(data.get("is_active", True)),
            is_central=is_central,
            generates_revenue=bool(data.get("generates_revenue", False)),
        )
        session.add(node)
        session.flush()
        create_node_slots(session, node)

    logger.info("Node created id=%s name=%s central=%s", node.id, name, is_central)
    return node


def update_node(node_id: int, data: dict) -> Node:
    """Partial update. Setting ``is_central`` demotes the previous central node."""
    with atomic() as session:
        node = get_or_raise(Node, node_id, session=session)
        if "name" in data:
            name = str(data.get("name") or "").strip()
            if not name:
                raise ValidationError("name cannot be empty", details={"name": "required"})
            node.name = name
        for attr in _TEXT_FIELDS:
            if attr in data:
                setattr(node, attr, data.get(attr) or ("" if attr == "description" else None))
        for attr in _FLAG_FIELDS:
            if attr in data:
                setattr(node, attr, bool(data.get(attr)))
        if "owner_id" in data:
            node.owner_id = _owner_id(data)
        if "is_central" in data:
            if data.get("is_central"):
                _clear_central(session, except_id=node.id)
            node.is_central = bool(data.get("is_central"))

    logger.info("Node updated id=%s", node_id)
    return node


def delete_node(node_id: int) -> None:
    node = get_or_raise(Node, node_id)
    db.session.delete(node)
    db.session.commit()
    logger.info("Node deleted id=%s", node_id)
