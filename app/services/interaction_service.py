"""Node interaction service — edges between nodes on the flywheel map."""

from __future__ import annotations

import logging

from sqlalchemy import select

from app.core.exceptions import ValidationError
from app.models import db
from app.models.node import INTERACTION_TYPES, Node, NodeInteraction
from app.utils.helpers import get_or_raise, parse_int

logger = logging.getLogger(__name__)


def list_interactions() -> list[NodeInteraction]:
    return db.session.execute(
        select(NodeInteraction).order_by(NodeInteraction.id.asc())
    ).scalars().all()


def create_interaction(data: dict) -> NodeInteraction:
    source_id = parse_int(data.get("source_node_id"))
    target_id = parse_int(data.get("target_node_id"))
    if source_id is None or target_id is None:
        raise ValidationError(
            "source_node_id and target_node_id are required",
            details={"source_node_id": "required", "target_node_id": "required"},
        )
    if source_id == target_id:
        raise ValidationError("A node cannot interact with itself")
    kind = data.get("type") or "one-way"
    if kind not in INTERACTION_TYPES:
        raise ValidationError(
            f"type must be one of {sorted(INTERACTION_TYPES)}", details={"type": kind},
        )
    get_or_raise(Node, source_id)
    get_or_raise(Node, target_id)

    interaction = NodeInteraction(
        source_node_id=source_id,
        target_node_id=target_id,
        label=data.get("label") or "",
        type=kind,
    )
    db.session.add(interaction)
    db.session.commit()
    logger.info("Interaction created id=%s %s -> %s", interaction.id, source_id, target_id)
    return interaction


def delete_interaction(interaction_id: int) -> None:
    interaction = get_or_raise(NodeInteraction, interaction_id, label="Interaction")
    db.session.delete(interaction)
    db.session.commit()
    logger.info("Interaction deleted id=%s", interaction_id)
