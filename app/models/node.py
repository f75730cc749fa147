"""
OKR Tracker
Organisational node models.

Models:
    - Node: team / business unit that owns periods and objectives
    - NodeInteraction: directed edge between two nodes on the flywheel map

Architecture chain: Node → ObjectiveGroup → Objective → KeyResult / Task
"""

from datetime import datetime, timezone

from app.models import db


def _utcnow():
    return datetime.now(timezone.utc)


INTERACTION_TYPES = {"one-way", "two-way"}


class Node(db.Model):
    """An organisational unit. At most one node carries ``is_central``."""

    __tablename__ = "nodes"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, default="")
    color = db.Column(db.String(20), nullable=True, comment="Hex colour for the flywheel UI")
    owner_id = db.Column(
        db.Integer,
        db.ForeignKey("assignees.id", ondelete="SET NULL"),
        nullable=True,
    )
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    is_central = db.Column(db.Boolean, nullable=False, default=False)
    generates_revenue = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    groups = db.relationship(
        "ObjectiveGroup", backref="node", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    objectives = db.relationship(
        "Objective", backref="node", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    owner = db.relationship("Assignee", foreign_keys=[owner_id])

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "color": self.color,
            "owner_id": self.owner_id,
            "is_active": self.is_active,
            "is_central": self.is_central,
            "generates_revenue": self.generates_revenue,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Node {self.id}: {self.name}>"


class NodeInteraction(db.Model):
    """Directed interaction between two nodes (who feeds whom)."""

    __tablename__ = "node_interactions"

    id = db.Column(db.Integer, primary_key=True)
    source_node_id = db.Column(
        db.Integer, db.ForeignKey("nodes.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    target_node_id = db.Column(
        db.Integer, db.ForeignKey("nodes.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    label = db.Column(db.String(200), default="")
    type = db.Column(db.String(20), nullable=False, default="one-way")
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "source_node_id": self.source_node_id,
            "target_node_id": self.target_node_id,
            "label": self.label,
            "type": self.type,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<NodeInteraction {self.source_node_id}->{self.target_node_id}>"
