"""
OKR Tracker
OKR domain models.

Models:
    - ObjectiveGroup: named period ("Q1 2026", "H2") scoped to one node
    - Objective: goal owned by a node directly or through a period
    - KeyResult: measurable sub-target of an objective

Ordering:
    Objectives and key results carry a user-controlled ``display_order``.
    New rows are appended after the current maximum among their siblings;
    reordering writes the value verbatim.
"""

from datetime import datetime, timezone

from app.models import db


def _utcnow():
    return datetime.now(timezone.utc)


OBJECTIVE_TYPES = {"annual", "quarterly"}
QUARTERS = ("Q1", "Q2", "Q3", "Q4")


# ═══════════════════════════════════════════════════════════════════════════
#  OBJECTIVE GROUP (period)
# ═══════════════════════════════════════════════════════════════════════════

class ObjectiveGroup(db.Model):
    """A time window grouping objectives within a node.

    Alias uniqueness per node is only enforced by replication; direct
    creation may produce two groups with the same alias.
    """

    __tablename__ = "objective_groups"

    id = db.Column(db.Integer, primary_key=True)
    node_id = db.Column(
        db.Integer, db.ForeignKey("nodes.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    alias = db.Column(db.String(120), nullable=False)
    target_date = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    objectives = db.relationship(
        "Objective", backref="group", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
        order_by="(Objective.display_order, Objective.created_at, Objective.id)",
    )

    __table_args__ = (
        db.Index("ix_objective_groups_node_alias", "node_id", "alias"),
    )

    def to_dict(self, include_objectives=False):
        d = {
            "id": self.id,
            "node_id": self.node_id,
            "alias": self.alias,
            "target_date": self.target_date.isoformat() if self.target_date else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_objectives:
            d["objectives"] = [o.to_dict(include_key_results=True) for o in self.objectives]
        return d

    def __repr__(self):
        return f"<ObjectiveGroup {self.id}: {self.alias}>"


# ═══════════════════════════════════════════════════════════════════════════
#  OBJECTIVE
# ═══════════════════════════════════════════════════════════════════════════

class Objective(db.Model):
    """A goal. Node-level slots (annual, Q1..Q4) have no group."""

    __tablename__ = "objectives"

    id = db.Column(db.Integer, primary_key=True)
    node_id = db.Column(
        db.Integer, db.ForeignKey("nodes.id", ondelete="CASCADE"), nullable=True, index=True,
    )
    group_id = db.Column(
        db.Integer, db.ForeignKey("objective_groups.id", ondelete="CASCADE"),
        nullable=True, index=True,
    )
    description = db.Column(db.Text, nullable=False, default="")
    type = db.Column(db.String(20), nullable=True, comment="annual | quarterly")
    quarter = db.Column(db.String(2), nullable=True, comment="Q1..Q4")
    year = db.Column(db.Integer, nullable=True)
    target_value = db.Column(db.Numeric(12, 2), default=100)
    current_value = db.Column(db.Numeric(12, 2), default=0)
    display_order = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    key_results = db.relationship(
        "KeyResult", backref="objective", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
        order_by="(KeyResult.display_order, KeyResult.created_at, KeyResult.id)",
    )
    tasks = db.relationship(
        "Task", backref="objective", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    def to_dict(self, include_key_results=False):
        d = {
            "id": self.id,
            "node_id": self.node_id,
            "group_id": self.group_id,
            "description": self.description,
            "type": self.type,
            "quarter": self.quarter,
            "year": self.year,
            "target_value": float(self.target_value) if self.target_value is not None else None,
            "current_value": float(self.current_value) if self.current_value is not None else None,
            "display_order": self.display_order,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_key_results:
            d["key_results"] = [kr.to_dict() for kr in self.key_results]
        return d

    def __repr__(self):
        return f"<Objective {self.id}: {self.description[:40]}>"


# ═══════════════════════════════════════════════════════════════════════════
#  KEY RESULT
# ═══════════════════════════════════════════════════════════════════════════

class KeyResult(db.Model):
    """Measurable sub-target. Description is unique per objective at creation."""

    __tablename__ = "key_results"

    id = db.Column(db.Integer, primary_key=True)
    objective_id = db.Column(
        db.Integer, db.ForeignKey("objectives.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    description = db.Column(db.Text, nullable=False)
    target_value = db.Column(db.Numeric(12, 2), nullable=False, default=100)
    current_value = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    display_order = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def progress(self) -> float:
        """Completion percentage, clamped to 0..100."""
        target = float(self.target_value or 0)
        if target <= 0:
            return 0.0
        pct = float(self.current_value or 0) / target * 100
        return round(max(0.0, min(100.0, pct)), 1)

    def to_dict(self):
        return {
            "id": self.id,
            "objective_id": self.objective_id,
            "description": self.description,
            "target_value": float(self.target_value) if self.target_value is not None else None,
            "current_value": float(self.current_value) if self.current_value is not None else None,
            "progress": self.progress(),
            "display_order": self.display_order,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<KeyResult {self.id}: {self.description[:40]}>"
