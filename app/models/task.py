"""
OKR Tracker
Task execution models.

Models:
    - Task: unit of work under an objective; carries its deliverables
    - TaskComment: discussion entry with embedded attachments
    - CrossNodeImpact: other nodes affected by a task

Embedded lists:
    ``Task.final_deliverables`` and ``TaskComment.attachments`` are JSON
    arrays stored on the owning row. Each element carries a stable ``id``
    assigned at insertion; list position is still exposed for
    index-addressed endpoints. Mutations go through the service layer,
    which locks the owning row and assigns a fresh list.
"""

from datetime import datetime, timezone

from app.models import db


def _utcnow():
    return datetime.now(timezone.utc)


DONE_STATUS = "Done"
WAITING_STATUS = "Waiting"
DEFAULT_TASK_STATUS = "Backlog"
DEFAULT_TASK_WEIGHT = 3


# ═══════════════════════════════════════════════════════════════════════════
#  TASK
# ═══════════════════════════════════════════════════════════════════════════

class Task(db.Model):
    """A task with an evidence-gated ``Done`` status."""

    __tablename__ = "tasks"

    id = db.Column(db.Integer, primary_key=True)
    objective_id = db.Column(
        db.Integer, db.ForeignKey("objectives.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    project_id = db.Column(
        db.Integer, db.ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    task_number = db.Column(db.Integer, nullable=True, comment="Sequential number behind task_identifier")
    title = db.Column(db.String(300), nullable=False)
    description = db.Column(db.Text, default="")
    assignee_id = db.Column(
        db.Integer, db.ForeignKey("assignees.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    week_number = db.Column(db.Integer, nullable=True, index=True)
    weight = db.Column(db.Integer, nullable=False, default=DEFAULT_TASK_WEIGHT)
    due_date = db.Column(db.Date, nullable=True)
    status = db.Column(db.String(30), nullable=False, default=DEFAULT_TASK_STATUS, index=True)
    blocking_reason = db.Column(db.Text, nullable=True)
    evidence_url = db.Column(db.String(1000), nullable=True, comment="Legacy single-evidence field")
    final_deliverables = db.Column(db.JSON, nullable=False, default=list)
    priority_score = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    comments = db.relationship(
        "TaskComment", backref="task", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    impacts = db.relationship(
        "CrossNodeImpact", backref="task", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    assignee = db.relationship("Assignee", foreign_keys=[assignee_id])
    project = db.relationship("Project", foreign_keys=[project_id])

    @property
    def deliverables(self) -> list:
        return list(self.final_deliverables or [])

    def to_dict(self, prefix=None):
        impacted = [i.target_node_id for i in self.impacts]
        identifier = None
        if prefix and self.task_number is not None:
            identifier = f"{prefix}-{self.task_number}"
        return {
            "id": self.id,
            "task_identifier": identifier,
            "task_number": self.task_number,
            "objective_id": self.objective_id,
            "objective_title": self.objective.description if self.objective else None,
            "project_id": self.project_id,
            "project_name": self.project.name if self.project else None,
            "title": self.title,
            "description": self.description,
            "assignee_id": self.assignee_id,
            "assignee_name": self.assignee.name if self.assignee else None,
            "week_number": self.week_number,
            "weight": self.weight,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "status": self.status,
            "blocking_reason": self.blocking_reason,
            "evidence_url": self.evidence_url,
            "final_deliverables": self.deliverables,
            "priority_score": self.priority_score,
            "impacted_nodes": impacted,
            "impacted_node_count": len(impacted),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Task {self.id}: {self.title[:40]} [{self.status}]>"


# ═══════════════════════════════════════════════════════════════════════════
#  COMMENT
# ═══════════════════════════════════════════════════════════════════════════

class TaskComment(db.Model):
    """Comment on a task. Must carry content or at least one attachment."""

    __tablename__ = "task_comments"

    id = db.Column(db.Integer, primary_key=True)
    task_id = db.Column(
        db.Integer, db.ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    user_id = db.Column(db.Integer, nullable=True)
    user_name = db.Column(db.String(255), nullable=False, default="Anonymous")
    content = db.Column(db.Text, nullable=False, default="")
    attachments = db.Column(db.JSON, nullable=False, default=list)

    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "task_id": self.task_id,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "content": self.content,
            "attachments": list(self.attachments or []),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<TaskComment {self.id} task={self.task_id}>"


# ═══════════════════════════════════════════════════════════════════════════
#  CROSS-NODE IMPACT
# ═══════════════════════════════════════════════════════════════════════════

class CrossNodeImpact(db.Model):
    """A node (other than the owner) affected by a task."""

    __tablename__ = "cross_node_impacts"

    id = db.Column(db.Integer, primary_key=True)
    source_task_id = db.Column(
        db.Integer, db.ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    target_node_id = db.Column(
        db.Integer, db.ForeignKey("nodes.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    __table_args__ = (
        db.UniqueConstraint("source_task_id", "target_node_id", name="uq_cross_node_impact"),
    )

    def __repr__(self):
        return f"<CrossNodeImpact task={self.source_task_id} node={self.target_node_id}>"
