"""
OKR Tracker
Workspace settings model.

A single ``project_settings`` row holds the task identifier prefix and the
next sequential task number. Task identifiers are rendered at read time
(``<prefix>-<task_number>``), so changing the prefix renames every task.
"""

from datetime import datetime, timezone

from app.models import db

DEFAULT_PROJECT_PREFIX = "SDL"


class ProjectSettings(db.Model):
    __tablename__ = "project_settings"

    id = db.Column(db.Integer, primary_key=True)
    project_prefix = db.Column(db.String(3), nullable=False, default=DEFAULT_PROJECT_PREFIX)
    next_task_number = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "project_prefix": self.project_prefix,
            "next_task_number": self.next_task_number,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
