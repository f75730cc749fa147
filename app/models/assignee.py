"""Assignee model — people tasks and nodes can be assigned to."""

from datetime import datetime, timezone

from app.models import db


class Assignee(db.Model):
    """A named person. Names are matched case-insensitively on get-or-create."""

    __tablename__ = "assignees"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Assignee {self.id}: {self.name}>"
