"""Project model and its many-to-many link to objectives."""

from datetime import datetime, timezone

from app.models import db


def _utcnow():
    return datetime.now(timezone.utc)


project_objectives = db.Table(
    "project_objectives",
    db.Column(
        "project_id", db.Integer,
        db.ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True,
    ),
    db.Column(
        "objective_id", db.Integer,
        db.ForeignKey("objectives.id", ondelete="CASCADE"), primary_key=True,
    ),
)


class Project(db.Model):
    """Cross-cutting initiative that contributes to one or more objectives."""

    __tablename__ = "projects"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(30), nullable=False, default="Active")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    objectives = db.relationship(
        "Objective",
        secondary=project_objectives,
        lazy="selectin",
        backref=db.backref("projects", lazy="dynamic"),
    )

    def to_dict(self) -> dict:
        """Serialize project fields plus linked objective ids."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "status": self.status,
            "objective_ids": sorted(o.id for o in self.objectives),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return f"<Project {self.id}: {self.name}>"
