"""
OKR Tracker
Audit domain model.

Models:
    - AuditLog: immutable, append-only trail for manual overrides
      (task reprioritisation today).
"""

import json
from datetime import UTC, datetime

from app.models import db

AUDIT_ENTITY_TYPES = {"task", "key_result", "objective", "objective_group"}

AUDIT_ACTIONS = {
    "REPRIORITIZE",
    "create",
    "update",
    "delete",
}


class AuditLog(db.Model):
    """
    One row per audited action. ``reason_for_change`` is mandatory for
    manual overrides; ``diff_json`` carries an optional old→new snapshot.
    """

    __tablename__ = "audit_logs"
    __table_args__ = (
        db.Index("idx_audit_entity", "entity_type", "entity_id"),
        db.Index("idx_audit_action", "action"),
        db.Index("idx_audit_ts", "timestamp"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=True, comment="Acting user, null until auth is wired")

    entity_type = db.Column(db.String(30), nullable=False, comment="task | key_result | …")
    entity_id = db.Column(db.String(36), nullable=False)
    action = db.Column(db.String(60), nullable=False)
    reason_for_change = db.Column(db.Text, nullable=True)

    diff_json = db.Column(db.Text, default="{}", comment="JSON: {field: {old, new}}")

    timestamp = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(UTC),
    )

    @property
    def diff(self) -> dict:
        """Deserialise *diff_json* to a Python dict."""
        try:
            return json.loads(self.diff_json or "{}")
        except (json.JSONDecodeError, TypeError):
            return {}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "action": self.action,
            "reason_for_change": self.reason_for_change,
            "diff": self.diff,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }

    def __repr__(self):
        return f"<AuditLog {self.id}: {self.action} on {self.entity_type}/{self.entity_id}>"


# ── Convenience writer ───────────────────────────────────────────────────────

def write_audit(
    session,
    *,
    entity_type: str,
    entity_id,
    action: str,
    reason: str | None = None,
    user_id: int | None = None,
    diff: dict | None = None,
) -> AuditLog:
    """
    Append a single audit row to *session*.  Uses ``flush`` so callers keep
    transaction control.

    Raises:
        ValueError: unknown entity_type or action.
    """
    if entity_type not in AUDIT_ENTITY_TYPES:
        raise ValueError(f"Unknown audit entity_type: {entity_type!r}")
    if action not in AUDIT_ACTIONS:
        raise ValueError(f"Unknown audit action: {action!r}")
    log = AuditLog(
        entity_type=entity_type,
        entity_id=str(entity_id),
        action=action,
        reason_for_change=reason,
        user_id=user_id,
        diff_json=json.dumps(diff or {}, default=str),
    )
    session.add(log)
    session.flush()
    return log
