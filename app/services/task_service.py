"""
Task service — creation, listing, reprioritisation and the completion gate.

Completion gate:
    ``Done`` requires at least one entry in ``final_deliverables``. This is
    the only gate. A legacy ``evidence_url`` (or an uploaded evidence file)
    sent with the status change is stored on the task and appended to the
    deliverable list in the same unit of work, so old clients keep working.
    A refused transition writes nothing. Every other status change is
    unconditional.

Rules:
    - priority_score starts at 0; PATCH /priority overrides it and writes an
      audit row with the mandatory reason in the same transaction.
    - Task creation and its cross-node impacts commit together.
"""

from __future__ import annotations

import logging

from sqlalchemy import select

from app.core.exceptions import ValidationError
from app.models import db
from app.models.assignee import Assignee
from app.models.audit import write_audit
from app.models.node import Node
from app.models.okr import Objective
from app.models.project import Project
from app.models.task import (
    DEFAULT_TASK_STATUS,
    DEFAULT_TASK_WEIGHT,
    DONE_STATUS,
    WAITING_STATUS,
    CrossNodeImpact,
    Task,
)
from app.services.deliverable_service import append_deliverables, build_deliverable
from app.services.settings_service import allocate_task_number
from app.utils.helpers import atomic, get_for_update, get_or_raise, parse_date, parse_int

logger = logging.getLogger(__name__)

# ── Queries ───────────────────────────────────────────────────────────────────


def list_tasks_by_objective(objective_id: int) -> list[Task]:
    """Tasks of one objective, newest first."""
    stmt = (
        select(Task)
        .where(Task.objective_id == objective_id)
        .order_by(Task.created_at.desc(), Task.id.desc())
    )
    return db.session.execute(stmt).scalars().all()


def list_tasks_by_week(week_number: int) -> list[Task]:
    """Tasks planned for a week, highest priority first."""
    stmt = (
        select(Task)
        .where(Task.week_number == week_number)
        .order_by(Task.priority_score.desc(), Task.id.asc())
    )
    return db.session.execute(stmt).scalars().all()


def get_task(task_id: int) -> Task:
    return get_or_raise(Task, task_id)


# ── Creation ──────────────────────────────────────────────────────────────────


def create_task(data: dict) -> Task:
    """Create a task (and its cross-node impacts) atomically.

    Raises:
        ValidationError: title missing or impacted_node_ids malformed.
        NotFoundError: objective, project, assignee or an impacted node missing.
    """
    title = str(data.get("title", "") or "").strip()
    if not title:
        raise ValidationError("title is required", details={"title": "required"})

    objective_id = parse_int(data.get("objective_id"))
    if objective_id is None:
        raise ValidationError("objective_id is required", details={"objective_id": "required"})

    impacted = data.get("impacted_node_ids") or []
    if not isinstance(impacted, list):
        raise ValidationError("impacted_node_ids must be a list")
    impacted_ids = []
    for raw in impacted:
        node_id = parse_int(raw)
        if node_id is None:
            raise ValidationError("impacted_node_ids must contain node ids")
        if node_id not in impacted_ids:
            impacted_ids.append(node_id)

    weight = parse_int(data.get("weight"), DEFAULT_TASK_WEIGHT)
    project_id = parse_int(data.get("project_id"))
    assignee_id = parse_int(data.get("assignee_id"))

    get_or_raise(Objective, objective_id)
    if project_id is not None:
        get_or_raise(Project, project_id)
    if assignee_id is not None:
        get_or_raise(Assignee, assignee_id)
    for node_id in impacted_ids:
        get_or_raise(Node, node_id)

    with atomic() as session:
        task = Task(
            objective_id=objective_id,
            project_id=project_id,
            title=title,
            description=data.get("description") or "",
            assignee_id=assignee_id,
            week_number=parse_int(data.get("week_number")),
            weight=weight,
            due_date=parse_date(data.get("due_date")),
            status=data.get("status") or DEFAULT_TASK_STATUS,
            priority_score=0,
            final_deliverables=[],
            task_number=allocate_task_number(session),
        )
        session.add(task)
        session.flush()
        for node_id in impacted_ids:
            session.add(CrossNodeImpact(source_task_id=task.id, target_node_id=node_id))

    logger.info(
        "Task created id=%s objective_id=%s number=%s impacts=%d",
        task.id, objective_id, task.task_number, len(impacted_ids),
    )
    return task


# ── Completion gate ───────────────────────────────────────────────────────────


def update_task_status(
    task_id: int,
    status,
    evidence_url: str | None = None,
    evidence_file: dict | None = None,
    blocking_reason: str | None = None,
    added_by: str | None = None,
) -> Task:
    """Change a task's status, enforcing the deliverable gate for ``Done``.

    Args:
        task_id: Target task.
        status: New status (free-form; ``"Done"`` is gated).
        evidence_url: Legacy evidence link; appended as a ``link`` deliverable.
        evidence_file: Stored upload descriptor ``{url, name, type, size}``;
                       appended as a ``file`` deliverable.
        blocking_reason: Reason shown while the task is ``Waiting``.
        added_by: Recorded on deliverables created from legacy evidence.

    Raises:
        ValidationError: status missing, or ``Done`` without any deliverable.
        NotFoundError: Task does not exist.
    """
    if not isinstance(status, str) or not status.strip():
        raise ValidationError("status is required", details={"status": "required"})
    status = status.strip()

    if evidence_url is not None and not isinstance(evidence_url, str):
        raise ValidationError("evidence_url must be a string")
    evidence_url = (evidence_url or "").strip() or None

    task = get_for_update(Task, task_id)
    existing_urls = {d.get("url") for d in task.deliverables}

    incoming = []
    if evidence_file and evidence_file.get("url"):
        incoming.append(build_deliverable({
            "type": "file",
            "url": evidence_file["url"],
            "title": evidence_file.get("name"),
            "added_by": added_by,
        }))
    if evidence_url:
        incoming.append(build_deliverable({
            "type": "link",
            "url": evidence_url,
            "title": None,
            "added_by": added_by,
        }))
    incoming = [d for d in incoming if d["url"] not in existing_urls]

    if status == DONE_STATUS and not task.deliverables and not incoming:
        db.session.rollback()
        raise ValidationError(
            "At least one deliverable (link or file) is required to mark task as Done",
            details={"deliverableCount": 0},
        )

    old_status = task.status
    if incoming:
        append_deliverables(task, incoming)
        task.evidence_url = incoming[-1]["url"]
    task.status = status
    if status == WAITING_STATUS:
        if blocking_reason is not None:
            task.blocking_reason = blocking_reason
    else:
        task.blocking_reason = None

    db.session.commit()
    logger.info(
        "Task status changed id=%s %s -> %s deliverables=%d",
        task_id, old_status, status, len(task.deliverables),
    )
    return task


# ── Reprioritisation ──────────────────────────────────────────────────────────


def update_task_priority(task_id: int, new_priority_score, reason, user_id: int | None = None) -> Task:
    """Override priority_score and record why, atomically.

    Raises:
        ValidationError: reason missing or score not an integer.
        NotFoundError: Task does not exist.
    """
    if not isinstance(reason, str) or not reason.strip():
        raise ValidationError("Reason for change is required for reprioritization.")
    score = parse_int(new_priority_score)
    if score is None:
        raise ValidationError("new_priority_score must be an integer")

    with atomic() as session:
        task = get_for_update(Task, task_id, session=session)
        old_score = task.priority_score
        task.priority_score = score
        write_audit(
            session,
            entity_type="task",
            entity_id=task.id,
            action="REPRIORITIZE",
            reason=reason.strip(),
            user_id=user_id,
            diff={"priority_score": {"old": old_score, "new": score}},
        )

    logger.info("Task reprioritized id=%s %s -> %s", task_id, old_score, score)
    return task

