"""
Deliverable service — final evidence attached to tasks.

Business context:
    A task may only reach ``Done`` once it holds at least one deliverable.
    Deliverables are added directly (link / uploaded file) or promoted from
    an attachment on one of the task's comments.

Storage:
    Deliverables live in ``tasks.final_deliverables`` as an ordered JSON
    array. List order is insertion order. Every element gets a stable ``id``
    when it is created; positional indexes are resolved to elements inside
    the same locked update that removes them.

Concurrency:
    Every mutation loads the task with ``SELECT … FOR UPDATE``, builds a new
    list, assigns it and commits. Writers on the same task are therefore
    serialized and no append or removal can be lost.

Rules:
    - db.session.commit() happens only in service modules.
    - Validation and not-found checks run before anything is written.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import select

from app.core.exceptions import NotFoundError, ValidationError
from app.models import db
from app.models.task import Task, TaskComment
from app.utils.helpers import get_for_update, get_or_raise

logger = logging.getLogger(__name__)

DEFAULT_DELIVERABLE_TYPE = "link"
DEFAULT_PROMOTED_TYPE = "file"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_element_id() -> str:
    """Stable identifier for an embedded list element."""
    return uuid.uuid4().hex


def _with_ids(items: list | None) -> list[dict]:
    """Copy *items*, back-filling ids on elements written before ids existed."""
    result = []
    for item in items or []:
        item = dict(item)
        if not item.get("id"):
            item["id"] = new_element_id()
        result.append(item)
    return result


def build_deliverable(draft: dict) -> dict:
    """Build a deliverable element from a client draft, applying defaults.

    Raises:
        ValidationError: If ``url`` is missing or blank.
    """
    url = draft.get("url")
    if not isinstance(url, str) or not url.strip():
        raise ValidationError("Deliverable must have a URL", details={"url": "required"})
    url = url.strip()
    return {
        "id": new_element_id(),
        "type": draft.get("type") or DEFAULT_DELIVERABLE_TYPE,
        "url": url,
        "title": draft.get("title") or url,
        "thumbnail": draft.get("thumbnail") or None,
        "added_by": draft.get("added_by") or None,
        "promoted_from_comment_id": draft.get("promoted_from_comment_id") or None,
        "added_at": _utcnow().isoformat(),
    }


def append_deliverables(task: Task, deliverables: list[dict]) -> list[dict]:
    """Append to a task that the caller already holds locked. Does not commit."""
    items = _with_ids(task.final_deliverables)
    items.extend(deliverables)
    task.final_deliverables = items
    task.updated_at = _utcnow()
    return items


# ── Public service functions ──────────────────────────────────────────────────


def list_deliverables(task_id: int) -> list[dict]:
    """Return the task's deliverables in insertion order."""
    task = get_or_raise(Task, task_id)
    return task.deliverables


def add_deliverable(task_id: int, draft: dict) -> list[dict]:
    """Append one deliverable built from *draft* and return the full list.

    Raises:
        ValidationError: ``url`` missing or empty.
        NotFoundError: Task does not exist.
    """
    deliverable = build_deliverable(draft)
    task = get_for_update(Task, task_id)
    items = append_deliverables(task, [deliverable])
    db.session.commit()
    logger.info(
        "Deliverable added task_id=%s deliverable_id=%s count=%d",
        task_id, deliverable["id"], len(items),
    )
    return items


def remove_deliverable(task_id: int, index: int) -> list[dict]:
    """Remove the deliverable at zero-based *index* and return the new list.

    The index is resolved against the list read under the row lock, so it
    refers to the same element the caller saw unless another writer got in
    first; in that case the request applies to the current list.

    Raises:
        ValidationError: index outside ``[0, count)``. The list is unchanged.
        NotFoundError: Task does not exist.
    """
    task = get_for_update(Task, task_id)
    items = _with_ids(task.final_deliverables)
    if not isinstance(index, int) or isinstance(index, bool) or index < 0 or index >= len(items):
        db.session.rollback()
        raise ValidationError(
            "Invalid deliverable index",
            details={"index": index, "count": len(items)},
        )
    return _remove_element(task, items, items[index]["id"])


def remove_deliverable_by_id(task_id: int, deliverable_id: str) -> list[dict]:
    """Remove the deliverable with stable id *deliverable_id*.

    Raises:
        NotFoundError: Task or deliverable does not exist.
    """
    task = get_for_update(Task, task_id)
    items = _with_ids(task.final_deliverables)
    if not any(d["id"] == deliverable_id for d in items):
        db.session.rollback()
        raise NotFoundError(resource="Deliverable", resource_id=deliverable_id)
    return _remove_element(task, items, deliverable_id)


def _remove_element(task: Task, items: list[dict], deliverable_id: str) -> list[dict]:
    remaining = [d for d in items if d["id"] != deliverable_id]
    task.final_deliverables = remaining
    task.updated_at = _utcnow()
    db.session.commit()
    logger.info(
        "Deliverable removed task_id=%s deliverable_id=%s count=%d",
        task.id, deliverable_id, len(remaining),
    )
    return remaining


def can_mark_done(task_id: int) -> dict:
    """Report whether the task currently satisfies the completion gate."""
    task = get_or_raise(Task, task_id)
    count = len(task.deliverables)
    can_complete = count > 0
    return {
        "canComplete": can_complete,
        "deliverableCount": count,
        "message": (
            "Task can be completed" if can_complete
            else "Task requires at least one deliverable"
        ),
    }


def promote_attachment(
    task_id: int,
    comment_id: int,
    attachment_index: int,
    added_by: str | None = None,
) -> dict:
    """Turn attachment *attachment_index* of comment *comment_id* into a deliverable.

    The comment is looked up within the task, so an attachment cannot be
    promoted through a comment that belongs to a different task.

    ``promoted_from_comment_id`` is provenance only; deleting the comment
    later leaves the deliverable in place with a dangling reference.

    Returns:
        ``{"deliverables": [...], "promoted": {...}}``

    Raises:
        NotFoundError: No comment with that id on this task.
        ValidationError: attachment index out of range, or attachment has no URL.
    """
    comment = db.session.execute(
        select(TaskComment).where(
            TaskComment.id == comment_id,
            TaskComment.task_id == task_id,
        )
    ).scalar_one_or_none()
    if comment is None:
        raise NotFoundError(resource="Comment", resource_id=comment_id)

    attachments = list(comment.attachments or [])
    if (
        not isinstance(attachment_index, int)
        or isinstance(attachment_index, bool)
        or attachment_index < 0
        or attachment_index >= len(attachments)
    ):
        raise ValidationError(
            "Invalid attachment index",
            details={"attachment_index": attachment_index, "count": len(attachments)},
        )

    attachment = attachments[attachment_index]
    url = attachment.get("url")
    if not url:
        raise ValidationError("Attachment has no URL to promote")

    deliverable = {
        "id": new_element_id(),
        "type": attachment.get("type") or DEFAULT_PROMOTED_TYPE,
        "url": url,
        "title": attachment.get("name") or url,
        "thumbnail": attachment.get("thumbnail") or None,
        "added_by": added_by or None,
        "promoted_from_comment_id": comment_id,
        "promoted_from_attachment_id": attachment.get("id"),
        "added_at": _utcnow().isoformat(),
    }

    task = get_for_update(Task, task_id)
    items = append_deliverables(task, [deliverable])
    db.session.commit()
    logger.info(
        "Attachment promoted task_id=%s comment_id=%s index=%s deliverable_id=%s",
        task_id, comment_id, attachment_index, deliverable["id"],
    )
    return {"deliverables": items, "promoted": deliverable}
