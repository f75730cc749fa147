"""
Comment service — discussion thread on a task.

A comment carries free text, embedded attachments, or both; a comment with
neither is rejected. Attachments are stored on the comment row as an
ordered JSON array and each receives a stable ``id`` when created so it can
later be promoted into a deliverable (see deliverable_service).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select

from app.core.exceptions import ValidationError
from app.models import db
from app.models.task import Task, TaskComment
from app.services.deliverable_service import new_element_id
from app.utils.helpers import get_or_raise

logger = logging.getLogger(__name__)

DEFAULT_USER_NAME = "Anonymous"


def _build_attachment(raw) -> dict:
    if not isinstance(raw, dict):
        raise ValidationError("Each attachment must be an object")
    url = raw.get("url")
    if not isinstance(url, str) or not url.strip():
        raise ValidationError("Attachment must have a URL", details={"url": "required"})
    return {
        "id": raw.get("id") or new_element_id(),
        "type": raw.get("type") or None,
        "url": url.strip(),
        "name": raw.get("name") or None,
        "thumbnail": raw.get("thumbnail") or None,
        "size": raw.get("size"),
    }


def list_comments(task_id: int) -> list[TaskComment]:
    """Return comments for a task, oldest first."""
    get_or_raise(Task, task_id)
    stmt = (
        select(TaskComment)
        .where(TaskComment.task_id == task_id)
        .order_by(TaskComment.created_at.asc(), TaskComment.id.asc())
    )
    return db.session.execute(stmt).scalars().all()


def create_comment(
    task_id: int,
    content: str | None = None,
    user_name: str | None = None,
    attachments: list | None = None,
    user_id: int | None = None,
) -> TaskComment:
    """Create a comment.

    Raises:
        ValidationError: content empty and no attachments, or a malformed attachment.
        NotFoundError: Task does not exist.
    """
    if attachments is None:
        attachments = []
    if not isinstance(attachments, list):
        raise ValidationError("attachments must be a list")
    if content is not None and not isinstance(content, str):
        raise ValidationError("content must be a string")

    if not content and not attachments:
        raise ValidationError("Comment must have content or attachments")

    built = [_build_attachment(a) for a in attachments]
    get_or_raise(Task, task_id)

    comment = TaskComment(
        task_id=task_id,
        user_id=user_id,
        user_name=(user_name or "").strip() or DEFAULT_USER_NAME,
        content=content or "",
        attachments=built,
    )
    db.session.add(comment)
    db.session.commit()
    logger.info(
        "Comment created id=%s task_id=%s attachments=%d",
        comment.id, task_id, len(built),
    )
    return comment


def update_comment(comment_id: int, content: str | None) -> TaskComment:
    """Replace a comment's text.

    Clearing the text is allowed only while the comment still has attachments.
    """
    comment = get_or_raise(TaskComment, comment_id, label="Comment")
    if content is not None and not isinstance(content, str):
        raise ValidationError("content must be a string")
    if not content and not comment.attachments:
        raise ValidationError("Comment must have content or attachments")

    comment.content = content or ""
    comment.updated_at = datetime.now(timezone.utc)
    db.session.commit()
    logger.info("Comment updated id=%s", comment_id)
    return comment


def delete_comment(comment_id: int) -> int:
    """Delete a comment and return its id.

    Deliverables promoted from it keep their ``promoted_from_comment_id``.
    """
    comment = get_or_raise(TaskComment, comment_id, label="Comment")
    db.session.delete(comment)
    db.session.commit()
    logger.info("Comment deleted id=%s", comment_id)
    return comment_id
