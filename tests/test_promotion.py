"""
Tests: promoting a comment attachment to a task deliverable.
"""

import pytest

from app.core.exceptions import NotFoundError, ValidationError
from app.models import db as _db
from app.models.task import Task
from app.services import comment_service, deliverable_service


@pytest.fixture()
def comment(task):
    return comment_service.create_comment(
        task.id,
        content="see files",
        attachments=[
            {"url": "/uploads/spec.pdf", "name": "spec.pdf"},
            {"url": "https://img/1.png", "type": "image", "thumbnail": "https://img/1_t.png"},
        ],
    )


def _other_task(objective_id):
    t = Task(objective_id=objective_id, title="Other", final_deliverables=[])
    _db.session.add(t)
    _db.session.commit()
    return t


def test_promote_attachment_builds_deliverable(task, comment):
    result = deliverable_service.promote_attachment(task.id, comment.id, 0, added_by="Ada")

    promoted = result["promoted"]
    assert promoted["type"] == "file"
    assert promoted["url"] == "/uploads/spec.pdf"
    assert promoted["title"] == "spec.pdf"
    assert promoted["added_by"] == "Ada"
    assert promoted["promoted_from_comment_id"] == comment.id
    assert promoted["promoted_from_attachment_id"] == comment.attachments[0]["id"]
    assert result["deliverables"] == [promoted]


def test_promote_attachment_title_falls_back_to_url(task, comment):
    promoted = deliverable_service.promote_attachment(task.id, comment.id, 1)["promoted"]

    assert promoted["type"] == "image"
    assert promoted["title"] == "https://img/1.png"
    assert promoted["thumbnail"] == "https://img/1_t.png"


def test_promote_appends_after_existing(task, comment):
    deliverable_service.add_deliverable(task.id, {"url": "https://first"})

    result = deliverable_service.promote_attachment(task.id, comment.id, 1)

    assert [d["url"] for d in result["deliverables"]] == ["https://first", "https://img/1.png"]


@pytest.mark.parametrize("index", [-1, 2, "0"])
def test_promote_invalid_index(task, comment, index):
    with pytest.raises(ValidationError, match="Invalid attachment index"):
        deliverable_service.promote_attachment(task.id, comment.id, index)
    assert deliverable_service.list_deliverables(task.id) == []


def test_promote_comment_from_other_task_is_not_found(task, comment, objective):
    other = _other_task(objective.id)

    with pytest.raises(NotFoundError):
        deliverable_service.promote_attachment(other.id, comment.id, 0)
    assert deliverable_service.list_deliverables(other.id) == []


def test_deleting_comment_keeps_promoted_deliverable(task, comment):
    deliverable_service.promote_attachment(task.id, comment.id, 0)

    comment_service.delete_comment(comment.id)

    items = deliverable_service.list_deliverables(task.id)
    assert len(items) == 1
    assert items[0]["promoted_from_comment_id"] == comment.id


# ── API ───────────────────────────────────────────────────────────────────────


def test_api_promote(client, task, comment):
    res = client.post(
        f"/api/v1/tasks/{task.id}/deliverables/promote",
        json={"comment_id": comment.id, "attachment_index": 0},
    )
    assert res.status_code == 201
    body = res.get_json()
    assert body["promoted"]["url"] == "/uploads/spec.pdf"
    assert len(body["deliverables"]) == 1

    res = client.get(f"/api/v1/tasks/{task.id}/can-complete")
    assert res.get_json()["canComplete"] is True


def test_api_promote_errors(client, task, comment):
    res = client.post(
        f"/api/v1/tasks/{task.id}/deliverables/promote",
        json={"comment_id": comment.id, "attachment_index": 9},
    )
    assert res.status_code == 400

    res = client.post(
        f"/api/v1/tasks/{task.id}/deliverables/promote",
        json={"comment_id": 9999, "attachment_index": 0},
    )
    assert res.status_code == 404
