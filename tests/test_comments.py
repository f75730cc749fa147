"""
Tests: task comments and their attachments.

All test data is created via the shared ORM fixtures (node → objective → task).
"""

import pytest

from app.core.exceptions import NotFoundError, ValidationError
from app.services import comment_service


def test_create_comment_with_content_defaults_user_name(task):
    comment = comment_service.create_comment(task.id, content="Looks good")

    assert comment.user_name == "Anonymous"
    assert comment.content == "Looks good"
    assert comment.attachments == []


def test_create_comment_with_only_attachments(task):
    comment = comment_service.create_comment(
        task.id,
        user_name="Ada",
        attachments=[{"url": "/uploads/a.png", "type": "image", "name": "a.png", "size": 12}],
    )

    assert comment.content == ""
    assert comment.user_name == "Ada"
    att = comment.attachments[0]
    assert att["url"] == "/uploads/a.png"
    assert att["name"] == "a.png"
    assert att["id"]


@pytest.mark.parametrize("content", [None, ""])
def test_create_comment_requires_content_or_attachments(task, content):
    with pytest.raises(ValidationError, match="content or attachments"):
        comment_service.create_comment(task.id, content=content, attachments=[])


def test_create_comment_rejects_attachment_without_url(task):
    with pytest.raises(ValidationError):
        comment_service.create_comment(task.id, content="x", attachments=[{"name": "a.png"}])


def test_create_comment_unknown_task():
    with pytest.raises(NotFoundError):
        comment_service.create_comment(9999, content="hello")


def test_list_comments_oldest_first(task):
    first = comment_service.create_comment(task.id, content="first")
    second = comment_service.create_comment(task.id, content="second")

    listed = comment_service.list_comments(task.id)

    assert [c.id for c in listed] == [first.id, second.id]


def test_update_and_delete_comment(task):
    comment = comment_service.create_comment(task.id, content="draft")

    updated = comment_service.update_comment(comment.id, "final")
    assert updated.content == "final"

    assert comment_service.delete_comment(comment.id) == comment.id
    assert comment_service.list_comments(task.id) == []
    with pytest.raises(NotFoundError):
        comment_service.delete_comment(comment.id)


# ── API ───────────────────────────────────────────────────────────────────────


def test_api_comment_lifecycle(client, task):
    res = client.post(f"/api/v1/tasks/{task.id}/comments", json={"content": "hi", "user_name": "Bo"})
    assert res.status_code == 201
    comment = res.get_json()
    assert comment["user_name"] == "Bo"

    res = client.get(f"/api/v1/tasks/{task.id}/comments")
    assert res.status_code == 200
    assert [c["content"] for c in res.get_json()] == ["hi"]

    res = client.put(f"/api/v1/tasks/comments/{comment['id']}", json={"content": "edited"})
    assert res.status_code == 200
    assert res.get_json()["content"] == "edited"

    res = client.delete(f"/api/v1/tasks/comments/{comment['id']}")
    assert res.status_code == 200
    assert res.get_json() == {"message": "Comment deleted", "id": comment["id"]}


def test_api_empty_comment_rejected(client, task):
    res = client.post(f"/api/v1/tasks/{task.id}/comments", json={"content": ""})
    assert res.status_code == 400


def test_api_comments_unknown_task_or_comment(client):
    assert client.get("/api/v1/tasks/9999/comments").status_code == 404
    assert client.put("/api/v1/tasks/comments/9999", json={"content": "x"}).status_code == 404
    assert client.delete("/api/v1/tasks/comments/9999").status_code == 404
