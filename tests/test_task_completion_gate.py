"""
Tests: the Done gate on task status changes.

A task reaches ``Done`` only with at least one deliverable. Legacy
``evidence_url`` and uploaded evidence files count: they are folded into the
deliverable list in the same commit.
"""

import io

import pytest

from app.core.exceptions import ValidationError
from app.models import db as _db
from app.models.task import Task
from app.services import deliverable_service, task_service


def _reload(task_id):
    _db.session.expire_all()
    return _db.session.get(Task, task_id)


def test_done_without_deliverables_is_refused(task):
    with pytest.raises(ValidationError, match="At least one deliverable"):
        task_service.update_task_status(task.id, "Done")

    assert _reload(task.id).status == "Backlog"


def test_done_with_existing_deliverable(task):
    deliverable_service.add_deliverable(task.id, {"url": "https://x"})

    updated = task_service.update_task_status(task.id, "Done")

    assert updated.status == "Done"


def test_evidence_url_is_folded_into_deliverables(task):
    updated = task_service.update_task_status(task.id, "Done", evidence_url="https://proof")

    assert updated.status == "Done"
    assert updated.evidence_url == "https://proof"
    assert [d["url"] for d in updated.deliverables] == ["https://proof"]
    assert updated.deliverables[0]["type"] == "link"


def test_evidence_url_not_duplicated(task):
    deliverable_service.add_deliverable(task.id, {"url": "https://proof"})

    updated = task_service.update_task_status(task.id, "Done", evidence_url="https://proof")

    assert len(updated.deliverables) == 1


def test_blank_evidence_url_does_not_satisfy_gate(task):
    with pytest.raises(ValidationError):
        task_service.update_task_status(task.id, "Done", evidence_url="   ")


@pytest.mark.parametrize("status", ["Todo", "Doing", "Waiting", "Backlog"])
def test_non_done_transitions_are_unconditional(task, status):
    assert task_service.update_task_status(task.id, status).status == status


def test_blocking_reason_kept_only_while_waiting(task):
    waiting = task_service.update_task_status(task.id, "Waiting", blocking_reason="Vendor")
    assert waiting.blocking_reason == "Vendor"

    doing = task_service.update_task_status(task.id, "Doing")
    assert doing.blocking_reason is None


def test_reopening_done_task(task):
    task_service.update_task_status(task.id, "Done", evidence_url="https://proof")

    assert task_service.update_task_status(task.id, "Doing").status == "Doing"


# ── API ───────────────────────────────────────────────────────────────────────


def test_api_status_done_refused(client, task):
    res = client.patch(f"/api/v1/tasks/{task.id}/status", json={"status": "Done"})

    assert res.status_code == 400
    assert "deliverable" in res.get_json()["error"]
    assert _reload(task.id).status == "Backlog"


def test_api_status_done_with_evidence_url(client, task):
    res = client.patch(
        f"/api/v1/tasks/{task.id}/status",
        json={"status": "Done", "evidence_url": "https://proof"},
    )

    assert res.status_code == 200
    body = res.get_json()
    assert body["status"] == "Done"
    assert body["final_deliverables"][0]["url"] == "https://proof"


def test_api_status_done_with_evidence_file(client, task, upload_dir):
    res = client.patch(
        f"/api/v1/tasks/{task.id}/status",
        data={"status": "Done", "evidence": (io.BytesIO(b"%PDF-1.4"), "report.pdf")},
        content_type="multipart/form-data",
    )

    assert res.status_code == 200
    body = res.get_json()
    assert body["status"] == "Done"
    deliverable = body["final_deliverables"][0]
    assert deliverable["type"] == "file"
    assert deliverable["title"] == "report.pdf"
    assert deliverable["url"].startswith("/uploads/")
    assert len(list(upload_dir.iterdir())) == 1


def test_api_status_evidence_file_for_unknown_task_is_not_stored(client, upload_dir):
    res = client.patch(
        "/api/v1/tasks/9999/status",
        data={"status": "Done", "evidence": (io.BytesIO(b"%PDF-1.4"), "report.pdf")},
        content_type="multipart/form-data",
    )

    assert res.status_code == 404
    assert list(upload_dir.iterdir()) == []


def test_api_status_evidence_file_discarded_when_refused(client, task, upload_dir):
    res = client.patch(
        f"/api/v1/tasks/{task.id}/status",
        data={"evidence": (io.BytesIO(b"%PDF-1.4"), "report.pdf")},
        content_type="multipart/form-data",
    )

    assert res.status_code == 400
    assert list(upload_dir.iterdir()) == []


def test_api_status_missing(client, task):
    res = client.patch(f"/api/v1/tasks/{task.id}/status", json={})
    assert res.status_code == 400


def test_api_status_unknown_task(client):
    res = client.patch("/api/v1/tasks/9999/status", json={"status": "Doing"})
    assert res.status_code == 404


def test_api_done_succeeds_once_deliverable_added(client, task):
    assert client.patch(f"/api/v1/tasks/{task.id}/status", json={"status": "Done"}).status_code == 400

    client.post(f"/api/v1/tasks/{task.id}/deliverables", json={"url": "https://x"})
    res = client.patch(f"/api/v1/tasks/{task.id}/status", json={"status": "Done"})

    assert res.status_code == 200
    assert res.get_json()["status"] == "Done"
