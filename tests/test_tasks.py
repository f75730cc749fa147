"""
Tests: task creation, listing and reprioritisation.
"""

import pytest

from app.core.exceptions import NotFoundError, ValidationError
from app.models import db as _db
from app.models.audit import AuditLog, write_audit
from app.models.node import Node
from app.models.task import CrossNodeImpact, Task
from app.services import task_service


def _make_node(name: str) -> Node:
    n = Node(name=name)
    _db.session.add(n)
    _db.session.commit()
    return n


def test_create_task_numbers_and_defaults(objective):
    first = task_service.create_task({"title": "One", "objective_id": objective.id})
    second = task_service.create_task({"title": "Two", "objective_id": objective.id})

    assert (first.task_number, second.task_number) == (1, 2)
    assert first.priority_score == 0
    assert first.status == "Backlog"
    assert first.weight == 3
    assert first.to_dict(prefix="SDL")["task_identifier"] == "SDL-1"


def test_create_task_with_impacts(objective):
    other = _make_node("Support")

    created = task_service.create_task(
        {"title": "Shared", "objective_id": objective.id, "impacted_node_ids": [other.id, other.id]},
    )

    data = created.to_dict()
    assert data["impacted_nodes"] == [other.id]
    assert data["impacted_node_count"] == 1


def test_create_task_with_unknown_impacted_node_writes_nothing(objective):
    with pytest.raises(NotFoundError):
        task_service.create_task(
            {"title": "Bad", "objective_id": objective.id, "impacted_node_ids": [9999]},
        )

    assert _db.session.query(Task).count() == 0
    assert _db.session.query(CrossNodeImpact).count() == 0


@pytest.mark.parametrize("data", [{"objective_id": 1}, {"title": "No objective"}])
def test_create_task_required_fields(data):
    with pytest.raises(ValidationError):
        task_service.create_task(data)


def test_reprioritize_writes_audit_row(task):
    updated = task_service.update_task_priority(task.id, 80, "Customer escalation", user_id=7)

    assert updated.priority_score == 80
    log = _db.session.query(AuditLog).one()
    assert log.action == "REPRIORITIZE"
    assert log.entity_id == str(task.id)
    assert log.reason_for_change == "Customer escalation"
    assert log.diff == {"priority_score": {"old": 0, "new": 80}}


@pytest.mark.parametrize("reason", [None, "", "   "])
def test_reprioritize_requires_reason(task, reason):
    with pytest.raises(ValidationError, match="Reason for change is required"):
        task_service.update_task_priority(task.id, 50, reason)

    assert _db.session.query(AuditLog).count() == 0


@pytest.mark.parametrize(
    "entity_type, action", [("bogus", "REPRIORITIZE"), ("task", "ARCHIVE")],
)
def test_write_audit_rejects_unknown_kinds(task, entity_type, action):
    with pytest.raises(ValueError):
        write_audit(_db.session, entity_type=entity_type, entity_id=task.id, action=action)

    assert _db.session.query(AuditLog).count() == 0


def test_tasks_by_week_sorted_by_priority(objective):
    low = task_service.create_task({"title": "Low", "objective_id": objective.id, "week_number": 12})
    high = task_service.create_task({"title": "High", "objective_id": objective.id, "week_number": 12})
    task_service.create_task({"title": "Other week", "objective_id": objective.id, "week_number": 13})
    task_service.update_task_priority(high.id, 10, "urgent")

    assert [t.id for t in task_service.list_tasks_by_week(12)] == [high.id, low.id]


# ── API ───────────────────────────────────────────────────────────────────────


def test_api_create_and_list_tasks(client, objective):
    res = client.post("/api/v1/tasks", json={"title": "Write brief", "objective_id": objective.id})
    assert res.status_code == 201
    body = res.get_json()
    assert body["task_identifier"] == "SDL-1"
    assert body["objective_title"] == "Grow revenue"

    res = client.get(f"/api/v1/tasks/objective/{objective.id}")
    assert [t["title"] for t in res.get_json()] == ["Write brief"]


def test_api_priority(client, task):
    res = client.patch(f"/api/v1/tasks/{task.id}/priority", json={"new_priority_score": 5})
    assert res.status_code == 400

    res = client.patch(
        f"/api/v1/tasks/{task.id}/priority",
        json={"new_priority_score": 5, "reason": "Board request"},
    )
    assert res.status_code == 200
    assert res.get_json()["priority_score"] == 5
