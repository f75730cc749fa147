"""
Tests: projects and their objective links.

Creation and relinking are all-or-nothing: an unknown objective id rolls
back the project row as well.
"""

from app.models import db as _db
from app.models.okr import Objective
from app.models.project import Project


def _make_objective(node_id: int, description: str) -> Objective:
    o = Objective(node_id=node_id, description=description)
    _db.session.add(o)
    _db.session.commit()
    return o


def test_project_crud_happy_path(client, node, objective):
    second = _make_objective(node.id, "Second")

    res = client.post(
        "/api/v1/projects",
        json={"name": "Website", "objective_ids": [second.id, objective.id]},
    )
    assert res.status_code == 201
    project = res.get_json()
    assert project["status"] == "Active"
    assert project["objective_ids"] == sorted([objective.id, second.id])

    res = client.put(f"/api/v1/projects/{project['id']}", json={"objective_ids": [second.id]})
    assert res.status_code == 200
    assert res.get_json()["objective_ids"] == [second.id]

    res = client.get(f"/api/v1/projects/objective/{objective.id}")
    assert res.get_json() == []
    res = client.get(f"/api/v1/projects/objective/{second.id}")
    assert [p["name"] for p in res.get_json()] == ["Website"]

    assert client.delete(f"/api/v1/projects/{project['id']}").status_code == 200
    assert client.get(f"/api/v1/projects/{project['id']}").status_code == 404


def test_create_project_with_unknown_objective_rolls_back(client, objective):
    res = client.post(
        "/api/v1/projects",
        json={"name": "Broken", "objective_ids": [objective.id, 9999]},
    )

    assert res.status_code == 404
    assert _db.session.query(Project).count() == 0


def test_update_project_with_unknown_objective_keeps_links(client, objective):
    project = client.post(
        "/api/v1/projects", json={"name": "Keep", "objective_ids": [objective.id]},
    ).get_json()

    res = client.put(
        f"/api/v1/projects/{project['id']}",
        json={"name": "Renamed", "objective_ids": [9999]},
    )

    assert res.status_code == 404
    _db.session.expire_all()
    stored = _db.session.get(Project, project["id"])
    assert stored.name == "Keep"
    assert [o.id for o in stored.objectives] == [objective.id]


def test_create_project_requires_name(client):
    res = client.post("/api/v1/projects", json={"objective_ids": []})
    assert res.status_code == 400
    body = res.get_json()
    assert body["code"] == "ERR_VALIDATION_REQUIRED"
    assert body["details"] == {"name": "required"}


def test_malformed_objective_ids_is_invalid_not_missing(client):
    res = client.post("/api/v1/projects", json={"name": "Bad", "objective_ids": "nope"})
    assert res.status_code == 400
    assert res.get_json()["code"] == "ERR_VALIDATION_INVALID"


def test_projects_by_objective_sorted_by_name(client, objective):
    for name in ("Zeta", "Alpha"):
        client.post("/api/v1/projects", json={"name": name, "objective_ids": [objective.id]})

    res = client.get(f"/api/v1/projects/objective/{objective.id}")

    assert [p["name"] for p in res.get_json()] == ["Alpha", "Zeta"]
