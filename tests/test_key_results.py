"""
Tests: key result and objective ordering, duplicate key result names.
"""

import pytest

from app.core.exceptions import DuplicateError, NotFoundError, ValidationError
from app.models import db as _db
from app.models.okr import Objective, ObjectiveGroup
from app.services import key_result_service, objective_service


def _kr(objective_id, description, **extra):
    return key_result_service.create_key_result(
        {"objective_id": objective_id, "description": description, **extra}
    )


# ── Key results ───────────────────────────────────────────────────────────────


def test_key_results_are_appended_in_order(objective):
    orders = [_kr(objective.id, f"KR {i}").display_order for i in range(3)]

    assert orders == [0, 1, 2]


def test_key_result_defaults_and_explicit_zero(objective):
    kr = _kr(objective.id, "Defaults")
    assert float(kr.target_value) == 100
    assert float(kr.current_value) == 0

    zero = _kr(objective.id, "Zero target", target_value=0, current_value=0)
    assert float(zero.target_value) == 0


def test_key_result_description_is_stored_trimmed(objective):
    assert _kr(objective.id, "  Ship v1  ").description == "Ship v1"


def test_duplicate_key_result_is_case_and_space_insensitive(objective):
    _kr(objective.id, "Ship v1")

    with pytest.raises(DuplicateError):
        _kr(objective.id, "ship v1  ")

    assert len(key_result_service.list_key_results(objective.id)) == 1


def test_duplicate_key_result_folds_non_ascii_case(objective):
    _kr(objective.id, "Über launch")

    with pytest.raises(DuplicateError):
        _kr(objective.id, "über LAUNCH")

    assert len(key_result_service.list_key_results(objective.id)) == 1


def test_same_description_allowed_on_other_objective(objective, node):
    other = Objective(node_id=node.id, description="Other")
    _db.session.add(other)
    _db.session.commit()

    _kr(objective.id, "Ship v1")
    assert _kr(other.id, "Ship v1").display_order == 0


def test_key_result_requires_objective(objective):
    with pytest.raises(ValidationError):
        key_result_service.create_key_result({"description": "orphan"})
    with pytest.raises(NotFoundError):
        _kr(9999, "missing objective")


def test_update_order_sets_value_verbatim(objective):
    a = _kr(objective.id, "A")
    _kr(objective.id, "B")

    moved = key_result_service.update_key_result_order(a.id, 7)

    assert moved.display_order == 7
    assert [kr.description for kr in key_result_service.list_key_results(objective.id)] == ["B", "A"]


def test_update_key_result_partial(objective):
    kr = _kr(objective.id, "Revenue")

    updated = key_result_service.update_key_result(kr.id, {"current_value": 40})

    assert float(updated.current_value) == 40
    assert updated.description == "Revenue"
    assert updated.progress() == 40.0


# ── Objectives ────────────────────────────────────────────────────────────────


def test_objective_order_within_group(node):
    group = ObjectiveGroup(node_id=node.id, alias="Q1")
    _db.session.add(group)
    _db.session.commit()

    first = objective_service.create_objective({"group_id": group.id, "description": "One"})
    second = objective_service.create_objective({"group_id": group.id, "description": "Two"})

    assert (first.display_order, second.display_order) == (0, 1)
    assert first.node_id == node.id


def test_objective_node_must_match_period(node):
    group = ObjectiveGroup(node_id=node.id, alias="Q1")
    _db.session.add(group)
    _db.session.commit()

    with pytest.raises(ValidationError):
        objective_service.create_objective(
            {"group_id": group.id, "node_id": 9999, "description": "Stray"},
        )

    same = objective_service.create_objective(
        {"group_id": group.id, "node_id": node.id, "description": "Matching"},
    )
    assert same.node_id == node.id
    assert same.group_id == group.id


def test_objective_order_update_is_raw(objective):
    updated = objective_service.update_objective_order(objective.id, 4)
    assert updated.display_order == 4

    with pytest.raises(ValidationError):
        objective_service.update_objective_order(objective.id, -1)


# ── API ───────────────────────────────────────────────────────────────────────


def test_api_duplicate_key_result(client, objective):
    res = client.post("/api/v1/key-results", json={"objective_id": objective.id, "description": "Ship v1"})
    assert res.status_code == 201

    res = client.post("/api/v1/key-results", json={"objective_id": objective.id, "description": "ship v1  "})
    assert res.status_code == 400
    assert res.get_json()["code"] == "ERR_DUPLICATE_NAME"


def test_api_objective_with_mismatched_node_writes_nothing(client, node):
    group = ObjectiveGroup(node_id=node.id, alias="Q3")
    _db.session.add(group)
    _db.session.commit()

    res = client.post(
        "/api/v1/objectives",
        json={"group_id": group.id, "node_id": 9999, "description": "Stray"},
    )

    assert res.status_code == 400
    assert _db.session.query(Objective).filter_by(group_id=group.id).count() == 0


def test_api_key_result_crud(client, objective):
    kr = client.post(
        "/api/v1/key-results", json={"objective_id": objective.id, "description": "NPS 50"},
    ).get_json()

    res = client.patch(f"/api/v1/key-results/{kr['id']}/order", json={"display_order": 3})
    assert res.status_code == 200
    assert res.get_json()["display_order"] == 3

    res = client.put(f"/api/v1/key-results/{kr['id']}", json={"target_value": 60})
    assert res.get_json()["target_value"] == 60.0

    res = client.get(f"/api/v1/key-results/objective/{objective.id}")
    assert [k["description"] for k in res.get_json()] == ["NPS 50"]

    assert client.delete(f"/api/v1/key-results/{kr['id']}").status_code == 200
    assert client.delete(f"/api/v1/key-results/{kr['id']}").status_code == 404
