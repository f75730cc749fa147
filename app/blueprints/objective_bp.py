"""
Objective Blueprint — objectives and key results.

Endpoints:
    GET    /api/v1/objectives/node/<node_id>           — node objectives (slots self-heal)
    POST   /api/v1/objectives                          — create objective
    PUT    /api/v1/objectives/<id>                     — update objective
    PATCH  /api/v1/objectives/<id>/order               — set display_order
    DELETE /api/v1/objectives/<id>                     — delete objective
    GET    /api/v1/key-results/objective/<objective_id> — key results of an objective
    POST   /api/v1/key-results                         — create key result
    PUT    /api/v1/key-results/<id>                    — update key result
    PATCH  /api/v1/key-results/<id>/order              — set display_order
    DELETE /api/v1/key-results/<id>                    — delete key result

Layer contract:
    - No ORM calls here — all DB work delegated to objective_service /
      key_result_service.
    - No db.session.commit() here.
"""

import logging

from flask import Blueprint, jsonify, request

from app.services import key_result_service, objective_service

logger = logging.getLogger(__name__)

objective_bp = Blueprint("objective", __name__, url_prefix="/api/v1")


def _order_from(data: dict):
    return data.get("display_order", data.get("new_order"))


# ── Objectives ────────────────────────────────────────────────────────────────


@objective_bp.route("/objectives/node/<int:node_id>", methods=["GET"])
def list_node_objectives(node_id: int):
    objectives = objective_service.list_objectives_by_node(node_id)
    return jsonify([o.to_dict(include_key_results=True) for o in objectives]), 200


@objective_bp.route("/objectives", methods=["POST"])
def create_objective():
    """Create an objective.

    Body (JSON):
        description (str, required)
        group_id (int) or node_id (int): at least one is required.
        type, quarter (str, optional)
        year (int, optional)
        target_value, current_value (number, optional)
    """
    data = request.get_json(silent=True) or {}
    objective = objective_service.create_objective(data)
    return jsonify(objective.to_dict()), 201


@objective_bp.route("/objectives/<int:objective_id>", methods=["PUT"])
def update_objective(objective_id: int):
    data = request.get_json(silent=True) or {}
    objective = objective_service.update_objective(objective_id, data)
    return jsonify(objective.to_dict()), 200


@objective_bp.route("/objectives/<int:objective_id>/order", methods=["PATCH", "PUT"])
def update_objective_order(objective_id: int):
    data = request.get_json(silent=True) or {}
    objective = objective_service.update_objective_order(objective_id, _order_from(data))
    return jsonify(objective.to_dict()), 200


@objective_bp.route("/objectives/<int:objective_id>", methods=["DELETE"])
def delete_objective(objective_id: int):
    objective_service.delete_objective(objective_id)
    return jsonify({"message": "Objective deleted", "id": objective_id}), 200


# ── Key results ───────────────────────────────────────────────────────────────


@objective_bp.route("/key-results/objective/<int:objective_id>", methods=["GET"])
def list_key_results(objective_id: int):
    krs = key_result_service.list_key_results(objective_id)
    return jsonify([kr.to_dict() for kr in krs]), 200


@objective_bp.route("/key-results", methods=["POST"])
def create_key_result():
    """Create a key result.

    Body (JSON):
        objective_id (int, required)
        description (str, required): unique per objective, case-insensitive.
        target_value (number, optional): default 100.
        current_value (number, optional): default 0.
    """
    data = request.get_json(silent=True) or {}
    kr = key_result_service.create_key_result(data)
    return jsonify(kr.to_dict()), 201


@objective_bp.route("/key-results/<int:kr_id>", methods=["PUT"])
def update_key_result(kr_id: int):
    data = request.get_json(silent=True) or {}
    kr = key_result_service.update_key_result(kr_id, data)
    return jsonify(kr.to_dict()), 200


@objective_bp.route("/key-results/<int:kr_id>/order", methods=["PATCH", "PUT"])
def update_key_result_order(kr_id: int):
    data = request.get_json(silent=True) or {}
    kr = key_result_service.update_key_result_order(kr_id, _order_from(data))
    return jsonify(kr.to_dict()), 200


@objective_bp.route("/key-results/<int:kr_id>", methods=["DELETE"])
def delete_key_result(kr_id: int):
    key_result_service.delete_key_result(kr_id)
    return jsonify({"message": "Key result deleted", "id": kr_id}), 200
