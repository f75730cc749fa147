"""
Objective Group Blueprint — periods and their replication across nodes.

Endpoints:
    GET    /api/v1/objective-groups/node/<node_id>               — periods of a node
    POST   /api/v1/objective-groups                              — create period
    PUT    /api/v1/objective-groups/<id>                         — update alias / target date
    DELETE /api/v1/objective-groups/<id>                         — delete period
    DELETE /api/v1/objective-groups/node/<node_id>/all           — delete every period of a node
    POST   /api/v1/objective-groups/<id>/replicate               — copy one period to all other nodes
    POST   /api/v1/objective-groups/node/<node_id>/replicate-all — copy all periods of a node

Layer contract:
    - No ORM calls here — all DB work delegated to objective_group_service.
    - No db.session.commit() here.
"""

import logging

from flask import Blueprint, jsonify, request

from app.services import objective_group_service

logger = logging.getLogger(__name__)

objective_group_bp = Blueprint("objective_group", __name__, url_prefix="/api/v1/objective-groups")


@objective_group_bp.route("/node/<int:node_id>", methods=["GET"])
def list_groups(node_id: int):
    """List a node's periods with nested objectives and key results."""
    groups = objective_group_service.list_groups_by_node(node_id)
    return jsonify([g.to_dict(include_objectives=True) for g in groups]), 200


@objective_group_bp.route("", methods=["POST"])
def create_group():
    """Body (JSON): node_id, alias (required), target_date (ISO, optional)."""
    data = request.get_json(silent=True) or {}
    group = objective_group_service.create_group(data)
    return jsonify(group.to_dict()), 201


@objective_group_bp.route("/<int:group_id>", methods=["PUT"])
def update_group(group_id: int):
    data = request.get_json(silent=True) or {}
    group = objective_group_service.update_group(group_id, data)
    return jsonify(group.to_dict()), 200


@objective_group_bp.route("/<int:group_id>", methods=["DELETE"])
def delete_group(group_id: int):
    objective_group_service.delete_group(group_id)
    return jsonify({"message": "Objective group deleted", "id": group_id}), 200


@objective_group_bp.route("/node/<int:node_id>/all", methods=["DELETE"])
def delete_all_groups(node_id: int):
    deleted = objective_group_service.delete_all_groups(node_id)
    return jsonify({
        "message": f"Deleted {deleted} objective group(s)",
        "deletedCount": deleted,
    }), 200


@objective_group_bp.route("/<int:group_id>/replicate", methods=["POST"])
def replicate_group(group_id: int):
    result = objective_group_service.replicate_group(group_id)
    return jsonify(result), 200


@objective_group_bp.route("/node/<int:node_id>/replicate-all", methods=["POST"])
def replicate_all_groups(node_id: int):
    result = objective_group_service.replicate_all_groups(node_id)
    return jsonify(result), 200
