"""
Node Blueprint — organisational units and their interactions.

Endpoints:
    GET    /api/v1/nodes                 — list nodes
    POST   /api/v1/nodes                 — create node (+ objective slots)
    GET    /api/v1/nodes/<id>            — node detail
    PUT    /api/v1/nodes/<id>            — partial update
    DELETE /api/v1/nodes/<id>            — delete node (cascades)
    GET    /api/v1/interactions          — list interactions
    POST   /api/v1/interactions          — create interaction
    DELETE /api/v1/interactions/<id>     — delete interaction

Layer contract:
    - No ORM calls here — all DB work delegated to node_service /
      interaction_service.
    - No db.session.commit() here.
"""

import logging

from flask import Blueprint, jsonify, request

from app.services import interaction_service, node_service

logger = logging.getLogger(__name__)

node_bp = Blueprint("node", __name__, url_prefix="/api/v1")


# ── Nodes ─────────────────────────────────────────────────────────────────────


@node_bp.route("/nodes", methods=["GET"])
def list_nodes():
    return jsonify([n.to_dict() for n in node_service.list_nodes()]), 200


@node_bp.route("/nodes", methods=["POST"])
def create_node():
    """Create a node.

    Body (JSON):
        name (str, required)
        description, color (str, optional)
        owner_id (int, optional)
        is_central, is_active, generates_revenue (bool, optional)
    """
    data = request.get_json(silent=True) or {}
    node = node_service.create_node(data)
    return jsonify(node.to_dict()), 201


@node_bp.route("/nodes/<int:node_id>", methods=["GET"])
def get_node(node_id: int):
    return jsonify(node_service.get_node(node_id).to_dict()), 200


@node_bp.route("/nodes/<int:node_id>", methods=["PUT", "PATCH"])
def update_node(node_id: int):
    data = request.get_json(silent=True) or {}
    node = node_service.update_node(node_id, data)
    return jsonify(node.to_dict()), 200


@node_bp.route("/nodes/<int:node_id>", methods=["DELETE"])
def delete_node(node_id: int):
    node_service.delete_node(node_id)
    return jsonify({"message": "Node deleted", "id": node_id}), 200


# ── Interactions ──────────────────────────────────────────────────────────────


@node_bp.route("/interactions", methods=["GET"])
def list_interactions():
    return jsonify([i.to_dict() for i in interaction_service.list_interactions()]), 200


@node_bp.route("/interactions", methods=["POST"])
def create_interaction():
    """Body (JSON): source_node_id, target_node_id (required), label, type."""
    data = request.get_json(silent=True) or {}
    interaction = interaction_service.create_interaction(data)
    return jsonify(interaction.to_dict()), 201


@node_bp.route("/interactions/<int:interaction_id>", methods=["DELETE"])
def delete_interaction(interaction_id: int):
    interaction_service.delete_interaction(interaction_id)
    return jsonify({"message": "Interaction deleted", "id": interaction_id}), 200
