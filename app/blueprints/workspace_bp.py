"""
Workspace Blueprint — assignees and task-identifier settings.

Endpoints:
    GET  /api/v1/assignees                — list assignees
    POST /api/v1/assignees/get-or-create  — find by name or create
    GET  /api/v1/settings                 — current settings
    PUT  /api/v1/settings                 — change the task prefix

Layer contract:
    - No ORM calls here — all DB work delegated to assignee_service /
      settings_service.
    - No db.session.commit() here.
"""

import logging

from flask import Blueprint, jsonify, request

from app.services import assignee_service, settings_service

logger = logging.getLogger(__name__)

workspace_bp = Blueprint("workspace", __name__, url_prefix="/api/v1")


@workspace_bp.route("/assignees", methods=["GET"])
def list_assignees():
    return jsonify([a.to_dict() for a in assignee_service.list_assignees()]), 200


@workspace_bp.route("/assignees/get-or-create", methods=["POST"])
def get_or_create_assignee():
    """Body (JSON): name (str, required). 201 when created, 200 when found."""
    data = request.get_json(silent=True) or {}
    assignee, created = assignee_service.get_or_create_assignee(data.get("name"))
    return jsonify(assignee.to_dict()), 201 if created else 200


@workspace_bp.route("/settings", methods=["GET"])
def get_settings():
    settings = settings_service.get_settings()
    return jsonify(settings.to_dict()), 200


@workspace_bp.route("/settings", methods=["PUT"])
def update_settings():
    """Body (JSON): project_prefix (three uppercase letters)."""
    data = request.get_json(silent=True) or {}
    settings = settings_service.update_prefix(data.get("project_prefix"))
    return jsonify(settings.to_dict()), 200
