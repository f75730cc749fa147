"""
Project Blueprint.

Endpoints:
    GET    /api/v1/projects                          — list projects
    POST   /api/v1/projects                          — create project (+ objective links)
    GET    /api/v1/projects/<id>                     — project detail
    PUT    /api/v1/projects/<id>                     — update project (+ relink objectives)
    DELETE /api/v1/projects/<id>                     — delete project
    GET    /api/v1/projects/objective/<objective_id> — projects linked to an objective

Layer contract:
    - No ORM calls here — all DB work delegated to project_service.
    - No db.session.commit() here.
"""

import logging

from flask import Blueprint, jsonify, request

from app.services import project_service

logger = logging.getLogger(__name__)

project_bp = Blueprint("project", __name__, url_prefix="/api/v1/projects")


@project_bp.route("", methods=["GET"])
def list_projects():
    return jsonify([p.to_dict() for p in project_service.list_projects()]), 200


@project_bp.route("", methods=["POST"])
def create_project():
    """Body (JSON): name (required), description, status, objective_ids (list[int])."""
    data = request.get_json(silent=True) or {}
    project = project_service.create_project(data)
    return jsonify(project.to_dict()), 201


@project_bp.route("/<int:project_id>", methods=["GET"])
def get_project(project_id: int):
    return jsonify(project_service.get_project(project_id).to_dict()), 200


@project_bp.route("/<int:project_id>", methods=["PUT"])
def update_project(project_id: int):
    data = request.get_json(silent=True) or {}
    project = project_service.update_project(project_id, data)
    return jsonify(project.to_dict()), 200


@project_bp.route("/<int:project_id>", methods=["DELETE"])
def delete_project(project_id: int):
    project_service.delete_project(project_id)
    return jsonify({"message": "Project deleted", "id": project_id}), 200


@project_bp.route("/objective/<int:objective_id>", methods=["GET"])
def list_projects_by_objective(objective_id: int):
    projects = project_service.list_projects_by_objective(objective_id)
    return jsonify([p.to_dict() for p in projects]), 200
