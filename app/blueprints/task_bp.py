"""
Task Blueprint — task creation, listing, status and priority.

Endpoints:
    POST  /api/v1/tasks                              — create task
    GET   /api/v1/tasks/<id>                         — task detail
    GET   /api/v1/tasks/objective/<objective_id>     — tasks of an objective
    GET   /api/v1/tasks/week/<week_number>           — tasks planned for a week
    PATCH /api/v1/tasks/<id>/status                  — status change (JSON or multipart)
    PATCH /api/v1/tasks/<id>/priority                — reprioritise with a reason

Layer contract:
    - No ORM calls here — all DB work delegated to task_service.
    - No db.session.commit() here.
    - Tasks are serialised with the current project prefix so
      ``task_identifier`` always reflects the latest setting.
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from app.services import task_service
from app.services.settings_service import current_prefix
from app.services.upload_service import discard_upload, save_upload
from app.utils.helpers import parse_int

logger = logging.getLogger(__name__)

task_bp = Blueprint("task", __name__, url_prefix="/api/v1/tasks")


def _serialize(tasks):
    prefix = current_prefix()
    return [t.to_dict(prefix=prefix) for t in tasks]


@task_bp.route("", methods=["POST"])
def create_task():
    """Create a task.

    Body (JSON):
        title (str, required)
        objective_id (int, required)
        description, due_date (str, optional)
        assignee_id, project_id, week_number, weight (int, optional)
        impacted_node_ids (list[int], optional)
    """
    data = request.get_json(silent=True) or {}
    task = task_service.create_task(data)
    return jsonify(task.to_dict(prefix=current_prefix())), 201


@task_bp.route("/<int:task_id>", methods=["GET"])
def get_task(task_id: int):
    task = task_service.get_task(task_id)
    return jsonify(task.to_dict(prefix=current_prefix())), 200


@task_bp.route("/objective/<int:objective_id>", methods=["GET"])
def list_tasks_by_objective(objective_id: int):
    return jsonify(_serialize(task_service.list_tasks_by_objective(objective_id))), 200


@task_bp.route("/week/<int:week_number>", methods=["GET"])
def list_tasks_by_week(week_number: int):
    return jsonify(_serialize(task_service.list_tasks_by_week(week_number))), 200


@task_bp.route("/<int:task_id>/status", methods=["PATCH"])
def update_task_status(task_id: int):
    """Change a task's status.

    Accepts JSON or multipart/form-data. Fields:
        status (str, required)
        evidence_url (str, optional): legacy evidence link.
        blocking_reason (str, optional): kept only while ``Waiting``.
        added_by (str, optional)
        evidence (file, multipart only): stored and added as a deliverable.

    Moving to ``Done`` requires at least one deliverable (an evidence link or
    file sent here counts).
    """
    if request.mimetype == "multipart/form-data":
        data = request.form.to_dict()
        evidence_file = None
        upload = request.files.get("evidence")
        if upload is not None and upload.filename:
            task_service.get_task(task_id)
            evidence_file = save_upload(upload, current_app.config["UPLOAD_FOLDER"])
    else:
        data = request.get_json(silent=True) or {}
        evidence_file = None

    try:
        task = task_service.update_task_status(
            task_id,
            data.get("status"),
            evidence_url=data.get("evidence_url"),
            evidence_file=evidence_file,
            blocking_reason=data.get("blocking_reason"),
            added_by=data.get("added_by"),
        )
    except Exception:
        if evidence_file:
            discard_upload(evidence_file, current_app.config["UPLOAD_FOLDER"])
        raise
    return jsonify(task.to_dict(prefix=current_prefix())), 200


@task_bp.route("/<int:task_id>/priority", methods=["PATCH"])
def update_task_priority(task_id: int):
    """Body (JSON): new_priority_score (int), reason (str), user_id (int, optional)."""
    data = request.get_json(silent=True) or {}
    task = task_service.update_task_priority(
        task_id,
        data.get("new_priority_score"),
        data.get("reason"),
        user_id=parse_int(data.get("user_id")),
    )
    return jsonify(task.to_dict(prefix=current_prefix())), 200
