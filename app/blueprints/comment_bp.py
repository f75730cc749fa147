"""
Comment & Deliverable Blueprint — task discussion and completion evidence.

Endpoints:
    GET    /api/v1/tasks/<task_id>/comments                    — list comments
    POST   /api/v1/tasks/<task_id>/comments                    — create comment
    PUT    /api/v1/tasks/comments/<comment_id>                 — edit comment
    DELETE /api/v1/tasks/comments/<comment_id>                 — delete comment
    GET    /api/v1/tasks/<task_id>/deliverables                — list deliverables
    POST   /api/v1/tasks/<task_id>/deliverables                — add deliverable
    DELETE /api/v1/tasks/<task_id>/deliverables/<index>        — remove by position
    DELETE /api/v1/tasks/<task_id>/deliverables/by-id/<id>     — remove by stable id
    POST   /api/v1/tasks/<task_id>/deliverables/promote        — attachment → deliverable
    GET    /api/v1/tasks/<task_id>/can-complete                — completion check
    POST   /api/v1/tasks/<task_id>/upload                      — store a file

Layer contract:
    - No ORM calls here — all DB work delegated to comment_service /
      deliverable_service.
    - No db.session.commit() here.
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from app.core.exceptions import ValidationError
from app.services import comment_service, deliverable_service
from app.services.upload_service import save_upload
from app.utils.helpers import parse_int

logger = logging.getLogger(__name__)

comment_bp = Blueprint("comment", __name__, url_prefix="/api/v1/tasks")


# ── Comments ──────────────────────────────────────────────────────────────────


@comment_bp.route("/<int:task_id>/comments", methods=["GET"])
def list_comments(task_id: int):
    comments = comment_service.list_comments(task_id)
    return jsonify([c.to_dict() for c in comments]), 200


@comment_bp.route("/<int:task_id>/comments", methods=["POST"])
def create_comment(task_id: int):
    """Create a comment.

    Body (JSON):
        content (str): required unless attachments are given.
        user_name (str, optional): default "Anonymous".
        user_id (int, optional)
        attachments (list, optional): ``{url, type, name, thumbnail, size}``.
    """
    data = request.get_json(silent=True) or {}
    comment = comment_service.create_comment(
        task_id,
        content=data.get("content"),
        user_name=data.get("user_name"),
        attachments=data.get("attachments"),
        user_id=parse_int(data.get("user_id")),
    )
    return jsonify(comment.to_dict()), 201


@comment_bp.route("/comments/<int:comment_id>", methods=["PUT"])
def update_comment(comment_id: int):
    data = request.get_json(silent=True) or {}
    comment = comment_service.update_comment(comment_id, data.get("content"))
    return jsonify(comment.to_dict()), 200


@comment_bp.route("/comments/<int:comment_id>", methods=["DELETE"])
def delete_comment(comment_id: int):
    deleted_id = comment_service.delete_comment(comment_id)
    return jsonify({"message": "Comment deleted", "id": deleted_id}), 200


# ── Deliverables ──────────────────────────────────────────────────────────────


@comment_bp.route("/<int:task_id>/deliverables", methods=["GET"])
def list_deliverables(task_id: int):
    return jsonify(deliverable_service.list_deliverables(task_id)), 200


@comment_bp.route("/<int:task_id>/deliverables", methods=["POST"])
def add_deliverable(task_id: int):
    """Body (JSON): url (required), type, title, thumbnail, added_by."""
    data = request.get_json(silent=True) or {}
    items = deliverable_service.add_deliverable(task_id, data)
    return jsonify(items), 201


@comment_bp.route("/<int:task_id>/deliverables/<index>", methods=["DELETE"])
def remove_deliverable(task_id: int, index: str):
    # Plain string converter so "-1" reaches the service instead of a 404.
    position = parse_int(index)
    if position is None:
        raise ValidationError("Invalid deliverable index", details={"index": index})
    items = deliverable_service.remove_deliverable(task_id, position)
    return jsonify(items), 200


@comment_bp.route("/<int:task_id>/deliverables/by-id/<deliverable_id>", methods=["DELETE"])
def remove_deliverable_by_id(task_id: int, deliverable_id: str):
    items = deliverable_service.remove_deliverable_by_id(task_id, deliverable_id)
    return jsonify(items), 200


@comment_bp.route("/<int:task_id>/deliverables/promote", methods=["POST"])
def promote_attachment(task_id: int):
    """Body (JSON): comment_id (int), attachment_index (int), added_by (str, optional)."""
    data = request.get_json(silent=True) or {}
    comment_id = parse_int(data.get("comment_id"))
    if comment_id is None:
        raise ValidationError("comment_id is required", details={"comment_id": "required"})
    attachment_index = data.get("attachment_index")
    if isinstance(attachment_index, str):
        attachment_index = parse_int(attachment_index, attachment_index)
    result = deliverable_service.promote_attachment(
        task_id, comment_id, attachment_index, added_by=data.get("added_by"),
    )
    return jsonify(result), 201


@comment_bp.route("/<int:task_id>/can-complete", methods=["GET"])
def can_complete(task_id: int):
    return jsonify(deliverable_service.can_mark_done(task_id)), 200


# ── Upload ────────────────────────────────────────────────────────────────────


@comment_bp.route("/<int:task_id>/upload", methods=["POST"])
def upload_file(task_id: int):
    """Multipart field ``file``. Returns ``{url, name, type, size}``."""
    descriptor = save_upload(request.files.get("file"), current_app.config["UPLOAD_FOLDER"])
    return jsonify(descriptor), 201
