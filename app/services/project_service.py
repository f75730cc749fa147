"""
Project service.

A project links to any number of objectives. Creating or updating a project
and rewriting its objective links happen in one transaction: an unknown
objective id rolls back the whole request, project row included.
"""

from __future__ import annotations

import logging

from sqlalchemy import select

from app.core.exceptions import NotFoundError, ValidationError
from app.models import db
from app.models.okr import Objective
from app.models.project import Project, project_objectives
from app.utils.helpers import atomic, get_or_raise, parse_int

logger = logging.getLogger(__name__)


def list_projects() -> list[Project]:
    return db.session.execute(
        select(Project).order_by(Project.created_at.desc(), Project.id.desc())
    ).scalars().all()


def list_projects_by_objective(objective_id: int) -> list[Project]:
    stmt = (
        select(Project)
        .join(project_objectives, project_objectives.c.project_id == Project.id)
        .where(project_objectives.c.objective_id == objective_id)
        .order_by(Project.name.asc())
    )
    return db.session.execute(stmt).scalars().all()


def get_project(project_id: int) -> Project:
    return get_or_raise(Project, project_id)


def _resolve_objectives(session, raw_ids) -> list[Objective]:
    if raw_ids is None:
        return []
    if not isinstance(raw_ids, list):
        raise ValidationError("objective_ids must be a list")
    ids = []
    for raw in raw_ids:
        objective_id = parse_int(raw)
        if objective_id is None:
            raise ValidationError("objective_ids must contain objective ids")
        if objective_id not in ids:
            ids.append(objective_id)
    if not ids:
        return []
    found = session.execute(select(Objective).where(Objective.id.in_(ids))).scalars().all()
    missing = set(ids) - {o.id for o in found}
    if missing:
        raise NotFoundError(resource="Objective", resource_id=min(missing))
    return found


def create_project(data: dict) -> Project:
    """Create a project and its objective links in one transaction.

    Raises:
        ValidationError: name missing or objective_ids malformed.
        NotFoundError: one of the objective ids does not exist.
    """
    name = str(data.get("name", "") or "").strip()
    if not name:
        raise ValidationError("name is required", details={"name": "required"})

    with atomic() as session:
        project = Project(
            name=name,
            description=data.get("description"),
            status=data.get("status") or "Active",
        )
        session.add(project)
        session.flush()
        project.objectives = _resolve_objectives(session, data.get("objective_ids"))

    logger.info("Project created id=%s name=%s objectives=%d", project.id, name, len(project.objectives))
    return project


def update_project(project_id: int, data: dict) -> Project:
    """Partial update; ``objective_ids`` when present replaces all links."""
    with atomic() as session:
        project = get_or_raise(Project, project_id, session=session)
        if "name" in data:
            name = str(data.get("name") or "").strip()
            if not name:
                raise ValidationError("name cannot be empty", details={"name": "required"})
            project.name = name
        if "description" in data:
            project.description = data.get("description")
        if "status" in data and data.get("status"):
            project.status = data["status"]
        if "objective_ids" in data:
            project.objectives = _resolve_objectives(session, data.get("objective_ids"))

    logger.info("Project updated id=%s", project_id)
    return project


def delete_project(project_id: int) -> None:
    project = get_or_raise(Project, project_id)
    db.session.delete(project)
    db.session.commit()
    logger.info("Project deleted id=%s", project_id)
