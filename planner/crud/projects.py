"""CRUD helpers for projects. Deleting a project removes all of its tickets."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from uuid import uuid4

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from ..domain import entities
from ..domain.entities import PROJECT_STATUSES, PROJECT_STATUS_PLANNING
from ..models.project import Project
from ..services.dates import parse_date

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("description", "manager", "notes")


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def _to_decimal(value: object) -> Decimal | None:
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).replace(",", ""))
    except InvalidOperation as exc:
        raise ValueError(f"invalid number: {value!r}") from exc


def _iso_or_none(value: object) -> str | None:
    try:
        parsed = parse_date(value)  # type: ignore[arg-type]
    except ValueError as exc:
        raise ValueError(f"invalid date: {exc}") from exc
    return parsed.isoformat() if parsed else None


def _normalize_status(value: object) -> str:
    status = (str(value or PROJECT_STATUS_PLANNING)).strip().lower()
    if status not in PROJECT_STATUSES:
        raise ValueError(f"status must be one of {', '.join(PROJECT_STATUSES)}")
    return status


def _check_window(project: Project) -> None:
    if project.start_date and project.end_date and project.end_date < project.start_date:
        raise ValueError("end_date must be on or after start_date")


def project_to_entity(row: Project) -> entities.Project:
    return entities.Project(
        id=row.id,
        name=row.name,
        description=row.description or "",
        manager=row.manager or "",
        estimated_hours=row.estimated_hours,
        estimated_budget=row.estimated_budget,
        start_date=date.fromisoformat(row.start_date) if row.start_date else None,
        end_date=date.fromisoformat(row.end_date) if row.end_date else None,
        notes=row.notes or "",
        status=row.status or PROJECT_STATUS_PLANNING,
    )


def list_projects(db: Session, status: str | None = None) -> list[Project]:
    stmt = select(Project).order_by(desc(Project.created_at))
    if status:
        stmt = stmt.where(Project.status == status)
    return list(db.execute(stmt).scalars().all())


def get_project(db: Session, project_id: str) -> Project | None:
    return db.get(Project, project_id)


def create_project(db: Session, payload: dict) -> Project:
    name = (payload.get("name") or "").strip()
    if not name:
        raise ValueError("name is required")
    now = _utcnow()
    project = Project(
        id=str(uuid4()),
        name=name,
        description=(payload.get("description") or "").strip(),
        manager=(payload.get("manager") or "").strip(),
        estimated_hours=_to_decimal(payload.get("estimated_hours")),
        estimated_budget=_to_decimal(payload.get("estimated_budget")),
        start_date=_iso_or_none(payload.get("start_date")),
        end_date=_iso_or_none(payload.get("end_date")),
        notes=(payload.get("notes") or "").strip(),
        status=_normalize_status(payload.get("status")),
        created_at=now,
        updated_at=now,
    )
    _check_window(project)
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


def update_project(db: Session, project: Project, payload: dict) -> Project:
    if "name" in payload:
        name = (payload.get("name") or "").strip()
        if not name:
            raise ValueError("name is required")
        project.name = name
    for field in TEXT_FIELDS:
        if field in payload:
            setattr(project, field, (payload.get(field) or "").strip())
    for field in ("estimated_hours", "estimated_budget"):
        if field in payload:
            setattr(project, field, _to_decimal(payload.get(field)))
    for field in ("start_date", "end_date"):
        if field in payload:
            setattr(project, field, _iso_or_none(payload.get(field)))
    if "status" in payload:
        project.status = _normalize_status(payload.get("status"))
    _check_window(project)
    project.updated_at = _utcnow()
    db.commit()
    db.refresh(project)
    return project


def delete_project(db: Session, project: Project) -> None:
    project_id = project.id
    ticket_count = len(project.tickets)
    db.delete(project)
    db.commit()
    logger.info(
        "project.deleted",
        extra={"extra_data": {"project_id": project_id, "ticket_count": ticket_count}},
    )


__all__ = [
    "create_project",
    "delete_project",
    "get_project",
    "list_projects",
    "project_to_entity",
    "update_project",
]
