from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..domain import entities
from ..models.assignee import Assignee
from .tickets import clear_assignee

logger = logging.getLogger(__name__)


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def _clean_name(payload: dict) -> str:
    name = (payload.get("name") or "").strip()
    if not name:
        raise ValueError("name is required")
    return name


def assignee_to_entity(row: Assignee) -> entities.Assignee:
    return entities.Assignee(id=row.id, name=row.name)


def list_assignees(db: Session) -> list[Assignee]:
    return list(db.execute(select(Assignee).order_by(Assignee.created_at, Assignee.id)).scalars().all())


def get_assignee(db: Session, assignee_id: str) -> Assignee | None:
    return db.get(Assignee, assignee_id)


def create_assignee(db: Session, payload: dict) -> Assignee:
    assignee = Assignee(
        id=str(uuid4()),
        name=_clean_name(payload),
        created_at=_utcnow(),
    )
    db.add(assignee)
    db.commit()
    db.refresh(assignee)
    return assignee


def update_assignee(db: Session, assignee: Assignee, payload: dict) -> Assignee:
    assignee.name = _clean_name(payload)
    db.commit()
    db.refresh(assignee)
    return assignee


def delete_assignee(db: Session, assignee: Assignee) -> int:
    """Remove an assignee; their tickets stay and become unassigned."""

    assignee_id = assignee.id
    released = clear_assignee(db, assignee_id)
    db.delete(assignee)
    db.commit()
    logger.info("assignee.deleted", extra={"extra_data": {"assignee_id": assignee_id, "released_tickets": released}})
    return released


__all__ = [
    "assignee_to_entity",
    "create_assignee",
    "delete_assignee",
    "get_assignee",
    "list_assignees",
    "update_assignee",
]
