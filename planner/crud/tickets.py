"""Ticket storage: CRUD plus the commit points for reorder and drag gestures.

Every mutation first computes the complete change set with the pure services
(tree closure, sibling reorder, gesture candidate) and then writes it inside a
single commit, so readers never observe a half-applied update.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Iterable
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..domain import entities
from ..models.assignee import Assignee
from ..models.project import Project
from ..models.ticket import Ticket
from ..services.dates import parse_date
from ..services.reorder import changed_tickets, next_sort_order, normalize_sibling_orders, reorder
from ..services.tree import collect_descendant_ids, would_create_cycle

logger = logging.getLogger(__name__)


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def ticket_to_entity(row: Ticket) -> entities.Ticket:
    return entities.Ticket(
        id=row.id,
        name=row.name,
        start_date=date.fromisoformat(row.start_date),
        end_date=date.fromisoformat(row.end_date),
        project_id=row.project_id,
        parent_id=row.parent_id,
        assignee_id=row.assignee_id,
        sort_order=row.sort_order or 0,
    )


def list_tickets(db: Session, project_id: str | None = None) -> list[Ticket]:
    stmt = select(Ticket)
    if project_id is not None:
        stmt = stmt.where(Ticket.project_id == project_id)
    stmt = stmt.order_by(Ticket.project_id, Ticket.parent_id, Ticket.sort_order, Ticket.created_at)
    return list(db.execute(stmt).scalars().all())


def load_ticket_records(db: Session, project_id: str | None = None) -> list[entities.Ticket]:
    return [ticket_to_entity(row) for row in list_tickets(db, project_id)]


def get_ticket(db: Session, ticket_id: str) -> Ticket | None:
    return db.get(Ticket, ticket_id)


def _require_name(payload: dict) -> str:
    name = (payload.get("name") or "").strip()
    if not name:
        raise ValueError("name is required")
    return name


def _require_dates(start: object, end: object) -> tuple[date, date]:
    try:
        start_date = parse_date(start)  # type: ignore[arg-type]
        end_date = parse_date(end)  # type: ignore[arg-type]
    except ValueError as exc:
        raise ValueError(f"invalid date: {exc}") from exc
    if start_date is None or end_date is None:
        raise ValueError("start_date and end_date are required")
    if end_date < start_date:
        raise ValueError("end_date must be on or after start_date")
    return start_date, end_date


def _check_assignee(db: Session, assignee_id: str | None) -> str | None:
    if not assignee_id:
        return None
    if db.get(Assignee, assignee_id) is None:
        raise ValueError("assignee_id does not reference an existing assignee")
    return assignee_id


def _check_parent(db: Session, project_id: str, parent_id: str | None) -> str | None:
    if not parent_id:
        return None
    parent = db.get(Ticket, parent_id)
    if parent is None:
        raise ValueError("parent_id does not reference an existing ticket")
    if parent.project_id != project_id:
        raise ValueError("parent ticket belongs to a different project")
    return parent_id


def _write_sort_orders(db: Session, before: list[entities.Ticket], after: list[entities.Ticket]) -> int:
    updated = changed_tickets(before, after)
    now = _utcnow()
    for record in updated:
        row = db.get(Ticket, record.id)
        if row is not None:
            row.sort_order = record.sort_order
            row.updated_at = now
    return len(updated)


def create_ticket(db: Session, project: Project, payload: dict) -> Ticket:
    name = _require_name(payload)
    start_date, end_date = _require_dates(payload.get("start_date"), payload.get("end_date"))
    parent_id = _check_parent(db, project.id, payload.get("parent_id"))
    assignee_id = _check_assignee(db, payload.get("assignee_id"))
    siblings = load_ticket_records(db, project.id)
    now = _utcnow()
    ticket = Ticket(
        id=str(uuid4()),
        name=name,
        start_date=start_date.isoformat(),
        end_date=end_date.isoformat(),
        project_id=project.id,
        parent_id=parent_id,
        assignee_id=assignee_id,
        sort_order=next_sort_order(siblings, project.id, parent_id),
        created_at=now,
        updated_at=now,
    )
    db.add(ticket)
    db.commit()
    db.refresh(ticket)
    return ticket


def update_ticket(db: Session, ticket: Ticket, payload: dict) -> Ticket:
    """Apply a partial update. Re-parenting appends to the new sibling group."""

    if "name" in payload:
        ticket.name = _require_name(payload)
    if "start_date" in payload or "end_date" in payload:
        start_date, end_date = _require_dates(
            payload.get("start_date", ticket.start_date),
            payload.get("end_date", ticket.end_date),
        )
        ticket.start_date = start_date.isoformat()
        ticket.end_date = end_date.isoformat()
    if "assignee_id" in payload:
        ticket.assignee_id = _check_assignee(db, payload.get("assignee_id"))

    if "parent_id" in payload and (payload.get("parent_id") or None) != ticket.parent_id:
        new_parent_id = _check_parent(db, ticket.project_id, payload.get("parent_id"))
        records = load_ticket_records(db, ticket.project_id)
        if would_create_cycle(records, ticket.id, new_parent_id):
            raise ValueError("a ticket cannot be moved under itself or one of its subtasks")
        old_parent_id = ticket.parent_id
        remaining = [r for r in records if r.id != ticket.id]
        ticket.parent_id = new_parent_id
        ticket.sort_order = next_sort_order(remaining, ticket.project_id, new_parent_id)
        _write_sort_orders(
            db, remaining, normalize_sibling_orders(remaining, ticket.project_id, old_parent_id)
        )

    ticket.updated_at = _utcnow()
    db.commit()
    db.refresh(ticket)
    return ticket


def delete_ticket(db: Session, ticket: Ticket) -> set[str]:
    """Delete a ticket with all of its subtasks and close the sibling gap."""

    ticket_id, project_id, parent_id = ticket.id, ticket.project_id, ticket.parent_id
    records = load_ticket_records(db, project_id)
    doomed = collect_descendant_ids(records, ticket_id)
    for row in db.execute(select(Ticket).where(Ticket.id.in_(doomed))).scalars().all():
        db.delete(row)
    remaining = [r for r in records if r.id not in doomed]
    _write_sort_orders(db, remaining, normalize_sibling_orders(remaining, project_id, parent_id))
    db.commit()
    logger.info(
        "ticket.deleted",
        extra={"extra_data": {"ticket_id": ticket_id, "cascade_count": len(doomed) - 1}},
    )
    return doomed


def reorder_tickets(db: Session, project_id: str, dragged_id: str, target_id: str) -> list[entities.Ticket]:
    """Drop ``dragged_id`` before ``target_id``; returns the tickets that moved.

    A request across sibling groups, or naming unknown tickets, changes nothing.
    """

    records = load_ticket_records(db, project_id)
    result = reorder(records, dragged_id, target_id)
    if result is records:
        return []
    moved = changed_tickets(records, result)
    _write_sort_orders(db, records, result)
    db.commit()
    logger.info(
        "ticket.reordered",
        extra={"extra_data": {"project_id": project_id, "dragged_id": dragged_id, "moved": len(moved)}},
    )
    return moved


def apply_ticket_dates(db: Session, ticket: Ticket, candidate: entities.Ticket) -> Ticket:
    """Commit a drag candidate's dates. Unchanged dates skip the write."""

    start_iso = candidate.start_date.isoformat()
    end_iso = candidate.end_date.isoformat()
    if (ticket.start_date, ticket.end_date) == (start_iso, end_iso):
        return ticket
    ticket.start_date = start_iso
    ticket.end_date = end_iso
    ticket.updated_at = _utcnow()
    db.commit()
    db.refresh(ticket)
    return ticket


def clear_assignee(db: Session, assignee_id: str) -> int:
    """Null out ``assignee_id`` on every ticket that references it (no commit)."""

    rows: Iterable[Ticket] = db.execute(select(Ticket).where(Ticket.assignee_id == assignee_id)).scalars().all()
    count = 0
    now = _utcnow()
    for row in rows:
        row.assignee_id = None
        row.updated_at = now
        count += 1
    return count


__all__ = [
    "apply_ticket_dates",
    "clear_assignee",
    "create_ticket",
    "delete_ticket",
    "get_ticket",
    "list_tickets",
    "load_ticket_records",
    "reorder_tickets",
    "ticket_to_entity",
    "update_ticket",
]
