from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..core.config import settings
from ..crud.tickets import apply_ticket_dates, delete_ticket, get_ticket, ticket_to_entity, update_ticket
from ..db.session import get_db
from ..deps.auth import require_api_key
from ..schemas.ticket import GestureOut, GestureRequest, TicketOut, TicketUpdate
from ..services.gestures import days_moved, resolve

router = APIRouter(prefix="/api/v1/tickets", tags=["tickets"], dependencies=[Depends(require_api_key)])


def _require_ticket(db: Session, ticket_id: str):
    ticket = get_ticket(db, ticket_id)
    if not ticket:
        raise HTTPException(404, "Not found")
    return ticket


@router.get("/{ticket_id}", response_model=TicketOut)
def api_get_ticket(ticket_id: str, db: Session = Depends(get_db)):
    return TicketOut.model_validate(_require_ticket(db, ticket_id), from_attributes=True)


@router.patch("/{ticket_id}", response_model=TicketOut)
def api_update_ticket(ticket_id: str, payload: TicketUpdate, db: Session = Depends(get_db)):
    ticket = _require_ticket(db, ticket_id)
    try:
        updated = update_ticket(db, ticket, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return TicketOut.model_validate(updated, from_attributes=True)


@router.delete("/{ticket_id}")
def api_delete_ticket(ticket_id: str, db: Session = Depends(get_db)):
    removed = delete_ticket(db, _require_ticket(db, ticket_id))
    return {"status": "deleted", "deleted_ids": sorted(removed)}


def _gesture(ticket_id: str, payload: GestureRequest, db: Session):
    ticket = _require_ticket(db, ticket_id)
    try:
        moved = days_moved(payload.current_x - payload.start_x, settings.DAY_WIDTH)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    candidate = resolve(ticket_to_entity(ticket), payload.kind, payload.start_x, payload.current_x, settings.DAY_WIDTH)
    return ticket, candidate, moved


@router.post("/{ticket_id}/gesture/preview", response_model=GestureOut)
def api_preview_gesture(ticket_id: str, payload: GestureRequest, db: Session = Depends(get_db)):
    _, candidate, moved = _gesture(ticket_id, payload, db)
    return GestureOut(
        kind=payload.kind,
        days_moved=moved,
        committed=False,
        ticket=TicketOut.model_validate(candidate, from_attributes=True),
    )


@router.post("/{ticket_id}/gesture/commit", response_model=GestureOut)
def api_commit_gesture(ticket_id: str, payload: GestureRequest, db: Session = Depends(get_db)):
    ticket, candidate, moved = _gesture(ticket_id, payload, db)
    before = (ticket.start_date, ticket.end_date)
    saved = apply_ticket_dates(db, ticket, candidate)
    return GestureOut(
        kind=payload.kind,
        days_moved=moved,
        committed=(saved.start_date, saved.end_date) != before,
        ticket=TicketOut.model_validate(saved, from_attributes=True),
    )
