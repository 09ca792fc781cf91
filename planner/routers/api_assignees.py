from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..crud.assignees import create_assignee, delete_assignee, get_assignee, list_assignees, update_assignee
from ..db.session import get_db
from ..deps.auth import require_api_key
from ..schemas.assignee import AssigneeIn, AssigneeOut

router = APIRouter(prefix="/api/v1/assignees", tags=["assignees"], dependencies=[Depends(require_api_key)])


@router.get("", response_model=list[AssigneeOut])
def api_list_assignees(db: Session = Depends(get_db)):
    return list_assignees(db)


@router.post("", response_model=AssigneeOut, status_code=201)
def api_create_assignee(payload: AssigneeIn, db: Session = Depends(get_db)):
    try:
        return create_assignee(db, payload.model_dump())
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.patch("/{assignee_id}", response_model=AssigneeOut)
def api_update_assignee(assignee_id: str, payload: AssigneeIn, db: Session = Depends(get_db)):
    assignee = get_assignee(db, assignee_id)
    if not assignee:
        raise HTTPException(404, "Not found")
    try:
        return update_assignee(db, assignee, payload.model_dump())
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.delete("/{assignee_id}")
def api_delete_assignee(assignee_id: str, db: Session = Depends(get_db)):
    assignee = get_assignee(db, assignee_id)
    if not assignee:
        raise HTTPException(404, "Not found")
    released = delete_assignee(db, assignee)
    return {"status": "deleted", "released_tickets": released}
