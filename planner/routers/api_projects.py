from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..core.config import settings
from ..crud.projects import create_project, delete_project, get_project, list_projects, update_project
from ..crud.tickets import create_ticket, load_ticket_records, reorder_tickets
from ..db.session import get_db
from ..deps.auth import require_api_key
from ..schemas.project import ProjectCreate, ProjectOut, ProjectUpdate
from ..schemas.ticket import FlatTicketOut, ReorderOut, ReorderRequest, TicketCreate, TicketOut, TreeOut
from ..schemas.timeline import BarOut, DayCellOut, MonthSegmentOut, TimelineOut
from ..services.dates import get_today
from ..services.timeline import TimelineConfig, layout_timeline
from ..services.tree import default_expanded, flatten_tickets

router = APIRouter(prefix="/api/v1/projects", tags=["projects"], dependencies=[Depends(require_api_key)])


def _project_to_schema(project) -> ProjectOut:
    return ProjectOut.model_validate(project, from_attributes=True).model_copy(
        update={"ticket_count": len(project.tickets or [])}
    )


def _require_project(db: Session, project_id: str):
    project = get_project(db, project_id)
    if not project:
        raise HTTPException(404, "Not found")
    return project


def _resolve_expanded(records, expanded: list[str] | None, expand_all: bool) -> set[str]:
    if expand_all:
        return {r.id for r in records}
    if expanded is None:
        return default_expanded(records)
    return {item for value in expanded for item in value.split(",") if item}


@router.get("", response_model=list[ProjectOut])
def api_list_projects(status: str | None = Query(default=None), db: Session = Depends(get_db)):
    return [_project_to_schema(project) for project in list_projects(db, status=status)]


@router.post("", response_model=ProjectOut, status_code=201)
def api_create_project(payload: ProjectCreate, db: Session = Depends(get_db)):
    try:
        project = create_project(db, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _project_to_schema(project)


@router.get("/{project_id}", response_model=ProjectOut)
def api_get_project(project_id: str, db: Session = Depends(get_db)):
    return _project_to_schema(_require_project(db, project_id))


@router.patch("/{project_id}", response_model=ProjectOut)
def api_update_project(project_id: str, payload: ProjectUpdate, db: Session = Depends(get_db)):
    project = _require_project(db, project_id)
    try:
        updated = update_project(db, project, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _project_to_schema(updated)


@router.delete("/{project_id}")
def api_delete_project(project_id: str, db: Session = Depends(get_db)):
    delete_project(db, _require_project(db, project_id))
    return {"status": "deleted"}


@router.get("/{project_id}/tickets", response_model=list[TicketOut])
def api_list_project_tickets(project_id: str, db: Session = Depends(get_db)):
    project = _require_project(db, project_id)
    return [TicketOut.model_validate(record, from_attributes=True) for record in load_ticket_records(db, project.id)]


@router.post("/{project_id}/tickets", response_model=TicketOut, status_code=201)
def api_add_project_ticket(project_id: str, payload: TicketCreate, db: Session = Depends(get_db)):
    project = _require_project(db, project_id)
    try:
        ticket = create_ticket(db, project, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return TicketOut.model_validate(ticket, from_attributes=True)


@router.post("/{project_id}/tickets/reorder", response_model=ReorderOut)
def api_reorder_tickets(project_id: str, payload: ReorderRequest, db: Session = Depends(get_db)):
    project = _require_project(db, project_id)
    moved = reorder_tickets(db, project.id, payload.dragged_id, payload.target_id)
    return ReorderOut(
        changed=bool(moved),
        moved=[TicketOut.model_validate(record, from_attributes=True) for record in moved],
    )


@router.get("/{project_id}/tree", response_model=TreeOut)
def api_project_tree(
    project_id: str,
    expanded: list[str] | None = Query(default=None),
    expand_all: bool = Query(default=False),
    db: Session = Depends(get_db),
):
    project = _require_project(db, project_id)
    records = load_ticket_records(db, project.id)
    open_ids = _resolve_expanded(records, expanded, expand_all)
    flat = flatten_tickets(records, open_ids)
    return TreeOut(
        project_id=project.id,
        expanded=sorted(open_ids),
        tickets=[
            FlatTicketOut(
                **TicketOut.model_validate(item.ticket, from_attributes=True).model_dump(),
                level=item.level,
                has_children=item.has_children,
                expanded=item.has_children and item.id in open_ids,
            )
            for item in flat
        ],
    )


@router.get("/{project_id}/timeline", response_model=TimelineOut)
def api_project_timeline(
    project_id: str,
    expanded: list[str] | None = Query(default=None),
    expand_all: bool = Query(default=False),
    db: Session = Depends(get_db),
):
    project = _require_project(db, project_id)
    records = load_ticket_records(db, project.id)
    visible = [item.ticket for item in flatten_tickets(records, _resolve_expanded(records, expanded, expand_all))]
    layout = layout_timeline(visible, get_today(settings.TZ), TimelineConfig.from_settings())
    return TimelineOut(
        project_id=project.id,
        range_start=layout.date_range.start,
        range_end=layout.date_range.end,
        total_days=layout.total_days,
        width=layout.width,
        height=layout.height,
        day_width=layout.day_width,
        row_height=layout.row_height,
        months=[MonthSegmentOut.model_validate(m) for m in layout.months],
        days=[DayCellOut.model_validate(d) for d in layout.days],
        bars=[BarOut.model_validate(b) for b in layout.bars],
    )
