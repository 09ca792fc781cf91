from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..core.config import settings
from ..crud.assignees import assignee_to_entity, list_assignees
from ..crud.projects import list_projects, project_to_entity
from ..crud.tickets import load_ticket_records
from ..db.session import get_db
from ..deps.auth import require_api_key
from ..domain.entities import PROJECT_STATUS_IN_PROGRESS, PROJECT_STATUSES
from ..schemas.dashboard import AssigneeStatsOut, DashboardOut, GlobalStatsOut, ProjectCountsOut, ProjectStatsOut
from ..services.dashboard import compute_dashboard_stats, projects_with_status, top_assignees
from ..services.dates import get_today

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"], dependencies=[Depends(require_api_key)])

ALL_PROJECTS = "all"
CARD_STATUS_PATTERN = f"^({'|'.join((ALL_PROJECTS, *PROJECT_STATUSES))})$"


@router.get("", response_model=DashboardOut)
def api_dashboard(
    status: str = Query(default=PROJECT_STATUS_IN_PROGRESS, pattern=CARD_STATUS_PATTERN),
    db: Session = Depends(get_db),
):
    """Totals cover every project; per-project cards only the ``status`` ones."""

    today = get_today(settings.TZ)
    projects = [project_to_entity(row) for row in list_projects(db)]
    assignees = [assignee_to_entity(row) for row in list_assignees(db)]
    stats = compute_dashboard_stats(
        projects,
        load_ticket_records(db),
        assignees,
        today,
        due_soon_days=settings.DUE_SOON_THRESHOLD_DAYS,
    )

    carded = projects if status == ALL_PROJECTS else projects_with_status(projects, status)
    project_rows = []
    for project in carded:
        project_stats = stats.project_stats[project.id]
        shown, hidden = top_assignees(project_stats, assignees, settings.MAX_DISPLAYED_ASSIGNEES)
        project_rows.append(
            ProjectStatsOut.model_validate(project_stats).model_copy(
                update={"top_assignees": shown, "more_assignees": hidden}
            )
        )

    return DashboardOut(
        today=today.isoformat(),
        due_soon_days=settings.DUE_SOON_THRESHOLD_DAYS,
        project_status=status,
        project_counts=ProjectCountsOut.model_validate(stats.project_counts),
        project_stats=project_rows,
        global_stats=GlobalStatsOut.model_validate(stats.global_stats),
        assignee_stats=[AssigneeStatsOut.model_validate(item) for item in stats.assignee_stats],
    )
