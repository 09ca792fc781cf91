from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Sequence

from ..domain.entities import PROJECT_STATUS_IN_PROGRESS, PROJECT_STATUSES, Assignee, Project, Ticket
from .dates import diff_in_days

DEFAULT_DUE_SOON_DAYS = 7
DEFAULT_MAX_DISPLAYED_ASSIGNEES = 3
UNKNOWN_ASSIGNEE = "Unknown"


@dataclass(frozen=True)
class ProjectStats:
    project_id: str
    total_tickets: int
    parent_tickets: int
    overdue_tickets: int
    due_soon_tickets: int
    unassigned_tickets: int
    assignee_breakdown: dict[str, int] = field(default_factory=dict)
    days_remaining: int | None = None


@dataclass(frozen=True)
class GlobalStats:
    total_tickets: int = 0
    total_overdue: int = 0
    total_due_soon: int = 0


@dataclass(frozen=True)
class AssigneeStats:
    assignee_id: str
    assignee_name: str
    ticket_count: int


@dataclass(frozen=True)
class ProjectCounts:
    total: int = 0
    by_status: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class DashboardStats:
    project_stats: dict[str, ProjectStats]
    global_stats: GlobalStats
    assignee_stats: list[AssigneeStats]
    project_counts: ProjectCounts = field(default_factory=ProjectCounts)


def is_overdue(end_date: date, today: date) -> bool:
    return diff_in_days(today, end_date) > 0


def is_due_soon(end_date: date, today: date, threshold_days: int = DEFAULT_DUE_SOON_DAYS) -> bool:
    """Due today or within the next ``threshold_days`` days."""
    remaining = diff_in_days(end_date, today)
    return 0 <= remaining <= threshold_days


def days_remaining(project: Project, today: date) -> int | None:
    if project.end_date is None:
        return None
    return diff_in_days(project.end_date, today)


def count_projects(projects: Sequence[Project]) -> ProjectCounts:
    """Total plus one count per known status, zeros included."""
    by_status = dict.fromkeys(PROJECT_STATUSES, 0)
    for project in projects:
        by_status[project.status] = by_status.get(project.status, 0) + 1
    return ProjectCounts(total=len(projects), by_status=by_status)


def projects_with_status(projects: Sequence[Project], status: str = PROJECT_STATUS_IN_PROGRESS) -> list[Project]:
    """Projects the dashboard shows cards for; active ones by default."""
    return [p for p in projects if p.status == status]


def compute_dashboard_stats(
    projects: Sequence[Project],
    tickets: Sequence[Ticket],
    assignees: Sequence[Assignee],
    today: date,
    *,
    due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
) -> DashboardStats:
    """Roll ticket counts up per project, overall and per assignee.

    Tickets of unknown projects are ignored. Assignees with no tickets are
    left out of ``assignee_stats``, which is sorted by ticket count with ties
    kept in the order of ``assignees``.
    """
    by_project: dict[str, list[Ticket]] = {}
    for ticket in tickets:
        by_project.setdefault(ticket.project_id, []).append(ticket)

    project_stats: dict[str, ProjectStats] = {}
    totals = {"tickets": 0, "overdue": 0, "due_soon": 0}
    assignee_counts: dict[str, int] = {}

    for project in projects:
        project_tickets = by_project.get(project.id, [])
        breakdown: dict[str, int] = {}
        for ticket in project_tickets:
            if ticket.assignee_id:
                breakdown[ticket.assignee_id] = breakdown.get(ticket.assignee_id, 0) + 1
                assignee_counts[ticket.assignee_id] = assignee_counts.get(ticket.assignee_id, 0) + 1
        overdue = sum(1 for t in project_tickets if is_overdue(t.end_date, today))
        due_soon = sum(1 for t in project_tickets if is_due_soon(t.end_date, today, due_soon_days))
        project_stats[project.id] = ProjectStats(
            project_id=project.id,
            total_tickets=len(project_tickets),
            parent_tickets=sum(1 for t in project_tickets if t.parent_id is None),
            overdue_tickets=overdue,
            due_soon_tickets=due_soon,
            unassigned_tickets=sum(1 for t in project_tickets if t.assignee_id is None),
            assignee_breakdown=breakdown,
            days_remaining=days_remaining(project, today),
        )
        totals["tickets"] += len(project_tickets)
        totals["overdue"] += overdue
        totals["due_soon"] += due_soon

    assignee_stats = [
        AssigneeStats(assignee_id=a.id, assignee_name=a.name, ticket_count=assignee_counts[a.id])
        for a in assignees
        if assignee_counts.get(a.id, 0) > 0
    ]
    assignee_stats.sort(key=lambda s: s.ticket_count, reverse=True)

    return DashboardStats(
        project_stats=project_stats,
        global_stats=GlobalStats(
            total_tickets=totals["tickets"],
            total_overdue=totals["overdue"],
            total_due_soon=totals["due_soon"],
        ),
        assignee_stats=assignee_stats,
        project_counts=count_projects(projects),
    )


def top_assignees(
    stats: ProjectStats,
    assignees: Sequence[Assignee],
    limit: int = DEFAULT_MAX_DISPLAYED_ASSIGNEES,
) -> tuple[list[tuple[str, int]], int]:
    """Busiest assignees of one project as ``(name, count)`` plus how many were cut."""
    names = {a.id: a.name for a in assignees}
    ranked = sorted(
        ((names.get(assignee_id, UNKNOWN_ASSIGNEE), count) for assignee_id, count in stats.assignee_breakdown.items()),
        key=lambda item: item[1],
        reverse=True,
    )
    return ranked[:limit], max(len(ranked) - limit, 0)
