from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProjectStatsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    project_id: str
    total_tickets: int
    parent_tickets: int
    overdue_tickets: int
    due_soon_tickets: int
    unassigned_tickets: int
    assignee_breakdown: dict[str, int] = Field(default_factory=dict)
    days_remaining: Optional[int] = None
    top_assignees: list[tuple[str, int]] = Field(default_factory=list)
    more_assignees: int = 0


class GlobalStatsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_tickets: int
    total_overdue: int
    total_due_soon: int


class AssigneeStatsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    assignee_id: str
    assignee_name: str
    ticket_count: int


class ProjectCountsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)


class DashboardOut(BaseModel):
    today: str
    due_soon_days: int
    project_status: Optional[str] = None
    project_counts: ProjectCountsOut = Field(default_factory=ProjectCountsOut)
    project_stats: list[ProjectStatsOut] = Field(default_factory=list)
    global_stats: GlobalStatsOut
    assignee_stats: list[AssigneeStatsOut] = Field(default_factory=list)
