"""Immutable records the planning engine computes over.

The services never mutate these objects: every change produces a new record
through ``dataclasses.replace`` so callers can detect changes by identity.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from decimal import Decimal

PROJECT_STATUS_PLANNING = "planning"
PROJECT_STATUS_IN_PROGRESS = "in_progress"
PROJECT_STATUS_COMPLETED = "completed"

PROJECT_STATUSES: tuple[str, ...] = (
    PROJECT_STATUS_PLANNING,
    PROJECT_STATUS_IN_PROGRESS,
    PROJECT_STATUS_COMPLETED,
)


@dataclass(frozen=True)
class Assignee:
    id: str
    name: str

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("Assignee.name must be non-empty")


@dataclass(frozen=True)
class Ticket:
    id: str
    name: str
    start_date: dt.date
    end_date: dt.date
    project_id: str
    parent_id: str | None = None
    assignee_id: str | None = None
    sort_order: int = 0

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Ticket.id must be non-empty")
        if not self.project_id:
            raise ValueError("Ticket.project_id must be non-empty")
        if self.end_date < self.start_date:
            raise ValueError("Ticket.end_date must be >= start_date")
        if self.parent_id == self.id:
            raise ValueError("Ticket cannot be its own parent")

    @property
    def sibling_key(self) -> tuple[str, str | None]:
        return (self.project_id, self.parent_id)


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    description: str = ""
    manager: str = ""
    estimated_hours: Decimal | None = None
    estimated_budget: Decimal | None = None
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    notes: str = ""
    status: str = PROJECT_STATUS_PLANNING

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("Project.name must be non-empty")
        if self.status not in PROJECT_STATUSES:
            raise ValueError(f"Unsupported project status: {self.status}")
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("Project.end_date must be >= start_date")


__all__ = [
    "Assignee",
    "PROJECT_STATUSES",
    "PROJECT_STATUS_COMPLETED",
    "PROJECT_STATUS_IN_PROGRESS",
    "PROJECT_STATUS_PLANNING",
    "Project",
    "Ticket",
]
