"""Domain records shared by the planning services."""

from .entities import (
    PROJECT_STATUSES,
    PROJECT_STATUS_COMPLETED,
    PROJECT_STATUS_IN_PROGRESS,
    PROJECT_STATUS_PLANNING,
    Assignee,
    Project,
    Ticket,
)

__all__ = [
    "Assignee",
    "PROJECT_STATUSES",
    "PROJECT_STATUS_COMPLETED",
    "PROJECT_STATUS_IN_PROGRESS",
    "PROJECT_STATUS_PLANNING",
    "Project",
    "Ticket",
]
