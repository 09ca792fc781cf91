"""Importing this package registers every table with ``Base.metadata``."""

from .assignee import Assignee
from .project import Project
from .ticket import Ticket

__all__ = ["Assignee", "Project", "Ticket"]
