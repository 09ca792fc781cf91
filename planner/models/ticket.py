"""SQLAlchemy model for schedulable tickets.

Dates are stored as ISO ``YYYY-MM-DD`` text. The parent link is a plain
column without a relationship so the tree is only ever walked through the
services, never through lazy-loaded object graphs.
"""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import relationship

from ..db.session import Base


class Ticket(Base):
    __tablename__ = "tickets"
    __allow_unmapped__ = True
    __table_args__ = (Index("ix_tickets_sibling_group", "project_id", "parent_id", "sort_order"),)

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    start_date = Column(Text, nullable=False)
    end_date = Column(Text, nullable=False)
    project_id = Column(Text, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    parent_id = Column(Text, nullable=True, index=True)
    assignee_id = Column(Text, ForeignKey("assignees.id", ondelete="SET NULL"), nullable=True, index=True)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    project = relationship("Project", back_populates="tickets")


__all__ = ["Ticket"]
