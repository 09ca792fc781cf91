"""SQLAlchemy model for projects, the containers that own tickets."""

from __future__ import annotations

from sqlalchemy import Column, Numeric, Text
from sqlalchemy.orm import relationship

from ..db.session import Base


class Project(Base):
    __tablename__ = "projects"
    __allow_unmapped__ = True

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    manager = Column(Text, nullable=False, default="")
    estimated_hours = Column(Numeric(12, 2), nullable=True)
    estimated_budget = Column(Numeric(14, 2), nullable=True)
    start_date = Column(Text, nullable=True)
    end_date = Column(Text, nullable=True)
    notes = Column(Text, nullable=False, default="")
    status = Column(Text, nullable=False, default="planning")
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    tickets = relationship(
        "Ticket",
        back_populates="project",
        cascade="all, delete-orphan",
    )


__all__ = ["Project"]
