from __future__ import annotations

from sqlalchemy import Column, Text

from ..db.session import Base


class Assignee(Base):
    __tablename__ = "assignees"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    created_at = Column(Text, nullable=False)


__all__ = ["Assignee"]
