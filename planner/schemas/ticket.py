"""Pydantic schemas for ticket payloads and the flattened tree view."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..services.gestures import GESTURE_KINDS

GESTURE_KIND_PATTERN = f"^({'|'.join(GESTURE_KINDS)})$"


class TicketBase(BaseModel):
    name: str = Field(min_length=1)
    start_date: dt.date
    end_date: dt.date
    parent_id: Optional[str] = None
    assignee_id: Optional[str] = None


class TicketCreate(TicketBase):
    @model_validator(mode="after")
    def _check_range(self) -> "TicketCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class TicketUpdate(BaseModel):
    name: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    parent_id: Optional[str] = None
    assignee_id: Optional[str] = None


class TicketOut(TicketBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    sort_order: int


class FlatTicketOut(TicketOut):
    level: int
    has_children: bool
    expanded: bool = False


class TreeOut(BaseModel):
    project_id: str
    expanded: list[str] = Field(default_factory=list)
    tickets: list[FlatTicketOut] = Field(default_factory=list)


class ReorderRequest(BaseModel):
    dragged_id: str
    target_id: str


class ReorderOut(BaseModel):
    changed: bool
    moved: list[TicketOut] = Field(default_factory=list)


class GestureRequest(BaseModel):
    kind: str = Field(pattern=GESTURE_KIND_PATTERN)
    start_x: float = Field(allow_inf_nan=False)
    current_x: float = Field(allow_inf_nan=False)


class GestureOut(BaseModel):
    kind: str
    days_moved: int
    committed: bool
    ticket: TicketOut
