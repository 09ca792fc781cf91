from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field


class _FromAttributes(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class MonthSegmentOut(_FromAttributes):
    year: int
    month: int
    first_date: dt.date
    days: int


class DayCellOut(_FromAttributes):
    date: dt.date
    day: int
    weekday: int
    is_weekend: bool


class BarOut(_FromAttributes):
    ticket_id: str
    row: int
    left: int
    width: int
    top: int
    height: int
    start_date: dt.date
    end_date: dt.date
    is_subtask: bool


class TimelineOut(BaseModel):
    project_id: str
    range_start: dt.date
    range_end: dt.date
    total_days: int
    width: int
    height: int
    day_width: int
    row_height: int
    months: list[MonthSegmentOut] = Field(default_factory=list)
    days: list[DayCellOut] = Field(default_factory=list)
    bars: list[BarOut] = Field(default_factory=list)
