"""Pydantic schemas that describe project payloads for the API."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain.entities import PROJECT_STATUSES

PROJECT_STATUS_PATTERN = f"^({'|'.join(PROJECT_STATUSES)})$"


class ProjectBase(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    manager: str = ""
    estimated_hours: Optional[Decimal] = Field(default=None, ge=0)
    estimated_budget: Optional[Decimal] = Field(default=None, ge=0)
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    notes: str = ""
    status: str = Field(default="planning", pattern=PROJECT_STATUS_PATTERN)


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    manager: Optional[str] = None
    estimated_hours: Optional[Decimal] = Field(default=None, ge=0)
    estimated_budget: Optional[Decimal] = Field(default=None, ge=0)
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    notes: Optional[str] = None
    status: Optional[str] = Field(default=None, pattern=PROJECT_STATUS_PATTERN)


class ProjectOut(ProjectBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: str
    updated_at: str
    ticket_count: int = 0
