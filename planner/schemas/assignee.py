from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AssigneeIn(BaseModel):
    name: str = Field(min_length=1)


class AssigneeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
