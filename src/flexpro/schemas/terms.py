from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from .base import APIModel


class TermCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=64)
    season: Optional[str] = Field(default=None, max_length=16)
    year: Optional[int] = Field(default=None, ge=1900, le=3000)
    start_date: date
    end_date: date
    is_active: bool = False

    @field_validator("end_date")
    @classmethod
    def validate_dates(cls, v: date, info):
        start = info.data.get("start_date")
        if start and v < start:
            raise ValueError("end_date must be on or after start_date")
        return v


class TermOut(APIModel):
    id: UUID
    name: str
    season: Optional[str] = None
    year: Optional[int] = None
    start_date: date
    end_date: date
    is_active: bool
    created_at: Optional[datetime] = None
