from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from .base import APIModel, reject_null


class InstructorOut(APIModel):
    id: UUID
    first_name: str
    last_name: str
    employee_id: Optional[str] = None


class SectionOut(APIModel):
    id: UUID
    name: str
    instructor: Optional[InstructorOut] = None


class SectionCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=32)
    instructor_id: Optional[UUID] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Section name is required")
        return v


class SectionUpdate(APIModel):
    name: Optional[str] = Field(default=None, max_length=32)
    instructor_id: Optional[UUID] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Section name cannot be empty")
        return v

    @model_validator(mode="after")
    def require_some_field(self):
        if not self.model_fields_set:
            raise ValueError("No valid fields provided")
        return self


class CourseCreate(APIModel):
    code: str = Field(..., min_length=2, max_length=32)
    title: str = Field(..., min_length=3, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    credit_hours: int = Field(..., ge=1, le=6)
    department: str = Field(..., min_length=2, max_length=120)
    semester: int = Field(..., ge=1, le=12)
    prerequisite: Optional[str] = Field(default=None, max_length=255)
    max_capacity: int = Field(default=40, ge=5, le=500)
    is_active: bool = True
    sections: list[SectionCreate] = Field(default_factory=list)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()


class CourseUpdate(APIModel):
    title: Optional[str] = Field(default=None, min_length=3, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    department: Optional[str] = Field(default=None, min_length=2, max_length=120)
    credit_hours: Optional[int] = Field(default=None, ge=1, le=6)
    semester: Optional[int] = Field(default=None, ge=1, le=12)
    max_capacity: Optional[int] = Field(default=None, ge=5, le=500)
    prerequisite: Optional[str] = Field(default=None, max_length=255)
    is_active: Optional[bool] = None

    @field_validator("title", "department", "credit_hours", "semester", "max_capacity", "is_active")
    @classmethod
    def required_columns(cls, v):
        return reject_null(v)

    @model_validator(mode="after")
    def require_some_field(self):
        if not self.model_fields_set:
            raise ValueError("Provide at least one field to update")
        return self


class CourseOut(APIModel):
    id: UUID
    code: str
    title: str
    description: Optional[str] = None
    credit_hours: int
    department: str
    semester: int
    prerequisite: Optional[str] = None
    max_capacity: int
    is_active: bool
    sections: list[SectionOut] = Field(default_factory=list)
