from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field, field_validator, model_validator

from .base import APIModel, reject_null


def _blank_to_none(v):
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


class UserOut(APIModel):
    id: UUID
    email: str
    first_name: str
    last_name: str
    role: str
    student_id: Optional[str] = None
    employee_id: Optional[str] = None
    program: Optional[str] = None
    department: Optional[str] = None
    semester: Optional[int] = None
    section: Optional[str] = None
    cgpa: float = 0.0
    phone: Optional[str] = None
    address: Optional[str] = None
    bio: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None


class ProfileUpdate(APIModel):
    phone: Optional[str] = Field(default=None, max_length=40)
    address: Optional[str] = Field(default=None, max_length=500)
    bio: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("phone", "address", "bio", mode="before")
    @classmethod
    def strip_blank(cls, v):
        return _blank_to_none(v)


class StudentRegister(APIModel):
    first_name: str = Field(..., min_length=2)
    last_name: str = Field(..., min_length=2)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=64)
    student_id: str = Field(..., min_length=3)
    program: str = Field(..., min_length=2)
    semester: int = Field(..., ge=1, le=12)
    section: Optional[str] = None
    cgpa: float = Field(default=0.0, ge=0, le=4)
    phone: Optional[str] = None
    address: Optional[str] = None
    bio: Optional[str] = None

    @field_validator("section", "phone", "address", "bio", mode="before")
    @classmethod
    def strip_blank(cls, v):
        return _blank_to_none(v)


class _AtLeastOneField(APIModel):
    @model_validator(mode="after")
    def require_some_field(self):
        if not self.model_fields_set:
            raise ValueError("Provide at least one field to update")
        return self


class StudentUpdate(_AtLeastOneField):
    first_name: Optional[str] = Field(default=None, min_length=2)
    last_name: Optional[str] = Field(default=None, min_length=2)
    email: Optional[EmailStr] = None
    student_id: Optional[str] = Field(default=None, min_length=3)
    program: Optional[str] = None
    semester: Optional[int] = Field(default=None, ge=1, le=12)
    section: Optional[str] = None
    cgpa: Optional[float] = Field(default=None, ge=0, le=4)
    phone: Optional[str] = None
    address: Optional[str] = None
    bio: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("first_name", "last_name", "email", "cgpa", "is_active")
    @classmethod
    def required_columns(cls, v):
        return reject_null(v)


class FacultyRegister(APIModel):
    first_name: str = Field(..., min_length=2)
    last_name: str = Field(..., min_length=2)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=64)
    employee_id: str = Field(..., min_length=3)
    department: str = Field(..., min_length=2)
    phone: Optional[str] = None
    address: Optional[str] = None
    bio: Optional[str] = None

    @field_validator("phone", "address", "bio", mode="before")
    @classmethod
    def strip_blank(cls, v):
        return _blank_to_none(v)


class FacultyUpdate(_AtLeastOneField):
    first_name: Optional[str] = Field(default=None, min_length=2)
    last_name: Optional[str] = Field(default=None, min_length=2)
    email: Optional[EmailStr] = None
    employee_id: Optional[str] = Field(default=None, min_length=3)
    department: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    bio: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("first_name", "last_name", "email", "is_active")
    @classmethod
    def required_columns(cls, v):
        return reject_null(v)
