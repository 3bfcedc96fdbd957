from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class APIModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        extra="ignore",
        populate_by_name=True,
    )


class Message(APIModel):
    message: str


def reject_null(value):
    """For partial updates: a field may be omitted, but not sent as null."""
    if value is None:
        raise ValueError("This field cannot be null")
    return value
