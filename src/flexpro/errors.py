# src/flexpro/errors.py
from __future__ import annotations

from fastapi import HTTPException, status


class PortalError(HTTPException):
    """Base for errors handlers raise on purpose; FastAPI renders them as {"detail": ...}."""

    status_code_default = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, code: int | None = None):
        super().__init__(status_code=code or self.status_code_default, detail=detail)


class BadRequestError(PortalError):
    status_code_default = status.HTTP_400_BAD_REQUEST


class ForbiddenError(PortalError):
    status_code_default = status.HTTP_403_FORBIDDEN

    def __init__(self, detail: str = "Forbidden", code: int | None = None):
        super().__init__(detail, code)


class NotFoundError(PortalError):
    status_code_default = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, code: int | None = None):
        super().__init__(f"{entity} not found", code)


class ConflictError(PortalError):
    status_code_default = status.HTTP_409_CONFLICT


class ServiceUnavailableError(PortalError):
    status_code_default = status.HTTP_503_SERVICE_UNAVAILABLE


__all__ = [
    "PortalError",
    "BadRequestError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "ServiceUnavailableError",
]
