# src/flexpro/api/routers/profile.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from flexpro.auth.deps import require_user
from flexpro.db.models import User
from flexpro.db.session import get_db
from flexpro.schemas.users import ProfileUpdate, UserOut

router = APIRouter(tags=["profile"])


@router.get("/profile", response_model=UserOut)
async def get_profile(user: User = Depends(require_user)) -> UserOut:
    return UserOut.model_validate(user)


@router.patch("/profile", response_model=UserOut)
async def update_profile(
    payload: ProfileUpdate,
    user: User = Depends(require_user),
    session: AsyncSession = Depends(get_db),
) -> UserOut:
    """Users may edit their own contact details; everything else is admin-managed."""
    for field in payload.model_fields_set:
        setattr(user, field, getattr(payload, field))
    await session.commit()
    return UserOut.model_validate(user)
