# src/flexpro/api/routers/admin_terms.py
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from flexpro.app_logger import get_logger
from flexpro.auth.deps import require_admin
from flexpro.db.models import Term, User
from flexpro.db.session import get_db
from flexpro.errors import NotFoundError
from flexpro.schemas.terms import TermCreate, TermOut

router = APIRouter(prefix="/admin/terms", tags=["admin"])
log = get_logger("routers.admin_terms")


async def _deactivate_all(session: AsyncSession) -> None:
    await session.execute(
        update(Term).where(Term.is_active.is_(True)).values(is_active=False).execution_options(synchronize_session="fetch")
    )


@router.get("", response_model=list[TermOut])
async def list_terms(
    _admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> list[TermOut]:
    rows = (await session.execute(select(Term).order_by(Term.start_date.desc()))).scalars().all()
    return [TermOut.model_validate(t) for t in rows]


@router.post("", response_model=TermOut, status_code=status.HTTP_201_CREATED)
async def create_term(
    payload: TermCreate,
    _admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> TermOut:
    """Create a term. Creating it active deactivates whichever term was active."""
    if payload.is_active:
        await _deactivate_all(session)
    term = Term(**payload.model_dump())
    session.add(term)
    await session.commit()
    return TermOut.model_validate(term)


@router.post("/{term_id}/activate", response_model=TermOut)
async def activate_term(
    term_id: UUID,
    _admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> TermOut:
    term = await session.get(Term, term_id)
    if term is None:
        raise NotFoundError("Term")
    await _deactivate_all(session)
    term.is_active = True
    await session.commit()
    log.info("active term is now %s", term.name)
    return TermOut.model_validate(term)
