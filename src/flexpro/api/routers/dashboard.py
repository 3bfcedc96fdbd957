# src/flexpro/api/routers/dashboard.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from flexpro.auth.deps import require_admin, require_faculty, require_student
from flexpro.db.models import User
from flexpro.db.session import get_db
from flexpro.schemas.dashboard import AdminDashboard, FacultyDashboard, StudentDashboard
from flexpro.services import dashboards

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard", response_model=StudentDashboard)
async def student_dashboard(
    user: User = Depends(require_student),
    session: AsyncSession = Depends(get_db),
) -> StudentDashboard:
    return StudentDashboard.model_validate(await dashboards.student_dashboard(session, user))


@router.get("/faculty/dashboard", response_model=FacultyDashboard, tags=["faculty"])
async def faculty_dashboard(
    user: User = Depends(require_faculty),
    session: AsyncSession = Depends(get_db),
) -> FacultyDashboard:
    return FacultyDashboard.model_validate(await dashboards.faculty_dashboard(session, user))


@router.get("/admin/dashboard", response_model=AdminDashboard, tags=["admin"])
async def admin_dashboard(
    _admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> AdminDashboard:
    return AdminDashboard.model_validate(await dashboards.admin_dashboard(session))
