# src/flexpro/api/routers/admin_users.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from flexpro.app_logger import get_logger
from flexpro.auth.deps import require_admin
from flexpro.auth.passwords import hash_password
from flexpro.core.config import settings
from flexpro.db.models import User, ROLE_FACULTY, ROLE_STUDENT
from flexpro.db.session import get_db
from flexpro.errors import ConflictError, NotFoundError
from flexpro.schemas.users import FacultyRegister, FacultyUpdate, StudentRegister, StudentUpdate, UserOut

router = APIRouter(prefix="/admin", tags=["admin"])
log = get_logger("routers.admin_users")


async def _list_by_role(session: AsyncSession, role: str, search: Optional[str]) -> list[User]:
    stmt = select(User).where(User.role == role)
    if search:
        like = f"%{search.strip().lower()}%"
        stmt = stmt.where(
            or_(
                User.email.ilike(like),
                User.first_name.ilike(like),
                User.last_name.ilike(like),
                User.student_id.ilike(like),
                User.employee_id.ilike(like),
            )
        )
    stmt = stmt.order_by(User.last_name, User.first_name)
    return list((await session.execute(stmt)).scalars().all())


async def _ensure_unique(session: AsyncSession, *, exclude: Optional[UUID] = None, **columns) -> None:
    """Raise Conflict if any given unique column value already belongs to another user."""
    clauses = [getattr(User, name) == value for name, value in columns.items() if value is not None]
    if not clauses:
        return
    stmt = select(User.id).where(or_(*clauses))
    if exclude is not None:
        stmt = stmt.where(User.id != exclude)
    if await session.scalar(stmt.limit(1)):
        raise ConflictError("A user with the provided email or id already exists")


async def _get_user(session: AsyncSession, user_id: UUID, role: str, label: str) -> User:
    user = await session.get(User, user_id)
    if user is None or user.role != role:
        raise NotFoundError(label)
    return user


def _apply(user: User, payload, fields: set[str]) -> None:
    for field in fields:
        value = getattr(payload, field)
        if field == "email" and value is not None:
            value = value.lower()
        if isinstance(value, str):
            value = value.strip() or None
            if value is None and field in ("first_name", "last_name", "email"):
                continue
        setattr(user, field, value)


# ---------- Students ----------

@router.get("/students", response_model=list[UserOut])
async def list_students(
    search: Optional[str] = Query(default=None),
    _admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> list[UserOut]:
    return [UserOut.model_validate(u) for u in await _list_by_role(session, ROLE_STUDENT, search)]


@router.post("/students/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register_student(
    payload: StudentRegister,
    _admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> UserOut:
    email = payload.email.lower()
    student_id = payload.student_id.strip()
    await _ensure_unique(session, email=email, student_id=student_id)

    user = User(
        email=email,
        password_hash=hash_password(payload.password),
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        role=ROLE_STUDENT,
        student_id=student_id,
        program=payload.program.strip(),
        semester=payload.semester,
        section=payload.section or settings.DEFAULT_SECTION,
        cgpa=payload.cgpa,
        phone=payload.phone,
        address=payload.address,
        bio=payload.bio,
        is_active=True,
    )
    session.add(user)
    await session.commit()
    log.info("registered student %s (%s)", user.student_id, user.id)
    return UserOut.model_validate(user)


@router.patch("/students/{user_id}", response_model=UserOut)
async def update_student(
    user_id: UUID,
    payload: StudentUpdate,
    _admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> UserOut:
    user = await _get_user(session, user_id, ROLE_STUDENT, "Student")
    fields = payload.model_fields_set
    await _ensure_unique(
        session,
        exclude=user.id,
        email=payload.email.lower() if "email" in fields and payload.email else None,
        student_id=payload.student_id if "student_id" in fields else None,
    )
    _apply(user, payload, fields)
    await session.commit()
    return UserOut.model_validate(user)


# ---------- Faculty ----------

@router.get("/faculty", response_model=list[UserOut])
async def list_faculty(
    search: Optional[str] = Query(default=None),
    _admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> list[UserOut]:
    return [UserOut.model_validate(u) for u in await _list_by_role(session, ROLE_FACULTY, search)]


@router.post("/faculty/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register_faculty(
    payload: FacultyRegister,
    _admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> UserOut:
    email = payload.email.lower()
    employee_id = payload.employee_id.strip()
    await _ensure_unique(session, email=email, employee_id=employee_id)

    user = User(
        email=email,
        password_hash=hash_password(payload.password),
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        role=ROLE_FACULTY,
        employee_id=employee_id,
        department=payload.department.strip(),
        phone=payload.phone,
        address=payload.address,
        bio=payload.bio,
        is_active=True,
    )
    session.add(user)
    await session.commit()
    log.info("registered faculty %s (%s)", user.employee_id, user.id)
    return UserOut.model_validate(user)


@router.patch("/faculty/{user_id}", response_model=UserOut)
async def update_faculty(
    user_id: UUID,
    payload: FacultyUpdate,
    _admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> UserOut:
    user = await _get_user(session, user_id, ROLE_FACULTY, "Faculty member")
    fields = payload.model_fields_set
    await _ensure_unique(
        session,
        exclude=user.id,
        email=payload.email.lower() if "email" in fields and payload.email else None,
        employee_id=payload.employee_id if "employee_id" in fields else None,
    )
    _apply(user, payload, fields)
    await session.commit()
    return UserOut.model_validate(user)
