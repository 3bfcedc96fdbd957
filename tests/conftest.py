# tests/conftest.py
"""
Test harness for the portal API.

- Points the app at a throwaway SQLite file (aiosqlite) before anything from
  `flexpro` is imported; the schema is dropped and recreated for every test
  that asks for `db` or `client`.
- `client` is an httpx AsyncClient talking to the ASGI app in-process.
- Factories create users/terms/courses directly through the ORM; `auth()`
  returns Authorization headers for a user without going through /auth/login.
"""
from __future__ import annotations

import datetime as dt
import os
import tempfile
from pathlib import Path
from typing import Optional

# ---------------------------------------------------------------------------
# Environment (must run before flexpro is imported)
# ---------------------------------------------------------------------------
TEST_DB_PATH = Path(tempfile.gettempdir()) / f"flexpro-test-{os.getpid()}.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["TESTING"] = "1"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["AUTH_SECRET"] = "test-secret-not-for-production"
os.environ.setdefault("FLEXPRO_LOG_LEVEL", "WARNING")

import pytest
from httpx import ASGITransport, AsyncClient

from flexpro.auth.passwords import hash_password
from flexpro.auth.tokens import sign_token
from flexpro.db.base import Base
from flexpro.db.models import (
    Course,
    CourseSection,
    Enrollment,
    StudentMark,
    Term,
    User,
    ROLE_ADMIN,
    ROLE_FACULTY,
    ROLE_STUDENT,
)
from flexpro.db.session import get_engine, get_sessionmaker
from flexpro.main import create_app

DEFAULT_PASSWORD = "secret123"


# Make anyio run on asyncio (so our async fixtures work everywhere)
@pytest.fixture(scope="session", autouse=True)
def anyio_backend():
    return "asyncio"


async def reset_schema() -> None:
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
async def db():
    """A fresh schema plus a session for arranging and inspecting data."""
    await reset_schema()
    async with get_sessionmaker()() as session:
        yield session


@pytest.fixture
async def client(db):
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------
class Factory:
    def __init__(self, session):
        self.session = session
        self._n = 0

    def _next(self) -> int:
        self._n += 1
        return self._n

    async def user(
        self,
        role: str = ROLE_STUDENT,
        *,
        section: Optional[str] = "A",
        password: Optional[str] = DEFAULT_PASSWORD,
        is_active: bool = True,
        **extra,
    ) -> User:
        n = self._next()
        fields = dict(
            email=f"{role}{n}@flexpro.edu",
            password_hash=hash_password(password) if password else None,
            first_name=f"First{n}",
            last_name=f"Last{n:03d}",
            role=role,
            is_active=is_active,
        )
        if role == ROLE_STUDENT:
            fields.update(student_id=f"S{n:04d}", program="BSCS", semester=3, section=section)
        elif role == ROLE_FACULTY:
            fields.update(employee_id=f"E{n:04d}", department="Computing")
        fields.update(extra)
        user = User(**fields)
        self.session.add(user)
        await self.session.commit()
        return user

    async def student(self, **kw) -> User:
        return await self.user(ROLE_STUDENT, **kw)

    async def faculty(self, **kw) -> User:
        return await self.user(ROLE_FACULTY, section=None, **kw)

    async def admin(self, **kw) -> User:
        return await self.user(ROLE_ADMIN, section=None, **kw)

    async def term(self, name: Optional[str] = None, *, is_active: bool = True, start: Optional[dt.date] = None) -> Term:
        n = self._next()
        start = start or dt.date(2026, 1, 10) + dt.timedelta(days=200 * n)
        term = Term(
            name=name or f"Term {n}",
            season="Fall",
            year=start.year,
            start_date=start,
            end_date=start + dt.timedelta(days=120),
            is_active=is_active,
        )
        self.session.add(term)
        await self.session.commit()
        return term

    async def course(
        self,
        *,
        code: Optional[str] = None,
        credit_hours: int = 3,
        max_capacity: int = 40,
        sections: tuple[str, ...] = ("A",),
        instructor: Optional[User] = None,
        is_active: bool = True,
    ) -> Course:
        n = self._next()
        course = Course(
            code=code or f"CS{100 + n}",
            title=f"Course number {n}",
            credit_hours=credit_hours,
            department="Computing",
            semester=3,
            max_capacity=max_capacity,
            is_active=is_active,
        )
        course.sections = [
            CourseSection(name=name, instructor_id=instructor.id if instructor else None) for name in sections
        ]
        self.session.add(course)
        await self.session.commit()
        return course

    async def enrollment(self, user: User, course: Course, term: Term, *, status: str = "enrolled", marks: Optional[dict] = None) -> Enrollment:
        en = Enrollment(user_id=user.id, course_id=course.id, term_id=term.id, status=status)
        self.session.add(en)
        await self.session.flush()
        if marks is not None:
            mark = StudentMark(enrollment_id=en.id, **{k: v for k, v in marks.items() if k != "total"})
            if "total" in marks:
                mark.total = marks["total"]
            self.session.add(mark)
        await self.session.commit()
        return en


@pytest.fixture
def factory(db) -> Factory:
    return Factory(db)


def auth(user: User, ttl: int = 3600) -> dict:
    return {"Authorization": f"Bearer {sign_token(str(user.id), ttl)}"}


@pytest.fixture
def auth_headers():
    return auth


async def fetch_all(stmt) -> list:
    """Run `stmt` in a session of its own, so results reflect what the app committed."""
    async with get_sessionmaker()() as session:
        return list((await session.execute(stmt)).scalars().all())
