# src/flexpro/cli.py
from __future__ import annotations

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from sqlalchemy import or_, select

from flexpro.auth.passwords import hash_password
from flexpro.core.config import settings
from flexpro.db.models import User, ROLES, ROLE_FACULTY, ROLE_STUDENT
from flexpro.db.session import get_session

app = typer.Typer(help="FlexPro student portal")
console = Console()


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(8000, help="Bind port"),
    reload: bool = typer.Option(False, help="Reload on code changes (development)"),
):
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("flexpro.main:app", host=host, port=port, reload=reload)


async def _create_user(
    *,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    role: str,
    student_id: Optional[str],
    employee_id: Optional[str],
    section: Optional[str],
) -> User:
    async with get_session() as session:
        clauses = [User.email == email]
        if student_id:
            clauses.append(User.student_id == student_id)
        if employee_id:
            clauses.append(User.employee_id == employee_id)
        clash = await session.scalar(select(User.id).where(or_(*clauses)))
        if clash:
            raise ValueError("A user with that email or id already exists")

        user = User(
            email=email,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            role=role,
            student_id=student_id,
            employee_id=employee_id,
            section=(section or settings.DEFAULT_SECTION) if role == ROLE_STUDENT else None,
            is_active=True,
        )
        session.add(user)
        await session.commit()
        return user


@app.command("create-user")
def create_user(
    email: str = typer.Option(..., help="Login email"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
    first_name: str = typer.Option(..., "--first-name"),
    last_name: str = typer.Option(..., "--last-name"),
    role: str = typer.Option("admin", help="student | faculty | admin"),
    student_id: Optional[str] = typer.Option(None, "--student-id"),
    employee_id: Optional[str] = typer.Option(None, "--employee-id"),
    section: Optional[str] = typer.Option(None, help="Students only; defaults to the configured section"),
):
    """Create a user directly in the database (bootstraps the first admin)."""
    if role not in ROLES:
        console.print(f"[red]Unknown role {role!r}; expected one of {', '.join(ROLES)}[/red]")
        raise typer.Exit(code=2)
    if role == ROLE_STUDENT and not student_id:
        console.print("[red]Students need --student-id[/red]")
        raise typer.Exit(code=2)
    if role == ROLE_FACULTY and not employee_id:
        console.print("[red]Faculty need --employee-id[/red]")
        raise typer.Exit(code=2)

    try:
        user = asyncio.run(
            _create_user(
                email=email.strip().lower(),
                password=password,
                first_name=first_name.strip(),
                last_name=last_name.strip(),
                role=role,
                student_id=student_id,
                employee_id=employee_id,
                section=section,
            )
        )
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    table = Table(title="User created")
    table.add_column("id")
    table.add_column("email")
    table.add_column("role")
    table.add_row(str(user.id), user.email, user.role)
    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
