import asyncio

from sqlalchemy import select
from typer.testing import CliRunner

from flexpro.auth.passwords import verify_password
from flexpro.cli import app
from flexpro.db.models import User

from .conftest import fetch_all, reset_schema

runner = CliRunner()


def setup_function():
    asyncio.run(reset_schema())


def users():
    return asyncio.run(fetch_all(select(User)))


def test_create_admin():
    result = runner.invoke(
        app,
        ["create-user", "--email", "Root@FlexPro.edu", "--password", "changeme1",
         "--first-name", "Site", "--last-name", "Admin"],
    )
    assert result.exit_code == 0, result.output
    assert "User created" in result.output

    [user] = users()
    assert user.email == "root@flexpro.edu"
    assert user.role == "admin"
    assert user.section is None
    assert verify_password("changeme1", user.password_hash)


def test_create_student_defaults_section():
    result = runner.invoke(
        app,
        ["create-user", "--email", "s@flexpro.edu", "--password", "changeme1", "--first-name", "Sara",
         "--last-name", "Malik", "--role", "student", "--student-id", "23F-0001"],
    )
    assert result.exit_code == 0, result.output
    [user] = users()
    assert user.student_id == "23F-0001"
    assert user.section == "A"


def test_student_needs_student_id():
    result = runner.invoke(
        app,
        ["create-user", "--email", "s@flexpro.edu", "--password", "changeme1", "--first-name", "Sara",
         "--last-name", "Malik", "--role", "student"],
    )
    assert result.exit_code == 2
    assert users() == []


def test_unknown_role():
    result = runner.invoke(
        app,
        ["create-user", "--email", "x@flexpro.edu", "--password", "changeme1", "--first-name", "X",
         "--last-name", "Y", "--role", "janitor"],
    )
    assert result.exit_code == 2


def test_duplicate_email_exits_1():
    args = ["create-user", "--email", "dup@flexpro.edu", "--password", "changeme1",
            "--first-name", "A", "--last-name", "B"]
    assert runner.invoke(app, args).exit_code == 0
    result = runner.invoke(app, args)
    assert result.exit_code == 1
    assert len(users()) == 1
