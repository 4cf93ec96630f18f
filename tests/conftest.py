"""
Pytest fixtures and configuration for the test suite.

Mocking strategy:
- No running PostgreSQL, MongoDB or AI endpoint is needed
- Route modules get a FakeSession in place of get_db_session/execute_raw_sql
- Auth is replaced through app.dependency_overrides on get_current_user
"""

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient


class FakeResult:
    """Enough of a SQLAlchemy Result for the routes: tuples, dict rows and rowcount."""

    def __init__(self, rows: Optional[List[Any]] = None, rowcount: Optional[int] = None):
        self.rows = list(rows or [])
        self.rowcount = len(self.rows) if rowcount is None else rowcount

    def fetchone(self):
        return self.rows[0] if self.rows else None

    def fetchall(self):
        return list(self.rows)


class FakeSession:
    """
    Scripted database.

    ``on(fragment, rows)`` answers every statement containing ``fragment``
    (first match wins); unmatched statements return no rows.
    Every executed statement is kept in ``calls`` as (sql, params).
    """

    def __init__(self):
        self.rules: List[tuple] = []
        self.calls: List[tuple] = []
        self.committed = False

    def on(self, fragment: str, rows=None, rowcount: Optional[int] = None) -> "FakeSession":
        self.rules.append((fragment, rows, rowcount))
        return self

    def execute(self, statement, params: Optional[Dict[str, Any]] = None) -> FakeResult:
        sql = str(statement)
        self.calls.append((sql, params or {}))
        for fragment, rows, rowcount in self.rules:
            if fragment in sql:
                return FakeResult(rows, rowcount)
        return FakeResult([])

    def executed(self, fragment: str) -> List[Dict[str, Any]]:
        """Params of every statement containing ``fragment``."""
        return [params for sql, params in self.calls if fragment in sql]

    @contextmanager
    def session(self):
        yield self
        self.committed = True

    def raw_sql(self, sql: str, params: dict = None) -> list:
        return self.execute(sql, params).fetchall()


@pytest.fixture
def fake_db(monkeypatch):
    """
    Install one FakeSession into the given route modules.

    Usage:
        db = fake_db(job_routes, company_service)
        db.on("FROM jobs", [("published",)])
    """
    db = FakeSession()

    def install(*modules):
        for module in modules:
            if hasattr(module, "get_db_session"):
                monkeypatch.setattr(module, "get_db_session", db.session)
            if hasattr(module, "execute_raw_sql"):
                monkeypatch.setattr(module, "execute_raw_sql", db.raw_sql)
        return db

    return install


def make_user(role: str = "client", user_id: int = 1, **extra) -> dict:
    user = {
        "user_id": user_id,
        "email": f"{role}@example.com",
        "role": role,
        "first_name": role.title(),
        "last_name": "Tester",
    }
    user.update(extra)
    return user


@pytest.fixture
def app():
    from simplifyhr.main import app as fastapi_app

    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def login_as(app):
    """Override authentication: ``login_as("admin")`` or ``login_as("candidate", candidate_id=7)``."""
    from simplifyhr.core.auth import get_current_candidate, get_current_user

    def _login(role: str = "client", user_id: int = 1, **extra) -> dict:
        user = make_user(role, user_id, **extra)
        app.dependency_overrides[get_current_user] = lambda: user
        if role == "candidate":
            app.dependency_overrides[get_current_candidate] = lambda: user
        return user

    return _login


@pytest.fixture
def now():
    return datetime(2024, 3, 4, 10, 0, 0)
