"""
Shared pytest fixtures for the registrar test suite.

Strategy:
- Guard and domain tests: pure in-memory, fake clock, zero I/O.
- Repository tests: SQLAlchemy sessions replaced by mocks; the SQL text and
  bound parameters are asserted, no database is touched.
- API tests: FastAPI TestClient wired with in-memory fake repositories.
"""
import os
import tempfile

import pytest

# ---------------------------------------------------------------------------
# Ensure no real database or log directory is touched during the test run
# ---------------------------------------------------------------------------
os.environ.pop("DATABASE_URL", None)
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-not-for-production-123456")
os.environ.setdefault("ENV", "test")
os.environ["AUDIT_LOG_DIR"] = tempfile.mkdtemp(prefix="registrar_audit_")

from registrar.domain.account import Account, AccountKind
from registrar.domain.errors import CommandError, InternalError
from registrar.infrastructure.auth.login_guard import LoginAttemptGuard
from registrar.infrastructure.auth.password import hash_password


STUDENT_PASSWORD = "Correct-Horse-1"
INSTRUCTOR_PASSWORD = "Battery-Staple-2"

# bcrypt is deliberately slow; hash once per run.
_STUDENT_HASH = hash_password(STUDENT_PASSWORD)
_INSTRUCTOR_HASH = hash_password(INSTRUCTOR_PASSWORD)


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_student(account_id=1, email="alice@uni.edu", name="Alice Moreau") -> Account:
    return Account(account_id, email, name, AccountKind.STUDENT, _STUDENT_HASH)


def make_instructor(account_id=7, email="bob@uni.edu", name="Bob Okafor") -> Account:
    return Account(account_id, email, name, AccountKind.INSTRUCTOR, _INSTRUCTOR_HASH)


class FakeAccountRepository:
    """In-memory account store partitioned by kind."""

    def __init__(self, accounts=()):
        self._accounts = {}
        self.lookups = 0
        self.fail = False
        for account in accounts:
            self.add(account)

    def add(self, account: Account) -> None:
        self._accounts[(account.kind, account.email)] = account

    def find_by_email_and_kind(self, email, kind):
        self.lookups += 1
        if self.fail:
            raise InternalError()
        return self._accounts.get((kind, email.lower().strip()))

    def find_by_id(self, account_id, kind):
        for (k, _), account in self._accounts.items():
            if k == kind and account.id == account_id:
                return account
        return None


class FakeDashboardRepository:
    def __init__(self):
        self.students = {}
        self.instructors = {}
        self.fail = False

    def student_dashboard(self, student_id):
        if self.fail:
            raise InternalError()
        return self.students.get(student_id)

    def instructor_dashboard(self, instructor_id):
        if self.fail:
            raise InternalError()
        return self.instructors.get(instructor_id)


class FakeRecordsRepository:
    def __init__(self):
        self.grade_updates = []
        self.transcripts = {}
        self.error = None

    def update_grade(self, student_id, course_id, grade):
        if self.error:
            raise CommandError(self.error)
        self.grade_updates.append((student_id, course_id, grade))

    def generate_transcript(self, student_id):
        if self.error:
            raise CommandError(self.error)
        return self.transcripts.get(student_id, [])


# ---------------------------------------------------------------------------
# pytest fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def guard(clock):
    return LoginAttemptGuard(max_attempts=3, lockout_seconds=900, clock=clock)


@pytest.fixture
def accounts():
    return FakeAccountRepository([make_student(), make_instructor()])


@pytest.fixture
def dashboards():
    return FakeDashboardRepository()


@pytest.fixture
def records():
    return FakeRecordsRepository()


@pytest.fixture
def test_app(accounts, dashboards, records, guard):
    """FastAPI app wired with in-memory fakes and a fake-clock guard."""
    from fastapi import FastAPI
    from registrar.api.errors import register_error_handlers
    from registrar.api.routes.auth_routes import router as auth_router, init_auth_routes
    from registrar.api.routes.dashboard_routes import router as dashboard_router, init_dashboard_routes
    from registrar.api.routes.records_routes import router as records_router, init_records_routes

    app = FastAPI()
    register_error_handlers(app)

    init_auth_routes(accounts, guard=guard)
    init_dashboard_routes(dashboards)
    init_records_routes(records)

    app.include_router(auth_router)
    app.include_router(dashboard_router)
    app.include_router(records_router)
    return app


@pytest.fixture
def client(test_app):
    from fastapi.testclient import TestClient
    return TestClient(test_app)


@pytest.fixture
def instructor_headers():
    from registrar.infrastructure.auth.jwt_handler import create_access_token
    token = create_access_token(7, "bob@uni.edu", "instructor")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student_headers():
    from registrar.infrastructure.auth.jwt_handler import create_access_token
    token = create_access_token(1, "alice@uni.edu", "student")
    return {"Authorization": f"Bearer {token}"}
