"""Database engine and session factory.

The schema (tables, the ``instructor_course_students`` view and the
grade/transcript stored procedures) is owned by the database; this module
only connects to it.

Environment variables:
  DATABASE_URL  -- full connection string; takes precedence when set
  DB_USER, DB_PASSWORD, DB_HOST, DB_PORT, DB_NAME -- used to build the URL otherwise
"""
import logging
import os
import re
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

logger = logging.getLogger("registrar.db")

POOL_SIZE = int(os.environ.get("DB_POOL_SIZE", "5"))
MAX_OVERFLOW = int(os.environ.get("DB_MAX_OVERFLOW", "5"))
POOL_TIMEOUT = int(os.environ.get("DB_POOL_TIMEOUT", "15"))

_engine = None
_SessionLocal = None

# Matches a postgres(ql):// URL anywhere inside a string.
_PG_URL_RE = re.compile(r"(postgres(?:ql)?(?:\+\w+)?://\S+)")


def _resolve_database_url(env_var: str = "DATABASE_URL") -> str:
    """Read a database URL from environment and return a clean SQLAlchemy URL.

    Handles robustly:
    - Leading/trailing whitespace or newlines from copy-paste.
    - Literal surrounding quotes pasted in dashboards.
    - Full ``psql`` command pasted instead of just the URL.
    - ``postgres://`` scheme that SQLAlchemy rejects (needs ``postgresql://``).
    """
    raw = os.environ.get(env_var, "").strip()

    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in ('"', "'"):
        raw = raw[1:-1].strip()

    match = _PG_URL_RE.search(raw)
    url = match.group(1) if match else raw
    url = url.rstrip("'\"").strip()

    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)

    return url


def _url_from_parts() -> str:
    """Build a URL from the discrete DB_* variables (local development defaults)."""
    return URL.create(
        "postgresql+psycopg2",
        username=os.environ.get("DB_USER", "postgres"),
        password=os.environ.get("DB_PASSWORD", "password"),
        host=os.environ.get("DB_HOST", "localhost"),
        port=int(os.environ.get("DB_PORT", "5432")),
        database=os.environ.get("DB_NAME", "student_system"),
    ).render_as_string(hide_password=False)


def database_url() -> str:
    return _resolve_database_url("DATABASE_URL") or _url_from_parts()


def _mask(url: str) -> str:
    if "@" not in url:
        return "<no-host>"
    return url.split("@")[-1].split("?")[0]


def _build_engine(url: str):
    """Create a SQLAlchemy engine for the given URL, logging the masked host."""
    logger.info("Initialising database engine -> %s", _mask(url))
    return create_engine(
        url,
        pool_size=POOL_SIZE,
        max_overflow=MAX_OVERFLOW,
        pool_timeout=POOL_TIMEOUT,
        pool_recycle=1800,
        pool_pre_ping=True,
        echo=False,
    )


def init_engine(url: str | None = None) -> None:
    """Create the engine and sessionmaker. Does not open a connection."""
    global _engine, _SessionLocal
    _engine = _build_engine(url or database_url())
    _SessionLocal = sessionmaker(bind=_engine, expire_on_commit=False)


def get_engine():
    """Return the active SQLAlchemy engine (may be None before init)."""
    return _engine


def check_health() -> bool:
    """Lightweight connectivity probe."""
    if _engine is None:
        return False
    try:
        with _engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as exc:
        logger.warning("Database health check failed: %s", exc)
        return False


class ManagedSessionFactory:
    """Callable passed to repositories.

    Behaves like a sessionmaker used as a context manager, but always rolls
    back on error and closes the session:

        with session_factory() as session:
            ...
    """

    def __call__(self):
        return self._managed_session()

    @contextmanager
    def _managed_session(self):
        if _SessionLocal is None:
            raise RuntimeError("Database not initialised. Call init_engine() first.")
        session = _SessionLocal()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


# Singleton -- import and pass to all PG repositories.
session_factory = ManagedSessionFactory()
