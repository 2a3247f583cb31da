"""PostgreSQL-backed account lookup for students and instructors."""
import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from registrar.domain.account import Account, AccountKind
from registrar.domain.errors import InternalError

logger = logging.getLogger("registrar.db")

# One fixed template per account kind. Only values are bound; table and
# column names never come from the request.
_BY_EMAIL = {
    AccountKind.STUDENT: text(
        "SELECT student_id AS id, email, password_hash, "
        "CONCAT(first_name, ' ', last_name) AS name "
        "FROM students WHERE LOWER(email) = :email"
    ),
    AccountKind.INSTRUCTOR: text(
        "SELECT instructor_id AS id, email, password_hash, "
        "CONCAT(first_name, ' ', last_name) AS name "
        "FROM instructors WHERE LOWER(email) = :email"
    ),
}

_BY_ID = {
    AccountKind.STUDENT: text(
        "SELECT student_id AS id, email, password_hash, "
        "CONCAT(first_name, ' ', last_name) AS name "
        "FROM students WHERE student_id = :account_id"
    ),
    AccountKind.INSTRUCTOR: text(
        "SELECT instructor_id AS id, email, password_hash, "
        "CONCAT(first_name, ' ', last_name) AS name "
        "FROM instructors WHERE instructor_id = :account_id"
    ),
}


class PgAccountRepository:
    """Account store partitioned by kind (``students`` / ``instructors`` tables)."""

    def __init__(self, session_factory):
        self._sf = session_factory

    def find_by_email_and_kind(self, email: str, kind: AccountKind) -> Optional[Account]:
        target = email.lower().strip()
        return self._fetch_one(_BY_EMAIL[kind], {"email": target}, kind)

    def find_by_id(self, account_id: int, kind: AccountKind) -> Optional[Account]:
        return self._fetch_one(_BY_ID[kind], {"account_id": account_id}, kind)

    def _fetch_one(self, stmt, params: dict, kind: AccountKind) -> Optional[Account]:
        try:
            with self._sf() as session:
                row = session.execute(stmt, params).mappings().first()
        except SQLAlchemyError as exc:
            logger.error("Account lookup failed (%s): %s", kind.value, exc)
            raise InternalError() from exc
        return self._to_domain(row, kind) if row else None

    @staticmethod
    def _to_domain(row, kind: AccountKind) -> Account:
        return Account(
            account_id=row["id"],
            email=row["email"],
            name=row["name"],
            kind=kind,
            password_hash=row["password_hash"] or "",
        )
