"""Account entity -- students and instructors who can sign in."""
from enum import Enum


class AccountKind(str, Enum):
    STUDENT = "student"
    INSTRUCTOR = "instructor"

    @staticmethod
    def parse(value: str | None) -> "AccountKind | None":
        """Return the kind for a raw ``userType`` value, or None if unknown."""
        try:
            return AccountKind(value)
        except ValueError:
            return None


class Account:
    """A student or instructor row reduced to what authentication needs."""

    def __init__(
        self,
        account_id: int,
        email: str,
        name: str,
        kind: AccountKind,
        password_hash: str,
    ):
        self._id = account_id
        self._email = email.lower().strip()
        self._name = name
        self._kind = kind
        self._password_hash = password_hash

    @property
    def id(self) -> int:
        return self._id

    @property
    def email(self) -> str:
        return self._email

    @property
    def name(self) -> str:
        return self._name

    @property
    def kind(self) -> AccountKind:
        return self._kind

    @property
    def password_hash(self) -> str:
        return self._password_hash

    def to_public_dict(self) -> dict:
        """Safe representation without credentials."""
        return {
            "id": self._id,
            "email": self._email,
            "name": self._name,
            "userType": self._kind.value,
        }
