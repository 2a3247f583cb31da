"""Password hashing (bcrypt) and credential verification."""
from dataclasses import dataclass

import bcrypt

from registrar.domain.account import Account

# bcrypt reads at most 72 bytes of a secret and bcrypt>=5 raises on longer
# input. Hashing and checking both truncate.
BCRYPT_MAX_BYTES = 72


def _secret(plain: str) -> bytes:
    return plain.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(plain: str) -> str:
    """Hash a plain-text password with bcrypt."""
    return bcrypt.hashpw(_secret(plain), bcrypt.gensalt(rounds=12)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a plain-text password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(_secret(plain), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def is_bcrypt_hash(hashed: str | None) -> bool:
    """Return True if the hash string looks like a bcrypt hash."""
    return bool(hashed) and hashed.startswith(("$2b$", "$2a$", "$2y$"))


@dataclass(frozen=True)
class Verified:
    account: Account


@dataclass(frozen=True)
class Rejected:
    reason: str = "invalid_credentials"


class CredentialVerifier:
    """Checks a submitted password against the account's stored salted hash."""

    def verify(self, account: Account, password: str) -> Verified | Rejected:
        if not is_bcrypt_hash(account.password_hash):
            return Rejected("unsupported_hash")
        if not verify_password(password, account.password_hash):
            return Rejected()
        return Verified(account)
