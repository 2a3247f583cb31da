"""Login flow: throttle, look up, verify, record the outcome."""
import logging

from registrar.domain.account import Account, AccountKind
from registrar.domain.errors import AuthenticationError, RateLimitError, ValidationError
from registrar.infrastructure.audit import try_log_event
from registrar.infrastructure.auth.password import CredentialVerifier, Verified

logger = logging.getLogger("registrar.auth")


class LoginService:
    """Authenticates students and instructors behind the login attempt guard.

    Every failed verification costs exactly one ``record_failure``; every
    success triggers exactly one ``record_success``. Store errors propagate
    as ``InternalError`` and leave the guard untouched.
    """

    def __init__(self, account_repo, guard, verifier: CredentialVerifier | None = None, audit=try_log_event):
        self._accounts = account_repo
        self._guard = guard
        self._verifier = verifier or CredentialVerifier()
        self._audit = audit

    def login(self, identifier: str, email: str, password: str, user_type: str) -> Account:
        with self._guard.attempt(identifier):
            return self._login(identifier, email, password, user_type)

    def _login(self, identifier: str, email: str, password: str, user_type: str) -> Account:
        decision = self._guard.check_and_consume(identifier)
        if not decision.allowed:
            self._audit("login_blocked", None, {"client": identifier, "email": email})
            raise RateLimitError(retry_after=decision.retry_after)

        kind = AccountKind.parse(user_type)
        if kind is None:
            raise ValidationError("Invalid user type")

        account = self._accounts.find_by_email_and_kind(email, kind)
        if account is None:
            self._fail(identifier, email, kind)

        result = self._verifier.verify(account, password)
        if not isinstance(result, Verified):
            self._fail(identifier, email, kind)

        self._guard.record_success(identifier)
        self._audit("login_succeeded", str(account.id), {"client": identifier, "kind": kind.value})
        return account

    def _fail(self, identifier: str, email: str, kind: AccountKind):
        count = self._guard.record_failure(identifier)
        logger.info("Failed %s login from %s (%d consecutive)", kind.value, identifier, count)
        self._audit("login_failed", None, {"client": identifier, "email": email, "kind": kind.value})
        raise AuthenticationError()
