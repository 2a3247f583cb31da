"""Tests for the Account entity, account kinds and the error taxonomy."""
import pytest

from registrar.domain.account import Account, AccountKind
from registrar.domain import errors


class TestAccountKind:
    @pytest.mark.parametrize("raw, kind", [
        ("student", AccountKind.STUDENT),
        ("instructor", AccountKind.INSTRUCTOR),
    ])
    def test_parse_known(self, raw, kind):
        assert AccountKind.parse(raw) is kind

    @pytest.mark.parametrize("raw", ["unknown", "Student", "", None, "admin"])
    def test_parse_unknown(self, raw):
        assert AccountKind.parse(raw) is None


class TestAccount:
    def test_email_normalised(self):
        account = Account(1, "  Alice@Uni.EDU ", "Alice Moreau", AccountKind.STUDENT, "$2b$hash")
        assert account.email == "alice@uni.edu"

    def test_public_dict_has_no_credentials(self):
        account = Account(7, "bob@uni.edu", "Bob Okafor", AccountKind.INSTRUCTOR, "$2b$hash")
        public = account.to_public_dict()
        assert public == {"id": 7, "email": "bob@uni.edu", "name": "Bob Okafor", "userType": "instructor"}
        assert "$2b$hash" not in public.values()


class TestErrors:
    @pytest.mark.parametrize("cls, status", [
        (errors.ValidationError, 400),
        (errors.AuthenticationError, 401),
        (errors.NotFoundError, 404),
        (errors.RateLimitError, 429),
        (errors.CommandError, 400),
        (errors.InternalError, 500),
    ])
    def test_status_codes(self, cls, status):
        assert cls().status_code == status

    def test_default_messages(self):
        assert errors.AuthenticationError().message == "Invalid email or password"
        assert errors.InternalError().message == "Internal server error"
        assert errors.RateLimitError().message.startswith("Too many login attempts")

    def test_custom_message(self):
        assert errors.ValidationError("Invalid user type").message == "Invalid user type"

    def test_rate_limit_carries_retry_after(self):
        assert errors.RateLimitError(retry_after=42).retry_after == 42
