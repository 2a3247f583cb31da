"""Authentication API routes -- login and profile."""
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from registrar.application.login_service import LoginService
from registrar.domain.account import AccountKind
from registrar.domain.errors import NotFoundError
from registrar.infrastructure.auth.client import client_identifier
from registrar.infrastructure.auth.dependencies import get_current_account
from registrar.infrastructure.auth.jwt_handler import create_access_token
from registrar.infrastructure.auth.login_guard import login_guard


router = APIRouter(prefix="/api", tags=["auth"])

_account_repo = None
_login_service = None


def init_auth_routes(account_repo, guard=None, verifier=None):
    global _account_repo, _login_service
    _account_repo = account_repo
    _login_service = LoginService(
        account_repo, guard if guard is not None else login_guard, verifier=verifier
    )


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)
    user_type: str = Field(..., alias="userType")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/login")
def api_login(req: LoginRequest, request: Request):
    """Authenticate a student or instructor. Throttled per client IP."""
    account = _login_service.login(
        client_identifier(request), req.email, req.password, req.user_type
    )
    access_token = create_access_token(account.id, account.email, account.kind.value)
    return {
        "success": True,
        "message": "Login successful",
        "user": account.to_public_dict(),
        "access_token": access_token,
        "token_type": "bearer",
    }


@router.get("/me")
def api_me(current: dict = Depends(get_current_account)):
    """Return the profile of the token bearer."""
    kind = AccountKind.parse(current.get("kind"))
    try:
        account_id = int(current["sub"])
    except (TypeError, ValueError):
        account_id = None
    account = _account_repo.find_by_id(account_id, kind) if kind and account_id is not None else None
    if account is None:
        raise NotFoundError("Account not found")
    return {"success": True, "user": account.to_public_dict()}
