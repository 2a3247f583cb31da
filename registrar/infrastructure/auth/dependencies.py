"""FastAPI authentication dependencies (Bearer JWT)."""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from registrar.domain.account import AccountKind
from registrar.infrastructure.auth.jwt_handler import verify_token

_security = HTTPBearer(auto_error=False)


def get_current_account(
    credentials: HTTPAuthorizationCredentials = Depends(_security),
) -> dict:
    """Extract and validate the JWT from the Authorization header.

    Returns the decoded payload dict with ``sub`` (account id), ``email``
    and ``kind``.  Raises 401 on missing / invalid / expired tokens.
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_token(credentials.credentials)
    if not payload or payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return payload


def require_instructor(account: dict = Depends(get_current_account)) -> dict:
    """Administrative endpoints are reserved to instructors."""
    if account.get("kind") != AccountKind.INSTRUCTOR.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Instructor access required.",
        )
    return account
