"""Exception handlers rendering every failure as ``{"success": false, "message": ...}``."""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from registrar.domain.errors import RateLimitError, RegistrarError

logger = logging.getLogger("registrar.api")


def _failure(message: str, status_code: int, headers: dict | None = None) -> JSONResponse:
    return JSONResponse({"success": False, "message": message}, status_code=status_code, headers=headers)


def _describe(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "path", "query"))
    return f"Invalid request: {field} {first.get('msg', '')}".strip() if field else "Invalid request"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RegistrarError)
    async def registrar_error_handler(request: Request, exc: RegistrarError):
        headers = None
        if isinstance(exc, RateLimitError) and exc.retry_after:
            headers = {"Retry-After": str(exc.retry_after)}
        return _failure(exc.message, exc.status_code, headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _failure(_describe(exc), 400)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _failure(str(exc.detail), exc.status_code, getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _failure("Internal server error", 500)
