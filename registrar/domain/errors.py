"""Error taxonomy shared by services and routes.

Every error carries the HTTP status it maps to; ``main`` renders them as
``{"success": false, "message": ...}``.
"""


class RegistrarError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(RegistrarError):
    status_code = 400
    default_message = "Invalid request"


class AuthenticationError(RegistrarError):
    status_code = 401
    default_message = "Invalid email or password"


class NotFoundError(RegistrarError):
    status_code = 404
    default_message = "Not found"


class RateLimitError(RegistrarError):
    status_code = 429
    default_message = "Too many login attempts. Please try again later."

    def __init__(self, message: str | None = None, retry_after: int = 0):
        super().__init__(message)
        self.retry_after = retry_after


class CommandError(RegistrarError):
    """A stored-procedure call was rejected; the message comes from the database."""

    status_code = 400
    default_message = "Command failed"


class InternalError(RegistrarError):
    status_code = 500
