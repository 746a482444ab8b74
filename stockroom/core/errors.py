"""Application error taxonomy. Each error maps to one HTTP status code."""


class AppError(Exception):
    """Base class for errors rendered as a JSON envelope by the API."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        errors: list[str] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.errors = errors
        self.cause = cause
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input."""

    status_code = 400
    default_message = "Validation error"


class AuthenticationError(AppError):
    """Bad credentials or bad bearer token."""

    status_code = 401
    default_message = "Authentication required"


class AuthorizationError(AppError):
    """Authenticated caller lacks the required role."""

    status_code = 403
    default_message = "Access denied"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class ConflictError(AppError):
    """Unique constraint violated (duplicate email)."""

    status_code = 409
    default_message = "User already exists with this email"


class InternalError(AppError):
    """Unexpected failure; the message sent to clients stays generic."""

    status_code = 500


class WeakCredential(ValidationError):
    default_message = "Password must be at least 6 characters long"


class HashingError(InternalError):
    """bcrypt failed internally (e.g. malformed stored hash)."""

    default_message = "Error comparing passwords"


class InvalidToken(AuthenticationError):
    """Bad signature, malformed token, or missing claims."""

    default_message = "Invalid or expired token"


class ExpiredToken(AuthenticationError):
    default_message = "Invalid or expired token"
