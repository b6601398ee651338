"""Service-layer exceptions mapped to HTTP error responses.

Every error carries an HTTP status, a stable machine-readable code and a
human message. The API layer renders them as::

    {"error": <message>, "code": <code>, "details": <optional>}
"""

from typing import Any, Optional


class ServiceError(Exception):
    """Base class for errors that surface to API clients."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class ValidationError(ServiceError):
    """Malformed or incomplete input (400)."""

    status_code = 400
    code = "VALIDATION_ERROR"


class ConflictError(ServiceError):
    """Duplicate resource (409)."""

    status_code = 409
    code = "CONFLICT"


class AuthenticationError(ServiceError):
    """Bad credentials or bad token (401, some cases 403)."""

    status_code = 401
    code = "AUTHENTICATION_ERROR"


class AuthorizationError(ServiceError):
    """Authenticated but not allowed (403)."""

    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(ServiceError):
    """Requested resource does not exist (404)."""

    status_code = 404
    code = "NOT_FOUND"


class PersistenceError(ServiceError):
    """Storage-layer failure (500)."""

    status_code = 500
    code = "PERSISTENCE_ERROR"


class UnexpectedError(ServiceError):
    """Catch-all (500)."""

    status_code = 500
    code = "INTERNAL_ERROR"


# ---------------------------------------------------------------------------
# Named errors used by the session service and authorization gate
# ---------------------------------------------------------------------------

def email_taken(email: str) -> ConflictError:
    return ConflictError(
        "Email is already registered",
        code="EMAIL_TAKEN",
        details=f"The email {email} is already in use",
    )


def username_taken(username: str) -> ConflictError:
    return ConflictError(
        "Username is already taken",
        code="USERNAME_TAKEN",
        details=f"The username {username} is not available",
    )


def invalid_credentials() -> AuthenticationError:
    # Same message whether the user is unknown or the password is wrong
    return AuthenticationError("Invalid credentials", code="INVALID_CREDENTIALS")


def account_disabled() -> AuthenticationError:
    return AuthenticationError(
        "Account is disabled",
        code="ACCOUNT_DISABLED",
        status_code=403,
    )


def token_required() -> ValidationError:
    return ValidationError(
        "Refresh token required",
        code="TOKEN_REQUIRED",
        details="A valid refresh token must be provided",
    )


def invalid_refresh_token(details: Optional[str] = None) -> AuthenticationError:
    return AuthenticationError(
        "Invalid refresh token",
        code="INVALID_REFRESH_TOKEN",
        status_code=403,
        details=details,
    )


def refresh_token_expired() -> AuthenticationError:
    return AuthenticationError(
        "Refresh token expired",
        code="REFRESH_TOKEN_EXPIRED",
        status_code=403,
        details="The refresh token has expired, please log in again",
    )


def user_not_found(details: Optional[str] = None) -> NotFoundError:
    return NotFoundError("User not found", code="USER_NOT_FOUND", details=details)


def missing_auth_token() -> AuthenticationError:
    return AuthenticationError(
        "Unauthorized",
        code="MISSING_AUTH_TOKEN",
        details="Access token required",
    )


def invalid_token_format() -> AuthenticationError:
    return AuthenticationError(
        "Unauthorized",
        code="INVALID_TOKEN_FORMAT",
        details="Invalid token format. Use: Bearer <token>",
    )


def invalid_or_expired_token() -> AuthenticationError:
    return AuthenticationError(
        "Invalid token",
        code="INVALID_OR_EXPIRED_TOKEN",
        status_code=403,
        details="The access token is invalid or has expired",
    )


def admin_access_required() -> AuthorizationError:
    return AuthorizationError(
        "Forbidden",
        code="ADMIN_ACCESS_REQUIRED",
        details="Administrator privileges are required",
    )


def user_creation_error(details: Optional[str] = None) -> PersistenceError:
    return PersistenceError(
        "Error registering the user",
        code="USER_CREATION_ERROR",
        details=details,
    )


def token_persistence_error(details: Optional[str] = None) -> PersistenceError:
    return PersistenceError(
        "Error saving the authentication token",
        code="TOKEN_PERSISTENCE_ERROR",
        details=details,
    )


__all__ = [
    "ServiceError",
    "ValidationError",
    "ConflictError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "PersistenceError",
    "UnexpectedError",
]
