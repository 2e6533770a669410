"""Service error hierarchy and user-facing error messages.

Services raise these exceptions instead of returning `(data, error)`
pairs; the FastAPI app converts them into `{"detail", "code"}` JSON
responses with the matching status code.
"""

from typing import Optional


class ServiceError(Exception):
    """Base exception carrying a human-readable message and HTTP status."""

    status_code = 400
    code = "service_error"

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code}


class ValidationFailed(ServiceError):
    status_code = 400
    code = "validation_error"


class AuthError(ServiceError):
    status_code = 401
    code = "auth_error"


class PermissionDenied(ServiceError):
    status_code = 403
    code = "forbidden"


class NotFoundError(ServiceError):
    status_code = 404
    code = "not_found"


class ConflictError(ServiceError):
    status_code = 409
    code = "conflict"


AUTH_ERROR_MESSAGES = {
    "invalid_credentials": "Invalid email or password",
    "email_not_confirmed": "Please verify your email address before signing in",
    "signup_disabled": "New registrations are currently disabled",
    "user_not_found": "No account found with this email address",
    "weak_password": "Password is too weak. Please choose a stronger password",
    "email_address_invalid": "Please enter a valid email address",
    "invalid_email": "Please enter a valid email address",
    "password_too_short": "Password must be at least 8 characters long",
    "email_already_in_use": "An account with this email already exists",
    "session_not_found": "Your session has expired. Please sign in again",
    "network_error": "Network error. Please check your connection and try again",
    "invalid_otp": "The verification code is invalid or has expired",
}

DEFAULT_ERROR_MESSAGE = "An unexpected error occurred"


def error_message(error) -> str:
    """Map an error code, exception or message to a user-facing string.

    Known codes resolve through `AUTH_ERROR_MESSAGES`; service errors
    resolve by their `code` first and fall back to their message. Any
    other exception yields its message, or the generic default.
    """
    if error is None:
        return DEFAULT_ERROR_MESSAGE
    if isinstance(error, str):
        return AUTH_ERROR_MESSAGES.get(error, error) or DEFAULT_ERROR_MESSAGE
    code = getattr(error, "code", None)
    if code and code in AUTH_ERROR_MESSAGES:
        return AUTH_ERROR_MESSAGES[code]
    message = getattr(error, "message", None) or str(error)
    return message or DEFAULT_ERROR_MESSAGE
