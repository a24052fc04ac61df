"""Error taxonomy shared by services and routes.

Every error is an ``HTTPException`` so it can be raised from any layer and
still reach the client with the right status code. The application installs a
handler that renders them as ``{"error": <class name>, "detail": <message>}``.
"""

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class for errors reported to API clients."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Unexpected error"

    def __init__(self, detail: object = None) -> None:
        super().__init__(
            status_code=self.status_code,
            detail=self.default_detail if detail is None else detail,
        )

    @property
    def code(self) -> str:
        return type(self).__name__


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class DuplicateEmail(ValidationError):
    default_detail = "Email already registered"


class InvalidResetCode(ValidationError):
    default_detail = "Invalid or expired reset code"


class InvalidOperation(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Operation not allowed"


class UnsupportedFileType(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Unsupported file type"


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication required"


class InvalidCredentials(AuthenticationError):
    default_detail = "Invalid email or password"


class InvalidToken(AuthenticationError):
    default_detail = "Invalid or expired token"


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Forbidden"


class Forbidden(AuthorizationError):
    default_detail = "Administrator rights required"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class FileTooLarge(AppError):
    status_code = 413
    default_detail = "File too large"


class PersistenceError(AppError):
    default_detail = "Database error"


class UnexpectedError(AppError):
    pass
