from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status
from fastapi.responses import JSONResponse


class ApiError(HTTPException):
    """
    Base error for the account service.
    Subclasses fix the status code; routers and services raise them directly.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Something went wrong"

    def __init__(
        self,
        message: str | None = None,
        *,
        errors: list[Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(status_code=type(self).status_code, detail=self.message, headers=headers)


class ValidationError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class Conflict(ApiError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "User with username or email already exists"


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "User not found"


class InvalidCredentials(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid user credentials"


class TokenInvalid(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid token"


class TokenExpired(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Token expired"


class TokenStale(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Refresh token is expired or used"


class UploadFailed(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "File upload failed"


class StoreUnavailable(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Account store unavailable"


class InternalError(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Something went wrong"


def error_body(status_code: int, message: str, errors: list[Any] | None = None) -> dict[str, Any]:
    return {
        "statusCode": status_code,
        "message": message,
        "success": False,
        "errors": errors or [],
    }


def api_error_response(exc: HTTPException) -> JSONResponse:
    """Render any HTTPException (ApiError included) as the error envelope."""
    message = getattr(exc, "message", None) or str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, message, getattr(exc, "errors", None)),
        headers=getattr(exc, "headers", None),
    )
