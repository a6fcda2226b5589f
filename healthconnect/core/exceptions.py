from typing import Any, Optional

from fastapi import HTTPException, status


class ApiError(HTTPException):
    """
    Base for errors raised by the consultation workflow.

    The ``detail`` is always a dict shaped like
    ``{"error": ..., "message": ..., "currentStatus": ..., "targetStatus": ...}``
    with absent keys dropped; ``main.py`` renders it as the response body.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_error: str = "Internal server error"

    def __init__(
        self,
        error: Optional[str] = None,
        message: Optional[str] = None,
        current_status: Optional[str] = None,
        target_status: Optional[str] = None,
        headers: Optional[dict] = None,
        **extra: Any,
    ):
        body = {"error": error or self.default_error}
        if message:
            body["message"] = message
        if current_status is not None:
            body["currentStatus"] = str(current_status)
        if target_status is not None:
            body["targetStatus"] = str(target_status)
        body.update({key: value for key, value in extra.items() if value is not None})
        super().__init__(status_code=self.status_code, detail=body, headers=headers)

    @property
    def error(self) -> str:
        return self.detail["error"]

    @property
    def message(self) -> Optional[str]:
        return self.detail.get("message")


class AuthenticationError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_error = "Unauthorized"


class AuthorizationError(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    default_error = "Forbidden"


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_error = "Not found"


class ValidationError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_error = "Validation error"


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT
    default_error = "Consultation was modified by another request"


class StorageError(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_error = "Internal server error"
