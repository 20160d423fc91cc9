"""Application error taxonomy and the FastAPI handlers that render it.

Every failure leaves the API as ``{"error": {"code", "message", "details"?}}``.
Raise errors through the constructor helpers below rather than building
``AppError`` by hand.
"""

import logging
from enum import Enum
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from timetrack.models.time_entry import USER_DATE_CONSTRAINT
from timetrack.models.user import EMAIL_CONSTRAINT

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Closed set of error codes exposed by the API."""

    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"
    INTERNAL = "INTERNAL"


STATUS_BY_CODE = {
    ErrorCode.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.TOO_MANY_REQUESTS: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorCode.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

CODE_BY_STATUS = {value: key for key, value in STATUS_BY_CODE.items()}

# Constraint name -> (code, client message)
CONSTRAINT_ERRORS: dict[str, tuple[ErrorCode, str]] = {
    USER_DATE_CONSTRAINT: (ErrorCode.CONFLICT, "Latest entry exists on this date"),
    "uq_subjects_user_name": (ErrorCode.CONFLICT, "subject name already exists"),
    EMAIL_CONSTRAINT: (ErrorCode.CONFLICT, "User with this email already exists"),
}


class AppError(Exception):
    """An expected failure with a stable code, a client-safe message and optional details."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details
        self.headers = headers

    @property
    def status_code(self) -> int:
        return STATUS_BY_CODE[self.code]

    def __repr__(self) -> str:
        return f"AppError({self.code.value}, {self.message!r})"


def bad_request(message: str, details: dict[str, Any] | None = None) -> AppError:
    return AppError(ErrorCode.BAD_REQUEST, message, details)


def unauthorized(message: str) -> AppError:
    return AppError(ErrorCode.UNAUTHORIZED, message, headers={"WWW-Authenticate": "Bearer"})


def forbidden(message: str) -> AppError:
    return AppError(ErrorCode.FORBIDDEN, message)


def not_found(message: str) -> AppError:
    return AppError(ErrorCode.NOT_FOUND, message)


def conflict(message: str, details: dict[str, Any] | None = None) -> AppError:
    return AppError(ErrorCode.CONFLICT, message, details)


def too_many_requests(message: str, retry_after: int) -> AppError:
    return AppError(
        ErrorCode.TOO_MANY_REQUESTS, message, headers={"Retry-After": str(retry_after)}
    )


def internal(message: str = "Internal server error") -> AppError:
    return AppError(ErrorCode.INTERNAL, message)


class ErrorEnvelope(JSONResponse):
    """JSON response carrying the error envelope."""

    def __init__(
        self,
        *,
        status_code: int,
        code: ErrorCode,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"code": code.value, "message": message}
        if details is not None:
            payload["details"] = details
        super().__init__(
            jsonable_encoder({"error": payload}), status_code=status_code, headers=headers
        )


def validation_fields(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Flatten pydantic errors into ``{path, message}`` pairs without the location prefix."""
    fields = []
    for error in errors:
        loc = list(error.get("loc", ()))
        if loc and loc[0] in ("body", "query", "path", "header"):
            loc = loc[1:]
        fields.append({"path": ".".join(str(part) for part in loc), "message": error["msg"]})
    return fields


def constraint_name(exc: IntegrityError) -> str | None:
    """Best-effort extraction of the violated constraint's name."""
    diag = getattr(exc.orig, "diag", None)
    name = getattr(diag, "constraint_name", None)
    if name:
        return name
    text = str(exc.orig)
    for known in CONSTRAINT_ERRORS:
        if known in text:
            return known
    # SQLite reports the columns instead of the constraint name
    if "time_entries.user_id, time_entries.date" in text:
        return USER_DATE_CONSTRAINT
    if "users.email" in text:
        return EMAIL_CONSTRAINT
    return None


async def app_error_handler(request: Request, exc: AppError):
    return ErrorEnvelope(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
        headers=exc.headers,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    fields = validation_fields(exc.errors())
    paths = ", ".join(field["path"] for field in fields if field["path"])
    message = f"Validation failed for fields: {paths}" if paths else "Validation failed"
    return ErrorEnvelope(
        status_code=status.HTTP_400_BAD_REQUEST,
        code=ErrorCode.BAD_REQUEST,
        message=message,
        details={"fields": fields},
    )


async def integrity_error_handler(request: Request, exc: IntegrityError):
    name = constraint_name(exc)
    if name in CONSTRAINT_ERRORS:
        code, message = CONSTRAINT_ERRORS[name]
        return ErrorEnvelope(status_code=STATUS_BY_CODE[code], code=code, message=message)
    if "foreign key" in str(exc.orig).lower():
        return ErrorEnvelope(
            status_code=status.HTTP_400_BAD_REQUEST,
            code=ErrorCode.BAD_REQUEST,
            message="Referenced record does not exist",
        )
    logger.error(
        "Unmapped integrity error on %s %s: %s", request.method, request.url.path, exc.orig
    )
    return ErrorEnvelope(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code=ErrorCode.INTERNAL,
        message="Internal server error",
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    code = CODE_BY_STATUS.get(exc.status_code)
    if code is None:
        code = ErrorCode.BAD_REQUEST if exc.status_code < 500 else ErrorCode.INTERNAL
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = f"Route {request.method} {request.url.path} not found"
    else:
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return ErrorEnvelope(
        status_code=exc.status_code,
        code=code,
        message=message,
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return ErrorEnvelope(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code=ErrorCode.INTERNAL,
        message="Internal server error",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error envelope handlers on ``app``."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
