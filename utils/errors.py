from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger()

ABOUT_BLANK = "about:blank"


class ErrorKind(str, Enum):
    INVALID_QUALITY = "invalid_quality"
    VALIDATION = "validation"
    UNKNOWN_OWNER = "unknown_owner"
    UNAUTHENTICATED = "unauthenticated"
    CARD_NOT_FOUND = "card_not_found"
    TAG_NOT_FOUND = "tag_not_found"
    FORBIDDEN = "forbidden"
    ALREADY_EXISTS = "already_exists"
    CONFLICT = "conflict"
    TRANSIENT = "transient"


# kind -> (HTTP status, ProblemDetail title)
ERROR_RESPONSES = {
    ErrorKind.INVALID_QUALITY: (status.HTTP_400_BAD_REQUEST, "Bad Request"),
    ErrorKind.VALIDATION: (status.HTTP_400_BAD_REQUEST, "Bad Request"),
    ErrorKind.UNKNOWN_OWNER: (status.HTTP_401_UNAUTHORIZED, "Unauthorized"),
    ErrorKind.UNAUTHENTICATED: (status.HTTP_401_UNAUTHORIZED, "Unauthorized"),
    ErrorKind.CARD_NOT_FOUND: (status.HTTP_404_NOT_FOUND, "Card Not Found"),
    ErrorKind.TAG_NOT_FOUND: (status.HTTP_404_NOT_FOUND, "Tag Not Found"),
    ErrorKind.FORBIDDEN: (status.HTTP_403_FORBIDDEN, "Forbidden"),
    ErrorKind.ALREADY_EXISTS: (status.HTTP_409_CONFLICT, "Already Exists"),
    ErrorKind.CONFLICT: (status.HTTP_409_CONFLICT, "Conflict"),
    ErrorKind.TRANSIENT: (status.HTTP_503_SERVICE_UNAVAILABLE, "Service Unavailable"),
}


class AppError(Exception):
    """Base class for every error with a defined surface meaning."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidQualityError(AppError, ValueError):
    kind = ErrorKind.INVALID_QUALITY

    def __init__(self, quality: object):
        super().__init__(f"Quality must be an integer between 0 and 5, got {quality!r}")
        self.quality = quality


class ValidationFailedError(AppError, ValueError):
    kind = ErrorKind.VALIDATION


class UnknownOwnerError(AppError):
    kind = ErrorKind.UNKNOWN_OWNER

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class AuthenticationError(AppError):
    kind = ErrorKind.UNAUTHENTICATED

    def __init__(self, message: str = "Invalid or missing credentials"):
        super().__init__(message)


class CardNotFoundError(AppError):
    kind = ErrorKind.CARD_NOT_FOUND

    def __init__(self, card_id: int):
        super().__init__(f"Card not found with id: {card_id}")
        self.card_id = card_id


class TagNotFoundError(AppError):
    kind = ErrorKind.TAG_NOT_FOUND

    def __init__(self, tag_id: int):
        super().__init__(f"Tag not found with id: {tag_id}")
        self.tag_id = tag_id


class ForbiddenError(AppError):
    kind = ErrorKind.FORBIDDEN

    def __init__(self, message: str = "Unauthorized access to card"):
        super().__init__(message)


class AlreadyExistsError(AppError):
    kind = ErrorKind.ALREADY_EXISTS


class ConflictError(AppError):
    kind = ErrorKind.CONFLICT

    def __init__(self, card_id: int):
        super().__init__(f"Card {card_id} was modified concurrently")
        self.card_id = card_id


class TransientError(AppError):
    kind = ErrorKind.TRANSIENT

    def __init__(self, message: str = "Storage temporarily unavailable"):
        super().__init__(message)


def problem_detail(status_code: int, title: str, detail: str, instance: Optional[str]) -> dict:
    body = {
        "type": ABOUT_BLANK,
        "title": title,
        "status": status_code,
        "detail": detail,
        "instance": instance,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    return {key: value for key, value in body.items() if value is not None}


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    status_code, title = ERROR_RESPONSES[exc.kind]
    if exc.kind is ErrorKind.TRANSIENT:
        logger.warning("storage_unavailable", path=request.url.path, detail=exc.message)
    return JSONResponse(
        status_code=status_code,
        content=problem_detail(status_code, title, exc.message, request.url.path),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = ", ".join(
        f"{'.'.join(str(part) for part in error['loc'][1:])}: {error['msg']}"
        for error in exc.errors()
    ) or "Validation failed"
    status_code = status.HTTP_400_BAD_REQUEST
    return JSONResponse(
        status_code=status_code,
        content=problem_detail(status_code, "Bad Request", errors, request.url.path),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unexpected_error", path=request.url.path, error=repr(exc))
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(
        status_code=status_code,
        content=problem_detail(
            status_code,
            "Internal Server Error",
            "An unexpected error occurred",
            request.url.path,
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
