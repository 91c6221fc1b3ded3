# app/backend/core/exceptions.py
from __future__ import annotations

from sqlalchemy.exc import DBAPIError, NoResultFound

STATUS_OK = "OK"
STATUS_NOT_FOUND = "NotFound"
STATUS_CONFLICT = "Conflict"
STATUS_UNEXPECTED_ERROR = "UnexpectedError"
STATUS_INVALID_PAYLOAD = "InvalidPayload"
STATUS_BAD_REQUEST = "BadRequest"
STATUS_UNAUTHORIZED = "Unauthorized"

# postgres (psycopg2 pgcode / psycopg sqlstate), mysql errno, sqlite extended code name
UNIQUE_VIOLATION_CODES = {
    "23505",
    1062,
    "SQLITE_CONSTRAINT_UNIQUE",
    "SQLITE_CONSTRAINT_PRIMARYKEY",
}


class AppError(Exception):
    """Base of the domain error taxonomy; carries the response tag and HTTP code."""

    status = STATUS_UNEXPECTED_ERROR
    code = 500
    default_message = "internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(AppError):
    status = STATUS_NOT_FOUND
    code = 404
    default_message = "data not found"


class ConflictError(AppError):
    status = STATUS_CONFLICT
    code = 409
    default_message = "data already exists"


class InternalServerError(AppError):
    pass


class InvalidPayloadError(AppError):
    status = STATUS_INVALID_PAYLOAD
    code = 400
    default_message = "invalid payload"


class BadRequestError(AppError):
    status = STATUS_BAD_REQUEST
    code = 400
    default_message = "bad request"


def _driver_code(orig: BaseException | None):
    if orig is None:
        return None
    for attr in ("pgcode", "sqlstate", "sqlite_errorname"):
        value = getattr(orig, attr, None)
        if value:
            return value
    args = getattr(orig, "args", ())
    if args and isinstance(args[0], int):
        return args[0]
    return None


def classify_db_error(exc: BaseException) -> AppError:
    """
    Map any store failure onto NotFound / Conflict / InternalServer.
    Unknown failures always land on InternalServer without the driver message.
    """
    if isinstance(exc, AppError):
        return exc
    if isinstance(exc, NoResultFound):
        return NotFoundError()
    if isinstance(exc, DBAPIError):
        if _driver_code(exc.orig) in UNIQUE_VIOLATION_CODES:
            return ConflictError()
    return InternalServerError()
