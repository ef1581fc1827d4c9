# app/domain/common/errors.py
from __future__ import annotations


class RoomError(Exception):
    """
    Base for every user-facing engine error.
    `code` is machine-checkable, `kind` is the taxonomy bucket, `status` the HTTP class.
    """
    kind = "internal"
    status = 500

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class ValidationFailed(RoomError):
    kind = "validation"
    status = 400


class NotFound(RoomError):
    kind = "not_found"
    status = 404


class Forbidden(RoomError):
    kind = "forbidden"
    status = 403


class Conflict(RoomError):
    kind = "conflict"
    status = 409


class CapacityError(RoomError):
    kind = "capacity"
    status = 503
