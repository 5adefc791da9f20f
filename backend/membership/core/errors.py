"""
Membership Errors

Every failure the engine surfaces carries a human-readable message and a
machine-checkable ``kind``. The API layer maps ``status_code`` onto the
response; nothing else inspects the HTTP status.
"""

from enum import Enum


class ErrorKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    BAD_REQUEST = "bad_request"
    INTERNAL = "internal"


class MembershipError(Exception):
    """Base class for all errors raised by the invitation engine."""

    kind: ErrorKind = ErrorKind.INTERNAL
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class UnauthorizedError(MembershipError):
    kind = ErrorKind.UNAUTHORIZED
    status_code = 401


class ForbiddenError(MembershipError):
    kind = ErrorKind.FORBIDDEN
    status_code = 403


class NotFoundError(MembershipError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404


class ConflictError(MembershipError):
    kind = ErrorKind.CONFLICT
    status_code = 409


class BadRequestError(MembershipError):
    kind = ErrorKind.BAD_REQUEST
    status_code = 400


class InternalError(MembershipError):
    kind = ErrorKind.INTERNAL
    status_code = 500
