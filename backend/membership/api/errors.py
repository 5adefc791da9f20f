import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from membership.core.errors import ErrorKind, MembershipError

logger = logging.getLogger(__name__)

# Status codes raised by the framework itself (unknown route, wrong method)
HTTP_STATUS_KINDS = {
    status.HTTP_400_BAD_REQUEST: ErrorKind.BAD_REQUEST,
    status.HTTP_401_UNAUTHORIZED: ErrorKind.UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: ErrorKind.FORBIDDEN,
    status.HTTP_404_NOT_FOUND: ErrorKind.NOT_FOUND,
    status.HTTP_405_METHOD_NOT_ALLOWED: ErrorKind.NOT_FOUND,
    status.HTTP_409_CONFLICT: ErrorKind.CONFLICT,
}


def _error_response(status_code: int, detail, kind: ErrorKind, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "kind": kind.value},
        headers=headers,
    )


async def membership_error_handler(request: Request, exc: MembershipError) -> JSONResponse:
    """Render engine errors as ``{"detail": message, "kind": kind}``."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    headers = None
    if exc.kind == ErrorKind.UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return _error_response(exc.status_code, exc.message, exc.kind, headers)


async def store_error_handler(request: Request, exc: PyMongoError) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} failed on the store: {exc}")
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", ErrorKind.INTERNAL
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(
        422,
        jsonable_encoder(exc.errors()),
        ErrorKind.BAD_REQUEST,
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    kind = HTTP_STATUS_KINDS.get(exc.status_code, ErrorKind.INTERNAL)
    return _error_response(exc.status_code, exc.detail, kind, getattr(exc, "headers", None))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MembershipError, membership_error_handler)
    app.add_exception_handler(PyMongoError, store_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
