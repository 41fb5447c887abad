from typing import Any, Dict, Optional, Sequence
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException


class NewsroomError(Exception):
    """Base class for errors that map onto a client-facing HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    headers: Optional[Dict[str, str]] = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(NewsroomError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(NewsroomError):
    status_code = status.HTTP_401_UNAUTHORIZED
    headers = {"WWW-Authenticate": "Bearer"}


class AuthorizationError(NewsroomError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(NewsroomError):
    status_code = status.HTTP_404_NOT_FOUND


_LOCATION_PREFIXES = ("body", "query", "path", "header", "cookie")


def format_validation_errors(errors: Sequence[Dict[str, Any]]) -> str:
    """Turn pydantic's error list into one readable line.

    `[{"loc": ("body", "title"), "msg": "Field required"}]` becomes
    `Validation error: Field required at "title"`.
    """
    parts = []
    for error in errors:
        loc = [str(p) for p in error.get("loc", ())]
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        msg = error.get("msg", "Invalid value")
        if loc:
            parts.append(f'{msg} at "{".".join(loc)}"')
        else:
            parts.append(msg)
    return "Validation error: " + "; ".join(parts)


def _message(status_code: int, message: str, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message}, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NewsroomError)
    async def newsroom_error_handler(request: Request, exc: NewsroomError):
        return _message(exc.status_code, exc.message, exc.headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _message(status.HTTP_400_BAD_REQUEST, format_validation_errors(exc.errors()))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return _message(exc.status_code, detail, getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _message(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")
