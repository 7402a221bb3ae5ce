"""Error taxonomy and its HTTP mapping.

Route handlers and services raise these; the handlers registered in
register_exception_handlers() turn them into JSON responses. Every
error is terminal for the request it occurs in.
"""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger()

VALIDATION_TITLE = "One or more validation errors occurred."


class AppError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    status_code: int = 400

    def __init__(self, detail: Any = None):
        super().__init__(detail)
        self.detail = detail


class ValidationError(AppError):
    """Malformed or missing input fields.

    ``errors`` maps a field name to its list of messages.
    """

    status_code = 400

    def __init__(self, errors: dict[str, list[str]]):
        super().__init__(errors)
        self.errors = errors


class NotFoundError(AppError):
    status_code = 404


class AuthenticationError(AppError):
    status_code = 400


class AuthorizationError(AppError):
    status_code = 403


class IdentityCreationError(AppError):
    """Identity store refused a new user (duplicate email, weak password).

    ``errors`` is a list of ``{"code", "description"}`` dicts.
    """

    status_code = 400

    def __init__(self, errors: list[dict[str, str]]):
        super().__init__(errors)
        self.errors = errors


class PersistenceError(AppError):
    status_code = 400


def validation_problem(errors: dict[str, list[str]]) -> dict:
    return {"title": VALIDATION_TITLE, "status": 400, "errors": errors}


def _field_name(loc: tuple) -> str:
    # Drop the "body"/"path"/"query" prefix FastAPI adds.
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts) or "body"


def collect_field_errors(raw_errors: list[dict]) -> dict[str, list[str]]:
    """Group pydantic error dicts by field name."""
    errors: dict[str, list[str]] = {}
    for err in raw_errors:
        field = _field_name(tuple(err.get("loc", ())))
        errors.setdefault(field, []).append(err.get("msg", "Invalid value"))
    return errors


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.info(
        "request.rejected",
        error=type(exc).__name__,
        status_code=exc.status_code,
        path=request.url.path,
    )
    if isinstance(exc, ValidationError):
        return JSONResponse(
            status_code=exc.status_code, content=validation_problem(exc.errors)
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = collect_field_errors(exc.errors())
    logger.info("request.invalid", path=request.url.path, fields=sorted(errors))
    return JSONResponse(status_code=400, content=validation_problem(errors))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
