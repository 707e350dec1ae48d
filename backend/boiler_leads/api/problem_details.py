import logging
import uuid
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from boiler_leads.domain.errors import VALIDATION_PROBLEM, DomainError, PersistenceError

logger = logging.getLogger(__name__)

SERVER_PROBLEM = "https://example.com/problems/server-error"
REQUEST_PROBLEM = "https://example.com/problems/request-error"

INVALID_DATA = "Invalid data"
INTERNAL_ERROR = "Internal server error"


def request_id_for(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if request_id is None:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
    return request_id


def problem_response(
    request: Request,
    status_code: int,
    *,
    message: str,
    problem_type: str,
    title: str | None = None,
    errors: list[dict[str, Any]] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Error body shared by every endpoint.

    The lead form shows ``message`` and highlights inputs named in
    ``errors[].field``; the remaining keys follow RFC 9457.
    """
    request_id = request_id_for(request)
    body = {
        "type": problem_type,
        "title": title or HTTPStatus(status_code).phrase,
        "status": status_code,
        "message": message,
        "request_id": request_id,
        "errors": errors or [],
    }
    response = JSONResponse(body, status_code=status_code, headers=headers, media_type="application/problem+json")
    response.headers["X-Request-ID"] = request_id
    return response


def _request_field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    errors = []
    for error in exc.errors():
        # A malformed or missing JSON body has no field name of its own.
        path = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(path) or "body", "message": error.get("msg", "Invalid value")})
    return errors


async def _on_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return problem_response(
        request,
        400,
        title="Validation Error",
        message=INVALID_DATA,
        problem_type=VALIDATION_PROBLEM,
        errors=_request_field_errors(exc),
    )


async def _on_domain_error(request: Request, exc: DomainError) -> JSONResponse:
    return problem_response(
        request,
        400,
        title=exc.title,
        message=exc.detail,
        problem_type=exc.type,
        errors=exc.errors,
    )


async def _on_persistence_error(request: Request, exc: PersistenceError) -> JSONResponse:
    logger.error(
        "persistence_error",
        exc_info=exc,
        extra={"extra": {"path": request.url.path, "cause": type(exc.__cause__).__name__}},
    )
    return problem_response(request, 500, message=INTERNAL_ERROR, problem_type=SERVER_PROBLEM)


async def _on_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else HTTPStatus(exc.status_code).phrase
    return problem_response(
        request,
        exc.status_code,
        message=message,
        problem_type=SERVER_PROBLEM if exc.status_code >= 500 else REQUEST_PROBLEM,
        headers=getattr(exc, "headers", None),
    )


async def _on_unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled_exception",
        extra={"extra": {"path": request.url.path, "error_type": type(exc).__name__}},
    )
    return problem_response(request, 500, message=INTERNAL_ERROR, problem_type=SERVER_PROBLEM)


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, _on_request_validation_error)
    app.add_exception_handler(DomainError, _on_domain_error)
    app.add_exception_handler(PersistenceError, _on_persistence_error)
    app.add_exception_handler(StarletteHTTPException, _on_http_exception)
    app.add_exception_handler(Exception, _on_unhandled_exception)
