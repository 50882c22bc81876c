"""
capopt_platform.api.errors

Exception -> HTTP response translation.

Responsibilities:
- Map request/body validation failures to 400 with a uniform body.
- Map domain errors from the service layer (not found, rejected status change).
- Log and mask anything unexpected as a 500.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from capopt_platform.observability.logging import get_logger
from capopt_platform.services.canvas_service import (
    CanvasNotFoundError,
    CanvasStatusError,
    ShareRequestError,
    TemplateNotFoundError,
)

log = get_logger(__name__)


def _validation_body(errors: list[dict]) -> dict:
    return {"detail": "Validation failed", "errors": jsonable_encoder(errors)}


async def _request_validation(_: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=HTTP_400_BAD_REQUEST, content=_validation_body(list(exc.errors()))
    )


async def _pydantic_validation(_: Request, exc: ValidationError) -> JSONResponse:
    # Raised when routers validate a raw JSON body against a schema picked at runtime.
    errors = exc.errors(include_url=False, include_context=False)
    return JSONResponse(status_code=HTTP_400_BAD_REQUEST, content=_validation_body(errors))


async def _canvas_not_found(_: Request, __: CanvasNotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=HTTP_404_NOT_FOUND, content={"detail": "Business canvas not found"}
    )


async def _template_not_found(_: Request, __: TemplateNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=HTTP_404_NOT_FOUND, content={"detail": "Template not found"})


async def _canvas_status(_: Request, exc: CanvasStatusError) -> JSONResponse:
    return JSONResponse(
        status_code=HTTP_400_BAD_REQUEST,
        content={"detail": "Status change not allowed", "validation": exc.result.to_dict()},
    )


async def _share_request(_: Request, exc: ShareRequestError) -> JSONResponse:
    return JSONResponse(status_code=HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


async def _integrity(_: Request, exc: IntegrityError) -> JSONResponse:
    log.warning("integrity_error", error=str(exc.orig))
    return JSONResponse(
        status_code=HTTP_400_BAD_REQUEST,
        content={"detail": "Request conflicts with existing data or references a missing record"},
    )


async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
    log.error("unhandled_exception", path=request.url.path, method=request.method, exc_info=exc)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Internal server error"}
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, _request_validation)
    app.add_exception_handler(ValidationError, _pydantic_validation)
    app.add_exception_handler(CanvasNotFoundError, _canvas_not_found)
    app.add_exception_handler(TemplateNotFoundError, _template_not_found)
    app.add_exception_handler(CanvasStatusError, _canvas_status)
    app.add_exception_handler(ShareRequestError, _share_request)
    app.add_exception_handler(IntegrityError, _integrity)
    app.add_exception_handler(Exception, _unhandled)


# --- Module Notes -----------------------------------------------------------
# HTTPException (401/403/404/409 raised by routers and auth deps) keeps FastAPI's default
# `{"detail": ...}` handler.
