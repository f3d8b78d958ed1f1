"""Render ProjectError and request validation failures as ``{"error": {...}}`` bodies."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from slotkeeper.core.exceptions import ProjectError, ValidationError

logger = logging.getLogger(__name__)


def error_body(exc: ProjectError) -> dict:
    return {"error": {"code": exc.code, "message": exc.message, "details": exc.details}}


async def project_error_handler(request: Request, exc: ProjectError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("API: %s %s failed: %s", request.method, request.url.path, exc.to_dict())
    else:
        logger.info(
            "API: %s %s rejected (%s): %s",
            request.method, request.url.path, exc.code, exc.message,
        )
    return JSONResponse(status_code=exc.http_status, content=jsonable_encoder(error_body(exc)))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationError(
        "Request validation failed", details={"errors": jsonable_encoder(exc.errors())}
    )
    return JSONResponse(status_code=error.http_status, content=error_body(error))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProjectError, project_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
