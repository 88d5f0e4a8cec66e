"""Boundary mapping of core errors to HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from src.auth_core.core.errors import AuthCoreError

INTERNAL_ERROR_RESPONSE = {
    "success": False,
    "code": "INTERNAL_ERROR",
    "message": "An unexpected error occurred",
}


async def auth_core_error_handler(request: Request, exc: AuthCoreError) -> JSONResponse:
    logger.info(
        "{} {} -> {} {}", request.method, request.url.path, exc.http_status, exc.code.value
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(
        "Unhandled error on {} {}", request.method, request.url.path
    )
    return JSONResponse(status_code=500, content=INTERNAL_ERROR_RESPONSE)


def register_error_handlers(app: FastAPI) -> None:
    """Install handlers so domain errors keep their code and nothing internal leaks."""
    app.add_exception_handler(AuthCoreError, auth_core_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
