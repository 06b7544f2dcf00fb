"""
Global exception handlers.

- PlannerError -> its own envelope and status
- RequestValidationError -> 400 with field-level details
- SQLAlchemyError -> logged with traceback, generic 500 STORE_ERROR
- anything else -> logged, generic 500 INTERNAL_ERROR
"""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from planner_server.core.errors import PlannerError, StoreError

log = structlog.get_logger()


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(PlannerError)
    async def planner_error_handler(request: Request, exc: PlannerError):
        if exc.http_status >= 500:
            log.error("request.failed", code=exc.code, error=exc.message)
        else:
            log.info("request.rejected", code=exc.code, status=exc.http_status)
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = [
            {
                "field": ".".join(str(loc) for loc in err["loc"]),
                "message": err["msg"],
                "type": err["type"],
            }
            for err in exc.errors()
        ]
        log.info("request.invalid", errors=details)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "Invalid request data",
                    "status": status.HTTP_400_BAD_REQUEST,
                    "details": details,
                }
            },
        )

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError):
        log.exception("store.error", error_type=type(exc).__name__)
        err = StoreError(operation=request.url.path)
        return JSONResponse(status_code=err.http_status, content=err.to_response())

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        log.exception("request.unhandled", error_type=type(exc).__name__)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "status": status.HTTP_500_INTERNAL_SERVER_ERROR,
                }
            },
        )
