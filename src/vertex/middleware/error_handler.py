"""Global error handler: consistent JSON error responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from vertex.errors import StoreError, VertexError

logger = structlog.get_logger()

_GENERIC_DETAIL = "Internal server error"


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        """Storage failures are logged in full and answered opaquely."""
        logger.error(
            "store_error",
            path=request.url.path,
            method=request.method,
            error=exc.detail,
        )
        return JSONResponse(status_code=500, content={"detail": _GENERIC_DETAIL})

    @app.exception_handler(VertexError)
    async def domain_error_handler(_request: Request, exc: VertexError) -> JSONResponse:
        """Map domain errors to their HTTP status."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Handle HTTP exceptions with consistent JSON format."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed request shapes are client errors (400)."""
        return JSONResponse(
            status_code=400,
            content={"detail": "Validation error", "errors": jsonable_errors(exc)},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions, always answered as JSON."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": _GENERIC_DETAIL},
        )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Strip non-serialisable context (e.g. raised exceptions) from pydantic errors."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
