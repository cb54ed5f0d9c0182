"""FastAPI app for the address reconciliation engine."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from recon import __version__ as VERSION
from recon.api.collection_routes import collection_router
from recon.api.comparison_routes import comparison_router
from recon.api.extraction_routes import extraction_router
from recon.api.routes import router
from recon.api.screener_routes import screener_router
from recon.exceptions import ReconError, ValidationFailedError
from recon.log import configure_logging
from recon.settings import get_settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------


def _recon_error_handler(request: Request, exc: ReconError) -> JSONResponse:
    if isinstance(exc, ValidationFailedError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.error, "details": exc.details})
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.error, "message": exc.message})


def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form", "header")]
        entry = {"message": err.get("msg", "Invalid value")}
        if loc:
            entry["field"] = ".".join(loc)
        details.append(entry)
    return JSONResponse(status_code=400, content={"error": "Validation failed", "details": details})


def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error", "message": str(exc)})


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    settings = get_settings()
    configure_logging()

    application = FastAPI(
        title="Address Reconciliation Engine",
        description="Extract, validate, and reconcile EVM address sets.",
        version=VERSION,
        debug=settings.debug,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(ReconError, _recon_error_handler)
    application.add_exception_handler(RequestValidationError, _request_validation_handler)
    application.add_exception_handler(Exception, _unhandled_error_handler)

    application.include_router(router)
    application.include_router(extraction_router)
    application.include_router(comparison_router)
    application.include_router(collection_router)
    application.include_router(screener_router)
    return application


app = create_app()
