"""
FastAPI app assembly: middleware, router wiring and the error envelope.

Every failure leaves the API as

    {"success": false, "error": "<message>"}

with the status code of the failure; nothing else about the error is exposed.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from partnerdb.config import config
from partnerdb.errors import PartnerDBError
from partnerdb.logging_config import configure_logging
from partnerdb.bus.events import bus, ALL_EVENTS
from partnerdb.api.contacts import router as contacts_router
from partnerdb.api.settings import router as settings_router
from partnerdb.api.auth import router as auth_router
from partnerdb.api.labor_claims import router as labor_claims_router
from partnerdb.api.files import router as files_router

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"success": False, "error": message}, status_code=status_code)


def audit_event(event_name: str, event_data: Dict[str, Any]) -> None:
    """Bus listener: one log line per domain event."""
    details = ", ".join(f"{k}={v!r}" for k, v in sorted(event_data.items()))
    logger.info(f"EVENT {event_name} | {details}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info(f"app_startup: bucket={config.S3_BUCKET} cors={config.CORS_ORIGINS}")
    yield
    logger.info("app_shutdown")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Partner DB",
        description="Business directory: contacts, vocabularies, labor claims and attachments.",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=config.CORS_ORIGINS != ["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["Content-Length", "ETag"],
        max_age=600,
    )

    @app.exception_handler(PartnerDBError)
    async def partnerdb_error_handler(request: Request, exc: PartnerDBError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} → {exc.status_code}: {exc.message}")
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        messages = []
        for err in exc.errors():
            location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
            messages.append(f"{location}: {err.get('msg')}" if location else err.get("msg", "invalid"))
        return error_response(400, "; ".join(messages) or "Invalid request body")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error(f"{request.method} {request.url.path} crashed: {type(exc).__name__}: {exc}", exc_info=exc)
        return error_response(500, "Internal server error")

    app.include_router(contacts_router)
    app.include_router(settings_router)
    app.include_router(auth_router)
    app.include_router(labor_claims_router)
    app.include_router(files_router)

    bus.on_all(ALL_EVENTS, audit_event)
    return app


app = create_app()
