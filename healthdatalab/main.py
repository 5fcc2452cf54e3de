from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from healthdatalab.api.middleware.geo_currency import GeoCurrencyMiddleware
from healthdatalab.api.routers.checkout import router as checkout_router
from healthdatalab.api.routers.contact import router as contact_router
from healthdatalab.api.routers.seats import router as seats_router
from healthdatalab.api.routers.webhook import router as webhook_router
from healthdatalab.core.logging import configure_logging
from healthdatalab.shared.config import Settings, get_settings


logger = logging.getLogger(__name__)


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    detail = "Invalid request body."
    if errors:
        location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
        message = errors[0].get("msg", "invalid value")
        detail = f"{location}: {message}" if location else message
    logger.info("api: invalid_body path=%s detail=%s", request.url.path, detail)
    return JSONResponse(status_code=400, content={"error": detail})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("api: unhandled_error path=%s", request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error."})


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    application = FastAPI(title="HealthDataLab API")
    application.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(GeoCurrencyMiddleware, country_header=settings.geo_country_header)

    application.add_exception_handler(StarletteHTTPException, _http_error_handler)
    application.add_exception_handler(RequestValidationError, _request_validation_handler)
    application.add_exception_handler(Exception, _unhandled_error_handler)

    application.include_router(checkout_router)
    application.include_router(webhook_router)
    application.include_router(seats_router)
    application.include_router(contact_router)

    @application.get("/healthz")
    def healthz():
        return {"status": "ok"}

    if settings.site_dir:
        application.mount("/", StaticFiles(directory=settings.site_dir, html=True), name="site")
    return application


app = create_app()
