# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/14 09:50
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : FastAPI application of the admin dashboard
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from dashboard.routes import router
from providers import ProviderError
from settings import settings
from transbot.container import Services


def _first_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    err = errors[0]
    field = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
    return f"{field}: {err.get('msg')}" if field else str(err.get("msg"))


def create_app(
    services: Services, api_key: str = settings.dashboard_api_key, lifespan=None
) -> FastAPI:
    """
    Build the admin app around an existing set of services

    Errors are always answered as `{"error": message}`: 400 for invalid
    bodies, 403 for a bad API key, 404 for unknown channels, 500 for provider
    failures.
    """
    app = FastAPI(title="Translation Relay Dashboard", version="0.1.0", lifespan=lifespan)
    app.state.services = services
    app.state.api_key = api_key

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _first_error(exc)})

    @app.exception_handler(ProviderError)
    async def provider_error(request: Request, exc: ProviderError):
        logger.warning(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(status_code=500, content={"error": str(exc)})

    app.include_router(router)
    return app
