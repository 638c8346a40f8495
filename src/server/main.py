"""FastAPI entrypoint."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from mathsvg.backend import Typesetter, create_backend
from mathsvg.config import settings as backend_settings
from mathsvg.rpc import RpcDispatcher
from server.config import settings
from server.conversion.router import router as conversion_router
from server.exceptions import AppError
from server.rpc.router import router as rpc_router

logger = logging.getLogger(__name__)


def create_app(backend: Optional[Typesetter] = None) -> FastAPI:
    backend = backend or create_backend()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await backend.start()
        logger.info("%s ready", settings.app_name)
        try:
            yield
        finally:
            await backend.close()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.backend = backend
    app.state.dispatcher = RpcDispatcher(
        backend,
        bitmap_width=backend_settings.bitmap_default_width,
        bitmap_height=backend_settings.bitmap_default_height,
    )

    @app.exception_handler(AppError)
    async def app_error_handler(_, exc: AppError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.code, "message": exc.message},
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(_, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "invalid_request", "message": "Request body must be a JSON object"},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"error": "internal_error", "message": "Internal Server Error"},
        )

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "environment": settings.environment}

    app.include_router(conversion_router, prefix=settings.api_prefix)
    app.include_router(rpc_router, prefix=settings.api_prefix)
    return app


app = create_app()
