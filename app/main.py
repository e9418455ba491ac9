from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.api import router
from datastore.connection import build_default_guard
from datastore.errors import StorageError
from logging_config import configure_logging
from services.garden import build_default_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    service = build_default_service()
    service.start()
    try:
        yield
    finally:
        service.shutdown()
        build_default_service.cache_clear()
        build_default_guard.cache_clear()


async def storage_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.error("Request failed on storage error", extra={"reason": str(exc)})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Storage failure."},
    )


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="SmartGarden",
        description="Rain-aware irrigation decisions for soil-moisture sensors.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_exception_handler(StorageError, storage_error_handler)
    app.include_router(router)
    return app

app = create_app()
