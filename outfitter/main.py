"""Application entrypoint: ``uvicorn outfitter.main:app``."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from outfitter.api.v1.router import get_api_router
from outfitter.core.config import get_config
from outfitter.core.exceptions import OutfitterError
from outfitter.core.startup import bootstrap
from outfitter.schemas.common import ErrorEnvelope

logger = logging.getLogger(__name__)


async def outfitter_error_handler(request: Request, exc: OutfitterError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error(
            "api.error",
            extra={"event": "api.error", "path": request.url.path, "error_code": exc.code, "error": exc.message},
        )
    envelope = ErrorEnvelope(error_code=exc.code, detail=exc.message, context=exc.details)
    return JSONResponse(status_code=exc.http_status, content=envelope.model_dump(mode="json"))


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    bootstrap()
    yield


def create_app() -> FastAPI:
    cfg = get_config()
    app = FastAPI(title=cfg.APP_NAME, version=cfg.APP_VERSION, lifespan=lifespan)
    app.add_exception_handler(OutfitterError, outfitter_error_handler)
    app.include_router(get_api_router())

    @app.get("/")
    def root() -> dict:
        return {"service": cfg.APP_NAME, "version": cfg.APP_VERSION, "api_prefix": cfg.API_PREFIX}

    return app


app = create_app()
