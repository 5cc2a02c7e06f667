"""FastAPI application factory.

Binds a :class:`~quoteflow.engine.WorkflowEngine` to the app, seeds the
store with demo quotes at startup when configured, and renders every
:class:`~quoteflow.errors.QuoteflowError` as ``{"error": message}`` with
the error's status code.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import QuoteflowConfig, load_config
from ..engine import WorkflowEngine
from ..errors import QuoteflowError
from ..persistence import get_repository
from ..seed import seed_repository
from . import routes

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[QuoteflowConfig] = None,
    engine: Optional[WorkflowEngine] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Service configuration. Loaded from file/env if not provided.
        engine: Workflow engine to serve. Built over the configured
            repository if not provided.

    Returns:
        Configured FastAPI application.
    """
    config = config or load_config()
    engine = engine or WorkflowEngine(
        get_repository(config=config)
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if config.seed_demo_data:
            await seed_repository(engine.repository)
        logger.info("Quoteflow API starting up")
        yield
        logger.info("Quoteflow API shutting down")

    app = FastAPI(title=config.api.title, version=__version__, lifespan=lifespan)
    app.state.engine = engine

    @app.exception_handler(QuoteflowError)
    async def quoteflow_error_handler(request: Request, exc: QuoteflowError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        messages = [
            f"{'.'.join(str(p) for p in err['loc'] if p != 'body')}: {err['msg']}"
            for err in exc.errors()
        ]
        return JSONResponse(status_code=400, content={"error": "; ".join(messages)})

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": __version__}

    app.include_router(routes.router, prefix=config.api.prefix)

    logger.info(f"Quoteflow API v{__version__} initialized")
    return app
