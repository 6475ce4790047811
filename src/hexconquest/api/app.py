"""FastAPI application for the HexConquest engine.

The lifespan owns the :class:`ApiState`: it is built and started before the
first request and shut down when the server stops.  Engine errors that escape
a route are rendered with the same ``{"reason", "message"}`` body as command
failures.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hexconquest.api import routes
from hexconquest.api.runtime import ApiState, build_state
from hexconquest.config import get_settings
from hexconquest.domain.errors import HexConquestError

logger = logging.getLogger(__name__)


async def engine_error_handler(request: Request, exc: HexConquestError) -> JSONResponse:
    error = routes.http_error(exc.reason, str(exc))
    logger.info("%s %s failed: %s", request.method, request.url.path, error.detail)
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


def create_app(*, state_factory: Callable[[], ApiState] = build_state) -> FastAPI:
    """Build the application; ``state_factory`` is called once per lifespan."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        state = state_factory()
        app.state.api_state = state
        try:
            await state.startup()
            yield
        finally:
            await state.shutdown()

    app = FastAPI(title="HexConquest API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_settings().cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(HexConquestError, engine_error_handler)
    app.include_router(routes.router)
    return app


app = create_app()
