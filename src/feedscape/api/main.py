"""FastAPI application for feedscape.

Serves the live scene to renderers and accepts filter, source and pointer
events. The reconciliation context is created on startup and torn down on
shutdown, stopping the poller before the scene is cleared.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from feedscape.api.routes import router
from feedscape.config import get_settings_for, settings
from feedscape.context import ReconciliationContext

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan - startup and shutdown."""
    logger.info("Starting feedscape API...")

    # Tests may install their own context before startup
    context = getattr(app.state, "context", None)
    if context is None:
        context = ReconciliationContext(get_settings_for(settings.environment))
        app.state.context = context

    if getattr(app.state, "autostart", True):
        await context.start()
        logger.info(f"Polling {len(context.sources)} sources")

    yield

    logger.info("Shutting down feedscape API...")
    await context.teardown()


def create_app(context: ReconciliationContext | None = None, autostart: bool = True) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="feedscape",
        description="Live feed entities reconciled into a 3D scene",
        version="0.1.0",
        lifespan=lifespan,
    )
    if context is not None:
        app.state.context = context
    app.state.autostart = autostart

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "feedscape.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
