"""FastAPI application factory"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jurisai import __version__
from jurisai.api.routes.insights import router as insights_router
from jurisai.api.routes.matters import router as matters_router
from jurisai.api.routes.research import router as research_router
from jurisai.api.routes.workspaces import router as workspaces_router
from jurisai.api.session_store import WorkspaceStore
from jurisai.utils.config import get_settings

logger = logging.getLogger(__name__)

EVICT_INTERVAL_SECONDS = 300


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    task = asyncio.create_task(_evict_loop(app.state.workspaces))
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


async def _evict_loop(workspaces: WorkspaceStore):
    """Periodically evict expired workspaces"""
    while True:
        await asyncio.sleep(EVICT_INTERVAL_SECONDS)
        evicted = await workspaces.evict_expired()
        if evicted:
            logger.info(f"Evicted {evicted} idle workspace(s)")


def create_app(entity_store=None, invoker=None, ingestion=None) -> FastAPI:
    """Create and configure the FastAPI application.

    Collaborators default to the configured backends; tests pass fakes.
    """
    settings = get_settings()
    if entity_store is None:
        from jurisai.db import get_store

        entity_store = get_store()
    if invoker is None:
        from jurisai.services.invoker import GenerationInvoker

        invoker = GenerationInvoker()
    if ingestion is None:
        from jurisai.services.ingestion import get_ingestion

        ingestion = get_ingestion()

    app = FastAPI(
        title="JurisAI API",
        description="AI-assisted legal research, argument drafting, document generation and judgment analysis",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.entity_store = entity_store
    app.state.invoker = invoker
    app.state.ingestion = ingestion
    app.state.workspaces = WorkspaceStore(ttl_minutes=settings.session_ttl_minutes)

    # CORS: allow all
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(insights_router)
    app.include_router(matters_router)
    app.include_router(research_router)
    app.include_router(workspaces_router)

    return app
