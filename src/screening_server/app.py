"""Application factory and CLI entry point.

``create_app()`` builds the FastAPI application with:
  - Lifespan handler that loads the catalog and initialises the pipeline once
  - CORS middleware
  - Global exception handlers (SDK ValueError → 404/409/503/400)
  - All API routes mounted under ``/api/v1``
  - A ``/health`` endpoint for readiness probes

The ``cli()`` function is the ``screening-server`` console-script entry point.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from screening_rulesets.catalog import QuestionnaireCatalog
from screening_rulesets.engine import ScreeningEngine
from screening_rulesets.interfaces import AnalysisGenerator
from screening_rulesets.pipeline import ScreeningPipeline
from screening_rulesets.prompt import PromptManager

from screening_server.config import ServerSettings, load_settings
from screening_server.errors import (
    generic_error_handler,
    key_error_handler,
    value_error_handler,
)
from screening_server.routes import register_routes

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Lifespan: runs once at startup/shutdown
# ------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialise shared resources at startup.

    Startup:
      1. Load the YAML catalog into a ``QuestionnaireCatalog``
      2. Build ``ScreeningEngine`` and ``ScreeningPipeline``
      3. Stash them on ``app.state`` for dependency injection

    Sessions are in-memory, so shutdown only logs how many were dropped.
    """
    settings: ServerSettings = app.state.settings

    catalog = QuestionnaireCatalog(catalog_dir=settings.catalog_dir)
    catalog.load()

    engine = ScreeningEngine(catalog)
    pipeline = ScreeningPipeline(
        engine, PromptManager(), generator=app.state.generator,
    )
    if app.state.generator is None:
        logger.info("No analysis generator configured; /analysis will return 503")

    app.state.catalog = catalog
    app.state.pipeline = pipeline

    yield

    logger.info("Shutting down; in-memory sessions are discarded")


# ------------------------------------------------------------------
# Factory
# ------------------------------------------------------------------

def create_app(
    settings: ServerSettings | None = None,
    generator: AnalysisGenerator | None = None,
) -> FastAPI:
    """Build and return the configured FastAPI application.

    Args:
        settings: server settings; read from the environment when omitted.
        generator: optional AI analysis generator used by
            ``POST /sessions/{id}/analysis``.
    """
    if settings is None:
        settings = load_settings()

    # --- Configure logging ---
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="Screening API Server",
        description="REST API for the mental-health self-screening questionnaire",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Read by the lifespan handler
    app.state.settings = settings
    app.state.generator = generator

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Exception handlers ---
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(KeyError, key_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # --- Health check (outside /api/v1 prefix) ---
    @app.get("/health")
    async def health() -> dict:
        """Readiness probe — the catalog is loaded and the pipeline is up."""
        if getattr(app.state, "pipeline", None) is None:
            return {"status": "error", "detail": "pipeline not initialised"}
        return {"status": "ok"}

    # --- Mount all API routes ---
    register_routes(app)

    return app


# ------------------------------------------------------------------
# Module-level ASGI export (for uvicorn screening_server.app:app)
# ------------------------------------------------------------------
app = create_app()


# ------------------------------------------------------------------
# CLI entry point
# ------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point: ``screening-server``."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "screening_server.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )
