"""FastAPI application factory and lifecycle management."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from shelfbrowse import __version__
from shelfbrowse.adapters.base.backend import SearchBackend
from shelfbrowse.adapters.solr.client import SolrBackend
from shelfbrowse.api.endpoints.health import build_version
from shelfbrowse.api.middleware import RequestContextMiddleware
from shelfbrowse.api.router import router
from shelfbrowse.config.settings import Settings
from shelfbrowse.core.resolver import BrowseResolver
from shelfbrowse.observability.logging import get_logger, setup_logging

logger = get_logger(__name__)

CONFIG_FILE_ENV = "SHELFBROWSE_CONFIG_FILE"


def create_app(settings: Settings | None = None, backend: SearchBackend | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings. If None, loads from environment.
        backend: Search backend to serve from. If None, a ``SolrBackend`` is
            built from ``settings.solr`` at startup.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        # Auto-detect the YAML config (the CLI points at it via the environment)
        yaml_path = Path(os.environ.get(CONFIG_FILE_ENV, "shelfbrowse-config.yaml"))
        settings = Settings.from_yaml(yaml_path) if yaml_path.exists() else Settings()

    setup_logging(settings.observability)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Build the shared backend clients and resolver; close them on shutdown."""
        logger.info("Starting shelfbrowse", version=__version__, build=build_version().build)

        search_backend = backend if backend is not None else SolrBackend(settings.solr)
        await search_backend.initialize()

        app.state.settings = settings
        app.state.backend = search_backend
        app.state.resolver = BrowseResolver(search_backend, settings)

        logger.info("shelfbrowse is ready", port=settings.server.port, auth=bool(settings.jwt_key))
        yield

        logger.info("Shutting down shelfbrowse...")
        await search_backend.shutdown()
        app.state.resolver = None
        app.state.backend = None
        logger.info("shelfbrowse shutdown complete")

    app = FastAPI(
        title="shelfbrowse",
        description="Virtual shelf browse: the items on either side of a catalog item, in call number order.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(GZipMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["Authorization", "*"],
    )
    app.add_middleware(RequestContextMiddleware)

    app.include_router(router)

    if not settings.jwt_key:
        logger.warning("No jwt_key configured; all browse requests will be rejected")

    return app
