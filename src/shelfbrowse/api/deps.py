"""API dependencies — Per-request access to the resources built at startup.

The backend and resolver live on ``app.state``; nothing is kept in module
globals.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from shelfbrowse.adapters.base.backend import SearchBackend
from shelfbrowse.config.settings import Settings
from shelfbrowse.core.resolver import BrowseResolver


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_backend(request: Request) -> SearchBackend:
    """The shared search backend.

    Raises:
        HTTPException: 503 if the service has not finished starting up.
    """
    backend = getattr(request.app.state, "backend", None)
    if backend is None:
        raise HTTPException(status_code=503, detail="Search backend not initialized. Is the server running?")
    return backend


def get_resolver(request: Request) -> BrowseResolver:
    """The shared browse resolver.

    Raises:
        HTTPException: 503 if the service has not finished starting up.
    """
    resolver = getattr(request.app.state, "resolver", None)
    if resolver is None:
        raise HTTPException(status_code=503, detail="Browse resolver not initialized. Is the server running?")
    return resolver
