"""Health and version endpoints."""

from __future__ import annotations

import os
import platform
from pathlib import Path

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from shelfbrowse import __version__
from shelfbrowse.adapters.base.backend import SearchBackend
from shelfbrowse.api.deps import get_backend

router = APIRouter()


# ── Response models ──────────────────────────────────────────────────────


class ComponentHealth(BaseModel):
    """Health of one dependency of the service."""

    healthy: bool = Field(description="Whether the dependency is usable")
    message: str | None = Field(default=None, description="Why it is not")


class VersionResponse(BaseModel):
    """Build information."""

    build: str = Field(description="Build tag, from a buildtag.* file in the working directory")
    python_version: str = Field(description="Interpreter version and platform")
    git_commit: str | None = Field(default=None, description="Commit the build was made from")
    version: str = Field(description="Package version")


def build_version(directory: Path | None = None) -> VersionResponse:
    """Collect build information for ``/version``."""
    tags = sorted((directory or Path.cwd()).glob("buildtag.*"))
    build = tags[0].name.removeprefix("buildtag.") if len(tags) == 1 else "unknown"

    return VersionResponse(
        build=build,
        python_version=f"{platform.python_version()} {platform.system().lower()}/{platform.machine()}",
        git_commit=os.environ.get("GIT_COMMIT") or None,
        version=__version__,
    )


# ── Endpoints ────────────────────────────────────────────────────────────


@router.get(
    "/healthcheck",
    response_model=dict[str, ComponentHealth],
    response_model_exclude_none=True,
    summary="Health Check",
    description="Ping Solr; responds 500 when it is not healthy.",
)
async def health_check(backend: SearchBackend = Depends(get_backend)) -> JSONResponse:
    """Report backend health keyed by backend name."""
    health = await backend.ping()
    body = {backend.name: ComponentHealth(healthy=health.healthy, message=health.message)}

    return JSONResponse(
        status_code=200 if health.healthy else 500,
        content={name: component.model_dump(exclude_none=True) for name, component in body.items()},
    )


@router.get("/version", response_model=VersionResponse, summary="Version")
async def version() -> VersionResponse:
    return build_version()


@router.get("/favicon.ico", include_in_schema=False)
async def favicon() -> Response:
    return Response(status_code=204)
