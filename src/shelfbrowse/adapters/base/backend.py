"""Base search backend — Abstract interface for the index behind shelf browse.

A backend answers three read-only questions:
  1. Which single document matches ``field:"value"``?
  2. Which indexed terms of a field sort directly after a given key?
  3. Is the backend alive?

Implementations own their HTTP transports, which are created once at startup
and shared by every request.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from shelfbrowse.models.document import SolrDocument


class BackendHealth(BaseModel):
    """Health status of a search backend."""

    healthy: bool = Field(description="Whether the backend answered the liveness probe with OK")
    message: str | None = Field(default=None, description="Reason the backend is unhealthy")
    latency_ms: int = Field(default=0, description="Latency of the probe in ms")


class SearchBackend(ABC):
    """Abstract base class for shelf browse search backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name (e.g., 'solr')."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create transports. Called once during application startup."""

    @abstractmethod
    async def shutdown(self) -> None:
        """Close transports. Called during application shutdown."""

    @abstractmethod
    async def lookup_by_field(self, field: str, value: str, *, verbose: bool = False) -> SolrDocument:
        """Fetch the single document matching ``field:"value"``.

        ``value`` is used verbatim inside the phrase; callers escape it.

        Raises:
            DocumentNotFoundError: If nothing matches.
            BackendError: On any transport or protocol failure.
        """

    @abstractmethod
    async def enumerate_terms(self, field: str, start_key: str, limit: int, *, verbose: bool = False) -> list[str]:
        """Indexed terms of ``field`` sorting strictly after ``start_key``.

        Returns more than ``limit`` terms when available, so callers can skip
        terms that fail to resolve.

        Raises:
            BackendError: On any transport or protocol failure.
        """

    @abstractmethod
    async def ping(self) -> BackendHealth:
        """Probe backend liveness. Never raises."""
