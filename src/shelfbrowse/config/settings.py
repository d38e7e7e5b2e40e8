"""Application settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. YAML config file (if specified)
  2. Environment variables (SHELFBROWSE_ prefix)
  3. Default values
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class ServerSettings(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="0.0.0.0", description="Server bind address")
    port: int = Field(default=8080, description="Server port")
    workers: int = Field(default=1, description="Number of worker processes")
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")


class SolrClientSettings(BaseModel):
    """One Solr endpoint role with its own timeouts.

    Timeouts are in seconds and never drop below one second.
    """

    endpoint: str = Field(min_length=1, description="Path below the core, e.g. 'select'")
    conn_timeout: int = Field(default=5, description="Connect timeout in seconds")
    read_timeout: int = Field(default=10, description="Read timeout in seconds")

    @field_validator("conn_timeout", "read_timeout", mode="before")
    @classmethod
    def _at_least_one_second(cls, v: Any) -> int:
        try:
            value = int(v)
        except (TypeError, ValueError):
            return 1
        return max(value, 1)


class SolrClientsSettings(BaseModel):
    """Endpoint roles: document lookup, health check and term enumeration."""

    service: SolrClientSettings = Field(default_factory=lambda: SolrClientSettings(endpoint="select"))
    healthcheck: SolrClientSettings = Field(
        default_factory=lambda: SolrClientSettings(endpoint="admin/ping", conn_timeout=2, read_timeout=5)
    )
    shelf_browse: SolrClientSettings = Field(default_factory=lambda: SolrClientSettings(endpoint="terms"))


class SolrParamsSettings(BaseModel):
    """Fixed parameters sent with every document lookup."""

    qt: str = Field(default="search", min_length=1, description="Solr request handler")
    deftype: str = Field(default="lucene", min_length=1, description="Solr query parser")
    fq: list[str] = Field(default_factory=list, description="Filter queries applied to every lookup")
    fl: list[str] = Field(default_factory=lambda: ["*"], description="Field list returned by lookups")


class ShelfBrowseSettings(BaseModel):
    """Shelf key fields and window sizing."""

    forward_key: str = Field(default="shelfkey", description="Field holding the forward shelf key")
    reverse_key: str = Field(default="reverse_shelfkey", description="Field holding the reverse shelf key")
    default_items: int = Field(default=5, ge=1, description="Neighbors per side when no range is requested")
    max_items: int = Field(default=25, ge=1, description="Upper bound on neighbors per side")
    overage: int = Field(
        default=10,
        ge=1,
        description="Multiplier applied to the range when enumerating candidate terms",
    )
    resolve_concurrency: int = Field(
        default=1,
        ge=1,
        description="Candidate lookups allowed in flight per direction (1 = sequential)",
    )


class CoverImageSettings(BaseModel):
    """Inputs for the cover image service URL."""

    field_name: str = Field(default="cover_image_url", description="Output field that receives the URL")
    url_prefix: str = Field(default="https://coverimages.example.edu/", description="Cover service URL prefix")
    id_field: str = Field(default="id")
    title_field: str = Field(default="title_a")
    author_fields: list[str] = Field(default_factory=lambda: ["author_a", "author_added_entry_a"])
    isbn_field: str = Field(default="isbn_a")
    oclc_field: str = Field(default="oclc_a")
    lccn_field: str = Field(default="lccn_a")
    upc_field: str = Field(default="upc_a")
    pool_field: str = Field(default="pool_f")
    music_pool: str = Field(default="music_recordings")


class SolrSettings(BaseModel):
    """Solr connection and query configuration."""

    host: str = Field(default="http://localhost:8983/solr", min_length=1, description="Solr base URL")
    core: str = Field(default="test_core", min_length=1, description="Solr core/collection name")
    clients: SolrClientsSettings = Field(default_factory=SolrClientsSettings)
    params: SolrParamsSettings = Field(default_factory=SolrParamsSettings)
    shelf_browse: ShelfBrowseSettings = Field(default_factory=ShelfBrowseSettings)
    cover_images: CoverImageSettings = Field(default_factory=CoverImageSettings)

    def url_for(self, client: SolrClientSettings) -> str:
        """Full URL of an endpoint role: ``host/core/endpoint``."""
        return f"{self.host.rstrip('/')}/{self.core}/{client.endpoint.lstrip('/')}"


class OutputField(BaseModel):
    """Maps a Solr field onto a name in the browse response."""

    name: str = Field(min_length=1, description="Output JSON name")
    field: str = Field(min_length=1, description="Source Solr field")


def _default_fields() -> list[OutputField]:
    return [
        OutputField(name="id", field="id"),
        OutputField(name="title", field="title_a"),
        OutputField(name="author", field="author_a"),
        OutputField(name="call_number", field="call_number_a"),
        OutputField(name="location", field="location2_a"),
        OutputField(name="cover_image_url", field="thumbnail_url_a"),
    ]


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")


class Settings(BaseSettings):
    """Root application settings.

    Configuration is loaded from environment variables with the SHELFBROWSE_ prefix.
    Nested settings use double underscores: SHELFBROWSE_SOLR__HOST=http://solr:8983/solr

    Example:
        SHELFBROWSE_SERVER__PORT=9090
        SHELFBROWSE_JWT_KEY=secret
        SHELFBROWSE_SOLR__SHELF_BROWSE__MAX_ITEMS=50
    """

    model_config = {
        "env_prefix": "SHELFBROWSE_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    # Application metadata
    app_name: str = Field(default="shelfbrowse", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")
    jwt_key: str = Field(default="", description="HS256 key for bearer tokens; empty rejects every browse request")

    # Component settings
    server: ServerSettings = Field(default_factory=ServerSettings)
    solr: SolrSettings = Field(default_factory=SolrSettings)
    fields: list[OutputField] = Field(default_factory=_default_fields, description="Output field projection")
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        YAML values are passed as init arguments, so they win over environment
        variables for any key the file sets.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated Settings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)
