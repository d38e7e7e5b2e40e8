"""Shared test fixtures and configuration."""

from __future__ import annotations

from typing import Any

import pytest
from jose import jwt

from shelfbrowse.adapters.base.backend import BackendHealth, SearchBackend
from shelfbrowse.adapters.base.exceptions import BackendError, DocumentNotFoundError
from shelfbrowse.config.settings import Settings
from shelfbrowse.models.document import SolrDocument

FORWARD_KEY = "shelfkey"
REVERSE_KEY = "reverse_shelfkey"
JWT_KEY = "test-signing-key"


def make_doc(n: int, **extra: Any) -> dict[str, Any]:
    """A catalog record at shelf position ``n``.

    Reverse keys are inverted so ascending reverse order walks the shelf backwards.
    """
    doc: dict[str, Any] = {
        "id": f"u{n}",
        "title_a": [f"Title {n}"],
        "author_a": [f"Author {n}"],
        "call_number_a": [f"QA{n}"],
        FORWARD_KEY: [f"B{n:03d}"],
        REVERSE_KEY: [f"R{999 - n:03d}"],
    }
    doc.update(extra)
    return doc


class FakeBackend(SearchBackend):
    """In-memory stand-in for Solr.

    Lookups match any document holding ``value`` in ``field``; term enumeration
    returns the sorted distinct values of a field after the start key.
    """

    def __init__(self, docs: list[dict[str, Any]], overage: int = 10) -> None:
        self.docs = docs
        self.overage = overage
        self.lookup_errors: dict[str, BackendError] = {}
        self.terms_errors: dict[str, BackendError] = {}
        self.extra_terms: dict[str, list[str]] = {}
        self.lookups: list[tuple[str, str]] = []
        self.terms_calls: list[tuple[str, str, int]] = []
        self.health = BackendHealth(healthy=True)
        self.initialized = False
        self.closed = False

    @property
    def name(self) -> str:
        return "solr"

    async def initialize(self) -> None:
        self.initialized = True

    async def shutdown(self) -> None:
        self.closed = True

    async def lookup_by_field(self, field: str, value: str, *, verbose: bool = False) -> SolrDocument:
        self.lookups.append((field, value))
        if value in self.lookup_errors:
            raise self.lookup_errors[value]
        for raw in self.docs:
            doc = SolrDocument(raw)
            if value in doc.get_values(field):
                return doc
        raise DocumentNotFoundError("record not found")

    async def enumerate_terms(self, field: str, start_key: str, limit: int, *, verbose: bool = False) -> list[str]:
        self.terms_calls.append((field, start_key, limit))
        if field in self.terms_errors:
            raise self.terms_errors[field]
        values = {v for raw in self.docs for v in SolrDocument(raw).get_values(field)}
        values.update(self.extra_terms.get(field, []))
        return sorted(v for v in values if v > start_key)[: self.overage * limit]

    async def ping(self) -> BackendHealth:
        return self.health


@pytest.fixture
def settings() -> Settings:
    """Create a test Settings instance with defaults."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        debug=True,
        jwt_key=JWT_KEY,
        solr={
            "host": "http://solr.test:8983/solr",
            "core": "catalog",
            "shelf_browse": {
                "forward_key": FORWARD_KEY,
                "reverse_key": REVERSE_KEY,
                "default_items": 3,
                "max_items": 5,
            },
            "cover_images": {
                "url_prefix": "https://covers.test/api/",
                "id_field": "id",
                "title_field": "title_a",
                "author_fields": ["author_a", "author_added_a"],
                "isbn_field": "isbn_a",
                "oclc_field": "oclc_a",
                "lccn_field": "lccn_a",
                "upc_field": "upc_a",
                "pool_field": "pool_f",
                "music_pool": "music_recordings",
            },
        },
        fields=[
            {"name": "id", "field": "id"},
            {"name": "title", "field": "title_a"},
            {"name": "call_number", "field": "call_number_a"},
            {"name": "cover_image_url", "field": "thumbnail_url_a"},
        ],
        observability={"log_level": "debug", "log_format": "console"},
    )


@pytest.fixture
def shelf_docs() -> list[dict[str, Any]]:
    """Twenty records at shelf positions 90-109."""
    return [make_doc(n) for n in range(90, 110)]


@pytest.fixture
def fake_backend(shelf_docs: list[dict[str, Any]]) -> FakeBackend:
    return FakeBackend(shelf_docs)


@pytest.fixture
def doc_factory():
    """Build catalog records: ``doc_factory(n, **extra_fields)``."""
    return make_doc


@pytest.fixture
def backend_factory():
    """Build a ``FakeBackend`` over a custom record list."""
    return FakeBackend


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Authorization header carrying a token signed with the test key."""
    token = jwt.encode({"sub": "u1", "role": "patron"}, JWT_KEY, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}
