"""Tests for the browse endpoint GET /api/browse/{item_id}."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from shelfbrowse.adapters.base.exceptions import BackendReportedError, BackendTimeoutError
from shelfbrowse.api.app import create_app
from shelfbrowse.config.settings import Settings


@pytest.fixture
def client(settings: Settings, fake_backend, auth_headers: dict[str, str]) -> TestClient:
    """Create an authenticated test client for the API."""
    app = create_app(settings, backend=fake_backend)
    with TestClient(app, headers=auth_headers) as test_client:
        yield test_client


def _ids(body: dict) -> list[str]:
    return [item["id"] for item in body["items"]]


class TestBrowseEndpoint:
    """Tests for GET /api/browse/{item_id}."""

    def test_returns_window(self, client: TestClient) -> None:
        resp = client.get("/api/browse/u100", params={"range": "2"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["status_code"] == 200
        assert "status_msg" not in body
        assert _ids(body) == ["u98", "u99", "u100", "u101", "u102"]

    def test_items_are_projected(self, client: TestClient) -> None:
        resp = client.get("/api/browse/u100", params={"range": "1"})
        item = resp.json()["items"][1]

        assert item["id"] == "u100"
        assert item["title"] == "Title 100"
        assert item["call_number"] == "QA100"
        assert item["cover_image_url"].startswith("https://covers.test/api/u100?")
        assert "shelfkey" not in item

    def test_default_range(self, client: TestClient) -> None:
        resp = client.get("/api/browse/u100")
        assert len(resp.json()["items"]) == 7

    def test_invalid_range_uses_default(self, client: TestClient) -> None:
        resp = client.get("/api/browse/u100", params={"range": "lots"})
        assert resp.status_code == 200
        assert len(resp.json()["items"]) == 7

    def test_range_is_capped(self, client: TestClient) -> None:
        resp = client.get("/api/browse/u100", params={"range": "999"})
        assert len(resp.json()["items"]) == 11

    def test_verbose_flag_accepted(self, client: TestClient) -> None:
        resp = client.get("/api/browse/u100", params={"range": "1", "verbose": "true"})
        assert resp.status_code == 200

    def test_unknown_item(self, client: TestClient) -> None:
        resp = client.get("/api/browse/nope")

        assert resp.status_code == 404
        body = resp.json()
        assert body["status_code"] == 404
        assert body["status_msg"] == "record not found"
        assert "items" not in body

    def test_item_without_shelf_keys(self, settings: Settings, backend_factory, auth_headers) -> None:
        backend = backend_factory([{"id": "u1", "title_a": "Loose leaf"}])
        with TestClient(create_app(settings, backend=backend), headers=auth_headers) as client:
            resp = client.get("/api/browse/u1")

        assert resp.status_code == 404
        assert resp.json()["status_msg"] == "item does not have shelf keys"

    def test_backend_error(self, client: TestClient, fake_backend) -> None:
        fake_backend.lookup_errors["u100"] = BackendReportedError(500, "index corrupt")

        resp = client.get("/api/browse/u100")

        assert resp.status_code == 500
        assert resp.json() == {"status_code": 500, "status_msg": "500 - index corrupt"}

    def test_term_enumeration_failure(self, client: TestClient, fake_backend) -> None:
        fake_backend.terms_errors["shelfkey"] = BackendTimeoutError("terms timed out")

        resp = client.get("/api/browse/u100")

        assert resp.status_code == 500
        assert "timed out" in resp.json()["status_msg"]

    def test_request_id_echoed(self, client: TestClient) -> None:
        resp = client.get("/api/browse/u100", headers={"X-Request-ID": "abc123"})
        assert resp.headers["X-Request-ID"] == "abc123"

    def test_request_id_generated(self, client: TestClient) -> None:
        resp = client.get("/api/browse/u100")
        assert len(resp.headers["X-Request-ID"]) == 8


class TestLifecycle:
    def test_backend_initialized_and_closed(self, settings: Settings, fake_backend) -> None:
        app = create_app(settings, backend=fake_backend)

        with TestClient(app):
            assert fake_backend.initialized is True
            assert app.state.backend is fake_backend
            assert app.state.resolver is not None

        assert fake_backend.closed is True
        assert app.state.resolver is None

    def test_unavailable_before_startup(self, settings: Settings, fake_backend, auth_headers) -> None:
        # without the context manager the lifespan never runs
        client = TestClient(create_app(settings, backend=fake_backend), headers=auth_headers)
        resp = client.get("/api/browse/u100")
        assert resp.status_code == 503
