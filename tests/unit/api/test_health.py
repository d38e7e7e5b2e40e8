"""Tests for the health and version endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from shelfbrowse import __version__
from shelfbrowse.adapters.base.backend import BackendHealth
from shelfbrowse.api.app import create_app
from shelfbrowse.api.endpoints.health import build_version
from shelfbrowse.config.settings import Settings


@pytest.fixture
def client(settings: Settings, fake_backend) -> TestClient:
    """Create a test client for the API."""
    with TestClient(create_app(settings, backend=fake_backend)) as test_client:
        yield test_client


class TestHealthEndpoints:
    """Tests for GET /healthcheck."""

    def test_healthy(self, client: TestClient) -> None:
        resp = client.get("/healthcheck")
        assert resp.status_code == 200
        assert resp.json() == {"solr": {"healthy": True}}

    def test_unhealthy(self, client: TestClient, fake_backend) -> None:
        fake_backend.health = BackendHealth(healthy=False, message="ping status was not OK")

        resp = client.get("/healthcheck")

        assert resp.status_code == 500
        assert resp.json() == {"solr": {"healthy": False, "message": "ping status was not OK"}}

    def test_no_token_needed(self, client: TestClient) -> None:
        assert client.get("/healthcheck").status_code == 200


class TestVersion:
    def test_version_endpoint(self, client: TestClient) -> None:
        resp = client.get("/version")
        assert resp.status_code == 200
        data = resp.json()
        assert data["version"] == __version__
        assert data["python_version"]
        assert "build" in data

    def test_single_build_tag(self, tmp_path, monkeypatch) -> None:
        (tmp_path / "buildtag.2024.05.01-r17").touch()
        monkeypatch.setenv("GIT_COMMIT", "0a1b2c3")

        info = build_version(tmp_path)

        assert info.build == "2024.05.01-r17"
        assert info.git_commit == "0a1b2c3"

    def test_no_build_tag(self, tmp_path, monkeypatch) -> None:
        monkeypatch.delenv("GIT_COMMIT", raising=False)
        info = build_version(tmp_path)
        assert info.build == "unknown"
        assert info.git_commit is None

    def test_ambiguous_build_tags(self, tmp_path) -> None:
        (tmp_path / "buildtag.a").touch()
        (tmp_path / "buildtag.b").touch()
        assert build_version(tmp_path).build == "unknown"


class TestFavicon:
    def test_favicon_is_empty(self, client: TestClient) -> None:
        resp = client.get("/favicon.ico")
        assert resp.status_code == 204
        assert resp.content == b""
