"""Apache Solr backend — document lookups, term enumeration and ping over ``httpx``.

Three endpoint roles are configured independently, each with its own pooled
``httpx.AsyncClient`` and timeouts:

  - ``service``: JSON Request API lookups (``/select`` style handler)
  - ``healthcheck``: liveness probe (``/admin/ping``)
  - ``shelf_browse``: TermsComponent enumeration (``/terms``)

Usage::

    backend = SolrBackend(settings.solr)
    await backend.initialize()
    doc = await backend.lookup_by_field("id", "u12345")
    terms = await backend.enumerate_terms("shelfkey", doc.get_first_value("shelfkey"), 5)
"""

from __future__ import annotations

import json
import time
from typing import Any

import httpx

from shelfbrowse.adapters.base.backend import BackendHealth, SearchBackend
from shelfbrowse.adapters.base.exceptions import (
    BackendError,
    BackendReportedError,
    BackendResponseError,
    BackendTimeoutError,
    BackendUnavailableError,
    BackendUnreachableError,
    DocumentNotFoundError,
)
from shelfbrowse.config.settings import SolrClientSettings, SolrSettings
from shelfbrowse.models.document import SolrDocument
from shelfbrowse.observability.logging import get_logger

logger = get_logger(__name__)

# one Solr host per role, so total and keep-alive pool sizes match
_POOL_LIMITS = httpx.Limits(max_connections=100, max_keepalive_connections=100, keepalive_expiry=90.0)


def _is_connection_refused(exc: BaseException) -> bool:
    """Walk the exception chain looking for a refused connection."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, ConnectionRefusedError) or "refused" in str(current).lower():
            return True
        current = current.__cause__ or current.__context__
    return False


def _classify_transport_error(exc: Exception, url: str) -> BackendError:
    if isinstance(exc, httpx.TimeoutException):
        return BackendTimeoutError(f"{url} timed out")
    if isinstance(exc, httpx.ConnectError) and _is_connection_refused(exc):
        return BackendUnavailableError(f"{url} refused connection")
    return BackendUnreachableError(f"{url} unreachable: {exc}")


def _non_empty(values: list[str]) -> list[str]:
    return [v for v in values if v]


class _Endpoint:
    """A configured endpoint role: its URL and the client that talks to it."""

    def __init__(self, role: str, url: str, config: SolrClientSettings) -> None:
        self.role = role
        self.url = url
        self.config = config
        self.client: httpx.AsyncClient | None = None

    def open(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        timeout = httpx.Timeout(float(self.config.read_timeout), connect=float(self.config.conn_timeout))
        self.client = httpx.AsyncClient(timeout=timeout, limits=_POOL_LIMITS, transport=transport)

    async def close(self) -> None:
        if self.client:
            await self.client.aclose()
            self.client = None


class SolrBackend(SearchBackend):
    """Search backend for Apache Solr.

    Lookups go through the `JSON Request API`_ with the request in the body,
    which avoids ``414 URI Too Long`` on long phrase queries. Term enumeration
    uses the TermsComponent with an exclusive lower bound.

    .. _JSON Request API: https://solr.apache.org/guide/solr/latest/query-guide/json-request-api.html

    Args:
        settings: Solr connection, parameter and shelf browse settings.
        transport: Optional ``httpx`` transport shared by all endpoint roles
            (tests pass an ``httpx.MockTransport``).
    """

    def __init__(self, settings: SolrSettings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._settings = settings
        self._transport = transport
        clients = settings.clients
        self._service = _Endpoint("service", settings.url_for(clients.service), clients.service)
        self._healthcheck = _Endpoint("healthcheck", settings.url_for(clients.healthcheck), clients.healthcheck)
        self._shelf_browse = _Endpoint("shelf_browse", settings.url_for(clients.shelf_browse), clients.shelf_browse)

    @property
    def name(self) -> str:
        return "solr"

    @property
    def endpoints(self) -> dict[str, str]:
        """Endpoint URL per role."""
        return {ep.role: ep.url for ep in (self._service, self._healthcheck, self._shelf_browse)}

    async def initialize(self) -> None:
        """Create one pooled client per endpoint role."""
        for endpoint in (self._service, self._healthcheck, self._shelf_browse):
            endpoint.open(self._transport)
            logger.info(
                "Solr client ready",
                role=endpoint.role,
                url=endpoint.url,
                conn_timeout=endpoint.config.conn_timeout,
                read_timeout=endpoint.config.read_timeout,
            )

    async def shutdown(self) -> None:
        """Close all HTTP clients."""
        for endpoint in (self._service, self._healthcheck, self._shelf_browse):
            await endpoint.close()

    # ── Transport ────────────────────────────────────────────────────────

    async def _send(self, endpoint: _Endpoint, method: str, **kwargs: Any) -> dict[str, Any]:
        """Issue one request and return the decoded, status-checked body.

        Every call is logged with its elapsed time and outcome.
        """
        if endpoint.client is None:
            raise BackendUnreachableError(f"Solr {endpoint.role} client not initialized.")

        start = time.monotonic()
        try:
            resp = await endpoint.client.request(method, endpoint.url, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            elapsed_ms = int((time.monotonic() - start) * 1000)
            error = _classify_transport_error(e, endpoint.url)
            logger.error(
                "Failed response from Solr",
                method=method,
                url=endpoint.url,
                role=endpoint.role,
                error_type=type(error).__name__,
                error=str(e),
                elapsed_ms=elapsed_ms,
            )
            raise error from e

        elapsed_ms = int((time.monotonic() - start) * 1000)

        # Solr reports errors in the JSON body as well, so decode regardless of HTTP status
        try:
            data = resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(
                "Failed response from Solr",
                method=method,
                url=endpoint.url,
                role=endpoint.role,
                error_type=BackendResponseError.__name__,
                http_status=resp.status_code,
                error=str(e),
                elapsed_ms=elapsed_ms,
            )
            raise BackendResponseError(f"failed to decode Solr response: {e}") from e

        if not isinstance(data, dict):
            logger.error(
                "Failed response from Solr",
                method=method,
                url=endpoint.url,
                role=endpoint.role,
                error_type=BackendResponseError.__name__,
                http_status=resp.status_code,
                elapsed_ms=elapsed_ms,
            )
            raise BackendResponseError("unexpected Solr response body")

        header = data.get("responseHeader") or {}
        status = header.get("status", 0) if isinstance(header, dict) else 0
        qtime = header.get("QTime", 0) if isinstance(header, dict) else 0

        if status != 0:
            error = data.get("error") or {}
            code = error.get("code", status) if isinstance(error, dict) else status
            msg = error.get("msg", "") if isinstance(error, dict) else ""
            logger.error(
                "Failed response from Solr",
                method=method,
                url=endpoint.url,
                role=endpoint.role,
                error_type=BackendReportedError.__name__,
                http_status=resp.status_code,
                status=status,
                qtime=qtime,
                code=code,
                msg=msg,
                elapsed_ms=elapsed_ms,
            )
            raise BackendReportedError(code, msg)

        logger.info(
            "Successful response from Solr",
            method=method,
            url=endpoint.url,
            role=endpoint.role,
            qtime=qtime,
            elapsed_ms=elapsed_ms,
        )
        return data

    # ── Lookup ───────────────────────────────────────────────────────────

    def build_item_request(self, query: str) -> dict[str, Any]:
        """JSON Request API body asking for exactly one row matching ``query``."""
        params = self._settings.params
        return {
            "params": {
                "q": query,
                "qt": params.qt,
                "defType": params.deftype,
                "fq": _non_empty(params.fq),
                "fl": _non_empty(params.fl),
                "start": 0,
                "rows": 1,
            }
        }

    async def lookup_by_field(self, field: str, value: str, *, verbose: bool = False) -> SolrDocument:
        """Fetch the single document matching ``field:"value"``."""
        body = self.build_item_request(f'{field}:"{value}"')

        if verbose:
            logger.info("Solr request", body=json.dumps(body))
        else:
            logger.info("Solr request", q=body["params"]["q"])

        data = await self._send(self._service, "POST", json=body)

        response = data.get("response")
        docs = response.get("docs", []) if isinstance(response, dict) else None
        if not isinstance(docs, list):
            raise BackendResponseError("Solr response has no document list")

        logger.info(
            "Solr lookup result",
            start=response.get("start", 0),
            rows=len(docs),
            total=response.get("numFound", 0),
            max_score=response.get("maxScore", 0.0),
        )

        if not docs or not isinstance(docs[0], dict):
            raise DocumentNotFoundError("record not found")

        return SolrDocument(docs[0])

    # ── Terms ────────────────────────────────────────────────────────────

    async def enumerate_terms(self, field: str, start_key: str, limit: int, *, verbose: bool = False) -> list[str]:
        """Indexed terms of ``field`` sorting strictly after ``start_key``.

        Asks for ``overage * limit`` terms: some may belong to no retrievable
        record, and the buffer lets the caller still fill the requested range.
        """
        params = {
            "terms.fl": field,
            "terms.lower": start_key,
            "terms.lower.incl": "false",
            "terms.limit": str(self._settings.shelf_browse.overage * limit),
            "terms.sort": "index",
        }

        if verbose:
            logger.info("Solr terms request", url=str(httpx.URL(self._shelf_browse.url, params=params)))

        data = await self._send(self._shelf_browse, "GET", params=params)

        terms = data.get("terms") or {}
        if not isinstance(terms, dict):
            raise BackendResponseError("Solr terms response is not a map")

        # flat list of [term, count, term, count, ...]
        flat = terms.get(field) or []
        if not isinstance(flat, list):
            raise BackendResponseError(f"Solr terms for {field} are not a flat list")
        return [term for term in flat[::2] if isinstance(term, str)]

    # ── Health ───────────────────────────────────────────────────────────

    async def ping(self) -> BackendHealth:
        """Ping the Solr healthcheck endpoint."""
        start = time.monotonic()
        try:
            data = await self._send(self._healthcheck, "GET")
        except BackendError as e:
            return BackendHealth(
                healthy=False,
                message=str(e),
                latency_ms=int((time.monotonic() - start) * 1000),
            )

        latency_ms = int((time.monotonic() - start) * 1000)
        status = data.get("status")
        logger.info("Solr ping", status=status)

        if status != "OK":
            return BackendHealth(healthy=False, message="ping status was not OK", latency_ms=latency_ms)
        return BackendHealth(healthy=True, latency_ms=latency_ms)
