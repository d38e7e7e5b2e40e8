"""Browse resolver — Builds the ordered shelf window around one item.

Pipeline per request:
  1. Resolve the requested range against the configured default and maximum
  2. Look up the anchor item and read its forward/reverse shelf keys
  3. Enumerate candidate keys after the anchor in both directions
  4. Re-resolve candidates into documents, skipping any that fail
  5. Assemble ``reverse + anchor + forward`` and project the output fields

Failures on the anchor or on term enumeration end the request; a candidate
that cannot be resolved is silently left out of the window.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from itertools import islice
from typing import TYPE_CHECKING, Any, TypeVar

from shelfbrowse.adapters.base.exceptions import BackendError, DocumentNotFoundError, NoShelfKeysError
from shelfbrowse.core.covers import build_cover_url
from shelfbrowse.models.browse import BrowseItem, BrowseResult, BrowseStatus
from shelfbrowse.models.document import SolrDocument
from shelfbrowse.observability.logging import get_logger

if TYPE_CHECKING:
    from shelfbrowse.adapters.base.backend import SearchBackend
    from shelfbrowse.config.settings import Settings, ShelfBrowseSettings

logger = get_logger(__name__)

_T = TypeVar("_T")


def resolve_range(requested: Any, default: int, maximum: int) -> int:
    """Neighbors per side for a request.

    Missing, non-numeric and non-positive values fall back to ``default``;
    values above ``maximum`` are capped rather than rejected.
    """
    try:
        limit = int(requested)
    except (TypeError, ValueError):
        limit = default

    if limit <= 0:
        limit = default
    if limit > maximum:
        limit = maximum
    return limit


def quote_phrase(value: str) -> str:
    """Escape ``value`` for use inside a double-quoted Solr phrase."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


async def take_resolved(
    candidates: Iterable[str],
    resolve: Callable[[str], Awaitable[_T | None]],
    limit: int,
    concurrency: int = 1,
) -> list[_T]:
    """First ``limit`` successful resolutions of ``candidates``, in candidate order.

    ``resolve`` returns None for a candidate that should be skipped.  Up to
    ``concurrency`` lookups run at once, never more than are still needed, and
    no further lookups are issued once ``limit`` results are in hand.
    """
    taken: list[_T] = []
    pending = iter(candidates)

    while len(taken) < limit:
        batch = list(islice(pending, min(concurrency, limit - len(taken))))
        if not batch:
            break

        results = await asyncio.gather(*(resolve(candidate) for candidate in batch))

        for result in results:
            if result is None:
                continue
            taken.append(result)
            if len(taken) >= limit:
                break

    return taken


class BrowseResolver:
    """Resolves shelf browse windows against a search backend.

    Holds no per-request state, so one instance serves every request.

    Attributes:
        backend: The search backend used for lookups and term enumeration.
        settings: Application configuration.
    """

    def __init__(self, backend: SearchBackend, settings: Settings) -> None:
        self.backend = backend
        self.settings = settings

    @property
    def _browse(self) -> ShelfBrowseSettings:
        return self.settings.solr.shelf_browse

    # ── Items ────────────────────────────────────────────────────────────

    async def get_item_details(self, field: str, value: str, *, verbose: bool = False) -> BrowseItem:
        """Look up the document whose ``field`` equals ``value`` and read its shelf keys.

        Raises:
            DocumentNotFoundError: If nothing matches.
            NoShelfKeysError: If the document has no shelf keys.
            BackendError: On backend failure.
        """
        doc = await self.backend.lookup_by_field(field, quote_phrase(value), verbose=verbose)

        item = BrowseItem(
            doc=doc,
            forward_key=doc.get_first_value(self._browse.forward_key),
            reverse_key=doc.get_first_value(self._browse.reverse_key),
        )

        if not item.has_shelf_keys:
            raise NoShelfKeysError()

        return item

    async def _try_item(self, field: str, key: str, verbose: bool) -> BrowseItem | None:
        try:
            return await self.get_item_details(field, key, verbose=verbose)
        except (DocumentNotFoundError, BackendError) as e:
            logger.debug("Skipping shelf key", field=field, key=key, reason=type(e).__name__, error=str(e))
            return None

    async def _neighbors(self, field: str, keys: list[str], limit: int, verbose: bool) -> list[BrowseItem]:
        return await take_resolved(
            keys,
            lambda key: self._try_item(field, key, verbose),
            limit,
            self._browse.resolve_concurrency,
        )

    async def _terms(self, field: str, key: str, limit: int, verbose: bool) -> list[str]:
        # an empty key enumerates from the start of the index
        return await self.backend.enumerate_terms(field, key, limit, verbose=verbose)

    # ── Projection ───────────────────────────────────────────────────────

    def project(self, doc: SolrDocument) -> dict[str, str]:
        """Map one document onto the configured output fields.

        Empty values are left out; the cover image field falls back to a
        generated cover service URL.
        """
        covers = self.settings.solr.cover_images
        record: dict[str, str] = {}

        for field in self.settings.fields:
            value = doc.get_first_value(field.field)

            if not value and field.name == covers.field_name:
                value = build_cover_url(doc, covers)

            if value:
                record[field.name] = value

        return record

    # ── Browse ───────────────────────────────────────────────────────────

    async def resolve_browse(
        self,
        item_id: str,
        requested_range: Any = None,
        *,
        verbose: bool = False,
    ) -> BrowseResult:
        """Build the shelf window centred on ``item_id``.

        Args:
            item_id: Identifier of the anchor item.
            requested_range: Neighbors wanted on each side (clamped).
            verbose: Log full backend requests.

        Returns:
            A ``BrowseResult``: the projected window on success, otherwise a
            not-found or internal-error status with a message.
        """
        limit = resolve_range(requested_range, self._browse.default_items, self._browse.max_items)
        logger.info("Browse request", item_id=item_id, requested_range=requested_range, limit=limit)

        try:
            anchor = await self.get_item_details("id", item_id, verbose=verbose)
        except DocumentNotFoundError as e:
            logger.warning("Browse anchor not usable", item_id=item_id, error=str(e))
            return BrowseResult(status=BrowseStatus.NOT_FOUND, message=str(e))
        except BackendError as e:
            logger.error("Browse anchor lookup failed", item_id=item_id, error_type=type(e).__name__, error=str(e))
            return BrowseResult(status=BrowseStatus.INTERNAL_ERROR, message=str(e))

        forward_field = self._browse.forward_key
        reverse_field = self._browse.reverse_key

        results = await asyncio.gather(
            self._terms(forward_field, anchor.forward_key, limit, verbose),
            self._terms(reverse_field, anchor.reverse_key, limit, verbose),
            return_exceptions=True,
        )

        for result in results:
            if isinstance(result, BackendError):
                logger.error("Term enumeration failed", error_type=type(result).__name__, error=str(result))
                return BrowseResult(status=BrowseStatus.INTERNAL_ERROR, message=str(result))
            if isinstance(result, BaseException):
                raise result

        forward_keys, reverse_keys = results

        reverse_items = await self._neighbors(reverse_field, reverse_keys, limit, verbose)
        forward_items = await self._neighbors(forward_field, forward_keys, limit, verbose)

        # reverse neighbors come back closest first; the window runs in shelf order
        window = [*reversed(reverse_items), anchor, *forward_items]

        logger.info(
            "Browse window assembled",
            item_id=item_id,
            reverse_candidates=len(reverse_keys),
            reverse_items=len(reverse_items),
            forward_candidates=len(forward_keys),
            forward_items=len(forward_items),
        )

        return BrowseResult(
            status=BrowseStatus.SUCCESS,
            items=[self.project(item.doc) for item in window],
        )
