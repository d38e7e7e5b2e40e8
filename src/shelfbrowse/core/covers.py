"""Cover image URL builder.

Composes a minimal URL to the cover image service for items whose record has
no stored thumbnail. The service wants:

  - ``doc_type``: ``music`` or ``non_music``
  - music: ``artist_name`` and ``album_name``
  - everything else: ``title`` plus at least one of isbn, oclc, lccn, upc

Everything else is optional, so all identifiers are always sent when present.
"""

from __future__ import annotations

import httpx

from shelfbrowse.config.settings import CoverImageSettings
from shelfbrowse.models.document import SolrDocument
from shelfbrowse.observability.logging import get_logger

logger = get_logger(__name__)


def strip_author_dates(author: str) -> str:
    """Drop a trailing bracketed date annotation: ``"Bach, J.S. [1685-1750]"`` → ``"Bach, J.S."``."""
    return author.split("[", 1)[0].strip()


def first_author(doc: SolrDocument, fields: list[str]) -> str:
    """First non-empty value among ``fields``, in configured order."""
    for field in fields:
        value = doc.get_first_value(field)
        if value:
            logger.debug("Cover author found", field=field, author=value)
            return value
    return ""


def build_cover_url(doc: SolrDocument, config: CoverImageSettings) -> str:
    """Cover image service URL for ``doc``, or ``""`` if it cannot be built."""
    base = config.url_prefix + doc.get_first_value(config.id_field)
    title = doc.get_first_value(config.title_field)

    params: dict[str, str] = {}

    if config.music_pool in doc.get_values(config.pool_field):
        params["doc_type"] = "music"
        params["artist_name"] = strip_author_dates(first_author(doc, config.author_fields))
        params["album_name"] = title
    else:
        params["doc_type"] = "non_music"
        params["title"] = title

    params["isbn"] = ",".join(doc.get_values(config.isbn_field))
    params["oclc"] = ",".join(doc.get_values(config.oclc_field))
    params["lccn"] = ",".join(doc.get_values(config.lccn_field))
    params["upc"] = ",".join(doc.get_values(config.upc_field))

    query = {key: params[key] for key in sorted(params) if params[key]}

    try:
        # keep any query the prefix already carries, e.g. "https://covers/cover?id="
        return str(httpx.URL(base).copy_merge_params(query))
    except (httpx.InvalidURL, TypeError, ValueError) as e:
        logger.warning("Could not build cover image URL", base=base, error=str(e))
        return ""
