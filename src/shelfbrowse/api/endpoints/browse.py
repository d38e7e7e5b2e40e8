"""Browse endpoint — The shelf window around one catalog item."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from shelfbrowse.api.auth import authenticate
from shelfbrowse.api.deps import get_resolver
from shelfbrowse.core.resolver import BrowseResolver
from shelfbrowse.models.browse import BrowseResponse
from shelfbrowse.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/browse/{item_id}",
    response_model=BrowseResponse,
    response_model_exclude_none=True,
    summary="Shelf Browse",
    description=(
        "Return the items that sit on either side of `item_id` on the virtual shelf, "
        "in shelf order with the requested item in the middle.\n\n"
        "`range` is the number of neighbors wanted on each side; missing or invalid "
        "values use the configured default and large values are capped."
    ),
    responses={
        401: {"description": "Missing or invalid bearer token"},
        404: {"description": "Item not found, or item has no shelf keys"},
        500: {"description": "Search backend failure"},
    },
)
async def browse(
    item_id: str,
    range_: str | None = Query(default=None, alias="range", description="Neighbors per side"),
    verbose: bool = Query(default=False, description="Log full Solr requests"),
    resolver: BrowseResolver = Depends(get_resolver),
    claims: dict[str, Any] = Depends(authenticate),
) -> JSONResponse:
    """Resolve the shelf window and map its outcome onto an HTTP status."""
    logger.info("Authenticated request", user_id=claims.get("userId") or claims.get("sub"), role=claims.get("role"))

    result = await resolver.resolve_browse(item_id, range_, verbose=verbose)

    if not result.ok:
        logger.warning("Browse failed", status=result.status.value, error=result.message)

    body = BrowseResponse.from_result(result)
    return JSONResponse(status_code=body.status_code, content=body.model_dump(exclude_none=True))
