"""Browse models — Items, outcomes and the JSON shape of a browse response."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from shelfbrowse.models.document import SolrDocument


class BrowseStatus(str, Enum):
    """Outcome class of a browse request.

    Each value maps onto one HTTP status at the service boundary.
    """

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    INTERNAL_ERROR = "internal_error"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    BrowseStatus.SUCCESS: 200,
    BrowseStatus.NOT_FOUND: 404,
    BrowseStatus.INTERNAL_ERROR: 500,
}


class BrowseItem(BaseModel):
    """A resolved document together with its shelf keys."""

    model_config = {"arbitrary_types_allowed": True}

    doc: SolrDocument
    forward_key: str = ""
    reverse_key: str = ""

    @property
    def has_shelf_keys(self) -> bool:
        return bool(self.forward_key or self.reverse_key)


class BrowseResult(BaseModel):
    """What the resolver hands back to the service boundary."""

    status: BrowseStatus = Field(description="Outcome class")
    items: list[dict[str, str]] = Field(default_factory=list, description="Projected records in shelf order")
    message: str | None = Field(default=None, description="Explanation for a failed outcome")

    @property
    def ok(self) -> bool:
        return self.status is BrowseStatus.SUCCESS


class BrowseResponse(BaseModel):
    """JSON body of ``GET /api/browse/{id}``."""

    items: list[dict[str, str]] | None = Field(default=None, description="Projected records in shelf order")
    status_code: int = Field(description="HTTP status of the response")
    status_msg: str | None = Field(default=None, description="Error message, if any")

    @classmethod
    def from_result(cls, result: BrowseResult) -> BrowseResponse:
        return cls(
            items=result.items or None,
            status_code=result.status.http_status,
            status_msg=result.message,
        )
