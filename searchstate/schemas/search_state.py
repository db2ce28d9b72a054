"""Search-state API schemas."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class SearchStateResponse(BaseModel):
    """Result of a store/get/update/clear/defaults call."""

    success: bool = True
    data: dict[str, Any] = Field(
        default_factory=dict, description="Cached parameters after the operation"
    )


class ResolvedSearchResponse(BaseModel):
    """Parameters resolved for a registered resource (request > cache > defaults)."""

    success: bool = True
    data: dict[str, Any] = Field(..., description="Resolved parameters")
    sort: str | None = Field(None, description="Resolved sort key, if any")
    direction: Literal["asc", "desc"]
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
