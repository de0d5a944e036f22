"""Data models for the HTTP getter."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from repofetch.getter.constants import HTTP_STATUS_OK_MAX, HTTP_STATUS_OK_MIN


class FetchResult(BaseModel):
    """Result of a retrieval.

    Holds the final response after redirects. Error statuses are results,
    not exceptions; the caller decides what a 404 means for it.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_code: int = Field(ge=100, le=599, description="HTTP status code")
    final_url: Annotated[
        str, Field(min_length=1, description="Final URL after redirects")
    ]
    headers: dict[str, str] = Field(
        default_factory=dict, description="Response headers"
    )
    body: bytes = Field(default=b"", description="Response body, exactly as served")
    redirects: int = Field(default=0, ge=0, description="Redirect hops followed")

    @property
    def is_success(self) -> bool:
        """Check if the response had a 2xx status."""
        return HTTP_STATUS_OK_MIN <= self.status_code < HTTP_STATUS_OK_MAX

    @property
    def body_size(self) -> int:
        """Get the size of the response body in bytes."""
        return len(self.body)
