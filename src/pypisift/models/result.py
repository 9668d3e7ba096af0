"""Search result model shared by the index projector and the response codec."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SearchResult(BaseModel):
    """One package entry in a legacy search response."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="", description="Package name")
    version: str = Field(default="", description="Package version")
    summary: str = Field(default="", description="One-line package summary")

    @property
    def key(self) -> tuple[str, str]:
        """Identity used when merging results from several repositories."""
        return (self.name, self.version)
