"""Raw response schemas for the built-in wire protocols.

These models describe the exact shape returned by the sources before the
adapters hand plain records to the orchestrator. Unknown keys are kept so
that feature payloads are never altered by validation.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FeatureCountResponse(BaseModel):
    """ArcGIS ``returnCountOnly=true`` response."""

    count: int | None = None

    model_config = ConfigDict(extra="allow")


class FeatureCollectionResponse(BaseModel):
    """ArcGIS ``f=geojson`` query response.

    ``exceededTransferLimit`` is the server's authoritative more-data flag.
    It is absent on servers that never truncate a page.
    """

    type: str = "FeatureCollection"
    features: list[Any] = Field(default_factory=list)
    exceeded_transfer_limit: bool | None = Field(default=None, alias="exceededTransferLimit")

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @field_validator("features", mode="before")
    @classmethod
    def _null_features(cls, value: Any) -> Any:
        return [] if value is None else value

    def has_more(self, batch_size: int) -> bool:
        """More-data verdict for this page."""
        if self.exceeded_transfer_limit is not None:
            return self.exceeded_transfer_limit
        return len(self.features) == batch_size
