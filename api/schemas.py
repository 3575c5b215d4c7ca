"""API response schemas using Pydantic."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class StatsResponse(BaseModel):
    """Transfer totals since the process started."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_transferred: str = Field(..., description="Human-readable byte count")
    total_requests: int = Field(..., ge=0)


class HealthResponse(BaseModel):
    """Liveness check payload."""

    status: str = "ok"
    media_root: str
    media_root_exists: bool
    cached_files: int
