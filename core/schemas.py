"""Pydantic models describing served files and resolved byte ranges."""

from __future__ import annotations

from email.utils import formatdate
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FileMetadata(BaseModel):
    """Stat result for a media file, cached per path."""

    model_config = ConfigDict(frozen=True)

    size: int = Field(..., ge=0, description="File size in bytes")
    last_modified: float = Field(..., description="mtime as epoch seconds")
    exists: bool = True

    @property
    def http_last_modified(self) -> str:
        """`Last-Modified` header value (IMF-fixdate, GMT)."""
        return formatdate(self.last_modified, usegmt=True)


class RangeSpec(BaseModel):
    """Inclusive byte window `[start, end]` of a source of `total` bytes."""

    model_config = ConfigDict(frozen=True)

    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)
    total: int = Field(..., gt=0)

    @model_validator(mode="after")
    def _check_bounds(self) -> RangeSpec:
        if not self.start <= self.end < self.total:
            raise ValueError(
                f"range {self.start}-{self.end} outside source of {self.total} bytes"
            )
        return self

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def content_range(self) -> str:
        return f"bytes {self.start}-{self.end}/{self.total}"


class RangeKind(str, Enum):
    """How a request's Range header resolved against the file size."""

    FULL = "full"
    PARTIAL = "partial"
    UNSATISFIABLE = "unsatisfiable"
    MALFORMED = "malformed"


class RangeOutcome(BaseModel):
    """Result of range resolution; `window` is set only for PARTIAL."""

    model_config = ConfigDict(frozen=True)

    kind: RangeKind
    window: RangeSpec | None = None
    reason: str = ""

    @model_validator(mode="after")
    def _window_matches_kind(self) -> RangeOutcome:
        if (self.kind is RangeKind.PARTIAL) != (self.window is not None):
            raise ValueError("window must be present exactly for partial outcomes")
        return self

    @classmethod
    def full(cls) -> RangeOutcome:
        return cls(kind=RangeKind.FULL)

    @classmethod
    def partial(cls, start: int, end: int, total: int) -> RangeOutcome:
        return cls(
            kind=RangeKind.PARTIAL,
            window=RangeSpec(start=start, end=end, total=total),
        )

    @classmethod
    def unsatisfiable(cls, reason: str) -> RangeOutcome:
        return cls(kind=RangeKind.UNSATISFIABLE, reason=reason)

    @classmethod
    def malformed(cls, reason: str) -> RangeOutcome:
        return cls(kind=RangeKind.MALFORMED, reason=reason)
