"""Reusable Pydantic Annotated types for domain-wide validation.

Every constrained type used by the models is defined here once,
so models can simply annotate their fields::

    from queuecord.domain.shared.types import NonEmptyStr, NonNegativeInt

    class MyModel(BaseModel):
        title: NonEmptyStr
        views: NonNegativeInt
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from pydantic import BeforeValidator, Field

# ── Numeric constraints ─────────────────────────────────────────────

NonNegativeInt = Annotated[int, Field(ge=0)]
"""Integer >= 0."""

PositiveInt = Annotated[int, Field(gt=0)]
"""Integer > 0."""

VolumeFloat = Annotated[float, Field(ge=0.0, le=2.0)]
"""Audio volume multiplier in [0.0, 2.0]."""


# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

TrackTitleStr = Annotated[str, Field(min_length=1, max_length=500)]
"""Track title: 1-500 characters."""

HttpUrlStr = Annotated[str, Field(pattern=r"^https?://")]
"""String that starts with http:// or https://."""

UploadDateStr = Annotated[str, Field(pattern=r"^\d{8}$")]
"""Upload date in YYYYMMDD format."""


# ── Domain-specific numeric constraints ─────────────────────────────

DurationSeconds = Annotated[int, Field(ge=0)]
"""Track duration in seconds."""

HistoryCapacity = Annotated[int, Field(ge=1, le=1000)]
"""History window size: 1 … 1 000."""

FetchConcurrency = Annotated[int, Field(ge=1, le=50)]
"""Parallel metadata fetches during playlist expansion: 1 … 50."""


# ── Datetime constraints ────────────────────────────────────────────

def _ensure_utc(v: datetime) -> datetime:
    """Validate that a datetime is timezone-aware and normalise to UTC."""
    if v.tzinfo is None:
        raise ValueError("datetime must be timezone-aware (UTC)")
    return v.astimezone(UTC)


UtcDatetimeField = Annotated[datetime, BeforeValidator(_ensure_utc)]
"""Timezone-aware datetime, normalised to UTC on input."""
