# review_aggregator/domain/models.py

"""Core domain models for critic reviews and their cross-source merges."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

# Reviewer tags are plain lower-case strings so more critics can be added.
FANTANO = "fantano"
SCARUFFI = "scaruffi"

# Used wherever a missing year or score takes part in ordering.
MISSING_YEAR_DEFAULT = 0
MISSING_SCORE_DEFAULT = 0.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AgreementLevel(str, Enum):
    AGREE = "agree"
    SIMILAR = "similar"
    DISAGREE = "disagree"


class SortField(str, Enum):
    YEAR = "year"
    SCORE = "score"
    ARTIST = "artist"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(slots=True)
class Review:
    """A single album review from one critic."""

    artist: str
    album: str
    reviewer: str
    year: int | None = None
    score: float | None = None  # 0..10
    summary: str | None = None
    source_url: str | None = None
    scraped_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        # One canonical reviewer tag and timezone-aware timestamps everywhere.
        self.reviewer = self.reviewer.strip().lower()
        if self.scraped_at.tzinfo is None:
            self.scraped_at = self.scraped_at.replace(tzinfo=timezone.utc)

    @property
    def key(self) -> str:
        """Normalized join key for cross-source matching."""
        from review_aggregator.matching.normalizer import join_key

        return join_key(self.artist, self.album)


@dataclass(frozen=True, slots=True)
class SourceSide:
    """One critic's view of an album inside a merged entry."""

    reviewer: str
    score: float | None = None
    summary: str | None = None
    source_url: str | None = None

    @classmethod
    def from_review(cls, review: Review) -> SourceSide:
        return cls(
            reviewer=review.reviewer,
            score=review.score,
            summary=review.summary,
            source_url=review.source_url,
        )


@dataclass(frozen=True, slots=True)
class Comparison:
    """How two critics' scores for the same album relate."""

    score_difference: float
    average_score: float
    agreement_level: AgreementLevel
    preferred_source: str  # reviewer tag, or "similar"
    explanation: str


@dataclass(frozen=True, slots=True)
class MergedEntry:
    """An album in the aggregate view, seen by one or two critics."""

    key: str
    artist: str
    album: str
    year: int | None
    primary: SourceSide
    secondary: SourceSide | None = None
    comparison: Comparison | None = None

    @property
    def overlap(self) -> bool:
        return self.secondary is not None

    @property
    def sides(self) -> tuple[SourceSide, ...]:
        if self.secondary is None:
            return (self.primary,)
        return (self.primary, self.secondary)


# An overlap entry is a merged entry whose secondary side is present.
OverlapEntry = MergedEntry


@dataclass(slots=True)
class ReviewFilters:
    """Query parameters shared by the store and the service."""

    artist: str | None = None
    album: str | None = None
    reviewer: str | None = None
    min_score: float | None = None
    max_score: float | None = None
    year_from: int | None = None
    year_to: int | None = None
    limit: int | None = None
    offset: int = 0
    overlap_only: bool = False
    # None keeps the default ordering of each query.
    sort_by: SortField | None = None
    order: SortOrder = SortOrder.DESC

    def validate(self) -> None:
        if self.limit is not None and self.limit < 0:
            msg = "limit must be non-negative."
            raise ValueError(msg)
        if self.offset < 0:
            msg = "offset must be non-negative."
            raise ValueError(msg)
        if (
            self.min_score is not None
            and self.max_score is not None
            and self.min_score > self.max_score
        ):
            msg = "min_score must be <= max_score."
            raise ValueError(msg)
        if (
            self.year_from is not None
            and self.year_to is not None
            and self.year_from > self.year_to
        ):
            msg = "year_from must be <= year_to."
            raise ValueError(msg)
        if self.sort_by is not None:
            self.sort_by = SortField(self.sort_by)
        self.order = SortOrder(self.order)


@dataclass(slots=True)
class ReviewStats:
    """Catalog-wide counts and averages."""

    total_count: int
    count_by_source: dict[str, int]
    overlap_count: int
    average_score_by_source: dict[str, float]
    recent_count: int = 0
