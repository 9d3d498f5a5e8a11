# review_aggregator/service.py

"""Query facade over the review store and the merge engine."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from review_aggregator.analysis.aggregate import aggregate
from review_aggregator.analysis.stats import compute_stats
from review_aggregator.domain.models import (
    FANTANO,
    MISSING_SCORE_DEFAULT,
    MISSING_YEAR_DEFAULT,
    SCARUFFI,
    MergedEntry,
    OverlapEntry,
    Review,
    ReviewFilters,
    ReviewStats,
    SortField,
    SortOrder,
)
from review_aggregator.errors import ReviewValidationError
from review_aggregator.matching.normalizer import review_from_record
from review_aggregator.matching.overlap import resolve
from review_aggregator.store.source_store import SourceStore

logger = logging.getLogger(__name__)

MIN_ARTIST_SEARCH_LENGTH = 2
DEFAULT_SEARCH_LIMIT = 25


@dataclass(slots=True)
class IngestReport:
    """Outcome of ingesting a batch of raw records."""

    inserted: int = 0
    replaced: int = 0
    rejected: list[tuple[int, ReviewValidationError]] = field(default_factory=list)

    @property
    def accepted(self) -> int:
        return self.inserted + self.replaced


class ReviewService:
    """Entry point for the HTTP layer and the CLI.

    ``primary`` and ``secondary`` name the two critics being compared; the
    primary critic always fills the first side of a merged entry.
    """

    def __init__(
        self,
        store: SourceStore,
        *,
        primary: str = FANTANO,
        secondary: str = SCARUFFI,
    ) -> None:
        primary = primary.strip().lower()
        secondary = secondary.strip().lower()
        if primary == secondary:
            msg = "primary and secondary reviewers must differ."
            raise ValueError(msg)

        self.store = store
        self.primary = primary
        self.secondary = secondary

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def ingest(self, raw: Mapping[str, Any], *, reviewer: str | None = None) -> Review:
        """Validate one raw record and upsert it.

        Raises:
            ReviewValidationError: if the record is malformed. Nothing is
                stored in that case.
        """
        review = review_from_record(raw, reviewer=reviewer)
        self.store.upsert(review)
        return review

    def ingest_many(
        self,
        raws: Iterable[Mapping[str, Any]],
        *,
        reviewer: str | None = None,
    ) -> IngestReport:
        """Ingest a stream of raw records, collecting rejections."""
        report = IngestReport()

        for index, raw in enumerate(raws):
            try:
                review = review_from_record(raw, reviewer=reviewer)
            except ReviewValidationError as exc:
                logger.warning("Rejected record %s: %s", index, exc)
                report.rejected.append((index, exc))
                continue

            if self.store.upsert(review):
                report.inserted += 1
            else:
                report.replaced += 1

        logger.info(
            "Ingested %s records (%s new, %s replaced, %s rejected).",
            report.accepted,
            report.inserted,
            report.replaced,
            len(report.rejected),
        )
        return report

    def is_scraped(self, artist: str, album: str, reviewer: str) -> bool:
        """Whether a review for this album and reviewer is already stored."""
        return self.store.contains(artist, album, reviewer)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_by_source(
        self,
        reviewer: str,
        filters: ReviewFilters | None = None,
    ) -> list[Review]:
        filters = replace(filters or ReviewFilters(), reviewer=reviewer)
        return self.store.query(filters)

    def get_overlap(self, filters: ReviewFilters | None = None) -> list[OverlapEntry]:
        """Albums reviewed by both critics, largest disagreements first per year."""
        filters = filters or ReviewFilters()
        filters.validate()

        source_a, source_b = self._filtered_sources(filters)
        return _paginate(_sorted(resolve(source_a, source_b), filters), filters)

    def get_aggregate(self, filters: ReviewFilters | None = None) -> list[MergedEntry]:
        """The merged catalog, overlaps first."""
        filters = filters or ReviewFilters()
        if filters.overlap_only:
            return self.get_overlap(filters)
        filters.validate()

        source_a, source_b = self._filtered_sources(filters)
        return _paginate(_sorted(aggregate(source_a, source_b), filters), filters)

    def search_by_artist(
        self,
        artist: str,
        *,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> list[MergedEntry]:
        name = artist.strip()
        if len(name) < MIN_ARTIST_SEARCH_LENGTH:
            msg = f"Artist name must be at least {MIN_ARTIST_SEARCH_LENGTH} characters."
            raise ValueError(msg)
        return self.get_aggregate(ReviewFilters(artist=name, limit=limit))

    def get_stats(self) -> ReviewStats:
        return compute_stats(
            self.store.all(),
            primary=self.primary,
            secondary=self.secondary,
        )

    def _filtered_sources(
        self,
        filters: ReviewFilters,
    ) -> tuple[list[Review], list[Review]]:
        # Pagination applies to the merged result, not to each source.
        source_filters = replace(filters, limit=None, offset=0, sort_by=None)
        return (
            self.get_by_source(self.primary, source_filters),
            self.get_by_source(self.secondary, source_filters),
        )


def _sorted(entries: list[MergedEntry], filters: ReviewFilters) -> list[MergedEntry]:
    if filters.sort_by is None:
        return entries
    field = filters.sort_by
    return sorted(
        entries,
        key=lambda e: _entry_sort_value(e, field),
        reverse=filters.order is SortOrder.DESC,
    )


def _entry_sort_value(entry: MergedEntry, field: SortField) -> int | float | str:
    if field is SortField.YEAR:
        return entry.year if entry.year is not None else MISSING_YEAR_DEFAULT
    if field is SortField.SCORE:
        # The primary critic's score, else the other side's.
        for side in entry.sides:
            if side.score is not None:
                return side.score
        return MISSING_SCORE_DEFAULT
    return entry.artist.casefold()


def _paginate(entries: list[MergedEntry], filters: ReviewFilters) -> list[MergedEntry]:
    end = None if filters.limit is None else filters.offset + filters.limit
    return entries[filters.offset:end]
