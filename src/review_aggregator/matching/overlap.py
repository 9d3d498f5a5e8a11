# review_aggregator/matching/overlap.py

"""Detect albums reviewed by both critics."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from review_aggregator.analysis.comparison import compare
from review_aggregator.domain.models import (
    MISSING_SCORE_DEFAULT,
    MISSING_YEAR_DEFAULT,
    MergedEntry,
    OverlapEntry,
    Review,
    SourceSide,
)

logger = logging.getLogger(__name__)


def index_by_key(reviews: Iterable[Review]) -> dict[str, Review]:
    """Index reviews by join key. Later records win on duplicate keys."""
    index: dict[str, Review] = {}
    for review in reviews:
        index[review.key] = review
    return index


def matched_keys(source_a: Iterable[Review], source_b: Iterable[Review]) -> set[str]:
    """Join keys present in both sources."""
    return set(index_by_key(source_a)) & set(index_by_key(source_b))


def merge_pair(a: Review, b: Review) -> OverlapEntry:
    """Build one overlap entry from two reviews sharing a join key."""
    return MergedEntry(
        key=a.key,
        artist=a.artist,
        album=a.album,
        year=a.year if a.year is not None else b.year,
        primary=SourceSide.from_review(a),
        secondary=SourceSide.from_review(b),
        comparison=compare(
            a.score,
            b.score,
            source_a=a.reviewer,
            source_b=b.reviewer,
        ),
    )


def raw_score_difference(entry: MergedEntry) -> float:
    """Unrounded score gap used for ordering; missing scores count as 0."""
    if entry.secondary is None:
        return 0.0
    a = entry.primary.score
    b = entry.secondary.score
    return abs(
        (a if a is not None else MISSING_SCORE_DEFAULT)
        - (b if b is not None else MISSING_SCORE_DEFAULT)
    )


def year_or_default(year: int | None) -> int:
    return year if year is not None else MISSING_YEAR_DEFAULT


def resolve(
    source_a: Sequence[Review],
    source_b: Sequence[Review],
) -> list[OverlapEntry]:
    """Return one overlap entry per album present in both sources.

    The A side always lands in ``primary`` and the B side in ``secondary``.
    Ordered by year (newest first), then by score difference (largest first),
    then by position in ``source_b``.
    """
    if not source_a or not source_b:
        return []

    index = index_by_key(source_a)

    # Keyed by join key so a duplicate in source_b replaces its earlier match.
    overlaps: dict[str, OverlapEntry] = {}
    for review in source_b:
        match = index.get(review.key)
        if match is None:
            continue
        overlaps[review.key] = merge_pair(match, review)

    entries = sorted(
        overlaps.values(),
        key=lambda e: (-year_or_default(e.year), -raw_score_difference(e)),
    )

    logger.debug(
        "Resolved %s overlaps from %s x %s reviews.",
        len(entries),
        len(source_a),
        len(source_b),
    )
    return entries
