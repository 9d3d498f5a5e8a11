# review_aggregator/analysis/aggregate.py

"""Full-catalog merge of two critics' reviews."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from review_aggregator.domain.models import MergedEntry, Review, SourceSide
from review_aggregator.matching.overlap import (
    merge_pair,
    raw_score_difference,
    year_or_default,
)

logger = logging.getLogger(__name__)


def standalone_entry(review: Review) -> MergedEntry:
    """Project a single review into a non-overlapping merged entry."""
    return MergedEntry(
        key=review.key,
        artist=review.artist,
        album=review.album,
        year=review.year,
        primary=SourceSide.from_review(review),
    )


def aggregate(
    source_a: Iterable[Review],
    source_b: Iterable[Review],
    limit: int | None = None,
) -> list[MergedEntry]:
    """Merge two review streams into one ranked list.

    Albums reviewed by both critics come first (largest score gap first),
    followed by single-critic albums (newest first). ``limit`` truncates the
    sorted result; ``None`` keeps everything.
    """
    if limit is not None and limit < 0:
        msg = "limit must be non-negative."
        raise ValueError(msg)

    # Phase 1: index source A. The review is kept alongside its entry so a
    # later match can be rebuilt from both originals.
    originals: dict[str, Review] = {}
    entries: dict[str, MergedEntry] = {}
    for review in source_a:
        key = review.key
        originals[key] = review
        entries[key] = standalone_entry(review)

    # Phase 2: fold source B in, replacing matched entries with merged copies.
    standalone_b: dict[str, MergedEntry] = {}
    for review in source_b:
        key = review.key
        match = originals.get(key)
        if match is not None:
            entries[key] = merge_pair(match, review)
        else:
            standalone_b[key] = standalone_entry(review)

    merged = [*entries.values(), *standalone_b.values()]
    merged.sort(key=_sort_key)

    overlap_count = sum(1 for entry in merged if entry.overlap)
    logger.debug(
        "Aggregated %s entries (%s overlaps).",
        len(merged),
        overlap_count,
    )

    if limit is None:
        return merged
    return merged[:limit]


def _sort_key(entry: MergedEntry) -> tuple[int, float]:
    if entry.overlap:
        return (0, -raw_score_difference(entry))
    return (1, -year_or_default(entry.year))
