# review_aggregator/io/reviews_jsonl.py

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from review_aggregator.domain.models import (
    Comparison,
    MergedEntry,
    Review,
    ReviewStats,
    SourceSide,
)
from review_aggregator.io.jsonl import iter_jsonl_objects


def _parse_datetime(value: str | None) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def review_from_raw(raw: dict[str, Any]) -> Review:
    """Convert a stored JSON dict into a Review instance.

    Stored rows were validated on ingestion, so this only restores types.
    """
    score = raw.get("score")
    return Review(
        artist=raw["artist"],
        album=raw["album"],
        reviewer=raw["reviewer"],
        year=raw.get("year"),
        score=float(score) if score is not None else None,
        summary=raw.get("summary"),
        source_url=raw.get("source_url"),
        scraped_at=_parse_datetime(raw.get("scraped_at")),
    )


def review_to_raw(review: Review) -> dict[str, Any]:
    """Convert a Review instance into a JSON-serialisable dict."""
    return {
        "artist": review.artist,
        "album": review.album,
        "reviewer": review.reviewer,
        "year": review.year,
        "score": review.score,
        "summary": review.summary,
        "source_url": review.source_url,
        "scraped_at": review.scraped_at.isoformat(),
    }


def comparison_to_raw(comparison: Comparison | None) -> dict[str, Any] | None:
    if comparison is None:
        return None
    return {
        "score_difference": comparison.score_difference,
        "average_score": comparison.average_score,
        "agreement_level": comparison.agreement_level.value,
        "preferred_source": comparison.preferred_source,
        "explanation": comparison.explanation,
    }


def _side_fields(side: SourceSide) -> dict[str, Any]:
    return {
        f"{side.reviewer}_score": side.score,
        f"{side.reviewer}_summary": side.summary,
        f"{side.reviewer}_url": side.source_url,
    }


def entry_to_raw(entry: MergedEntry) -> dict[str, Any]:
    """Flatten a merged entry into the per-critic field layout.

    Each side contributes ``<reviewer>_score``, ``<reviewer>_summary`` and
    ``<reviewer>_url`` keys.
    """
    raw: dict[str, Any] = {
        "artist": entry.artist,
        "album": entry.album,
        "year": entry.year,
        "reviewers": [side.reviewer for side in entry.sides],
    }
    for side in entry.sides:
        raw.update(_side_fields(side))
    raw["overlap"] = entry.overlap
    raw["comparison"] = comparison_to_raw(entry.comparison)
    return raw


def stats_to_raw(stats: ReviewStats) -> dict[str, Any]:
    return {
        "total_count": stats.total_count,
        "count_by_source": dict(stats.count_by_source),
        "overlap_count": stats.overlap_count,
        "average_score_by_source": dict(stats.average_score_by_source),
        "recent_count": stats.recent_count,
    }


def load_raw_records(path: str | Path) -> list[dict[str, Any]]:
    """Load raw, not yet validated, review records from a JSONL file."""
    return list(iter_jsonl_objects(Path(path)))
