# review_aggregator/analysis/stats.py

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

from review_aggregator.domain.models import Review, ReviewStats
from review_aggregator.matching.overlap import matched_keys

RECENT_DAYS = 7


def count_by_source(reviews: Iterable[Review]) -> dict[str, int]:
    """Return review counts per reviewer, most reviews first."""
    counter: Counter[str] = Counter(review.reviewer for review in reviews)
    return dict(sorted(counter.items(), key=lambda x: (-x[1], x[0])))


def average_score_by_source(reviews: Iterable[Review]) -> dict[str, float]:
    """Mean score per reviewer over scored reviews, rounded to 2 decimals."""
    scores: dict[str, list[float]] = defaultdict(list)
    for review in reviews:
        if review.score is not None:
            scores[review.reviewer].append(review.score)

    return {
        reviewer: round(sum(values) / len(values), 2)
        for reviewer, values in sorted(scores.items())
    }


def compute_stats(
    reviews: Iterable[Review],
    *,
    primary: str,
    secondary: str,
    now: datetime | None = None,
    recent_days: int = RECENT_DAYS,
) -> ReviewStats:
    """Summarize a review catalog.

    ``overlap_count`` counts albums reviewed by both ``primary`` and
    ``secondary``; ``recent_count`` counts reviews scraped within the last
    ``recent_days`` days.
    """
    all_reviews = list(reviews)
    cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=recent_days)

    overlaps = matched_keys(
        (r for r in all_reviews if r.reviewer == primary),
        (r for r in all_reviews if r.reviewer == secondary),
    )

    return ReviewStats(
        total_count=len(all_reviews),
        count_by_source=count_by_source(all_reviews),
        overlap_count=len(overlaps),
        average_score_by_source=average_score_by_source(all_reviews),
        recent_count=sum(1 for r in all_reviews if r.scraped_at > cutoff),
    )
