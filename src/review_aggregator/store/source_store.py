# review_aggregator/store/source_store.py

"""Per-critic review storage keyed by normalized join key."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from review_aggregator.domain.models import (
    MISSING_SCORE_DEFAULT,
    MISSING_YEAR_DEFAULT,
    Review,
    ReviewFilters,
    SortField,
    SortOrder,
)
from review_aggregator.io.jsonl import append_jsonl_line, iter_jsonl_objects, write_jsonl
from review_aggregator.io.reviews_jsonl import review_from_raw, review_to_raw
from review_aggregator.matching.normalizer import join_key

logger = logging.getLogger(__name__)


class SourceStore:
    """In-memory review store with one collection per reviewer.

    Rows are unique on (join key, reviewer). Upserting an existing row
    replaces it in place, so it keeps its original insertion position.
    Callers serialize upserts per reviewer; the store does no locking.
    """

    def __init__(self, reviews: Iterable[Review] | None = None) -> None:
        self._rows: dict[str, dict[str, Review]] = {}
        for review in reviews or ():
            self.upsert(review)

    def __len__(self) -> int:
        return sum(len(rows) for rows in self._rows.values())

    def reviewers(self) -> list[str]:
        """Reviewer tags with at least one stored review."""
        return [tag for tag, rows in self._rows.items() if rows]

    def upsert(self, review: Review) -> bool:
        """Insert or replace a review. Returns True if a new row was added."""
        rows = self._rows.setdefault(review.reviewer.lower(), {})
        key = review.key
        inserted = key not in rows
        rows[key] = review

        logger.debug(
            "%s %s review for %s - %s.",
            "Inserted" if inserted else "Replaced",
            review.reviewer,
            review.artist,
            review.album,
        )
        return inserted

    def get(self, artist: str, album: str, reviewer: str) -> Review | None:
        return self._rows.get(reviewer.lower(), {}).get(join_key(artist, album))

    def contains(self, artist: str, album: str, reviewer: str) -> bool:
        """Whether this album was already stored for the reviewer."""
        return self.get(artist, album, reviewer) is not None

    def all(self, reviewer: str | None = None) -> list[Review]:
        """Every review for one reviewer (or all reviewers), in insertion order."""
        if reviewer is not None:
            return list(self._rows.get(reviewer.lower(), {}).values())
        return [review for rows in self._rows.values() for review in rows.values()]

    def query(self, filters: ReviewFilters | None = None) -> list[Review]:
        """Filtered, ordered and paginated retrieval.

        Ordered by year then score, both descending; ties keep insertion
        order. A score or year bound excludes reviews missing that value.
        An explicit ``sort_by`` replaces the default order.
        """
        filters = filters or ReviewFilters()
        filters.validate()

        matches = [r for r in self.all(filters.reviewer) if _matches(r, filters)]
        if filters.sort_by is None:
            matches.sort(key=_order_key)
        else:
            field = filters.sort_by
            matches.sort(
                key=lambda r: _sort_value(r, field),
                reverse=filters.order is SortOrder.DESC,
            )

        end = None if filters.limit is None else filters.offset + filters.limit
        return matches[filters.offset:end]


def _matches(review: Review, filters: ReviewFilters) -> bool:
    if filters.artist and filters.artist.lower() not in review.artist.lower():
        return False
    if filters.album and filters.album.lower() not in review.album.lower():
        return False
    if filters.min_score is not None:
        if review.score is None or review.score < filters.min_score:
            return False
    if filters.max_score is not None:
        if review.score is None or review.score > filters.max_score:
            return False
    if filters.year_from is not None:
        if review.year is None or review.year < filters.year_from:
            return False
    if filters.year_to is not None:
        if review.year is None or review.year > filters.year_to:
            return False
    return True


def _order_key(review: Review) -> tuple[int, float]:
    year = review.year if review.year is not None else MISSING_YEAR_DEFAULT
    score = review.score if review.score is not None else MISSING_SCORE_DEFAULT
    return (-year, -score)


def _sort_value(review: Review, field: SortField) -> int | float | str:
    if field is SortField.YEAR:
        return review.year if review.year is not None else MISSING_YEAR_DEFAULT
    if field is SortField.SCORE:
        return review.score if review.score is not None else MISSING_SCORE_DEFAULT
    return review.artist.casefold()


class JsonlSourceStore(SourceStore):
    """SourceStore persisted to a JSON Lines file.

    Every upsert appends one line; on load later lines win, so the file may
    hold superseded rows until ``compact()`` rewrites it.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__()
        self._load()

    def _load(self) -> None:
        loaded = 0
        for obj in iter_jsonl_objects(self.path):
            try:
                review = review_from_raw(obj)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed stored review in %s: %s", self.path, exc)
                continue
            super().upsert(review)
            loaded += 1

        if loaded:
            logger.info(
                "Loaded %s stored reviews (%s unique) from %s.",
                loaded,
                len(self),
                self.path,
            )

    def upsert(self, review: Review) -> bool:
        append_jsonl_line(self.path, review_to_raw(review))
        return super().upsert(review)

    def compact(self) -> int:
        """Rewrite the backing file with one line per stored review."""
        rows = self.all()
        write_jsonl(self.path, (review_to_raw(r) for r in rows))
        logger.info("Compacted %s to %s reviews.", self.path, len(rows))
        return len(rows)
