# review_aggregator/matching/normalizer.py

"""Canonicalize scraped artist/album names and raw review records."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from review_aggregator.domain.models import Review
from review_aggregator.errors import ReviewValidationError

# The separator must never survive normalize_text, which drops underscores.
KEY_SEPARATOR = "_"

_NON_ALNUM_RE = re.compile(r"[^\w\s]|_")
_WHITESPACE_RE = re.compile(r"\s+")

MIN_SCORE = 0.0
MAX_SCORE = 10.0


def normalize_text(text: str | None) -> str:
    """Case-fold, strip punctuation and collapse whitespace.

    NFKC runs on both sides of the case fold, so composed and decomposed
    spellings ("Sigur Rós" typed either way) produce the same text.
    """
    if not text:
        return ""
    folded = unicodedata.normalize("NFKC", unicodedata.normalize("NFKC", text).casefold())
    cleaned = _NON_ALNUM_RE.sub("", folded)
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def join_key(artist: str | None, album: str | None) -> str:
    """Build the cross-source join key for an artist/album pair.

    >>> join_key("RADIOHEAD!!", "kid    a")
    'radiohead_kid a'
    """
    return f"{normalize_text(artist)}{KEY_SEPARATOR}{normalize_text(album)}"


# ---------------------------------------------------------------------------
# Raw record -> Review
# ---------------------------------------------------------------------------


def review_from_record(
    raw: Mapping[str, Any],
    *,
    reviewer: str | None = None,
    scraped_at: datetime | None = None,
) -> Review:
    """Validate a raw ingestion record and convert it into a Review.

    Required: non-blank ``artist``, ``album`` and ``reviewer`` (either in the
    record or passed explicitly). Optional fields are coerced; blank strings
    become None. Older scrapers emitted ``<reviewer>_score`` and
    ``<reviewer>_summary`` instead of ``score``/``summary``; both are accepted.

    Raises:
        ReviewValidationError: if a required field is missing or a value
            cannot be coerced.
    """
    artist = _required_str(raw, "artist")
    album = _required_str(raw, "album")

    tag = reviewer if reviewer is not None else raw.get("reviewer") or raw.get("source")
    if not isinstance(tag, str) or not tag.strip():
        raise ReviewValidationError(
            "Missing required field 'reviewer'.", field="reviewer", record=raw
        )
    tag = tag.strip().lower()

    score_value = raw.get("score")
    if score_value is None:
        score_value = raw.get(f"{tag}_score")
    summary_value = raw.get("summary")
    if summary_value is None:
        summary_value = raw.get(f"{tag}_summary")
    url_value = raw.get("source_url")
    if url_value is None:
        url_value = raw.get("sourceUrl")

    return Review(
        artist=artist,
        album=album,
        reviewer=tag,
        year=_parse_year(raw.get("year"), raw),
        score=_parse_score(score_value, raw),
        summary=_optional_str(summary_value),
        source_url=_optional_str(url_value),
        scraped_at=_parse_scraped_at(
            scraped_at if scraped_at is not None else raw.get("scraped_at"), raw
        ),
    )


def _required_str(raw: Mapping[str, Any], name: str) -> str:
    value = raw.get(name)
    if not isinstance(value, str) or not value.strip():
        raise ReviewValidationError(
            f"Missing required field {name!r}.", field=name, record=raw
        )
    return value.strip()


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_year(value: Any, raw: Mapping[str, Any]) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ReviewValidationError(
            f"Invalid year {value!r}.", field="year", record=raw
        )
    if isinstance(value, float) and value.is_integer():
        return int(value)
    try:
        year = int(str(value).strip())
    except ValueError as exc:
        raise ReviewValidationError(
            f"Invalid year {value!r}.", field="year", record=raw
        ) from exc
    return year


def _parse_score(value: Any, raw: Mapping[str, Any]) -> float | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ReviewValidationError(
            f"Invalid score {value!r}.", field="score", record=raw
        )
    try:
        score = float(str(value).strip())
    except ValueError as exc:
        raise ReviewValidationError(
            f"Invalid score {value!r}.", field="score", record=raw
        ) from exc

    if not MIN_SCORE <= score <= MAX_SCORE:
        raise ReviewValidationError(
            f"Score {score} outside [{MIN_SCORE}, {MAX_SCORE}].",
            field="score",
            record=raw,
        )
    return score


def _parse_scraped_at(value: Any, raw: Mapping[str, Any]) -> datetime:
    if value is None or value == "":
        return datetime.now(timezone.utc)
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value))
        except ValueError as exc:
            raise ReviewValidationError(
                f"Invalid scraped_at {value!r}.", field="scraped_at", record=raw
            ) from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
