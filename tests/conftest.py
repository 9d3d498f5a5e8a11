"""Shared fixtures for review aggregator tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from review_aggregator.domain.models import FANTANO, SCARUFFI, Review


def _make_review(
    artist: str = "Radiohead",
    album: str = "Kid A",
    reviewer: str = FANTANO,
    **kwargs: Any,
) -> Review:
    return Review(artist=artist, album=album, reviewer=reviewer, **kwargs)


@pytest.fixture
def make_review() -> Callable[..., Review]:
    return _make_review


@pytest.fixture
def kid_a_pair() -> tuple[list[Review], list[Review]]:
    """Kid A reviewed by both critics plus one Scaruffi-only album."""
    source_a = [_make_review(year=2000, score=9.0)]
    source_b = [
        _make_review(reviewer=SCARUFFI, year=2000, score=8.5),
        _make_review("Can", "Tago Mago", SCARUFFI, year=1971, score=9.5),
    ]
    return source_a, source_b
