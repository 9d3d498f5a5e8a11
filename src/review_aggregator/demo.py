# review_aggregator/demo.py

"""Seed catalog used to populate an empty store."""

from __future__ import annotations

import logging
from typing import Any

from review_aggregator.domain.models import FANTANO, SCARUFFI
from review_aggregator.service import IngestReport, ReviewService

logger = logging.getLogger(__name__)

_SCARUFFI_URL = "https://www.scaruffi.com"

DEMO_REVIEWS: list[dict[str, Any]] = [
    {
        "reviewer": FANTANO,
        "artist": "Kendrick Lamar",
        "album": "To Pimp a Butterfly",
        "year": 2015,
        "score": 10,
        "summary": (
            "A masterpiece that explores race, identity and social justice "
            "through jazz-influenced production."
        ),
        "source_url": "https://www.youtube.com/watch?v=qTmHuavOXNg",
    },
    {
        "reviewer": FANTANO,
        "artist": "Death Grips",
        "album": "The Money Store",
        "year": 2012,
        "score": 10,
        "summary": (
            "Aggressive experimental hip-hop with abrasive production and "
            "MC Ride's intense vocal delivery."
        ),
        "source_url": "https://www.youtube.com/watch?v=2MHhLDCJ57E",
    },
    {
        "reviewer": FANTANO,
        "artist": "Radiohead",
        "album": "Kid A",
        "year": 2000,
        "score": 9,
        "summary": (
            "A bold reinvention that trades rock structures for electronic "
            "experimentation."
        ),
        "source_url": "https://www.youtube.com/channel/UCt7fwAhXDy3oNFTAzF2o8Pw",
    },
    {
        "reviewer": FANTANO,
        "artist": "Kanye West",
        "album": "My Beautiful Dark Twisted Fantasy",
        "year": 2010,
        "score": 10,
        "summary": "A maximalist opus with lavish orchestration and introspective lyricism.",
    },
    {
        "reviewer": FANTANO,
        "artist": "Swans",
        "album": "The Seer",
        "year": 2012,
        "score": 9,
        "summary": "A transcendent journey through experimental rock territory.",
    },
    {
        "reviewer": SCARUFFI,
        "artist": "Can",
        "album": "Tago Mago",
        "year": 1971,
        "score": 9.5,
        "summary": (
            "Groundbreaking krautrock with hypnotic rhythms and innovative "
            "studio techniques."
        ),
        "source_url": _SCARUFFI_URL,
    },
    {
        "reviewer": SCARUFFI,
        "artist": "Radiohead",
        "album": "Kid A",
        "year": 2000,
        "score": 8.5,
        "summary": (
            "An important transition from rock to electronic music, short of "
            "the impact of earlier experimental works."
        ),
        "source_url": _SCARUFFI_URL,
    },
    {
        "reviewer": SCARUFFI,
        "artist": "The Velvet Underground",
        "album": "White Light/White Heat",
        "year": 1968,
        "score": 9,
        "summary": "Brutal, uncompromising noise rock that predates punk by a decade.",
        "source_url": _SCARUFFI_URL,
    },
    {
        "reviewer": SCARUFFI,
        "artist": "Swans",
        "album": "The Seer",
        "year": 2012,
        "score": 8,
        "summary": "A monumental achievement in post-rock experimentation.",
        "source_url": _SCARUFFI_URL,
    },
    {
        "reviewer": SCARUFFI,
        "artist": "Sonic Youth",
        "album": "Daydream Nation",
        "year": 1988,
        "score": 9,
        "summary": "A defining moment in alternative rock, built on innovative guitar noise.",
        "source_url": _SCARUFFI_URL,
    },
]


def seed_store(service: ReviewService, *, only_if_empty: bool = True) -> IngestReport:
    """Populate the service's store with the demo catalog."""
    if only_if_empty and len(service.store):
        logger.info("Store already holds %s reviews; skipping seed.", len(service.store))
        return IngestReport()

    return service.ingest_many(DEMO_REVIEWS)
