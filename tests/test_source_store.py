"""Tests for the in-memory and JSONL-backed review stores."""

from __future__ import annotations

import json
from pathlib import Path

from review_aggregator.domain.models import FANTANO, SCARUFFI, ReviewFilters
from review_aggregator.store.source_store import JsonlSourceStore, SourceStore


def test_upsert_dedups_on_key_and_reviewer(make_review) -> None:
    store = SourceStore()

    assert store.upsert(make_review(score=7.0)) is True
    assert store.upsert(make_review("RADIOHEAD", "Kid A!", score=9.0)) is False

    assert len(store) == 1
    stored = store.get("radiohead", "kid a", FANTANO)
    assert stored is not None
    assert stored.score == 9.0


def test_same_album_different_reviewers_are_separate_rows(make_review) -> None:
    store = SourceStore([make_review(), make_review(reviewer=SCARUFFI)])
    assert len(store) == 2
    assert store.reviewers() == [FANTANO, SCARUFFI]
    assert store.contains("Radiohead", "Kid A", "SCARUFFI")
    assert not store.contains("Radiohead", "Amnesiac", SCARUFFI)


def test_replaced_row_keeps_insertion_position(make_review) -> None:
    store = SourceStore(
        [
            make_review("A", "One", score=5.0),
            make_review("B", "Two", score=5.0),
        ]
    )
    store.upsert(make_review("A", "One", score=6.0))
    assert [r.artist for r in store.all(FANTANO)] == ["A", "B"]


def test_query_orders_by_year_then_score_stably(make_review) -> None:
    store = SourceStore(
        [
            make_review("A", "First Tie", year=2000, score=8.0),
            make_review("B", "Old", year=1990, score=10.0),
            make_review("C", "Second Tie", year=2000, score=8.0),
            make_review("D", "Better", year=2000, score=9.0),
            make_review("E", "Undated", score=10.0),
        ]
    )

    albums = [r.album for r in store.query()]

    assert albums == ["Better", "First Tie", "Second Tie", "Old", "Undated"]


def test_query_filters(make_review) -> None:
    store = SourceStore(
        [
            make_review("Radiohead", "Kid A", FANTANO, year=2000, score=9.0),
            make_review("Radiohead", "Amnesiac", FANTANO, year=2001, score=6.0),
            make_review("Radiohead", "Kid A", SCARUFFI, year=2000, score=8.5),
            make_review("Swans", "The Seer", FANTANO, year=2012),
        ]
    )

    assert len(store.query(ReviewFilters(artist="RADIO"))) == 3
    assert len(store.query(ReviewFilters(artist="radio", reviewer=FANTANO))) == 2
    assert [r.album for r in store.query(ReviewFilters(album="kid"))] == ["Kid A", "Kid A"]
    assert [r.album for r in store.query(ReviewFilters(min_score=8.5))] == ["Kid A", "Kid A"]
    assert [r.album for r in store.query(ReviewFilters(max_score=7))] == ["Amnesiac"]
    assert store.query(ReviewFilters(reviewer="nobody")) == []


def test_query_year_bounds_exclude_undated(make_review) -> None:
    store = SourceStore(
        [
            make_review("Can", "Tago Mago", year=1971),
            make_review("Swans", "The Seer", year=2012),
            make_review("Radiohead", "Kid A", year=2000),
            make_review("Unknown", "Undated"),
        ]
    )

    assert [r.album for r in store.query(ReviewFilters(year_from=2000))] == ["The Seer", "Kid A"]
    assert [r.album for r in store.query(ReviewFilters(year_to=2000))] == ["Kid A", "Tago Mago"]
    assert [
        r.album for r in store.query(ReviewFilters(year_from=2000, year_to=2000))
    ] == ["Kid A"]


def test_query_sort_by_overrides_default_order(make_review) -> None:
    store = SourceStore(
        [
            make_review("beta", "B", year=2000, score=7.0),
            make_review("Alpha", "A", year=1990, score=9.0),
            make_review("charlie", "C"),
            make_review("delta", "D", year=2005, score=7.0),
        ]
    )

    def artists(**kwargs) -> list[str]:
        return [r.artist for r in store.query(ReviewFilters(**kwargs))]

    assert artists(sort_by="artist", order="asc") == ["Alpha", "beta", "charlie", "delta"]
    assert artists(sort_by="artist") == ["delta", "charlie", "beta", "Alpha"]
    # Ties keep insertion order in either direction.
    assert artists(sort_by="score") == ["Alpha", "beta", "delta", "charlie"]
    assert artists(sort_by="score", order="asc") == ["charlie", "beta", "delta", "Alpha"]
    assert artists(sort_by="year", order="asc", limit=2) == ["charlie", "Alpha"]


def test_query_pagination(make_review) -> None:
    store = SourceStore(
        [make_review("Artist", f"Album {i}", year=2000 + i) for i in range(5)]
    )

    page = store.query(ReviewFilters(limit=2, offset=1))

    assert [r.album for r in page] == ["Album 3", "Album 2"]
    assert store.query(ReviewFilters(limit=0)) == []
    assert store.query(ReviewFilters(offset=10)) == []


def test_jsonl_store_persists_and_reloads(tmp_path: Path, make_review) -> None:
    path = tmp_path / "reviews.jsonl"
    store = JsonlSourceStore(path)
    store.upsert(make_review(year=2000, score=7.0, summary="First take."))
    store.upsert(make_review(year=2000, score=9.0, summary="Second take."))
    store.upsert(make_review("Can", "Tago Mago", SCARUFFI, year=1971, score=9.5))

    assert len(path.read_text(encoding="utf-8").splitlines()) == 3

    reloaded = JsonlSourceStore(path)
    assert len(reloaded) == 2
    kid_a = reloaded.get("Radiohead", "Kid A", FANTANO)
    assert kid_a is not None
    assert kid_a.score == 9.0
    assert kid_a.summary == "Second take."
    assert kid_a.scraped_at == store.get("Radiohead", "Kid A", FANTANO).scraped_at


def test_jsonl_store_compact(tmp_path: Path, make_review) -> None:
    path = tmp_path / "reviews.jsonl"
    store = JsonlSourceStore(path)
    store.upsert(make_review(score=7.0))
    store.upsert(make_review(score=9.0))

    assert store.compact() == 1

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["score"] == 9.0


def test_jsonl_store_skips_bad_lines(tmp_path: Path) -> None:
    path = tmp_path / "reviews.jsonl"
    path.write_text(
        "\n".join(
            [
                "not json",
                json.dumps({"album": "No Artist", "reviewer": FANTANO}),
                json.dumps({"artist": "Can", "album": "Tago Mago", "reviewer": SCARUFFI}),
                "",
            ]
        ),
        encoding="utf-8",
    )

    store = JsonlSourceStore(path)

    assert len(store) == 1
    assert store.contains("Can", "Tago Mago", SCARUFFI)
