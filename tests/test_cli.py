"""End-to-end tests for the command-line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from review_aggregator.cli import main


def _run(capsys: pytest.CaptureFixture[str], data: Path, *args: str):
    main(["--data", str(data), *args])
    return json.loads(capsys.readouterr().out)


def test_seed_and_aggregate(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    data = tmp_path / "reviews.jsonl"

    assert _run(capsys, data, "seed") == {"inserted": 10, "replaced": 0}

    entries = _run(capsys, data, "aggregate", "--limit", "3")
    assert [e["album"] for e in entries] == ["The Seer", "Kid A", "To Pimp a Butterfly"]

    kid_a = entries[1]
    assert kid_a["overlap"] is True
    assert kid_a["fantano_score"] == 9.0
    assert kid_a["scaruffi_score"] == 8.5
    assert kid_a["comparison"]["agreement_level"] == "agree"
    assert kid_a["comparison"]["preferred_source"] == "similar"
    assert entries[2]["comparison"] is None


def test_overlap_and_stats(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    data = tmp_path / "reviews.jsonl"
    _run(capsys, data, "seed")

    overlaps = _run(capsys, data, "overlap", "--artist", "radiohead")
    assert [e["album"] for e in overlaps] == ["Kid A"]

    stats = _run(capsys, data, "stats")
    assert stats["total_count"] == 10
    assert stats["overlap_count"] == 2


def test_ingest_reports_rejections(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    data = tmp_path / "reviews.jsonl"
    raw = tmp_path / "raw.jsonl"
    raw.write_text(
        "\n".join(
            json.dumps(r)
            for r in [
                {"artist": "Radiohead", "album": "Kid A", "score": 9},
                {"artist": "Radiohead", "album": ""},
            ]
        ),
        encoding="utf-8",
    )

    with pytest.raises(SystemExit) as exc_info:
        main(["--data", str(data), "ingest", str(raw), "--reviewer", "fantano"])
    assert exc_info.value.code == 1

    capsys.readouterr()
    reviews = _run(capsys, data, "source", "fantano")
    assert len(reviews) == 1
    assert reviews[0]["reviewer"] == "fantano"


def test_compact(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    data = tmp_path / "reviews.jsonl"
    _run(capsys, data, "seed")
    _run(capsys, data, "seed", "--force")

    assert len(data.read_text(encoding="utf-8").splitlines()) == 20
    assert _run(capsys, data, "compact") == {"reviews": 10}
    assert len(data.read_text(encoding="utf-8").splitlines()) == 10


def test_year_and_sort_flags(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    data = tmp_path / "reviews.jsonl"
    _run(capsys, data, "seed")

    entries = _run(
        capsys,
        data,
        "aggregate",
        "--year-from",
        "1960",
        "--year-to",
        "1990",
        "--sort-by",
        "year",
        "--order",
        "asc",
    )
    assert [e["year"] for e in entries] == [1968, 1971, 1988]

    reviews = _run(capsys, data, "source", "fantano", "--sort-by", "artist", "--order", "asc")
    assert [r["artist"] for r in reviews] == [
        "Death Grips",
        "Kanye West",
        "Kendrick Lamar",
        "Radiohead",
        "Swans",
    ]


def test_unknown_sort_field_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["--data", str(tmp_path / "reviews.jsonl"), "overlap", "--sort-by", "popularity"])
    assert exc_info.value.code == 2
