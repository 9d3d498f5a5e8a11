# review_aggregator/io/jsonl.py

"""JSON Lines primitives shared by the review store and ingestion.

Readers are forgiving: a store file that was cut off mid-append or edited by
hand still loads, minus the lines that do not decode to a JSON object. Every
skipped line is logged, with a per-file total at the end. Writers always emit
UTF-8 with one compact object per line.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

TMP_SUFFIX = ".tmp"


def _decode_line(line: str) -> dict[str, Any] | None:
    """Parse one line; returns None if it is not a JSON object."""
    try:
        obj = json.loads(line)
    except json.JSONDecodeError:
        return None
    return obj if isinstance(obj, dict) else None


def _encode_line(obj: dict[str, Any]) -> str:
    return json.dumps(obj, ensure_ascii=False) + "\n"


def iter_jsonl_objects(path: Path) -> Iterator[dict[str, Any]]:
    """Yield the JSON objects of a JSONL file in file order.

    A missing file yields nothing. Blank lines are ignored; lines that are
    not a JSON object are skipped with a warning.
    """
    if not path.exists():
        return

    skipped = 0
    with path.open("r", encoding="utf-8") as f:
        for line_number, raw_line in enumerate(f, start=1):
            line = raw_line.strip()
            if not line:
                continue
            obj = _decode_line(line)
            if obj is None:
                skipped += 1
                logger.warning("Skipping line %d in %s: not a JSON object.", line_number, path)
                continue
            yield obj

    if skipped:
        logger.warning("Skipped %d unreadable lines in %s.", skipped, path)


def append_jsonl_line(path: Path, obj: dict[str, Any]) -> None:
    """Append one object to a JSONL file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as f:
        f.write(_encode_line(obj))


def write_jsonl(path: Path, objects: Iterable[dict[str, Any]]) -> int:
    """Replace a JSONL file with the given objects, one per line.

    Writes to a sibling temp file first so readers never see a half-written
    file. Returns the number of lines written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + TMP_SUFFIX)
    count = 0
    with tmp_path.open("w", encoding="utf-8") as f:
        for obj in objects:
            f.write(_encode_line(obj))
            count += 1
    tmp_path.replace(path)
    logger.debug("Wrote %d lines to %s.", count, path)
    return count
