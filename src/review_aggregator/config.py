# review_aggregator/config.py

"""Shared configuration and environment setup."""

from __future__ import annotations

from dataclasses import dataclass
from os import getenv
from pathlib import Path

from dotenv import load_dotenv

from review_aggregator.domain.models import FANTANO, SCARUFFI

load_dotenv(override=True)

DEFAULT_LIMIT = 50


@dataclass(frozen=True, slots=True)
class Settings:
    """Runtime settings resolved from the environment."""

    project_root: Path
    data_path: Path
    primary_reviewer: str
    secondary_reviewer: str
    default_limit: int


def get_project_root() -> Path:
    """Return the project root directory.

    Prefers REVIEW_AGGREGATOR_PROJECT_ROOT env var. Falls back to current
    working directory.
    """
    if root := getenv("REVIEW_AGGREGATOR_PROJECT_ROOT"):
        return Path(root).resolve()
    return Path.cwd()


def get_settings() -> Settings:
    """Build a Settings instance from environment variables."""
    root = get_project_root()

    data_path = Path(
        getenv("REVIEW_AGGREGATOR_DATA_PATH") or root / "data" / "reviews.jsonl"
    )

    raw_limit = getenv("REVIEW_AGGREGATOR_DEFAULT_LIMIT")
    try:
        default_limit = int(raw_limit) if raw_limit else DEFAULT_LIMIT
    except ValueError as exc:
        msg = f"REVIEW_AGGREGATOR_DEFAULT_LIMIT must be an integer, got {raw_limit!r}."
        raise ValueError(msg) from exc

    return Settings(
        project_root=root,
        data_path=data_path,
        primary_reviewer=(getenv("REVIEW_AGGREGATOR_PRIMARY") or FANTANO).lower(),
        secondary_reviewer=(getenv("REVIEW_AGGREGATOR_SECONDARY") or SCARUFFI).lower(),
        default_limit=default_limit,
    )
