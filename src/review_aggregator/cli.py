# src/review_aggregator/cli.py

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from review_aggregator.config import get_settings
from review_aggregator.demo import seed_store
from review_aggregator.domain.models import ReviewFilters, SortField, SortOrder
from review_aggregator.io.reviews_jsonl import (
    entry_to_raw,
    load_raw_records,
    review_to_raw,
    stats_to_raw,
)
from review_aggregator.service import ReviewService
from review_aggregator.store.source_store import JsonlSourceStore

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    """Entry point for the review-aggregator CLI."""
    settings = get_settings()
    args = _build_arg_parser(default_data=settings.data_path).parse_args(argv)

    _configure_logging(verbose=args.verbose)

    store = JsonlSourceStore(Path(args.data))
    service = ReviewService(
        store,
        primary=args.primary or settings.primary_reviewer,
        secondary=args.secondary or settings.secondary_reviewer,
    )

    try:
        exit_code = _dispatch(args, service, default_limit=settings.default_limit)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user. Exiting.")
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


def _dispatch(
    args: argparse.Namespace,
    service: ReviewService,
    *,
    default_limit: int,
) -> int:
    if args.command == "ingest":
        return _cmd_ingest(service, [Path(p) for p in args.files], reviewer=args.reviewer)
    if args.command == "seed":
        report = seed_store(service, only_if_empty=not args.force)
        _emit({"inserted": report.inserted, "replaced": report.replaced})
        return 0
    if args.command == "compact":
        store = service.store
        assert isinstance(store, JsonlSourceStore)
        _emit({"reviews": store.compact()})
        return 0
    if args.command == "stats":
        _emit(stats_to_raw(service.get_stats()))
        return 0
    if args.command == "search":
        entries = service.search_by_artist(args.artist, limit=args.limit or default_limit)
        _emit([entry_to_raw(e) for e in entries])
        return 0

    filters = _filters_from_args(args, default_limit=default_limit)
    if args.command == "source":
        reviews = service.get_by_source(args.reviewer, filters)
        _emit([review_to_raw(r) for r in reviews])
    elif args.command == "overlap":
        _emit([entry_to_raw(e) for e in service.get_overlap(filters)])
    elif args.command == "aggregate":
        _emit([entry_to_raw(e) for e in service.get_aggregate(filters)])
    else:
        msg = f"Unknown command: {args.command}"
        raise ValueError(msg)
    return 0


def _build_arg_parser(*, default_data: Path) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="review-aggregator",
        description="Merge and compare album reviews from two critics.",
    )

    parser.add_argument(
        "--data",
        default=str(default_data),
        help="Path to the review store JSONL file (default: %(default)s).",
    )
    parser.add_argument(
        "--primary",
        default=None,
        help="Reviewer tag of the first critic (default: from environment).",
    )
    parser.add_argument(
        "--secondary",
        default=None,
        help="Reviewer tag of the second critic (default: from environment).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging.",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        help="Sub-command to run.",
    )

    # ingest: raw JSONL records from a scraper
    ingest_parser = subparsers.add_parser(
        "ingest",
        help="Validate and store raw review records from JSONL files.",
    )
    ingest_parser.add_argument("files", nargs="+", help="Raw JSONL files.")
    ingest_parser.add_argument(
        "--reviewer",
        default=None,
        help="Reviewer tag for records that do not carry one.",
    )

    seed_parser = subparsers.add_parser(
        "seed",
        help="Populate an empty store with the demo catalog.",
    )
    seed_parser.add_argument(
        "--force",
        action="store_true",
        help="Seed even if the store already holds reviews.",
    )

    subparsers.add_parser(
        "compact",
        help="Rewrite the store file without superseded rows.",
    )
    subparsers.add_parser("stats", help="Print catalog statistics.")

    search_parser = subparsers.add_parser(
        "search",
        help="Aggregate reviews for an artist name substring.",
    )
    search_parser.add_argument("artist")
    search_parser.add_argument("--limit", type=int, default=None)

    source_parser = subparsers.add_parser(
        "source",
        help="List reviews from a single critic.",
    )
    source_parser.add_argument("reviewer")
    _add_filter_arguments(source_parser)

    overlap_parser = subparsers.add_parser(
        "overlap",
        help="List albums reviewed by both critics.",
    )
    _add_filter_arguments(overlap_parser)

    aggregate_parser = subparsers.add_parser(
        "aggregate",
        help="List the merged catalog, overlaps first.",
    )
    _add_filter_arguments(aggregate_parser)
    aggregate_parser.add_argument(
        "--overlap-only",
        action="store_true",
        help="Only return albums reviewed by both critics.",
    )

    return parser


def _add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--artist", default=None, help="Artist substring.")
    parser.add_argument("--album", default=None, help="Album substring.")
    parser.add_argument("--min-score", type=float, default=None)
    parser.add_argument("--max-score", type=float, default=None)
    parser.add_argument("--year-from", type=int, default=None, help="Earliest year, inclusive.")
    parser.add_argument("--year-to", type=int, default=None, help="Latest year, inclusive.")
    parser.add_argument(
        "--sort-by",
        choices=[f.value for f in SortField],
        default=None,
        help="Sort field (default: the query's own ordering).",
    )
    parser.add_argument(
        "--order",
        choices=[o.value for o in SortOrder],
        default=SortOrder.DESC.value,
        help="Sort direction for --sort-by (default: %(default)s).",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of results (default: from environment).",
    )
    parser.add_argument("--offset", type=int, default=0)


def _filters_from_args(args: argparse.Namespace, *, default_limit: int) -> ReviewFilters:
    return ReviewFilters(
        artist=args.artist,
        album=args.album,
        min_score=args.min_score,
        max_score=args.max_score,
        year_from=args.year_from,
        year_to=args.year_to,
        limit=args.limit if args.limit is not None else default_limit,
        offset=args.offset,
        overlap_only=getattr(args, "overlap_only", False),
        sort_by=SortField(args.sort_by) if args.sort_by else None,
        order=SortOrder(args.order),
    )


def _configure_logging(*, verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _cmd_ingest(
    service: ReviewService,
    paths: list[Path],
    *,
    reviewer: str | None,
) -> int:
    rejected = 0
    for path in paths:
        if not path.exists():
            msg = f"Input file does not exist: {path}"
            raise FileNotFoundError(msg)

        records = load_raw_records(path)
        logger.info("Ingesting %s raw records from %s.", len(records), path)
        report = service.ingest_many(records, reviewer=reviewer)
        rejected += len(report.rejected)

    return 1 if rejected else 0


def _emit(payload: Any) -> None:
    json.dump(payload, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


if __name__ == "__main__":
    # python -m review_aggregator.cli seed
    # python -m review_aggregator.cli aggregate --limit 10
    main()
