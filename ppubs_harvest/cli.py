"""Command-line interface for ppubs-harvest."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import Settings
from .pipeline import run_harvest
from .search import dedupe_identifiers, fetch_identifiers

logger = logging.getLogger(__name__)


def _page_size(value: str) -> int:
    """argparse type for --page-size: a positive integer."""
    try:
        n = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from exc
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {n}")
    return n


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    p = argparse.ArgumentParser(
        prog="ppubs-harvest",
        description="Resumable bulk download of USPTO patent PDFs and rendered HTML views.",
    )
    p.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    sub = p.add_subparsers(dest="cmd", required=True)

    # --- search ---
    search = sub.add_parser("search", help="Run the search query and print unique identifiers")
    search.add_argument(
        "--page-size", type=_page_size, default=None, help="Number of search results to request"
    )

    # --- harvest ---
    harvest = sub.add_parser("harvest", help="Search, then download both artifacts per identifier")
    harvest.add_argument(
        "--page-size", type=_page_size, default=None, help="Number of search results to request"
    )
    harvest.add_argument(
        "--output-dir", type=Path, default=None, help="Artifact directory (default: PDFs)"
    )

    return p


def _configure_logging(verbose: bool) -> None:
    """Set up root logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    overrides = {}
    if getattr(args, "output_dir", None) is not None:
        overrides["output_dir"] = args.output_dir
    s = Settings(**overrides)
    s.ensure_dirs()
    page_size = args.page_size if args.page_size is not None else s.page_size

    if args.cmd == "search":
        identifiers = dedupe_identifiers(fetch_identifiers(page_size, settings=s))
        print(json.dumps(identifiers, indent=2))
        return 0

    if args.cmd == "harvest":
        summary = run_harvest(s, page_size=page_size)
        print(
            json.dumps(
                {
                    "identifiers_found": summary.identifiers_found,
                    "identifiers_unique": summary.identifiers_unique,
                    "attempts": summary.attempts,
                    "cooldowns": summary.cooldowns,
                    "outcomes": summary.counts(),
                },
                indent=2,
            )
        )
        return 0

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
