"""Module executed when running ``python -m malgroup``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Sequence

from app.config import get_settings
from app.grouping import MATCH_CRITERIA, criterion_key
from app.pipeline import generate_report
from app.services.myanimelist import ListFetchError

logger = logging.getLogger("malgroup")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="malgroup",
        description="Compare MyAnimeList anime lists and write an HTML report.",
    )
    parser.add_argument(
        "-u",
        "--user",
        dest="users",
        action="append",
        default=None,
        help="MyAnimeList username to compare; repeat for each user "
        "(defaults to MALGROUP_USERNAMES)",
    )
    parser.add_argument(
        "-c",
        "--criterion",
        type=criterion_key,
        choices=sorted(MATCH_CRITERIA),
        default=None,
        help="status used to group anime (defaults to MATCH_CRITERION)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="write the report here instead of standard output",
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="ignore cached lists and fetch them again",
    )

    subcommands = parser.add_subparsers(dest="command")
    subcommands.add_parser("serve", help="serve the report over HTTP")
    return parser


def serve() -> None:
    """Start the uvicorn server using the configured settings."""

    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "development",
    )


def write_report(args: argparse.Namespace) -> int:
    settings = get_settings()
    criterion = MATCH_CRITERIA[args.criterion] if args.criterion else None
    try:
        html = asyncio.run(
            generate_report(
                settings, args.users, criterion=criterion, refresh=args.refresh
            )
        )
    except ListFetchError as exc:
        logger.error("%s", exc)
        return 1

    if args.output is None:
        sys.stdout.write(html)
        sys.stdout.flush()
    else:
        args.output.write_text(html, encoding="utf-8")
        logger.info("Report written to %s", args.output)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=get_settings().log_level.upper(), stream=sys.stderr)
    if args.command == "serve":
        serve()
        return 0
    return write_report(args)


if __name__ == "__main__":  # pragma: no cover - runtime entrypoint
    sys.exit(main())
