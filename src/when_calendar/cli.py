from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Optional, Sequence

from .bootstrap import configure_logging
from .config import get_settings
from .data import build_event_store
from .domain import parse_timestamp
from .services import SyncServer
from .services.http import run_server

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="When shared calendar server.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Serve the client bundle and the event relay.")
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)

    purge_parser = subparsers.add_parser("purge", help="Delete every event that ended before a cutoff.")
    purge_parser.add_argument("--before", required=True, help="ISO-8601 cutoff, e.g. 2024-01-01T00:00")

    return parser


def purge(before: str) -> int:
    cutoff = parse_timestamp(before)
    if cutoff is None:
        logger.error("Invalid cutoff: %s", before)
        return 2
    sync = SyncServer(build_event_store(get_settings()))
    deleted = asyncio.run(sync.purge_older_than(cutoff))
    if deleted is None:
        return 1
    print(f"Deleted {deleted} events that ended before {cutoff.isoformat()}.")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "serve":
        logging.getLogger(__name__).info("When server starting")
        run_server(host=args.host, port=args.port)
        return 0
    if args.command == "purge":
        return purge(args.before)
    parser.print_help()  # pragma: no cover - argparse enforces choices
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
