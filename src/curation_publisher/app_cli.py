from __future__ import annotations

import argparse
import os
import sys

import structlog

from .config import PublisherSettings
from .domain_types import RunStatus
from .errors import ConfigurationError, DirectoryUnavailable, NoResourcesFound
from .http_publisher_client import HttpPublisherClient
from .log_config import configure_logging
from .orchestrator import PublicationOrchestrator
from .presenters import render_plan, render_summary
from .publisher_client import FakePublisherClient, PublisherClient

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_PARTIAL = 1
EXIT_FAILURE = 2


def _build_client(dry_run: bool) -> tuple[PublisherClient, int | None]:
    if dry_run:
        return FakePublisherClient(), None

    settings = PublisherSettings.from_env()
    logger.info(
        "publisher configured",
        base_url=settings.base_url,
        token=settings.masked_token,
        timeout_secs=settings.timeout_secs,
    )
    client = HttpPublisherClient(
        base_url=settings.base_url,
        token=settings.token,
        timeout_secs=settings.timeout_secs,
    )
    return client, settings.max_workers


def publish(args: argparse.Namespace) -> int:
    try:
        client, env_workers = _build_client(args.dry_run)
    except ConfigurationError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return EXIT_FAILURE

    workers = args.workers or env_workers or 1
    orchestrator = PublicationOrchestrator(client, max_workers=workers)

    try:
        resources = orchestrator.plan(args.directory)
    except DirectoryUnavailable as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return EXIT_FAILURE
    except NoResourcesFound as exc:
        print(exc.message)
        return EXIT_OK

    print(render_plan(resources))
    if args.dry_run:
        print("[dry run: no requests are sent, condition ids are synthetic]")
    print()

    try:
        summary = orchestrator.run(args.directory)
    except DirectoryUnavailable as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return EXIT_FAILURE

    print(render_summary(summary))
    if summary.status is RunStatus.DEGRADED:
        return EXIT_PARTIAL
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="curation-publisher",
        description="Post curation condition and policy JSON files, wiring each policy to its condition id.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    pub = sub.add_parser("publish", help="Post conditions, then policies with resolved condition ids")
    pub.add_argument("-d", "--directory", default=os.path.join(".", "output"), help="Directory containing JSON files (default: ./output)")
    pub.add_argument("--dry-run", action="store_true", help="Run against an in-memory API; no credentials needed")
    pub.add_argument("--workers", type=int, default=None, help="Parallel submissions within a phase (default: 1)")
    pub.add_argument("-v", "--verbose", action="store_true", help="Log progress and API responses")
    pub.add_argument("--debug", action="store_true", help="Log request and resolution details")

    args = parser.parse_args(argv)
    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be at least 1")

    configure_logging(verbose=args.verbose, debug=args.debug)
    if args.command == "publish":
        return publish(args)
    return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
