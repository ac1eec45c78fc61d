"""Command-line access to filetrail queries, printing JSON."""

import argparse
import asyncio
import json
import os
import sys
from typing import Any, Dict, List, Optional

from loguru import logger

from filetrail.config import load_settings
from filetrail.service import HistoryService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect the git history of individual record files")
    parser.add_argument("--repo-path", type=str, help="Directory inside the git working tree", default=".")
    parser.add_argument("--env-file", type=str, help="Optional .env file with FILETRAIL_* settings")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("status", help="Show branch and remote status")
    commands.add_parser("stats", help="Show repository-wide commit statistics")
    commands.add_parser("pull", help="Fast-forward the current branch from its remote")

    history = commands.add_parser("history", help="Show the commit history of one file")
    history.add_argument("path", type=str)
    history.add_argument("--limit", type=int, default=None)

    show = commands.add_parser("show", help="Print a file as it was at a revision")
    show.add_argument("revision", type=str)
    show.add_argument("path", type=str, help="Path relative to the repository root")

    timeline = commands.add_parser("timeline", help="Merged history of a record and its satellite file")
    timeline.add_argument("primary", type=str)
    timeline.add_argument("--satellite", type=str, default=None)
    timeline.add_argument("--limit", type=int, default=None)

    return parser


async def run_command(service: HistoryService, args: argparse.Namespace) -> Dict[str, Any]:
    """Run one parsed command and return a JSON-ready result."""
    if args.command == "status":
        return (await service.status()).to_dict()
    if args.command == "stats":
        return (await service.repository_stats()).to_dict()
    if args.command == "pull":
        return (await service.pull_latest()).to_dict()
    if args.command == "history":
        return (await service.file_history(os.path.abspath(args.path), args.limit)).to_dict()
    if args.command == "show":
        content = await service.content_at(args.revision, args.path)
        return {"revision": args.revision, "path": args.path, "content": content}
    if args.command == "timeline":
        satellite = os.path.abspath(args.satellite) if args.satellite else None
        timeline = await service.build_timeline(os.path.abspath(args.primary), satellite, args.limit)
        return timeline.to_dict()
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "INFO")

    settings = load_settings(args.env_file)
    service = HistoryService(os.path.abspath(args.repo_path), settings)

    logger.debug(f"Running {args.command} in {service.accessor.base_dir}")
    result = asyncio.run(run_command(service, args))
    print(json.dumps(result, indent=2, default=str))

    if args.command == "pull" and not result["success"]:
        logger.error(f"Pull failed: {result['message']}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
