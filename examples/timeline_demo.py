#!/usr/bin/env python3
"""
examples/timeline_demo.py

Demonstrates the filetrail timeline: the merged history of a record file and
its satellite file, including any uncommitted edits in the working tree.
"""

import argparse
import os
import sys

from filetrail.history.repository import RepositoryAccessor
from filetrail.history.timeline import TimelineAggregator
from filetrail.models.timeline import TimelineEntry


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Show the merged history of one record")
    parser.add_argument("primary", type=str, help="Path to the record file")
    parser.add_argument("--satellite", type=str, help="Path to the record's satellite file")
    parser.add_argument(
        "--repo-path",
        type=str,
        default=os.getcwd(),
        help="Directory inside the git working tree (default: current directory)",
    )
    parser.add_argument("--limit", type=int, default=20, help="Commits per file (default: 20)")
    return parser.parse_args()


def format_entry(entry: TimelineEntry) -> str:
    """Format a single timeline entry for display.

    Args:
        entry: TimelineEntry for a commit or for pending changes

    Returns:
        Formatted string containing the entry's details
    """
    commit = entry.commit
    structured = commit.structured_diff.summary if commit.structured_diff else "not computed"

    return f"""
[{entry.label}] {commit.short_hash}
Author: {commit.author}
Date: {commit.date.strftime('%Y-%m-%d %H:%M:%S')}
Lines: +{commit.changes.insertions} -{commit.changes.deletions}
Fields: {structured}
Message: {commit.message.strip()}
{'=' * 80}
"""


def main():
    """Run the timeline demo."""
    args = parse_args()
    primary = os.path.abspath(args.primary)
    satellite = os.path.abspath(args.satellite) if args.satellite else None

    print(f"Building timeline for: {primary}")
    if satellite:
        print(f"Satellite file: {satellite}")

    accessor = RepositoryAccessor(args.repo_path)
    if not accessor.is_repository():
        print(f"{args.repo_path} is not inside a git repository", file=sys.stderr)
        return 1

    timeline = TimelineAggregator(accessor).build_timeline(primary, satellite, args.limit)

    print(f"\n{timeline.total_commits} entries ({timeline.primary_commits} record, {timeline.satellite_commits} satellite)")
    if timeline.pending_entries:
        print(f"{len(timeline.pending_entries)} file(s) with uncommitted changes")

    for entry in timeline.entries:
        print(format_entry(entry))

    return 0


if __name__ == "__main__":
    sys.exit(main())
