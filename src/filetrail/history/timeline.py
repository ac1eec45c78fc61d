"""Merged history of a record's primary file and its satellite file."""

import os
from datetime import datetime, timezone
from typing import List, Optional

from loguru import logger

from filetrail.config import HistorySettings
from filetrail.history.repository import RepositoryAccessor
from filetrail.models.base import CommitRecord
from filetrail.models.timeline import HistorySource, Timeline, TimelineEntry

PENDING_HASH = "pending"


def read_working_copy(path: str) -> str:
    """Read a file exactly as stored, without newline translation."""
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


class TimelineAggregator:
    """Builds one chronological feed from the histories of two files.

    Uncommitted edits show up as synthetic "pending" entries ahead of all
    real commits, one per file whose working copy differs from HEAD.
    """

    def __init__(self, accessor: RepositoryAccessor, settings: Optional[HistorySettings] = None):
        self.accessor = accessor
        self.settings = settings or accessor.settings

    def _resolve(self, path: str) -> str:
        """Relative paths are taken relative to the accessor's base directory."""
        return path if os.path.isabs(path) else os.path.join(self.accessor.base_dir, path)

    def build_timeline(
        self, primary_path: str, satellite_path: Optional[str] = None, limit: Optional[int] = None
    ) -> Timeline:
        sources = [(HistorySource.PRIMARY, primary_path, self.settings.primary_label)]
        if satellite_path:
            sources.append((HistorySource.SATELLITE, satellite_path, self.settings.satellite_label))

        commits: List[TimelineEntry] = []
        pending: List[TimelineEntry] = []

        for source, given_path, label in sources:
            path = self._resolve(given_path)
            if not os.path.exists(path):
                logger.debug(f"No {source.value} file at {path}, skipping")
                continue

            is_record_list = source is HistorySource.SATELLITE or self.settings.is_record_list_path(path)
            history = self.accessor.file_history(path, limit, is_record_list=is_record_list)
            commits.extend(TimelineEntry(commit=commit, source=source, label=label) for commit in history.commits)

            entry = self._pending_entry(path, source, label, is_record_list)
            if entry is not None:
                pending.append(entry)

        commits.sort(key=lambda entry: entry.commit.date, reverse=True)
        timeline = Timeline(primary_path=primary_path, satellite_path=satellite_path, entries=pending + commits)

        logger.info(
            f"Timeline for {primary_path}: {timeline.total_commits} entries "
            f"({timeline.primary_commits} primary, {timeline.satellite_commits} satellite)"
        )
        return timeline

    def _pending_entry(
        self, path: str, source: HistorySource, label: str, is_record_list: bool
    ) -> Optional[TimelineEntry]:
        """Entry for uncommitted changes to ``path``, or None if it matches HEAD."""
        relative = self.accessor.relative_path(path)
        if relative is None:
            return None

        try:
            current = read_working_copy(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Could not read working copy of {path}: {e}")
            return None

        # None when the file has never been committed.
        head = self.accessor.content_at("HEAD", relative)
        if current == (head or ""):
            return None

        logger.debug(f"Found pending changes in {source.value} file: {relative}")
        revision = self.accessor.differ.diff(head, current, relative, is_record_list)
        commit = CommitRecord(
            hash=PENDING_HASH,
            short_hash=PENDING_HASH,
            author=self.settings.pending_author,
            author_email=self.settings.pending_email,
            date=datetime.now(timezone.utc),
            message=self.settings.pending_message,
            changes=revision.changes,
            diff=revision.diff,
            structured_diff=revision.structured_diff,
        )
        return TimelineEntry(commit=commit, source=source, label=label)
