"""Async entry points for the transport layer."""

import asyncio
from typing import Optional

from filetrail.config import HistorySettings
from filetrail.history.repository import RepositoryAccessor
from filetrail.history.timeline import TimelineAggregator
from filetrail.models.base import CommitRecord, FileHistory
from filetrail.models.status import BranchInfo, PullResult, RepositoryStats, RepositoryStatus
from filetrail.models.timeline import Timeline


class HistoryService:
    """Runs the blocking git queries in worker threads."""

    def __init__(self, base_dir: str = ".", settings: Optional[HistorySettings] = None):
        self.settings = settings or HistorySettings()
        self.accessor = RepositoryAccessor(base_dir, self.settings)
        self.timeline = TimelineAggregator(self.accessor, self.settings)

    async def is_repository(self) -> bool:
        return await asyncio.to_thread(self.accessor.is_repository)

    async def file_history(self, path: str, limit: Optional[int] = None) -> FileHistory:
        return await asyncio.to_thread(self.accessor.file_history, path, limit)

    async def content_at(self, revision: str, path: str) -> Optional[str]:
        return await asyncio.to_thread(self.accessor.content_at, revision, path)

    async def commit_count(self, path: str) -> int:
        return await asyncio.to_thread(self.accessor.commit_count, path)

    async def latest_commit(self, path: str) -> Optional[CommitRecord]:
        return await asyncio.to_thread(self.accessor.latest_commit, path)

    async def current_branch(self) -> Optional[str]:
        return await asyncio.to_thread(self.accessor.current_branch)

    async def branch_info(self, branch_name: str) -> Optional[BranchInfo]:
        return await asyncio.to_thread(self.accessor.branch_info, branch_name)

    async def status(self) -> RepositoryStatus:
        return await asyncio.to_thread(self.accessor.status)

    async def repository_stats(self) -> RepositoryStats:
        return await asyncio.to_thread(self.accessor.repository_stats)

    async def pull_latest(self) -> PullResult:
        return await asyncio.to_thread(self.accessor.pull_latest)

    async def build_timeline(
        self, primary_path: str, satellite_path: Optional[str] = None, limit: Optional[int] = None
    ) -> Timeline:
        return await asyncio.to_thread(self.timeline.build_timeline, primary_path, satellite_path, limit)
