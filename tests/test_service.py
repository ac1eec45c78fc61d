"""Tests for the async history service."""

import asyncio

import pytest

from filetrail.service import HistoryService


@pytest.fixture
def two_records(temp_git_repo, repo_path, make_commit):
    first = repo_path / "controls" / "AC-1.yaml"
    second = repo_path / "controls" / "AC-2.yaml"
    make_commit(temp_git_repo, first, "title: One\n", "Add AC-1", 1700000000)
    make_commit(temp_git_repo, second, "title: Two\n", "Add AC-2", 1700000100)
    make_commit(temp_git_repo, second, "title: Two v2\n", "Revise AC-2", 1700000200)
    return first, second


@pytest.mark.asyncio
async def test_concurrent_histories(repo_path, two_records):
    service = HistoryService(str(repo_path))
    first, second = two_records

    first_history, second_history = await asyncio.gather(
        service.file_history(str(first)), service.file_history(str(second))
    )

    assert first_history.total_commits == 1
    assert second_history.total_commits == 2
    assert await service.commit_count(str(second)) == 2
    assert (await service.latest_commit(str(second))).message == "Revise AC-2"


@pytest.mark.asyncio
async def test_repository_queries(repo_path, two_records, temp_git_repo):
    service = HistoryService(str(repo_path))

    assert await service.is_repository() is True
    assert await service.current_branch() == temp_git_repo.active_branch.name
    assert await service.content_at("HEAD~1", "controls/AC-2.yaml") == "title: Two\n"

    status = await service.status()
    assert status.is_repository is True
    assert status.branch_info.last_commit_message == "Revise AC-2"

    stats = await service.repository_stats()
    assert stats.total_commits == 3

    info = await service.branch_info(temp_git_repo.active_branch.name)
    assert info.ahead_count == 0


@pytest.mark.asyncio
async def test_build_timeline_and_pull(repo_path, two_records):
    service = HistoryService(str(repo_path))
    first, _ = two_records
    first.write_text("title: One edited\n", encoding="utf-8")

    timeline = await service.build_timeline(str(first))

    assert timeline.entries[0].is_pending
    assert timeline.total_commits == 2

    result = await service.pull_latest()
    assert result.success is False
    assert result.message == "No remote configured"
