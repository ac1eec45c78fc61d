"""Shared fixtures: throwaway git repositories built with GitPython."""

from pathlib import Path
from typing import Optional

import pytest
from git import Repo


def configure_identity(repo: Repo) -> Repo:
    with repo.config_writer() as config:
        config.set_value("user", "name", "Test Author")
        config.set_value("user", "email", "author@example.com")
    return repo


def create_commit(repo: Repo, file_path: Path, content: str, message: str, timestamp: Optional[int] = None):
    """Write ``content`` to ``file_path`` and commit it, optionally at a fixed time."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(content, encoding="utf-8")
    repo.index.add([file_path.relative_to(repo.working_tree_dir).as_posix()])
    date = f"{timestamp} +0000" if timestamp else None
    return repo.index.commit(message, author_date=date, commit_date=date)


@pytest.fixture
def temp_git_repo(tmp_path):
    """Create an empty repository with a known identity."""
    repo_path = tmp_path / "records"
    repo_path.mkdir()
    return configure_identity(Repo.init(repo_path))


@pytest.fixture
def repo_path(temp_git_repo):
    return Path(temp_git_repo.working_tree_dir)


@pytest.fixture
def not_a_repo(tmp_path):
    path = tmp_path / "plain"
    path.mkdir()
    (path / "record.yaml").write_text("title: plain\n", encoding="utf-8")
    return path


@pytest.fixture
def remote_setup(tmp_path):
    """A bare remote with two clones: ``upstream`` publishes, ``local`` is under test."""
    bare = Repo.init(tmp_path / "remote.git", bare=True)
    upstream = configure_identity(Repo.clone_from(str(tmp_path / "remote.git"), str(tmp_path / "upstream")))

    create_commit(upstream, Path(upstream.working_tree_dir) / "record.yaml", "title: first\n", "Initial commit")
    branch = upstream.active_branch.name
    upstream.remote("origin").push(f"{branch}:{branch}")

    local = configure_identity(Repo.clone_from(str(tmp_path / "remote.git"), str(tmp_path / "local")))
    return {"bare": bare, "upstream": upstream, "local": local, "branch": branch}


@pytest.fixture
def make_commit():
    """The create_commit helper, for tests that build their own history."""
    return create_commit
