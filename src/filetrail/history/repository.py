"""
filetrail repository accessor: per-file history and branch state from git.

Every public read degrades instead of raising. A missing repository, a
file that was never committed, and an unexpected git failure all produce
the same empty or neutral result, the last one after being logged.
Only pull_latest reports failure to the caller.
"""

import os
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from git import Repo
from git.exc import BadName, GitCommandError, InvalidGitRepositoryError, NoSuchPathError
from git.objects.commit import Commit
from git.remote import Remote
from loguru import logger

from filetrail.config import HistorySettings
from filetrail.errors import BackendError, NotARepositoryError, PullError
from filetrail.history.revision_diff import RevisionDiff, RevisionDiffer
from filetrail.history.structured_diff import StructuredDiffEngine
from filetrail.models.base import ChangeStats, CommitRecord, FileHistory
from filetrail.models.status import BranchInfo, PullResult, RepositoryStats, RepositoryStatus


def _commit_date(commit: Commit) -> datetime:
    return datetime.fromtimestamp(commit.authored_date, tz=timezone.utc)


def _read_blob(commit: Commit, relative_path: str) -> Optional[str]:
    """Content of ``relative_path`` at ``commit``, or None if it did not exist there."""
    try:
        blob = commit.tree / relative_path
    except KeyError:
        return None
    if blob.type != "blob":
        return None
    return blob.data_stream.read().decode("utf-8")


def _command_error_message(error: GitCommandError) -> str:
    message = (error.stderr or "").strip()
    if message.startswith("stderr:"):
        message = message[len("stderr:") :].strip().strip("'").strip()
    return message or str(error)


class RepositoryAccessor:
    """Queries the git repository that contains ``base_dir``.

    No repository handle is kept between calls: each query opens the
    repository, reads what it needs and closes it again, so one accessor
    can be shared by concurrent callers.
    """

    def __init__(
        self,
        base_dir: str = ".",
        settings: Optional[HistorySettings] = None,
        differ: Optional[RevisionDiffer] = None,
    ):
        self.base_dir = os.path.abspath(base_dir)
        self.settings = settings or HistorySettings()
        self.differ = differ or RevisionDiffer(
            StructuredDiffEngine(
                identifier_field=self.settings.record_identifier_field,
                reference_field=self.settings.record_reference_field,
            )
        )

    @contextmanager
    def _open_repo(self) -> Iterator[Repo]:
        try:
            repo = Repo(self.base_dir, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise NotARepositoryError(self.base_dir) from e

        try:
            if repo.bare or not repo.working_tree_dir:
                raise NotARepositoryError(self.base_dir)
            yield repo
        finally:
            repo.close()

    def _relative_path(self, repo: Repo, path: str) -> str:
        """Path of ``path`` relative to the repository root, with forward slashes.

        Relative paths are taken relative to ``base_dir``.
        """
        root = os.path.realpath(repo.working_tree_dir)
        full_path = path if os.path.isabs(path) else os.path.join(self.base_dir, path)
        relative = os.path.relpath(os.path.realpath(full_path), root)
        if relative == os.pardir or relative.startswith(os.pardir + os.sep):
            raise BackendError(f"{path} is outside the repository at {root}")
        return Path(relative).as_posix()

    def is_repository(self) -> bool:
        try:
            with self._open_repo():
                return True
        except NotARepositoryError:
            return False
        except Exception as e:
            logger.error(f"Error looking up repository for {self.base_dir}: {e}")
            return False

    def relative_path(self, path: str) -> Optional[str]:
        """Repository-relative form of ``path``, or None outside a repository."""
        try:
            with self._open_repo() as repo:
                return self._relative_path(repo, path)
        except NotARepositoryError:
            return None
        except BackendError as e:
            logger.error(str(e))
            return None
        except Exception as e:
            logger.error(f"Error resolving {path} in repository: {e}")
            return None

    def file_history(
        self, path: str, limit: Optional[int] = None, is_record_list: Optional[bool] = None
    ) -> FileHistory:
        """Up to ``limit`` commits that touched ``path``, newest first.

        ``is_record_list`` controls how structured diffs of the file are
        computed; when omitted it is inferred from the file name.
        """
        if limit is None:
            limit = self.settings.history_limit
        if limit <= 0:
            return FileHistory.empty(path)
        if is_record_list is None:
            is_record_list = self.settings.is_record_list_path(path)

        try:
            with self._open_repo() as repo:
                relative = self._relative_path(repo, path)
                if not repo.head.is_valid():
                    # Nothing has been committed on this branch yet.
                    return FileHistory.empty(path)

                commits = list(repo.iter_commits("HEAD", paths=relative, max_count=limit))
                records = [
                    self._to_record(commit, relative, is_record_list, i < self.settings.diff_commit_limit)
                    for i, commit in enumerate(commits)
                ]
        except NotARepositoryError:
            return FileHistory.empty(path)
        except Exception as e:
            logger.error(f"Unexpected error getting git history for {path}: {e}")
            return FileHistory.empty(path)

        logger.debug(f"Found {len(records)} commits for {path}")
        return FileHistory(file_path=path, commits=records)

    def _to_record(self, commit: Commit, relative_path: str, is_record_list: bool, include_diff: bool) -> CommitRecord:
        revision = RevisionDiff(changes=ChangeStats())
        if include_diff:
            revision = self._commit_diff(commit, relative_path, is_record_list)

        return CommitRecord(
            hash=commit.hexsha,
            short_hash=commit.hexsha[: self.settings.short_hash_length],
            author=commit.author.name,
            author_email=commit.author.email,
            date=_commit_date(commit),
            message=commit.message,
            changes=revision.changes,
            diff=revision.diff,
            structured_diff=revision.structured_diff,
        )

    def _commit_diff(self, commit: Commit, relative_path: str, is_record_list: bool) -> RevisionDiff:
        """Diff ``relative_path`` between ``commit`` and its first parent."""
        try:
            new_content = _read_blob(commit, relative_path)
            old_content = _read_blob(commit.parents[0], relative_path) if commit.parents else None
        except (GitCommandError, ValueError, OSError) as e:
            logger.warning(f"Could not read {relative_path} around commit {commit.hexsha}: {e}")
            return RevisionDiff(changes=ChangeStats())

        return self.differ.diff(old_content, new_content, relative_path, is_record_list)

    def content_at(self, revision: str, path: str) -> Optional[str]:
        """Content of ``path`` at ``revision``.

        ``path`` is relative to the repository root, or absolute. None means
        the file did not exist at that revision.
        """
        try:
            with self._open_repo() as repo:
                relative = path
                if os.path.isabs(path):
                    relative = self._relative_path(repo, path)
                if revision == "HEAD" and not repo.head.is_valid():
                    return None
                return _read_blob(repo.commit(revision), Path(relative).as_posix())
        except NotARepositoryError:
            return None
        except BadName as e:
            logger.warning(f"Unknown revision {revision}: {e}")
            return None
        except Exception as e:
            logger.error(f"Error getting file content at commit {revision}: {e}")
            return None

    def commit_count(self, path: str) -> int:
        try:
            with self._open_repo() as repo:
                relative = self._relative_path(repo, path)
                if not repo.head.is_valid():
                    return 0
                return sum(1 for _ in repo.iter_commits("HEAD", paths=relative))
        except NotARepositoryError:
            return 0
        except Exception as e:
            logger.error(f"Error counting commits for {path}: {e}")
            return 0

    def latest_commit(self, path: str) -> Optional[CommitRecord]:
        return self.file_history(path, 1).last_commit

    def repository_stats(self) -> RepositoryStats:
        """Commit and contributor totals for the whole repository."""
        try:
            with self._open_repo() as repo:
                if not repo.head.is_valid():
                    return RepositoryStats()
                commits = list(repo.iter_commits("HEAD"))
        except NotARepositoryError:
            return RepositoryStats()
        except Exception as e:
            logger.error(f"Error getting repository stats: {e}")
            return RepositoryStats()

        return RepositoryStats(
            total_commits=len(commits),
            contributors=len({commit.author.email for commit in commits}),
            first_commit_date=_commit_date(commits[-1]) if commits else None,
            last_commit_date=_commit_date(commits[0]) if commits else None,
        )

    def current_branch(self) -> Optional[str]:
        try:
            with self._open_repo() as repo:
                if repo.head.is_detached:
                    return None
                return repo.active_branch.name
        except NotARepositoryError:
            return None
        except Exception as e:
            logger.error(f"Error getting current branch: {e}")
            return None

    def branch_info(self, branch_name: str) -> Optional[BranchInfo]:
        """Compare ``branch_name`` with its counterpart on a remote.

        Remotes are refreshed first; a remote that cannot be reached is
        skipped. Without any remote counterpart the branch is reported as
        neither ahead nor behind.
        """
        try:
            with self._open_repo() as repo:
                return self._compare_with_remote(repo, branch_name)
        except NotARepositoryError:
            return None
        except Exception as e:
            logger.error(f"Error getting branch info for {branch_name}: {e}")
            return None

    def _compare_with_remote(self, repo: Repo, branch_name: str) -> BranchInfo:
        local_commits: List[Commit] = []
        if branch_name in repo.heads:
            local_commits = list(repo.iter_commits(branch_name))

        last_commit = local_commits[0] if local_commits else None
        last_commit_date = _commit_date(last_commit) if last_commit else None
        last_commit_message = last_commit.message if last_commit else None

        if self.settings.fetch_remotes:
            self._refresh_remotes(repo)

        remote_commits = self._remote_commits(repo, branch_name)
        if not remote_commits:
            return BranchInfo(
                current_branch=branch_name,
                last_commit_date=last_commit_date,
                last_commit_message=last_commit_message,
            )

        local_hashes = {commit.hexsha for commit in local_commits}
        remote_hashes = {commit.hexsha for commit in remote_commits}
        ahead_count = len(local_hashes - remote_hashes)
        behind_count = len(remote_hashes - local_hashes)

        return BranchInfo(
            current_branch=branch_name,
            is_ahead=ahead_count > 0,
            is_behind=behind_count > 0,
            ahead_count=ahead_count,
            behind_count=behind_count,
            last_commit_date=last_commit_date,
            last_commit_message=last_commit_message,
            has_unpushed_changes=ahead_count > 0,
        )

    def _refresh_remotes(self, repo: Repo) -> None:
        for remote in repo.remotes:
            try:
                remote.fetch(no_tags=True)
            except (GitCommandError, ValueError) as e:
                logger.warning(f"Could not fetch from remote {remote.name}: {e}")

    def _remote_commits(self, repo: Repo, branch_name: str) -> List[Commit]:
        """Commits of the first remote branch matching ``branch_name``."""
        candidates = []
        if branch_name in repo.heads:
            tracking = repo.heads[branch_name].tracking_branch()
            if tracking is not None:
                candidates.append(tracking.name)
        candidates.extend(f"{remote.name}/{branch_name}" for remote in repo.remotes)

        for ref in dict.fromkeys(candidates):
            try:
                return list(repo.iter_commits(ref))
            except (GitCommandError, ValueError) as e:
                logger.warning(f"Could not get commits for {ref}: {e}")
        return []

    def status(self) -> RepositoryStatus:
        try:
            if not self.is_repository():
                return RepositoryStatus.not_a_repository()

            branch = self.current_branch()
            if not branch:
                return RepositoryStatus(is_repository=True)

            return RepositoryStatus(is_repository=True, current_branch=branch, branch_info=self.branch_info(branch))
        except Exception as e:
            logger.error(f"Error getting git status: {e}")
            return RepositoryStatus.not_a_repository()

    def pull_latest(self) -> PullResult:
        """Fast-forward the current branch from its remote.

        git refuses a fast-forward that cannot be applied cleanly, so a
        failed pull leaves the working tree untouched.
        """
        try:
            with self._open_repo() as repo:
                if repo.head.is_detached:
                    raise PullError("No current branch found")
                branch = repo.active_branch.name
                remote, remote_branch = self._pull_remote(repo, branch)

                logger.info(f"Fast-forwarding {branch} from {remote.name}/{remote_branch}")
                remote.pull(remote_branch, ff_only=True)
        except NotARepositoryError:
            return PullResult(success=False, message="Not a git repository")
        except PullError as e:
            return PullResult(success=False, message=str(e))
        except GitCommandError as e:
            logger.error(f"Error pulling changes: {e}")
            return PullResult(success=False, message=_command_error_message(e))
        except Exception as e:
            logger.error(f"Error pulling changes: {e}")
            return PullResult(success=False, message=str(e) or "Unknown error occurred")

        return PullResult(success=True, message="Successfully pulled changes")

    def _pull_remote(self, repo: Repo, branch: str) -> Tuple[Remote, str]:
        """Remote to pull from and the branch name on that remote."""
        tracking = repo.heads[branch].tracking_branch() if branch in repo.heads else None
        if tracking is not None:
            return repo.remote(tracking.remote_name), tracking.remote_head
        if repo.remotes:
            return repo.remotes[0], branch
        raise PullError("No remote configured")
