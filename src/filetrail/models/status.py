"""Repository and branch status types."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class BranchInfo:
    """Comparison of a local branch against its remote counterpart."""

    current_branch: str
    is_ahead: bool = False
    is_behind: bool = False
    ahead_count: int = 0
    behind_count: int = 0
    last_commit_date: Optional[datetime] = None
    last_commit_message: Optional[str] = None
    has_unpushed_changes: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentBranch": self.current_branch,
            "isAhead": self.is_ahead,
            "isBehind": self.is_behind,
            "aheadCount": self.ahead_count,
            "behindCount": self.behind_count,
            "lastCommitDate": _iso(self.last_commit_date),
            "lastCommitMessage": self.last_commit_message,
            "hasUnpushedChanges": self.has_unpushed_changes,
        }


@dataclass(frozen=True)
class RepositoryStatus:
    is_repository: bool
    current_branch: Optional[str] = None
    branch_info: Optional[BranchInfo] = None

    @property
    def can_pull(self) -> bool:
        return bool(self.branch_info and self.branch_info.is_behind)

    @property
    def can_push(self) -> bool:
        return bool(self.branch_info and self.branch_info.is_ahead)

    @classmethod
    def not_a_repository(cls) -> "RepositoryStatus":
        return cls(is_repository=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isRepository": self.is_repository,
            "currentBranch": self.current_branch,
            "branchInfo": self.branch_info.to_dict() if self.branch_info else None,
            "canPull": self.can_pull,
            "canPush": self.can_push,
        }


@dataclass(frozen=True)
class PullResult:
    success: bool
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "message": self.message}


@dataclass(frozen=True)
class RepositoryStats:
    """Repository-wide commit statistics."""

    total_commits: int = 0
    contributors: int = 0
    first_commit_date: Optional[datetime] = None
    last_commit_date: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalCommits": self.total_commits,
            "contributors": self.contributors,
            "firstCommitDate": _iso(self.first_commit_date),
            "lastCommitDate": _iso(self.last_commit_date),
        }
