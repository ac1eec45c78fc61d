"""Base types used across the filetrail system."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from filetrail.models.diff import StructuredDiffResult


@dataclass(frozen=True)
class ChangeStats:
    """Line-level change counts for a single file in a single commit."""

    insertions: int = 0
    deletions: int = 0
    files: int = 1

    def to_dict(self) -> Dict[str, int]:
        return {"insertions": self.insertions, "deletions": self.deletions, "files": self.files}


@dataclass(frozen=True)
class CommitRecord:
    """Information about a single commit that touched a file."""

    hash: str
    short_hash: str
    author: str
    author_email: str
    date: datetime
    message: str
    changes: ChangeStats = field(default_factory=ChangeStats)
    diff: Optional[str] = None
    structured_diff: Optional[StructuredDiffResult] = None

    @property
    def is_pending(self) -> bool:
        return self.hash == "pending"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "hash": self.hash,
            "shortHash": self.short_hash,
            "author": self.author,
            "authorEmail": self.author_email,
            "date": self.date.isoformat(),
            "message": self.message,
            "changes": self.changes.to_dict(),
        }
        if self.diff is not None:
            data["diff"] = self.diff
        if self.structured_diff is not None:
            data["structuredDiff"] = self.structured_diff.to_dict()
        return data


@dataclass(frozen=True)
class FileHistory:
    """Commits that touched a file, newest first."""

    file_path: str
    commits: List[CommitRecord] = field(default_factory=list)

    @property
    def total_commits(self) -> int:
        return len(self.commits)

    @property
    def first_commit(self) -> Optional[CommitRecord]:
        """The oldest commit in the history."""
        return self.commits[-1] if self.commits else None

    @property
    def last_commit(self) -> Optional[CommitRecord]:
        """The newest commit in the history."""
        return self.commits[0] if self.commits else None

    @classmethod
    def empty(cls, file_path: str) -> "FileHistory":
        return cls(file_path=file_path, commits=[])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filePath": self.file_path,
            "commits": [commit.to_dict() for commit in self.commits],
            "totalCommits": self.total_commits,
            "firstCommit": self.first_commit.to_dict() if self.first_commit else None,
            "lastCommit": self.last_commit.to_dict() if self.last_commit else None,
        }
