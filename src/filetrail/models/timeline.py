"""Types for the merged history of a record and its satellite file."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from filetrail.models.base import CommitRecord


class HistorySource(str, Enum):
    PRIMARY = "primary"
    SATELLITE = "satellite"


@dataclass(frozen=True)
class TimelineEntry:
    """A commit tagged with the file it came from."""

    commit: CommitRecord
    source: HistorySource
    label: str

    @property
    def is_pending(self) -> bool:
        return self.commit.is_pending

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.commit.to_dict(),
            "source": self.source.value,
            "label": self.label,
            "isPending": self.is_pending,
        }


@dataclass(frozen=True)
class Timeline:
    """Merged history feed: pending entries first, then commits newest first."""

    primary_path: str
    satellite_path: Optional[str] = None
    entries: List[TimelineEntry] = field(default_factory=list)

    @property
    def total_commits(self) -> int:
        return len(self.entries)

    @property
    def primary_commits(self) -> int:
        return sum(1 for entry in self.entries if entry.source == HistorySource.PRIMARY)

    @property
    def satellite_commits(self) -> int:
        return sum(1 for entry in self.entries if entry.source == HistorySource.SATELLITE)

    @property
    def pending_entries(self) -> List[TimelineEntry]:
        return [entry for entry in self.entries if entry.is_pending]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primaryPath": self.primary_path,
            "satellitePath": self.satellite_path,
            "commits": [entry.to_dict() for entry in self.entries],
            "totalCommits": self.total_commits,
            "primaryCommits": self.primary_commits,
            "satelliteCommits": self.satellite_commits,
        }
