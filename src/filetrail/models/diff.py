"""Types describing structural differences between two documents."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ChangeType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


class _Missing:
    """Marks a side of a change that has no value, as opposed to an explicit null."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


@dataclass(frozen=True)
class ChangeRecord:
    """A single change between two structured documents."""

    type: ChangeType
    path: str
    description: str
    old_value: Any = MISSING
    new_value: Any = MISSING

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type.value, "path": self.path, "description": self.description}
        if self.old_value is not MISSING:
            data["oldValue"] = self.old_value
        if self.new_value is not MISSING:
            data["newValue"] = self.new_value
        return data


@dataclass(frozen=True)
class StructuredDiffResult:
    """Result of comparing two structured documents."""

    has_changes: bool
    changes: List[ChangeRecord] = field(default_factory=list)
    summary: str = "No changes detected"

    def count(self, change_type: ChangeType) -> int:
        return sum(1 for change in self.changes if change.type == change_type)

    def find(self, path: str) -> Optional[ChangeRecord]:
        return next((change for change in self.changes if change.path == path), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hasChanges": self.has_changes,
            "changes": [change.to_dict() for change in self.changes],
            "summary": self.summary,
        }
