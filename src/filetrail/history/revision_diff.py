"""Line-based differences between two revisions of a file."""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from filetrail.models.base import ChangeStats
from filetrail.models.diff import StructuredDiffResult
from filetrail.history.structured_diff import StructuredDiffEngine


@dataclass(frozen=True)
class RevisionDiff:
    """Everything known about how a file changed between two revisions."""

    changes: ChangeStats
    diff: Optional[str] = None
    structured_diff: Optional[StructuredDiffResult] = None


def split_lines(content: Optional[str]) -> List[str]:
    """Split file content into lines; absent content has no lines."""
    if content is None:
        return []
    return content.split("\n")


class RevisionDiffer:
    """Produces change counts and a unified rendering for two snapshots.

    Counts are a positional approximation: line i of the old side is
    compared to line i of the new side. This is cheap and good enough to
    show the magnitude of a change, but is not a minimal edit script.
    """

    def __init__(self, structured_engine: Optional[StructuredDiffEngine] = None):
        self.structured_engine = structured_engine or StructuredDiffEngine()

    @staticmethod
    def count_changes(old_lines: List[str], new_lines: List[str]) -> Tuple[int, int]:
        """Count (insertions, deletions) by comparing lines at the same position."""
        insertions = 0
        deletions = 0

        for i in range(max(len(old_lines), len(new_lines))):
            if i >= len(old_lines):
                insertions += 1
            elif i >= len(new_lines):
                deletions += 1
            elif old_lines[i] != new_lines[i]:
                insertions += 1
                deletions += 1

        return insertions, deletions

    @staticmethod
    def render_unified(old_lines: List[str], new_lines: List[str], path: str) -> str:
        """Render a single-hunk unified diff spanning the whole file."""
        diff_lines = [
            f"--- a/{path}",
            f"+++ b/{path}",
            f"@@ -1,{len(old_lines)} +1,{len(new_lines)} @@",
        ]

        i = j = 0
        while i < len(old_lines) or j < len(new_lines):
            if i < len(old_lines) and j < len(new_lines) and old_lines[i] == new_lines[j]:
                diff_lines.append(f" {old_lines[i]}")
                i += 1
                j += 1
            elif i < len(old_lines):
                diff_lines.append(f"-{old_lines[i]}")
                i += 1
            else:
                diff_lines.append(f"+{new_lines[j]}")
                j += 1

        return "\n".join(diff_lines)

    @staticmethod
    def render_creation(new_lines: List[str], path: str) -> str:
        """Render a file's first revision as a diff against /dev/null."""
        header = ["--- /dev/null", f"+++ b/{path}", f"@@ -0,0 +1,{len(new_lines)} @@"]
        return "\n".join(header + [f"+{line}" for line in new_lines])

    def diff(
        self,
        old_content: Optional[str],
        new_content: Optional[str],
        path: str,
        is_record_list: bool = False,
    ) -> RevisionDiff:
        """Diff two snapshots of ``path``.

        ``old_content`` is None when the file did not exist on the old side
        (for example the commit that created it); the whole new content is
        then reported as insertions.
        """
        if old_content is None and new_content is None:
            return RevisionDiff(changes=ChangeStats())

        new_lines = split_lines(new_content)
        structured = self.structured_engine.diff(old_content or "", new_content or "", is_record_list)

        if old_content is None:
            return RevisionDiff(
                changes=ChangeStats(insertions=len(new_lines), deletions=0),
                diff=self.render_creation(new_lines, path),
                structured_diff=structured,
            )

        old_lines = split_lines(old_content)
        insertions, deletions = self.count_changes(old_lines, new_lines)
        return RevisionDiff(
            changes=ChangeStats(insertions=insertions, deletions=deletions),
            diff=self.render_unified(old_lines, new_lines, path),
            structured_diff=structured,
        )
