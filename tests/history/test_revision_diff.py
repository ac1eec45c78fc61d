"""Tests for the line-based revision differ."""

import pytest

from filetrail.history.revision_diff import RevisionDiffer, split_lines
from filetrail.models.base import ChangeStats
from filetrail.models.diff import ChangeType


@pytest.fixture
def differ():
    return RevisionDiffer()


@pytest.mark.parametrize(
    "old_lines, new_lines, expected",
    [
        (["a", "b", "c"], ["a", "x", "c"], (1, 1)),
        (["a"], ["a", "b", "c"], (2, 0)),
        (["a", "b", "c"], ["a"], (0, 2)),
        ([], ["a", "b"], (2, 0)),
        (["a", "b"], ["a", "b"], (0, 0)),
        (["a", "b", "c"], ["b", "c"], (2, 3)),
    ],
)
def test_count_changes_is_positional(differ, old_lines, new_lines, expected):
    assert differ.count_changes(old_lines, new_lines) == expected


def test_render_unified_single_hunk(differ):
    rendered = differ.render_unified(["a", "b", "c"], ["a", "x", "c"], "controls/AC-1.yaml")

    assert rendered.split("\n") == [
        "--- a/controls/AC-1.yaml",
        "+++ b/controls/AC-1.yaml",
        "@@ -1,3 +1,3 @@",
        " a",
        "-b",
        "-c",
        "+x",
        "+c",
    ]


def test_render_unified_appended_lines(differ):
    rendered = differ.render_unified(["a"], ["a", "b"], "f.yaml")

    assert rendered.split("\n")[2:] == ["@@ -1,1 +1,2 @@", " a", "+b"]


def test_first_revision_renders_against_dev_null(differ):
    result = differ.diff(None, "title: New\nstatus: draft", "controls/AC-1.yaml")

    assert result.changes == ChangeStats(insertions=2, deletions=0, files=1)
    assert result.diff.split("\n") == [
        "--- /dev/null",
        "+++ b/controls/AC-1.yaml",
        "@@ -0,0 +1,2 @@",
        "+title: New",
        "+status: draft",
    ]
    assert {c.path for c in result.structured_diff.changes} == {"title", "status"}


def test_modified_revision_carries_counts_and_structured_diff(differ):
    result = differ.diff("title: Old\nstatus: draft\n", "title: New\nstatus: draft\n", "r.yaml")

    assert result.changes.insertions == 1
    assert result.changes.deletions == 1
    assert result.diff.startswith("--- a/r.yaml\n+++ b/r.yaml\n@@ -1,3 +1,3 @@")
    assert [(c.type, c.path) for c in result.structured_diff.changes] == [(ChangeType.MODIFIED, "title")]


def test_deleted_file_counts_every_line_as_deletion(differ):
    result = differ.diff("a: 1\nb: 2", None, "gone.yaml")

    assert result.changes.insertions == 0
    assert result.changes.deletions == 2
    assert result.structured_diff.summary == "2 removed"


def test_both_sides_missing_degrades_to_neutral_stats(differ):
    result = differ.diff(None, None, "missing.yaml")

    assert result.changes == ChangeStats(insertions=0, deletions=0, files=1)
    assert result.diff is None
    assert result.structured_diff is None


def test_record_list_flag_is_passed_to_structured_diff(differ):
    result = differ.diff("", "- uuid: m1\n  text: a\n", "m.yaml", is_record_list=True)

    assert result.structured_diff.changes[0].path == "[uuid=m1]"


def test_split_lines():
    assert split_lines(None) == []
    assert split_lines("a\nb\n") == ["a", "b", ""]
