"""Structural differences between two YAML documents.

The engine walks both documents in parallel and reports every added,
removed, or modified value together with its location, written in dot
notation from the document root (``metadata.owner``, ``steps[2].name``).
Keys that would read as path syntax are quoted (``['a.b']``).

Arrays whose elements are identified records are matched by identifier
instead of by position, so appending one record to a long list is reported
as one addition rather than as a rewrite of the whole list.
"""

import math
from typing import Any, Dict, List, Optional

import yaml
from loguru import logger

from filetrail.models.diff import ChangeRecord, ChangeType, StructuredDiffResult

PARSE_ERROR_SUMMARY = "Error parsing YAML content"
NO_CHANGES_SUMMARY = "No changes detected"


class StructuredDiffEngine:
    """Compare parsed YAML documents and summarize what changed."""

    def __init__(self, identifier_field: str = "uuid", reference_field: str = "control_id"):
        self.identifier_field = identifier_field
        self.reference_field = reference_field

    def diff(self, old_text: str, new_text: str, is_record_list_document: bool = False) -> StructuredDiffResult:
        """Parse two YAML snapshots and compare them.

        Empty text stands for an empty document. If either side fails to
        parse, the failure is logged and a result without changes is
        returned.
        """
        try:
            old_doc = self._parse(old_text, is_record_list_document)
            new_doc = self._parse(new_text, is_record_list_document)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML for diff: {e}")
            return StructuredDiffResult(has_changes=False, changes=[], summary=PARSE_ERROR_SUMMARY)

        return self.compare(old_doc, new_doc, is_record_list_document)

    def compare(self, old_doc: Any, new_doc: Any, is_record_list_document: bool = False) -> StructuredDiffResult:
        """Compare two already-parsed documents."""
        changes = self._compare_values(old_doc, new_doc, "", is_record_list_document)
        return StructuredDiffResult(has_changes=bool(changes), changes=changes, summary=summarize(changes))

    @staticmethod
    def _parse(text: Optional[str], is_record_list_document: bool) -> Any:
        empty: Any = [] if is_record_list_document else {}
        if not text or not text.strip():
            return empty
        data = yaml.safe_load(text)
        return empty if data is None else data

    def _compare_values(self, old: Any, new: Any, path: str, top_level: bool = False) -> List[ChangeRecord]:
        where = path or "root"

        if old is None:
            if new is None:
                return []
            return [ChangeRecord(ChangeType.ADDED, where, f"Added {path or 'content'}", new_value=new)]
        if new is None:
            return [ChangeRecord(ChangeType.REMOVED, where, f"Removed {path or 'content'}", old_value=old)]

        if isinstance(old, list) and isinstance(new, list):
            return self._compare_lists(old, new, path, top_level)
        if isinstance(old, list) or isinstance(new, list):
            shape = "from array to non-array" if isinstance(old, list) else "from non-array to array"
            return [
                ChangeRecord(
                    ChangeType.MODIFIED, where, f"Changed {path or 'value'} {shape}", old_value=old, new_value=new
                )
            ]

        if isinstance(old, dict) and isinstance(new, dict):
            return self._compare_maps(old, new, path)

        if not deep_equal(old, new):
            return [ChangeRecord(ChangeType.MODIFIED, where, f"Changed {path or 'value'}", old_value=old, new_value=new)]
        return []

    def _compare_maps(self, old: Dict[Any, Any], new: Dict[Any, Any], path: str) -> List[ChangeRecord]:
        changes: List[ChangeRecord] = []
        keys = list(old) + [key for key in new if key not in old]

        for key in keys:
            key_path = path + _key_segment(key, leading_dot=bool(path))

            if key not in old:
                changes.append(ChangeRecord(ChangeType.ADDED, key_path, f"Added {key}", new_value=new[key]))
            elif key not in new:
                changes.append(ChangeRecord(ChangeType.REMOVED, key_path, f"Removed {key}", old_value=old[key]))
            elif not deep_equal(old[key], new[key]):
                if _is_container(old[key]) and _is_container(new[key]):
                    changes.extend(self._compare_values(old[key], new[key], key_path))
                else:
                    changes.append(
                        ChangeRecord(
                            ChangeType.MODIFIED,
                            key_path,
                            f"Changed {key}",
                            old_value=old[key],
                            new_value=new[key],
                        )
                    )

        return changes

    def _compare_lists(self, old: List[Any], new: List[Any], path: str, top_level: bool) -> List[ChangeRecord]:
        if self.is_record_list(old) or self.is_record_list(new):
            return self._compare_records(old, new, path)
        if top_level and (self._is_identified(old) or self._is_identified(new)):
            return self._compare_records(old, new, path)

        if len(old) != len(new):
            return [
                ChangeRecord(
                    ChangeType.MODIFIED,
                    path or "root",
                    f"Array {path or 'items'} changed from {len(old)} to {len(new)} items",
                    old_value=old,
                    new_value=new,
                )
            ]

        changes: List[ChangeRecord] = []
        for i, (old_item, new_item) in enumerate(zip(old, new)):
            if not deep_equal(old_item, new_item):
                changes.extend(self._compare_values(old_item, new_item, f"{path}[{i}]"))
        return changes

    def is_record_list(self, items: List[Any]) -> bool:
        """True when every element exposes both a reference and an identifier field."""
        return bool(items) and all(
            isinstance(item, dict) and self.reference_field in item and self.identifier_field in item
            for item in items
        )

    def _is_identified(self, items: List[Any]) -> bool:
        return bool(items) and all(isinstance(item, dict) and self.identifier_field in item for item in items)

    def _record_path(self, path: str, identifier: Any) -> str:
        return f"{path}[{self.identifier_field}={identifier}]"

    def _index_records(self, items: List[Any]) -> Dict[str, Any]:
        """Records keyed by identifier; 1 and "1" name the same record."""
        records: Dict[str, Any] = {}
        for item in items:
            if isinstance(item, dict) and self.identifier_field in item:
                records[str(item[self.identifier_field])] = item
        return records

    def _unidentified(self, items: List[Any]) -> List[Any]:
        return [item for item in items if not (isinstance(item, dict) and self.identifier_field in item)]

    def _compare_records(self, old: List[Any], new: List[Any], path: str) -> List[ChangeRecord]:
        old_records = self._index_records(old)
        new_records = self._index_records(new)
        changes: List[ChangeRecord] = []

        for identifier, record in new_records.items():
            if identifier not in old_records:
                changes.append(
                    ChangeRecord(
                        ChangeType.ADDED,
                        self._record_path(path, identifier),
                        f"Added record {identifier}",
                        new_value=record,
                    )
                )

        for identifier, record in old_records.items():
            if identifier not in new_records:
                changes.append(
                    ChangeRecord(
                        ChangeType.REMOVED,
                        self._record_path(path, identifier),
                        f"Removed record {identifier}",
                        old_value=record,
                    )
                )

        for identifier, record in old_records.items():
            if identifier in new_records and not deep_equal(record, new_records[identifier]):
                changes.append(
                    ChangeRecord(
                        ChangeType.MODIFIED,
                        self._record_path(path, identifier),
                        f"Modified record {identifier}",
                        old_value=record,
                        new_value=new_records[identifier],
                    )
                )

        # Records without an identifier are only visible through the count.
        unidentified_changed = not deep_equal(self._unidentified(old), self._unidentified(new))
        if unidentified_changed or (not changes and len(old) != len(new)):
            changes.append(
                ChangeRecord(
                    ChangeType.MODIFIED,
                    path or "root",
                    f"Records changed from {len(old)} to {len(new)} items",
                    old_value=old,
                    new_value=new,
                )
            )

        return changes


def _is_container(value: Any) -> bool:
    return isinstance(value, (dict, list))


def _key_segment(key: Any, leading_dot: bool) -> str:
    """Path segment for a map key; keys that would read as path syntax are quoted."""
    if isinstance(key, str) and key and not any(char in key for char in ".[]"):
        return f".{key}" if leading_dot else key
    return f"[{key!r}]"


def deep_equal(a: Any, b: Any) -> bool:
    """Structural equality that, unlike ``==``, keeps booleans apart from numbers."""
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if isinstance(a, float) and isinstance(b, float) and math.isnan(a) and math.isnan(b):
        return True
    if isinstance(a, dict) and isinstance(b, dict):
        return a.keys() == b.keys() and all(deep_equal(a[key], b[key]) for key in a)
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(deep_equal(x, y) for x, y in zip(a, b))
    if _is_container(a) or _is_container(b):
        return False
    return a == b


def summarize(changes: List[ChangeRecord]) -> str:
    """Summarize changes as e.g. ``"2 added, 1 modified"``."""
    if not changes:
        return NO_CHANGES_SUMMARY

    parts = []
    for change_type in (ChangeType.ADDED, ChangeType.MODIFIED, ChangeType.REMOVED):
        count = sum(1 for change in changes if change.type == change_type)
        if count:
            parts.append(f"{count} {change_type.value}")
    return ", ".join(parts)
