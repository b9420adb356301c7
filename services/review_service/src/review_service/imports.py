"""
Annotation import: normalize untyped JSON into annotations and chapters.

Accepted documents:
    {"annotations": [ {...}, ... ]}
    {"groups": [ {"sectionPath": "...", "annotations": [ {...}, ... ]}, ... ]}

Individual records are never rejected; missing or mistyped fields get typed
defaults. Only the top-level shape can fail the import.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from wikireview_core.errors import EmptyImportError, InvalidFormatError
from wikireview_core.models import Annotation, AnnotationGroup, Chapter, Composition, Suggestion
from wikireview_core.normalize import is_record, normalize_annotation, str_or
from wikireview_core.ordering import OrderKeyComparator, compare_order_keys, group_by_section, sort_groups

__all__ = [
    "build_composition",
    "chapters_from_groups",
    "load_import_file",
    "normalize_annotation",
    "parse_import_payload",
]


def parse_import_payload(data: Any, *, user_name: str | None = None) -> list[Annotation]:
    """Normalize every annotation of an import document, in document order."""
    imported: list[Annotation] = []
    if is_record(data) and isinstance(data.get("annotations"), list):
        for raw in data["annotations"]:
            imported.append(normalize_annotation(raw, user_name=user_name))
    elif is_record(data) and isinstance(data.get("groups"), list):
        for raw_group in data["groups"]:
            group = raw_group if is_record(raw_group) else {}
            section = str_or(group.get("sectionPath"), "")
            members = group.get("annotations") if isinstance(group.get("annotations"), list) else []
            for raw in members:
                record = raw if is_record(raw) else {}
                # the member's own path wins over the group's
                merged = {**record, "sectionPath": str_or(record.get("sectionPath"), section)}
                imported.append(normalize_annotation(merged, section, user_name=user_name))
    else:
        raise InvalidFormatError("invalid-format")

    if not imported:
        raise EmptyImportError("empty-import")
    return imported


def load_import_file(path: Path, *, user_name: str | None = None) -> list[Annotation]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise InvalidFormatError(f"could not read {path}: {exc}", details={"path": str(path)}) from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidFormatError(f"malformed JSON in {path}: {exc}", details={"path": str(path)}) from exc
    return parse_import_payload(data, user_name=user_name)


def chapters_from_groups(
    groups: Iterable[AnnotationGroup],
    fallback_title: str = "",
    comparator: OrderKeyComparator = compare_order_keys,
) -> list[Chapter]:
    """One chapter per group, groups and members in position order."""
    chapters = []
    for group in sort_groups(list(groups), comparator):
        suggestions = [
            Suggestion(quote=a.sentence_text or "", suggestion=a.opinion or "") for a in group.annotations
        ]
        chapters.append(Chapter(title=group.section_path or fallback_title, suggestions=suggestions))
    return chapters


def build_composition(
    annotations: Iterable[Annotation],
    fallback_title: str = "",
    comparator: OrderKeyComparator = compare_order_keys,
) -> Composition:
    annotations = list(annotations)
    if not annotations:
        raise EmptyImportError("empty-import")
    chapters = chapters_from_groups(group_by_section(annotations), fallback_title, comparator)
    return Composition(chapters=chapters)
