"""
Position ordering and grouping of annotations.

Position keys are opaque; the order between two keys comes from an
`OrderKeyComparator`. The default comparator understands dotted numeric paths
(``"2.1.14"``) as produced by the sentence locator, and treats an absent key as
lower than any present one.
"""

from __future__ import annotations

import re
from functools import cmp_to_key
from typing import Callable, Iterable, Optional, Sequence

from wikireview_core.models.annotation import Annotation, AnnotationGroup

OrderKeyComparator = Callable[[Optional[str], Optional[str]], int]

_NUMBER = re.compile(r"\d+")


def _numeric_parts(key: str) -> tuple[int, ...]:
    return tuple(int(part) for part in _NUMBER.findall(key))


def compare_order_keys(a: Optional[str], b: Optional[str]) -> int:
    if not a and not b:
        return 0
    if not a:
        return -1
    if not b:
        return 1
    pa, pb = _numeric_parts(a), _numeric_parts(b)
    if pa != pb:
        return -1 if pa < pb else 1
    if a == b:
        return 0
    return -1 if a < b else 1


def sort_by_position(
    annotations: Iterable[Annotation] | None,
    comparator: OrderKeyComparator = compare_order_keys,
) -> list[Annotation]:
    """New list ordered by position key, ties broken by ascending creation time."""
    if annotations is None:
        return []

    def _cmp(x: Annotation, y: Annotation) -> int:
        cmp = comparator(x.sentence_pos, y.sentence_pos)
        if cmp != 0:
            return cmp
        return (x.created_at or 0) - (y.created_at or 0)

    # sorted() is stable and leaves the input untouched
    return sorted(annotations, key=cmp_to_key(_cmp))


def group_by_section(annotations: Iterable[Annotation]) -> list[AnnotationGroup]:
    """
    Partition by exact `section_path`, groups in first-occurrence order.

    Members keep their input order; sorting is a separate step.
    """
    buckets: dict[str, list[Annotation]] = {}
    for annotation in annotations:
        buckets.setdefault(annotation.section_path, []).append(annotation)
    return [AnnotationGroup(section_path=key, annotations=members) for key, members in buckets.items()]


def sort_groups(
    groups: Sequence[AnnotationGroup],
    comparator: OrderKeyComparator = compare_order_keys,
) -> list[AnnotationGroup]:
    sorted_groups = [
        AnnotationGroup(section_path=g.section_path, annotations=sort_by_position(g.annotations, comparator))
        for g in groups
    ]

    def _cmp(a: AnnotationGroup, b: AnnotationGroup) -> int:
        cmp = comparator(a.first.sentence_pos, b.first.sentence_pos)
        if cmp != 0:
            return cmp
        if a.section_path == b.section_path:
            return 0
        return -1 if a.section_path < b.section_path else 1

    return sorted(sorted_groups, key=cmp_to_key(_cmp))


def build_groups_sorted(
    annotations: Iterable[Annotation],
    comparator: OrderKeyComparator = compare_order_keys,
) -> list[AnnotationGroup]:
    return sort_groups(group_by_section(annotations), comparator)


def build_time_sorted_groups(annotations: Iterable[Annotation], *, descending: bool = False) -> list[AnnotationGroup]:
    """Groups ordered by their earliest (or, descending, latest) annotation; members by time."""
    groups = []
    for group in group_by_section(annotations):
        members = sorted(group.annotations, key=lambda a: a.created_at, reverse=descending)
        groups.append(AnnotationGroup(section_path=group.section_path, annotations=members))
    groups.sort(key=lambda g: g.first.created_at, reverse=descending)
    return groups
