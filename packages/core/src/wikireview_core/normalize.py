"""
Typed annotations from untyped JSON records.

Used for imported documents and for the per-page store file, both of which a
user may have edited by hand. A record is never rejected: missing or mistyped
fields get typed defaults.
"""

from __future__ import annotations

import math
from typing import Any

from wikireview_core.identity import import_annotation_id, now_ms
from wikireview_core.models.annotation import Annotation
from wikireview_core.settings import settings


def is_record(value: Any) -> bool:
    return isinstance(value, dict)


def str_or(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default


def normalize_annotation(
    raw: Any,
    fallback_section_path: str = "",
    *,
    user_name: str | None = None,
    now: int | None = None,
) -> Annotation:
    """Build a valid Annotation from any value. Never raises."""
    record = raw if is_record(raw) else {}

    raw_id = record.get("id")
    ann_id = raw_id.strip() if isinstance(raw_id, str) and raw_id.strip() else import_annotation_id()

    raw_section = record.get("sectionPath")
    if isinstance(raw_section, str) and raw_section.strip():
        section_path = raw_section.strip()
    else:
        section_path = fallback_section_path or ""

    created_at = record.get("createdAt")
    if (
        isinstance(created_at, bool)
        or not isinstance(created_at, (int, float))
        or not math.isfinite(created_at)
    ):
        created_at = now if now is not None else now_ms()

    return Annotation(
        id=ann_id,
        section_path=section_path,
        sentence_pos=str_or(record.get("sentencePos"), "") or None,
        sentence_text=str_or(record.get("sentenceText"), str_or(record.get("quote"), "")),
        opinion=str_or(record.get("opinion"), str_or(record.get("suggestion"), "")),
        created_by=str_or(record.get("createdBy"), user_name or settings.user_name or "import"),
        created_at=int(created_at),
        resolved=bool(record.get("resolved")),
    )
