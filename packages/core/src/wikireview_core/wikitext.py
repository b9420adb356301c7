"""Wikitext produced by the review composer."""

from __future__ import annotations

import re
from typing import Iterable

from wikireview_core.models.composition import Chapter

_EMPTY_QUOTE_PREFIX = "{{rvw|1=}} —— "
_PARAGRAPH_BREAK = re.compile(r"\n{2,}")
_LINE_SPLIT = re.compile(r"\r?\n")
_LEADING_BLANK_LINES = re.compile(r"^\s*\n+")


def format_suggestion_text(text: str) -> str:
    text = (text or "").strip()
    text = _PARAGRAPH_BREAK.sub("{{pb}}", text)
    return text.replace("\n", "<br>")


def build_review_wikitext(chapters: Iterable[Chapter]) -> str:
    """
    Render chapters as the review block appended to the talk-page section.

    Each chapter becomes a bold title, one ``{{rvw}}`` bullet per suggestion
    and a signature line. The first bullet with an empty quote loses its quote
    template.
    """
    out = ""
    for chapter in chapters:
        title = (chapter.title or "").strip()
        out += "'''" + title + "'''\n"
        for item in chapter.suggestions:
            quote = (item.quote or "").strip()
            out += f"* {{{{rvw|1={quote}}}}} —— {format_suggestion_text(item.suggestion)}\n"
        out += "--~~~~\n\n"
    return out.replace(_EMPTY_QUOTE_PREFIX, "", 1)


def build_diff_lines(old_text: str, appended_fragment: str) -> list[str]:
    """Plain-text fallback diff: the existing section, then the appended lines marked with ``+``."""
    old_lines = _LINE_SPLIT.split(old_text or "")
    appended_only = _LEADING_BLANK_LINES.sub("", appended_fragment or "", count=1)
    new_lines = _LINE_SPLIT.split(appended_only)
    out = ["--- Existing section ---"]
    out.extend("  " + line for line in old_lines)
    out.append("")
    out.append("+++ New content to append +++")
    out.extend("+ " + line for line in new_lines)
    return out
