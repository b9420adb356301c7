"""Resolve the page title and section number a review should be written to."""

from __future__ import annotations

import html
import re
from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode, urlparse

from bs4 import BeautifulSoup, Tag

_LEADING_INT = re.compile(r"\s*\+?(\d+)")


@dataclass(frozen=True)
class SectionInfo:
    page_title: str | None
    section_id: int | None


@dataclass(frozen=True)
class SectionTarget:
    """Where a commit goes. `section_id` None blocks the commit."""

    page_title: str
    section_id: int | None

    @property
    def resolved(self) -> bool:
        return bool(self.page_title) and self.section_id is not None


def _as_tag(heading: Tag | str | None) -> Tag | None:
    if heading is None:
        return None
    if isinstance(heading, Tag):
        return heading
    if not heading.strip():
        return None
    soup = BeautifulSoup(heading, "lxml")
    # lxml wraps fragments in <html><body>
    return soup.body or soup


def _parse_section(value: str | None) -> int | None:
    # leading integer like parseInt; "T-1" (transcluded) and negatives stay unresolved
    match = _LEADING_INT.match(value or "")
    return int(match.group(1)) if match else None


def find_section_info(heading: Tag | str | None) -> SectionInfo:
    """
    Read ``title`` and ``section`` from the edit link inside a heading.

    Looks for ``a.qe-target`` first, then any link whose href contains
    ``action=edit``.
    """
    root = _as_tag(heading)
    if root is None:
        return SectionInfo(None, None)
    link = root.select_one("a.qe-target") or root.select_one('a[href*="action=edit"]')
    if link is None:
        return SectionInfo(None, None)

    href = link.get("href") or ""
    query = urlparse(href).query if "?" in href else href
    # parse_qsl URL-decodes; '+' becomes a space as in form encoding
    params = dict(parse_qsl(query, keep_blank_values=True))
    title = params.get("title") or None
    return SectionInfo(page_title=title, section_id=_parse_section(params.get("section")))


def resolve_section_target(heading: Tag | str | None, article_title: str) -> SectionTarget:
    info = find_section_info(heading)
    return SectionTarget(page_title=info.page_title or article_title or "", section_id=info.section_id)


def edit_link_heading(page_title: str, section_id: int) -> str:
    """Heading markup carrying an edit link, as a rendered wiki page has it."""
    query = urlencode({"title": page_title, "action": "edit", "section": section_id})
    href = html.escape(f"/w/index.php?{query}")
    return f'<h2><span class="mw-editsection"><a class="qe-target" href="{href}">edit</a></span></h2>'
