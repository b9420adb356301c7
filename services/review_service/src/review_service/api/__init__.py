from __future__ import annotations

__all__ = [
    "EditOutcome",
    "EditResult",
    "MediaWikiClient",
    "SectionEditClient",
    "SectionText",
    "SectionTimestamps",
    "get_page_info_html",
]

from review_service.api.client import MediaWikiClient
from review_service.api.page_info import get_page_info_html
from review_service.api.sections import (
    EditOutcome,
    EditResult,
    SectionEditClient,
    SectionText,
    SectionTimestamps,
)
