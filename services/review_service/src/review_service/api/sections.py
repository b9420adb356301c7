"""
Section-scoped reads and writes against the remote wiki.

Writes are guarded by the revision timestamps of a read made for exactly that
write; tokens are never reused across unrelated reads. Edit outcomes keep the
three-way Success / Conflict / Other distinction the API reports.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from review_service.api.client import MediaWikiClient, dig
from review_service.notify import Notifier, NullNotifier
from review_service.settings import get_settings
from wikireview_core.errors import (
    CommitError,
    ConflictError,
    NotFoundError,
    TransportError,
    ValidationError,
)
from wikireview_core.messages import message

logger = logging.getLogger(__name__)

DIFF_TABLE_HEAD = (
    '<table class="diff"><colgroup><col class="diff-marker"/><col class="diff-content"/>'
    '<col class="diff-marker"/><col class="diff-content"/></colgroup>'
)


class EditOutcome(str, Enum):
    SUCCESS = "Success"
    CONFLICT = "Conflict"
    OTHER = "Other"


@dataclass(frozen=True)
class SectionTimestamps:
    starttimestamp: str
    basetimestamp: str


@dataclass(frozen=True)
class SectionText:
    text: str
    starttimestamp: str
    basetimestamp: str

    @property
    def timestamps(self) -> SectionTimestamps:
        return SectionTimestamps(self.starttimestamp, self.basetimestamp)


@dataclass(frozen=True)
class EditResult:
    outcome: EditOutcome
    response: dict[str, Any]


def classify_edit_response(response: dict[str, Any]) -> EditOutcome:
    result = dig(response, "edit", "result")
    if result == "Success":
        return EditOutcome.SUCCESS
    if result == "Conflict" or dig(response, "error", "code") == "editconflict":
        return EditOutcome.CONFLICT
    return EditOutcome.OTHER


def coerce_section_id(value: Any) -> int | None:
    """Non-negative int from an int or a digit string; anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, str):
        value = value.strip()
        # isdigit() also accepts superscripts and other non-ASCII digits
        if value.isascii() and value.isdigit():
            return int(value)
    return None


def _raise_for_api_error(response: dict[str, Any], action: str) -> None:
    error = response.get("error")
    if isinstance(error, dict):
        code = error.get("code", "unknown")
        raise TransportError(f"{action} failed: {code}", details={"response": response})


class SectionEditClient:
    """Read, append, replace, render and diff one wiki section."""

    def __init__(
        self,
        api: MediaWikiClient,
        *,
        notifier: Notifier | None = None,
        refresh: Callable[[], Any] | None = None,
        refresh_delay_s: float | None = None,
        context_title: str | None = None,
    ):
        """
        Args:
            api: MediaWiki API client
            notifier: Receives edit outcome notifications
            refresh: Called once, after `refresh_delay_s`, following a successful write
            refresh_delay_s: Delay before the refresh (defaults to settings)
            context_title: Title used for diff rendering (the page being viewed)
        """
        self.api = api
        self.notifier = notifier or NullNotifier()
        self.refresh = refresh
        self.refresh_delay_s = (
            refresh_delay_s if refresh_delay_s is not None else get_settings().refresh_delay_s
        )
        self.context_title = context_title
        self._refresh_tasks: set[asyncio.Task[Any]] = set()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def retrieve_full_text(self, page_title: str, section_id: int | None = None) -> SectionText:
        if not page_title:
            raise ValidationError("Invalid pageTitle")
        params: dict[str, Any] = {
            "action": "query",
            "prop": "revisions",
            "titles": page_title,
            "rvslots": "main",
            "rvprop": ["timestamp", "content"],
            "curtimestamp": True,
        }
        if section_id is not None:
            sid = coerce_section_id(section_id)
            if sid is None:
                raise ValidationError(f"Invalid sectionId: {section_id!r}")
            params["rvsection"] = sid

        response = await self.api.post(params)
        _raise_for_api_error(response, "query")
        revision = dig(response, "query", "pages", 0, "revisions", 0)
        if not isinstance(revision, dict):
            raise NotFoundError("No content found", details={"title": page_title, "section": section_id})

        main = dig(revision, "slots", "main") or {}
        text = main.get("content")
        if not isinstance(text, str):
            text = main.get("*") if isinstance(main.get("*"), str) else ""
        return SectionText(
            text=text,
            starttimestamp=response.get("curtimestamp") or "",
            basetimestamp=revision.get("timestamp") or "",
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def append_text_to_section(
        self,
        page_title: str,
        section_id: int,
        append_text: str,
        summary: str | None = None,
    ) -> EditResult:
        sid = self._validate_target(page_title, section_id)
        params: dict[str, Any] = {
            "action": "edit",
            "title": page_title,
            "section": sid,
            "appendtext": append_text,
            "summary": summary or None,
        }
        response = await self.api.post_with_token(params)
        return self._finish_edit(response, "append")

    async def replace_section_text(
        self,
        page_title: str,
        section_id: int,
        new_text: str,
        summary: str | None = None,
        timestamps: SectionTimestamps | None = None,
    ) -> EditResult:
        sid = self._validate_target(page_title, section_id)
        if timestamps is None or not timestamps.starttimestamp or not timestamps.basetimestamp:
            fetched = await self.retrieve_full_text(page_title, sid)
            timestamps = fetched.timestamps
        params: dict[str, Any] = {
            "action": "edit",
            "title": page_title,
            "section": sid,
            "text": new_text,
            "starttimestamp": timestamps.starttimestamp,
            "basetimestamp": timestamps.basetimestamp,
            "summary": summary or None,
        }
        response = await self.api.post_with_token(params)
        return self._finish_edit(response, "replace")

    def _validate_target(self, page_title: str, section_id: Any) -> int:
        sid = coerce_section_id(section_id)
        if not page_title or sid is None:
            raise ValidationError("Invalid pageTitle or sectionId")
        return sid

    def _finish_edit(self, response: dict[str, Any], kind: str) -> EditResult:
        outcome = classify_edit_response(response)
        if outcome is EditOutcome.SUCCESS:
            logger.info("[ReviewTool] %s successful", kind)
            self.notifier.notify(message(f"{kind}-success"), kind="success", tag="review-tool")
            self._schedule_refresh()
            return EditResult(outcome, response)

        if outcome is EditOutcome.CONFLICT:
            logger.error("[ReviewTool] edit conflict during %s", kind)
            self.notifier.notify(message(f"{kind}-conflict"), kind="error", tag="review-tool")
            raise ConflictError(message(f"{kind}-conflict"), details={"response": response}, reported=True)

        logger.error("[ReviewTool] %s failed: %s", kind, response)
        self.notifier.notify(message(f"{kind}-failed"), kind="error", tag="review-tool")
        raise CommitError(message(f"{kind}-failed"), details={"response": response}, reported=True)

    def _schedule_refresh(self) -> None:
        if self.refresh is None:
            return
        loop = asyncio.get_running_loop()
        loop.call_later(self.refresh_delay_s, self._run_refresh)

    def _run_refresh(self) -> None:
        result = self.refresh() if self.refresh else None
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._refresh_tasks.add(task)
            task.add_done_callback(self._refresh_done)

    def _refresh_done(self, task: asyncio.Future[Any]) -> None:
        self._refresh_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("[ReviewTool] refresh failed: %r", task.exception())

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    async def render_to_display_form(self, text: str, title: str | None = None) -> str:
        """Parse wikitext to HTML. Never raises: empty input or any failure gives ``""``."""
        if not (text or "").strip():
            return ""
        params: dict[str, Any] = {
            "action": "parse",
            "text": text,
            "contentmodel": "wikitext",
            "title": title or None,
        }
        try:
            response = await self.api.post(params)
            _raise_for_api_error(response, "parse")
        except TransportError as exc:
            logger.error("[ReviewTool] render failed: %s", exc.to_log_message())
            return ""
        html = dig(response, "parse", "text")
        if isinstance(html, dict):
            html = html.get("*")
        return html if isinstance(html, str) else ""

    async def compute_display_diff(self, old_text: str, new_text: str, title: str | None = None) -> str:
        """
        HTML diff table between two wikitext values.

        Returns the "no difference" message when the API reports no change.
        Raises `TransportError` on failure so the caller can fall back to a
        plain-text diff.
        """
        title = title or self.context_title
        params: dict[str, Any] = {
            "action": "compare",
            "fromslots": "main",
            "fromtext-main": old_text or "",
            "fromtitle": title,
            "frompst": True,
            "toslots": "main",
            "totext-main": new_text or "",
            "totitle": title,
            "topst": True,
        }
        response = await self.api.post(params)
        _raise_for_api_error(response, "compare")
        compare = response.get("compare")
        body = None
        if isinstance(compare, dict):
            body = compare.get("body") or compare.get("*")
        if isinstance(body, str) and body:
            return DIFF_TABLE_HEAD + body + "</table>"
        return message("no-difference")
