"""
Shared fixtures: an in-memory wiki behind `httpx.MockTransport` and a
notifier that records what the user would have seen.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qsl

import httpx
import pytest

from review_service.api.client import MediaWikiClient
from review_service.api.sections import SectionEditClient
from review_service.dialog import DialogRegistry

API_URL = "https://test.wiki/w/api.php"


# =============================================================================
# Fake wiki
# =============================================================================


class FakeWiki:
    """Answers the handful of api.php actions the review tool uses."""

    def __init__(self) -> None:
        self.sections: Dict[int, str] = {}
        self.calls: List[Dict[str, str]] = []
        self.edit_response: Dict[str, Any] = {"edit": {"result": "Success"}}
        self.parse_html = '<div class="mw-parser-output"><p>rendered</p></div>'
        self.compare_body: Optional[str] = '<tr><td class="diff-addedline">+</td></tr>'
        self.failing_actions: set[str] = set()

    async def handler(self, request: httpx.Request) -> httpx.Response:
        # one real suspension per request, like a network round-trip
        await asyncio.sleep(0)
        params = dict(parse_qsl(request.content.decode("utf-8"), keep_blank_values=True))
        self.calls.append(params)
        action = params.get("action")

        if action in self.failing_actions:
            return httpx.Response(500, text="boom")
        if action == "query" and params.get("meta") == "tokens":
            return httpx.Response(200, json={"query": {"tokens": {"csrftoken": "token+\\"}}})
        if action == "query":
            section = int(params.get("rvsection", "0"))
            text = self.sections.get(section)
            if text is None:
                return httpx.Response(200, json={"query": {"pages": [{"title": params["titles"], "missing": True}]}})
            return httpx.Response(
                200,
                json={
                    "curtimestamp": "2024-05-01T10:00:00Z",
                    "query": {
                        "pages": [
                            {
                                "title": params["titles"],
                                "revisions": [
                                    {"timestamp": "2024-04-30T08:00:00Z", "slots": {"main": {"content": text}}}
                                ],
                            }
                        ]
                    },
                },
            )
        if action == "parse":
            return httpx.Response(200, json={"parse": {"title": params.get("title", "API"), "text": self.parse_html}})
        if action == "compare":
            compare = {"body": self.compare_body} if self.compare_body is not None else {}
            return httpx.Response(200, json={"compare": compare})
        if action == "edit":
            return httpx.Response(200, json=self.edit_response)
        return httpx.Response(200, json={"error": {"code": "badvalue", "info": f"unknown action {action}"}})

    def count(self, action: str) -> int:
        return sum(1 for call in self.calls if call.get("action") == action)

    @property
    def section_reads(self) -> int:
        return sum(1 for call in self.calls if call.get("action") == "query" and "rvprop" in call)


class RecordingNotifier:
    def __init__(self) -> None:
        self.notices: List[Tuple[str, str]] = []
        self.alerts: List[str] = []

    def notify(self, message: str, *, kind: str = "info", tag: Optional[str] = None) -> None:
        self.notices.append((kind, message))

    def alert(self, message: str) -> None:
        self.alerts.append(message)

    def kinds(self) -> List[str]:
        return [kind for kind, _ in self.notices]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def wiki() -> FakeWiki:
    return FakeWiki()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def api(wiki: FakeWiki) -> MediaWikiClient:
    transport = httpx.MockTransport(wiki.handler)
    return MediaWikiClient(API_URL, client=httpx.AsyncClient(transport=transport))


@pytest.fixture
def refreshes() -> List[int]:
    return []


@pytest.fixture
def sections(api: MediaWikiClient, notifier: RecordingNotifier, refreshes: List[int]) -> SectionEditClient:
    return SectionEditClient(
        api,
        notifier=notifier,
        refresh=lambda: refreshes.append(1),
        refresh_delay_s=0,
        context_title="Talk:Example",
    )


@pytest.fixture
def dialog_registry() -> DialogRegistry:
    return DialogRegistry()
