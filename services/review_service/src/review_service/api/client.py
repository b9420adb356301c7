"""Async client for the MediaWiki Action API."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from review_service.settings import get_settings
from wikireview_core.errors import TransportError

logger = logging.getLogger(__name__)

ApiParams = Mapping[str, Any]


def _encode_params(params: ApiParams) -> dict[str, str]:
    """Flatten values the way api.php expects: lists piped, booleans as presence flags."""
    out: dict[str, str] = {}
    for key, value in params.items():
        if value is None or value is False:
            continue
        if value is True:
            out[key] = "1"
        elif isinstance(value, (list, tuple)):
            out[key] = "|".join(str(v) for v in value)
        else:
            out[key] = str(value)
    return out


def dig(payload: Any, *path: str | int) -> Any:
    """Walk nested dicts/lists, returning None as soon as the shape does not match."""
    node = payload
    for step in path:
        if isinstance(step, int):
            if not isinstance(node, list) or len(node) <= step:
                return None
        elif not isinstance(node, dict):
            return None
        node = node[step] if isinstance(step, int) else node.get(step)
    return node


class MediaWikiClient:
    """
    Thin `api.php` client.

    Features:
    - JSON format version 2 on every request
    - CSRF token fetch for write actions
    - Host-supplied session cookie passthrough
    - Every HTTP/protocol failure surfaces as `TransportError`
    """

    def __init__(
        self,
        api_url: str | None = None,
        *,
        user_agent: str | None = None,
        timeout: float | None = None,
        cookie: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the API client.

        Args:
            api_url: api.php endpoint (defaults to settings)
            user_agent: User-Agent header (defaults to settings)
            timeout: Request timeout in seconds
            cookie: Session cookie header supplied by the host environment
            client: Pre-built httpx client, mainly for tests
        """
        settings = get_settings()
        self.api_url = api_url or settings.api_url
        self.user_agent = user_agent or settings.user_agent
        self.timeout = timeout if timeout is not None else settings.request_timeout_s
        cookie = cookie if cookie is not None else settings.cookie

        headers = {"User-Agent": self.user_agent}
        if cookie:
            headers["Cookie"] = cookie
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            headers=headers,
            follow_redirects=True,
        )
        self._csrf_token: str | None = None

    async def post(self, params: ApiParams) -> dict[str, Any]:
        data = _encode_params({**params, "format": "json", "formatversion": "2"})
        try:
            response = await self.client.post(self.api_url, data=data)
        except httpx.HTTPError as exc:
            raise TransportError(f"{data.get('action', '?')} request failed: {exc}") from exc

        if response.status_code != 200:
            raise TransportError(
                f"{data.get('action', '?')} responded HTTP {response.status_code}",
                details={"status_code": response.status_code},
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportError("API returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise TransportError("Unexpected API response shape")
        return payload

    async def get_csrf_token(self) -> str:
        if self._csrf_token:
            return self._csrf_token
        payload = await self.post({"action": "query", "meta": "tokens", "type": "csrf"})
        token = dig(payload, "query", "tokens", "csrftoken")
        if not isinstance(token, str) or not token:
            raise TransportError("Could not obtain a CSRF token", details={"response": payload})
        self._csrf_token = token
        return token

    async def post_with_token(self, params: ApiParams) -> dict[str, Any]:
        token = await self.get_csrf_token()
        payload = await self.post({**params, "token": token})
        if dig(payload, "error", "code") == "badtoken":
            # expired session token; the next write fetches a fresh one
            logger.warning("[ReviewTool] CSRF token rejected, dropping cached token")
            self._csrf_token = None
        return payload

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "MediaWikiClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
