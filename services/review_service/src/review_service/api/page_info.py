"""
XTools page statistics, rendered as a one-paragraph HTML summary.

Best-effort only: any network failure or unexpected payload degrades to a fixed
inline error message instead of raising.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError as SchemaError

from review_service.settings import get_settings
from wikireview_core.messages import message

logger = logging.getLogger(__name__)


class Assessment(BaseModel):
    value: str
    badge: str


class PageInfo(BaseModel):
    """Subset of the XTools ``pageinfo`` payload we rely on."""

    project: str
    page: str
    created_rev_id: int
    modified_rev_id: int
    pageviews_offset: int
    creator: str
    created_at: str
    revisions: int
    editors: int
    watchers: int
    pageviews: int
    secs_since_last_edit: int
    assessment: Assessment
    creator_editcount: Optional[int] = None


def _fmt(num: int) -> str:
    return f"{num:,}"


def error_html() -> str:
    return f'<span style="color: red; font-weight: bold;">{message("page-info-error")}</span>'


def render_page_info(info: PageInfo, *, xtools_base_url: str) -> str:
    project = info.project
    page_enc = quote(info.page, safe="")
    page_url = f"https://{project}/wiki/{info.page}"
    pageinfo_url = f"{xtools_base_url}/pageinfo/{project}/{page_enc}"
    permalink_url = f"https://{project}/wiki/Special:PermaLink%2F{info.created_rev_id}"
    diff_url = f"https://{project}/wiki/Special:Diff%2F{info.modified_rev_id}"
    pageviews_url = (
        f"https://pageviews.wmcloud.org/?project={project}&pages={page_enc}&range=latest-{info.pageviews_offset}"
    )
    creator_link = f"https://{project}/wiki/User:{info.creator}"
    contribs_url = f"https://{project}/wiki/Special:Contributions/{info.creator}"
    created_date = datetime.fromisoformat(info.created_at.replace("Z", "+00:00")).date().isoformat()
    days = round(info.secs_since_last_edit / 86400)

    if info.creator_editcount:
        creator = (
            f'<bdi><a href="{creator_link}" target="_blank">{info.creator}</a></bdi> '
            f'(<a href="{contribs_url}" target="_blank">{_fmt(info.creator_editcount)}</a>)'
        )
    else:
        creator = f'<bdi><a href="{contribs_url}" target="_blank">{info.creator}</a></bdi>'

    creation = (
        f'「<a target="_blank" title="評級: {info.assessment.value}" href="{pageinfo_url}">'
        f'<img src="{info.assessment.badge}" style="height:16px !important; vertical-align:-4px; margin-right:3px"/></a>'
        f'<bdi><a target="_blank" href="{page_url}">{info.page}</a></bdi>」由 {creator} 於 '
        f"<bdi><a target='_blank' href='{permalink_url}'>{created_date}</a></bdi> 建立，"
        f'共 {_fmt(info.revisions)} 個修訂，最後修訂於 <a href="{diff_url}">{days} 天</a>前。'
    )
    editors = f"共 {_fmt(info.editors)} 編輯者"
    if info.watchers:
        editors += f"、{_fmt(info.watchers)} 監視者"
    editors += (
        f'，最近 {info.pageviews_offset} 天共 <a target="_blank" href="{pageviews_url}">'
        f"{_fmt(info.pageviews)} 瀏覽數</a>。"
    )
    return (
        f'<span style="line-height:20px">{creation}{editors}'
        f'<a target="_blank" href="{pageinfo_url}">檢視完整頁面統計</a>。</span>'
    )


async def get_page_info_html(
    page_name: str,
    *,
    server_name: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> str:
    settings = get_settings()
    server = server_name or settings.server_name
    base = settings.xtools_base_url.rstrip("/")
    url = f"{base}/api/page/pageinfo/{quote(server, safe='')}/{quote(page_name, safe='')}"

    owns_client = client is None
    client = client or httpx.AsyncClient(
        timeout=httpx.Timeout(settings.request_timeout_s),
        headers={"User-Agent": settings.user_agent},
    )
    try:
        response = await client.get(url)
        if response.status_code != 200:
            raise RuntimeError(f"XTools responded {response.status_code}")
        info = PageInfo.model_validate(response.json())
        return render_page_info(info, xtools_base_url=base)
    except (httpx.HTTPError, SchemaError, ValueError, RuntimeError) as exc:
        logger.error("[ReviewTool] Error fetching XTools data: %s", exc)
        return error_html()
    finally:
        if owns_client:
            await client.aclose()
