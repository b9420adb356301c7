"""Unit tests for section target resolution from heading markup."""

import pytest
from bs4 import BeautifulSoup

from review_service.target import edit_link_heading, find_section_info, resolve_section_target

HEADING = (
    '<h2 id="文筆">文筆</h2>'
    '<span class="mw-editsection"><a href="/w/index.php?title=Talk:%E4%BE%8B&amp;action=edit&amp;section=3">'
    "編輯</a></span>"
)


class TestFindSectionInfo:
    def test_edit_link(self):
        info = find_section_info(HEADING)
        assert info.page_title == "Talk:例"
        assert info.section_id == 3

    def test_qe_target_preferred(self):
        html = (
            '<div><a href="/w/index.php?title=Other&amp;action=edit&amp;section=1">e</a>'
            '<a class="qe-target" href="/w/index.php?title=Right&amp;action=edit&amp;section=5">q</a></div>'
        )
        info = find_section_info(html)
        assert (info.page_title, info.section_id) == ("Right", 5)

    def test_accepts_tag(self):
        tag = BeautifulSoup(HEADING, "lxml").body
        assert find_section_info(tag).section_id == 3

    @pytest.mark.parametrize("section", ["T-1", "-2", "", "abc"])
    def test_unparseable_section(self, section):
        html = f'<a href="/w/index.php?title=P&action=edit&section={section}">e</a>'
        assert find_section_info(html).section_id is None

    def test_leading_integer(self):
        html = '<a href="/w/index.php?title=P&action=edit&section=4x">e</a>'
        assert find_section_info(html).section_id == 4

    @pytest.mark.parametrize("heading", [None, "", "<h2>No link</h2>"])
    def test_nothing_found(self, heading):
        info = find_section_info(heading)
        assert info.page_title is None
        assert info.section_id is None


class TestResolveSectionTarget:
    def test_falls_back_to_article_title(self):
        target = resolve_section_target(None, "Article")
        assert target.page_title == "Article"
        assert target.section_id is None
        assert not target.resolved

    def test_round_trips_generated_heading(self):
        target = resolve_section_target(edit_link_heading("Talk:A b", 7), "A b")
        assert target.page_title == "Talk:A b"
        assert target.section_id == 7
        assert target.resolved
