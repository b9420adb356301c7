"""Unit tests for review wikitext and the plain-text diff fallback."""

from wikireview_core.models import Chapter, Suggestion
from wikireview_core.wikitext import (
    build_diff_lines,
    build_review_wikitext,
    format_suggestion_text,
)


class TestBuildReviewWikitext:
    def test_single_chapter(self):
        chapter = Chapter(title="Intro", suggestions=[Suggestion(quote="foo", suggestion="bar")])
        assert build_review_wikitext([chapter]) == "'''Intro'''\n* {{rvw|1=foo}} —— bar\n--~~~~\n\n"

    def test_first_empty_quote_prefix_removed_once(self):
        chapter = Chapter(
            title="Body",
            suggestions=[Suggestion(quote="", suggestion="general"), Suggestion(quote="", suggestion="again")],
        )
        assert build_review_wikitext([chapter]) == (
            "'''Body'''\n* general\n* {{rvw|1=}} —— again\n--~~~~\n\n"
        )

    def test_multiple_chapters_each_signed(self):
        chapters = [
            Chapter(title="A", suggestions=[Suggestion(quote="q1", suggestion="s1")]),
            Chapter(title=" B ", suggestions=[Suggestion(quote=" q2 ", suggestion="s2")]),
        ]
        text = build_review_wikitext(chapters)
        assert text.count("--~~~~\n\n") == 2
        assert "'''B'''\n* {{rvw|1=q2}} —— s2\n" in text

    def test_no_chapters(self):
        assert build_review_wikitext([]) == ""


class TestFormatSuggestionText:
    def test_paragraph_and_line_breaks(self):
        assert format_suggestion_text("one\n\n\ntwo\nthree") == "one{{pb}}two<br>three"

    def test_trims(self):
        assert format_suggestion_text("  x \n") == "x"


class TestBuildDiffLines:
    def test_layout(self):
        lines = build_diff_lines("old one\nold two", "\n\nnew line\nsecond")
        assert lines == [
            "--- Existing section ---",
            "  old one",
            "  old two",
            "",
            "+++ New content to append +++",
            "+ new line",
            "+ second",
        ]

    def test_empty_baseline(self):
        lines = build_diff_lines("", "\n\nx")
        assert lines[:2] == ["--- Existing section ---", "  "]
        assert lines[-1] == "+ x"
