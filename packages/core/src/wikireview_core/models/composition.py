"""
Composition - the chapters a reviewer turns into one appended wikitext block.

A composition always holds at least one chapter and every chapter at least one
suggestion. Removing the last element of either level is a no-op.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class Suggestion(BaseModel):
    quote: str = ""
    suggestion: str = ""


def _blank_suggestions() -> List[Suggestion]:
    return [Suggestion()]


class Chapter(BaseModel):
    title: str = ""
    suggestions: List[Suggestion] = Field(default_factory=_blank_suggestions, min_length=1)

    def add_suggestion(self, quote: str = "", suggestion: str = "") -> Suggestion:
        item = Suggestion(quote=quote, suggestion=suggestion)
        self.suggestions.append(item)
        return item

    def remove_suggestion(self, index: int) -> bool:
        if len(self.suggestions) <= 1:
            return False
        del self.suggestions[index]
        return True


def _blank_chapters() -> List[Chapter]:
    return [Chapter()]


class Composition(BaseModel):
    chapters: List[Chapter] = Field(default_factory=_blank_chapters, min_length=1)

    def add_chapter(self, title: str = "") -> Chapter:
        chapter = Chapter(title=title)
        self.chapters.append(chapter)
        return chapter

    def remove_chapter(self, index: int) -> bool:
        if len(self.chapters) <= 1:
            return False
        del self.chapters[index]
        return True

    def add_suggestion(self, chapter_index: int, quote: str = "", suggestion: str = "") -> Suggestion:
        return self.chapters[chapter_index].add_suggestion(quote, suggestion)

    def remove_suggestion(self, chapter_index: int, suggestion_index: int) -> bool:
        return self.chapters[chapter_index].remove_suggestion(suggestion_index)
