from __future__ import annotations

from typing import Callable

ContentHook = Callable[["ContentSurface", str], None]


class ContentSurface:
    """
    Display slot for server-rendered HTML (a preview or a diff).

    Injection only writes into an empty slot, so markup that hooks augmented in
    place is never overwritten. Hooks run once per successful injection.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.html = ""
        self.needs_diff_styles = False
        self.injections = 0
        self._hooks: list[ContentHook] = []

    def __repr__(self) -> str:
        return f"ContentSurface({self.name!r}, empty={self.is_empty})"

    @property
    def is_empty(self) -> bool:
        return not self.html.strip()

    def on_content(self, hook: ContentHook) -> ContentHook:
        self._hooks.append(hook)
        return hook

    def inject(self, html: str) -> bool:
        if not html or not self.is_empty:
            return False
        self.html = html
        self.injections += 1
        if 'class="diff' in html:
            self.needs_diff_styles = True
        for hook in list(self._hooks):
            hook(self, html)
        return True

    def clear(self) -> None:
        self.html = ""
