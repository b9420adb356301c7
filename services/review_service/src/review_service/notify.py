"""User-facing notifications: toasts and blocking alerts."""

from __future__ import annotations

from typing import Literal, Protocol

from rich.console import Console

NoticeKind = Literal["info", "success", "warn", "error"]


class Notifier(Protocol):
    def notify(self, message: str, *, kind: NoticeKind = "info", tag: str | None = None) -> None: ...

    def alert(self, message: str) -> None:
        """Show a message the user has to acknowledge."""
        ...


class NullNotifier:
    def notify(self, message: str, *, kind: NoticeKind = "info", tag: str | None = None) -> None:
        pass

    def alert(self, message: str) -> None:
        pass


_STYLES: dict[str, str] = {
    "info": "cyan",
    "success": "green",
    "warn": "yellow",
    "error": "bold red",
}


class ConsoleNotifier:
    def __init__(self, console: Console | None = None, *, interactive: bool = False) -> None:
        self.console = console or Console()
        self.interactive = interactive

    def notify(self, message: str, *, kind: NoticeKind = "info", tag: str | None = None) -> None:
        self.console.print(f"[{_STYLES[kind]}][ReviewTool][/{_STYLES[kind]}] {message}")

    def alert(self, message: str) -> None:
        self.console.print(f"[bold red]![/bold red] {message}")
        if self.interactive:
            self.console.input("[dim]Press Enter to continue[/dim]")
