"""Single-owner handle for the one active review dialog."""

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Dialog(Protocol):
    def teardown(self) -> None:
        """Discard the dialog's state; in-flight work must no longer display anything."""
        ...


class DialogRegistry:
    """
    Holds at most one dialog. Acquiring while another dialog is held tears the
    previous one down first.
    """

    def __init__(self) -> None:
        self._current: Dialog | None = None

    @property
    def current(self) -> Dialog | None:
        return self._current

    def acquire(self, dialog: Dialog) -> Dialog:
        previous = self._current
        if previous is not None and previous is not dialog:
            logger.debug("[ReviewTool] replacing active dialog %r", previous)
            self._current = None
            previous.teardown()
        self._current = dialog
        return dialog

    def release(self, dialog: Dialog | None = None) -> None:
        """Release the held dialog (only if it is `dialog`, when one is given)."""
        if self._current is None:
            return
        if dialog is not None and dialog is not self._current:
            return
        self._current = None


registry = DialogRegistry()
