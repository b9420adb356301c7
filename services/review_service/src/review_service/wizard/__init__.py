from __future__ import annotations

__all__ = [
    "COMPOSE_STEP",
    "DIFF_STEP",
    "EDIT_STEP",
    "PREVIEW_STEP",
    "CheckWritingWizard",
    "ContentSurface",
    "PreviewBundle",
    "StepMachine",
    "next_tick",
]

from review_service.wizard.check_writing import (
    COMPOSE_STEP,
    DIFF_STEP,
    EDIT_STEP,
    PREVIEW_STEP,
    CheckWritingWizard,
    PreviewBundle,
)
from review_service.wizard.steps import StepMachine, next_tick
from review_service.wizard.surfaces import ContentSurface
