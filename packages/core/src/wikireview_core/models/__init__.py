"""Review workflow data models."""

from wikireview_core.models.annotation import Annotation, AnnotationGroup
from wikireview_core.models.composition import Chapter, Composition, Suggestion

__all__ = [
    "Annotation",
    "AnnotationGroup",
    "Chapter",
    "Composition",
    "Suggestion",
]
