"""
Annotation - a reviewer comment attached to a span of article text.

Annotations are keyed by `id`; two records with the same id inside one store
are the same logical entity. The id never changes once assigned.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Annotation(BaseModel):
    """A single reviewer comment, serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    id: str = Field(..., min_length=1, frozen=True, description="Unique within a store")
    section_path: str = Field(default="", description="Logical section/chapter; empty means unfiled")
    sentence_pos: Optional[str] = Field(default=None, description="Opaque position key")
    sentence_text: str = Field(default="", description="Quoted source excerpt")
    opinion: str = Field(default="", description="Free-text comment")
    created_by: str = Field(default="import")
    created_at: int = Field(default=0, description="Creation instant, epoch milliseconds")
    resolved: bool = False

    @field_validator("sentence_pos")
    @classmethod
    def _empty_pos_is_absent(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class AnnotationGroup(BaseModel):
    """Annotations sharing one section path. A derived view, never stored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    section_path: str = ""
    annotations: List[Annotation] = Field(..., min_length=1)

    @property
    def first(self) -> Annotation:
        return self.annotations[0]
