"""
wikireview core

Annotation data model, position ordering and the error taxonomy shared by the
review service.
"""

__version__ = "0.1.0"

from wikireview_core.errors import (
    CommitError,
    ConflictError,
    EmptyImportError,
    ErrorType,
    InvalidFormatError,
    NotFoundError,
    ReviewToolError,
    TransportError,
    ValidationError,
)
from wikireview_core.models import Annotation, AnnotationGroup, Chapter, Composition, Suggestion
from wikireview_core.ordering import (
    OrderKeyComparator,
    build_groups_sorted,
    build_time_sorted_groups,
    compare_order_keys,
    group_by_section,
    sort_by_position,
)
from wikireview_core.store import AnnotationStore
