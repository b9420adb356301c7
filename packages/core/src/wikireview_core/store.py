from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator

from wikireview_core.errors import InvalidFormatError
from wikireview_core.identity import annotation_id, now_ms
from wikireview_core.models.annotation import Annotation, AnnotationGroup
from wikireview_core.normalize import is_record, normalize_annotation, str_or
from wikireview_core.ordering import OrderKeyComparator, build_groups_sorted, compare_order_keys
from wikireview_core.settings import settings


class AnnotationStore:
    """
    In-memory annotations of one page, keyed by id.

    Insertion order is kept; adding a record whose id already exists replaces
    it in place. The store never deletes on its own: `remove` and `clear` are
    exposed for callers that do.
    """

    def __init__(self, page_name: str, annotations: list[Annotation] | None = None) -> None:
        self.page_name = page_name
        self._items: dict[str, Annotation] = {}
        for annotation in annotations or []:
            self.add(annotation)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Annotation]:
        return iter(list(self._items.values()))

    def __contains__(self, annotation_id: object) -> bool:
        return annotation_id in self._items

    @property
    def annotations(self) -> list[Annotation]:
        return list(self._items.values())

    def get(self, annotation_id: str) -> Annotation | None:
        return self._items.get(annotation_id)

    def add(self, annotation: Annotation) -> Annotation:
        self._items[annotation.id] = annotation
        return annotation

    def create(
        self,
        *,
        section_path: str,
        sentence_text: str,
        opinion: str,
        sentence_pos: str | None = None,
        created_by: str | None = None,
    ) -> Annotation:
        """New annotation with a fresh id, stamped with the current user and time."""
        return self.add(
            Annotation(
                id=annotation_id(),
                section_path=section_path,
                sentence_pos=sentence_pos,
                sentence_text=sentence_text,
                opinion=opinion,
                created_by=created_by or settings.user_name or "import",
                created_at=now_ms(),
            )
        )

    def update_opinion(self, annotation_id: str, opinion: str) -> Annotation:
        annotation = self._items[annotation_id]
        annotation.opinion = opinion
        return annotation

    def set_resolved(self, annotation_id: str, resolved: bool = True) -> Annotation:
        annotation = self._items[annotation_id]
        annotation.resolved = resolved
        return annotation

    def remove(self, annotation_id: str) -> bool:
        return self._items.pop(annotation_id, None) is not None

    def clear(self) -> None:
        self._items.clear()

    def groups(self, comparator: OrderKeyComparator = compare_order_keys) -> list[AnnotationGroup]:
        return build_groups_sorted(self._items.values(), comparator)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_payload(self) -> dict[str, Any]:
        return {
            "pageName": self.page_name,
            "annotations": [a.model_dump(by_alias=True) for a in self._items.values()],
        }

    def save(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_payload(), ensure_ascii=False, indent=2), encoding="utf-8")
        return path

    @classmethod
    def load(cls, path: Path, page_name: str) -> "AnnotationStore":
        """
        Load a store written by `save`; a missing file gives an empty store.

        The file may have been edited by hand, so records go through the same
        normalization as imports. Only an unreadable file or a wrong top-level
        shape raises `InvalidFormatError`.
        """
        if not path.exists():
            return cls(page_name)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise InvalidFormatError(f"could not read store {path}: {exc}", details={"path": str(path)}) from exc

        raw_items = data.get("annotations", []) if is_record(data) else None
        if not isinstance(raw_items, list):
            raise InvalidFormatError(f"unexpected store layout in {path}", details={"path": str(path)})
        items = [normalize_annotation(raw) for raw in raw_items]
        return cls(str_or(data.get("pageName"), "") or page_name, items)


def store_path_for(data_dir: Path, page_name: str) -> Path:
    safe = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in page_name.strip()) or "_"
    return data_dir / "annotations" / f"{safe}.json"
