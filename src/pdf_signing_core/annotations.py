from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, replace
from uuid import uuid4

from pdf_signing_core.models import SignatureAnnotation

_MUTABLE_FIELDS = frozenset({"x", "y", "width", "height"})


@dataclass(frozen=True)
class Placement:
    """Where a freshly added signature lands on the current page."""

    x: float = 50.0
    y: float = 50.0
    width: float = 200.0
    height: float = 100.0


class SignatureRecordStore:
    """
    Ordered, in-memory set of annotations for the document being edited.

    This is the only mutation surface for annotations; rendering code reads
    through `list_for_page`, the compositor through `list_all`.
    """

    def __init__(
        self,
        annotations: Iterable[SignatureAnnotation] = (),
        *,
        default_placement: Placement | None = None,
    ):
        self._placement = default_placement or Placement()
        self._items: list[SignatureAnnotation] = []
        self._issued: set[str] = set()
        for ann in annotations:
            if ann.id in self._issued:
                raise ValueError(f"Duplicate annotation id: {ann.id}")
            self._items.append(ann)
            self._issued.add(ann.id)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[SignatureAnnotation]:
        return iter(list(self._items))

    def _new_id(self) -> str:
        while True:
            candidate = uuid4().hex
            if candidate not in self._issued:
                self._issued.add(candidate)
                return candidate

    def add(self, image_ref: str, page: int) -> SignatureAnnotation:
        p = self._placement
        ann = SignatureAnnotation(
            id=self._new_id(),
            image_ref=image_ref,
            x=p.x,
            y=p.y,
            width=p.width,
            height=p.height,
            page=page,
        )
        self._items.append(ann)
        return ann

    def update(self, annotation_id: str, **fields: float) -> SignatureAnnotation | None:
        unknown = set(fields) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update annotation fields: {', '.join(sorted(unknown))}")
        for idx, ann in enumerate(self._items):
            if ann.id == annotation_id:
                updated = replace(ann, **fields)
                self._items[idx] = updated
                return updated
        return None

    def remove(self, annotation_id: str) -> None:
        self._items = [a for a in self._items if a.id != annotation_id]

    def clear(self) -> None:
        self._items.clear()

    def list_for_page(self, page: int) -> list[SignatureAnnotation]:
        return [a for a in self._items if a.page == page]

    def list_all(self) -> list[SignatureAnnotation]:
        return list(self._items)
