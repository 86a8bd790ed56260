"""Axis-aligned rectangles and an exact rectangle-union coverage test."""

from dataclasses import dataclass
from typing import List, Optional

from llm_dom_serializer.dom.views import DOMRect


@dataclass(frozen=True)
class Rect:
    """Closed axis-aligned rectangle with (x1, y1) the low corner and (x2, y2) the high corner."""

    x1: float
    y1: float
    x2: float
    y2: float

    @classmethod
    def from_bounds(cls, bounds: Optional[DOMRect]) -> Optional["Rect"]:
        """Convert element bounds; None when bounds are missing or inverted."""
        if bounds is None:
            return None
        rect = cls(bounds.x, bounds.y, bounds.x + bounds.width, bounds.y + bounds.height)
        if rect.x2 < rect.x1 or rect.y2 < rect.y1:
            return None
        return rect

    @property
    def area(self) -> float:
        return max(0.0, self.x2 - self.x1) * max(0.0, self.y2 - self.y1)

    def is_valid(self) -> bool:
        """True if the rectangle has positive area."""
        return self.x2 > self.x1 and self.y2 > self.y1

    def intersects(self, other: "Rect") -> bool:
        return not (
            self.x2 <= other.x1 or other.x2 <= self.x1 or
            self.y2 <= other.y1 or other.y2 <= self.y1
        )

    def contains(self, other: "Rect") -> bool:
        return (
            self.x1 <= other.x1 and self.y1 <= other.y1 and
            self.x2 >= other.x2 and self.y2 >= other.y2
        )


def split_diff(a: Rect, b: Rect) -> List[Rect]:
    r"""
    Return up to four rectangles covering a \ b.

    Assumes ``a`` intersects ``b``. The pieces are the slice of ``a`` below
    ``b``, the slice above ``b``, and the left and right slices inside
    ``b``'s vertical span. Zero-area pieces are dropped.
    """
    parts = []

    # Bottom slice
    if a.y1 < b.y1:
        parts.append(Rect(a.x1, a.y1, a.x2, b.y1))
    # Top slice
    if b.y2 < a.y2:
        parts.append(Rect(a.x1, b.y2, a.x2, a.y2))

    y_lo = max(a.y1, b.y1)
    y_hi = min(a.y2, b.y2)

    # Left slice
    if a.x1 < b.x1:
        parts.append(Rect(a.x1, y_lo, b.x1, y_hi))
    # Right slice
    if b.x2 < a.x2:
        parts.append(Rect(b.x2, y_lo, a.x2, y_hi))

    return [part for part in parts if part.is_valid()]


class RectUnion:
    """
    Maintains a disjoint set of rectangles whose union is the covered region.

    No external dependencies; fine for a few thousand rectangles.
    """

    __slots__ = ("_rects",)

    def __init__(self):
        self._rects: List[Rect] = []

    def __len__(self) -> int:
        return len(self._rects)

    @property
    def rects(self) -> List[Rect]:
        return list(self._rects)

    def clear(self) -> None:
        self._rects.clear()

    def contains(self, rect: Rect) -> bool:
        """True iff ``rect`` is fully covered by the current union."""
        if not self._rects:
            return False

        stack = [rect]
        for s in self._rects:
            new_stack = []
            for piece in stack:
                if s.contains(piece):
                    continue
                if piece.intersects(s):
                    new_stack.extend(split_diff(piece, s))
                else:
                    new_stack.append(piece)
            if not new_stack:
                return True
            stack = new_stack
        return False

    def add(self, rect: Rect) -> bool:
        """
        Insert ``rect`` unless it is degenerate or already covered.

        Returns:
            True if the union grew
        """
        if not rect.is_valid() or self.contains(rect):
            return False

        pending = [rect]
        for s in self._rects:
            new_pending = []
            for piece in pending:
                if piece.intersects(s):
                    new_pending.extend(split_diff(piece, s))
                else:
                    new_pending.append(piece)
            pending = new_pending
            if not pending:
                break

        self._rects.extend(pending)
        return bool(pending)
