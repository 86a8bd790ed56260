"""Occlusion filtering based on browser paint order."""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List

from llm_dom_serializer.dom.geometry import Rect, RectUnion
from llm_dom_serializer.dom.interactive import InteractiveElementDetector
from llm_dom_serializer.dom.views import SimplifiedNode

logger = logging.getLogger(__name__)

TRANSPARENT_BACKGROUNDS = frozenset({"rgba(0, 0, 0, 0)", "rgba(0,0,0,0)", "transparent"})


@dataclass
class PaintOrderStats:
    """Counters for one paint order pass."""
    considered_nodes: int = 0
    occluded_nodes: int = 0
    transparent_nodes: int = 0
    exception_nodes: int = 0
    union_rect_count: int = 0


class PaintOrderAnalyzer:
    """
    Marks nodes that are fully covered by elements painted on top of them.

    Nodes are grouped by paint order and processed from the highest (painted
    last, visually on top) to the lowest. Each kept node's bounds join a
    running rectangle union; a later node whose bounds the union already
    covers is occluded.
    """

    def __init__(
        self,
        opacity_threshold: float = 0.8,
        enable_transparency_filtering: bool = True,
    ):
        self.opacity_threshold = opacity_threshold
        self.enable_transparency_filtering = enable_transparency_filtering

    def filter_nodes(self, nodes: Iterable[SimplifiedNode]) -> PaintOrderStats:
        """
        Set ``ignored_by_paint_order`` on occluded or transparent nodes.

        Nodes without a paint order or bounds, and nodes that are not
        displayed, are left untouched.

        Args:
            nodes: Candidate nodes in any order

        Returns:
            Counters for this pass
        """
        stats = PaintOrderStats()
        rect_union = RectUnion()

        grouped: Dict[int, List[SimplifiedNode]] = defaultdict(list)
        for node in nodes:
            raw = node.original_node
            if not node.should_display or raw.paint_order is None or raw.bounds is None:
                continue
            grouped[raw.paint_order].append(node)

        for paint_order in sorted(grouped, reverse=True):
            rects_to_add: List[Rect] = []

            for node in grouped[paint_order]:
                rect = Rect.from_bounds(node.original_node.bounds)
                if rect is None:
                    continue
                stats.considered_nodes += 1

                if self._is_exception(node):
                    stats.exception_nodes += 1
                    node.ignored_by_paint_order = False
                    rects_to_add.append(rect)
                    continue

                if rect_union.contains(rect):
                    node.ignored_by_paint_order = True
                    stats.occluded_nodes += 1
                    continue

                if self.enable_transparency_filtering and self._is_transparent(node):
                    node.ignored_by_paint_order = True
                    stats.transparent_nodes += 1
                    continue

                node.ignored_by_paint_order = False
                rects_to_add.append(rect)

            # Nodes sharing a paint order do not occlude each other
            for rect in rects_to_add:
                rect_union.add(rect)

        stats.union_rect_count = len(rect_union)
        logger.debug(
            f"Paint order: {stats.considered_nodes} considered, "
            f"{stats.occluded_nodes} occluded, {stats.transparent_nodes} transparent"
        )
        return stats

    def _is_transparent(self, node: SimplifiedNode) -> bool:
        styles = node.original_node.computed_styles
        if not styles:
            return False

        background = styles.get("background-color")
        if background is not None and background.strip().lower() in TRANSPARENT_BACKGROUNDS:
            return True

        try:
            opacity = float(styles.get("opacity", "1"))
        except (TypeError, ValueError):
            return False
        return opacity < self.opacity_threshold

    @staticmethod
    def _is_exception(node: SimplifiedNode) -> bool:
        """Interactive, scrollable and named elements are never filtered here."""
        raw = node.original_node
        if raw.is_scrollable:
            return True
        if raw.accessibility and raw.accessibility.has_name:
            return True
        return InteractiveElementDetector.is_interactive(raw)
