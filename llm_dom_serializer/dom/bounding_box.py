"""Containment-based filtering with propagating bounds and exception rules."""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from llm_dom_serializer.dom.views import DOMRect, RawNode, SimplifiedNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ElementPattern:
    """Tag, optionally qualified by a role (attribute or accessibility role)."""
    tag: str
    role: Optional[str] = None

    def matches(self, node: RawNode) -> bool:
        if node.tag != self.tag:
            return False
        if self.role is None:
            return True
        return self.role in _roles_of(node)


@dataclass(frozen=True)
class PropagatingBounds:
    """Containment reference for a subtree: the bounds of its nearest propagating ancestor."""
    bounds: DOMRect
    node: SimplifiedNode


@dataclass
class BoundingBoxStats:
    contained_nodes: int = 0
    size_filtered_nodes: int = 0
    retained_nodes: int = 0

    @property
    def filtered_nodes(self) -> int:
        return self.contained_nodes + self.size_filtered_nodes


def _roles_of(node: RawNode) -> Tuple[str, ...]:
    roles = []
    attr_role = node.attributes.get("role")
    if attr_role:
        roles.append(attr_role.strip().lower())
    if node.accessibility and node.accessibility.role:
        roles.append(node.accessibility.role.lower())
    return tuple(roles)


class BoundingBoxFilter:
    """
    Removes descendants whose bounds are indistinguishable from an
    interactive ancestor's.

    Inside a link, button, list item or table cell the ancestor's rectangle
    becomes the containment reference for the whole subtree. A descendant
    covering at least ``containment_threshold`` of its own area with that
    rectangle is dropped unless an exception rule says it carries meaning of
    its own.
    """

    PROPAGATING_ELEMENTS: Tuple[ElementPattern, ...] = (
        ElementPattern("a"),
        ElementPattern("button"),
        ElementPattern("div", "button"),
        ElementPattern("div", "combobox"),
        ElementPattern("span", "button"),
        ElementPattern("span", "link"),
        ElementPattern("input", "combobox"),
        ElementPattern("li"),
        ElementPattern("tr"),
        ElementPattern("td"),
        ElementPattern("th"),
    )

    EXCEPTION_ELEMENTS: Tuple[ElementPattern, ...] = (
        ElementPattern("input"),
        ElementPattern("select"),
        ElementPattern("textarea"),
        ElementPattern("button"),
        ElementPattern("label"),
        ElementPattern("a"),
        ElementPattern("iframe"),
        ElementPattern("canvas"),
        ElementPattern("video"),
        ElementPattern("audio"),
        ElementPattern("div", "button"),
        ElementPattern("div", "combobox"),
        ElementPattern("div", "link"),
        ElementPattern("div", "menuitem"),
        ElementPattern("span", "button"),
        ElementPattern("span", "link"),
    )

    EVENT_HANDLERS = (
        "onclick", "onmousedown", "onmouseup", "onmouseover", "onmouseout",
        "onkeydown", "onkeyup", "onkeypress", "ontouchstart", "ontouchend",
        "onsubmit", "onchange", "oninput", "onfocus", "onblur",
    )

    AX_INTERACTIVE_PROPERTIES = frozenset({
        "focusable", "editable", "settable", "checked", "selected",
        "haspopup", "hasPopup", "required",
    })

    FORM_TAGS = frozenset({"input", "select", "textarea", "button", "option", "label"})
    MEDIA_TAGS = frozenset({"video", "audio", "canvas"})

    def __init__(
        self,
        containment_threshold: float = 0.99,
        enable_size_filtering: bool = True,
        min_element_size: float = 5,
        max_element_size: float = 10000,
    ):
        self.containment_threshold = containment_threshold
        self.enable_size_filtering = enable_size_filtering
        self.min_element_size = min_element_size
        self.max_element_size = max_element_size

    def filter_tree(self, root: SimplifiedNode) -> BoundingBoxStats:
        """
        Mark contained and badly sized nodes with ``excluded_by_parent``.

        The root itself is never excluded. Excluded nodes stay in the tree;
        the caller removes them.
        """
        stats = BoundingBoxStats()
        stack: List[Tuple[SimplifiedNode, Optional[PropagatingBounds], bool]] = [(root, None, True)]
        while stack:
            node, context, is_root = stack.pop()
            child_context = self._visit(node, context, stats, is_root)
            for child in reversed(node.children):
                stack.append((child, child_context, False))

        logger.debug(
            f"Bounding box filter: {stats.contained_nodes} contained, "
            f"{stats.size_filtered_nodes} size-filtered, {stats.retained_nodes} retained"
        )
        return stats

    def _visit(
        self,
        node: SimplifiedNode,
        context: Optional[PropagatingBounds],
        stats: BoundingBoxStats,
        is_root: bool = False,
    ) -> Optional[PropagatingBounds]:
        """Classify one node and return the bounds context for its children."""
        raw = node.original_node
        bounds = raw.bounds

        if (
            context is not None
            and bounds is not None
            and self.is_contained(bounds, context.bounds)
            and self.should_exclude_child(node)
        ):
            node.excluded_by_parent = True
            stats.contained_nodes += 1
        elif (
            not is_root
            and self.enable_size_filtering
            and raw.is_element
            and bounds is not None
            and self.fails_size_filter(bounds)
        ):
            node.excluded_by_parent = True
            stats.size_filtered_nodes += 1
        elif not is_root:
            stats.retained_nodes += 1

        if not node.excluded_by_parent and bounds is not None and self.propagates_bounds(raw):
            return PropagatingBounds(bounds=bounds, node=node)
        return context

    def is_contained(self, child: DOMRect, parent: DOMRect) -> bool:
        """Check if enough of the child's area lies inside the parent."""
        child_area = child.area
        if child_area <= 0 or parent.area <= 0:
            return False
        return child.overlap_area(parent) / child_area >= self.containment_threshold

    def fails_size_filter(self, bounds: DOMRect) -> bool:
        if bounds.width <= 0 or bounds.height <= 0:
            return True
        area = bounds.width * bounds.height
        if area < self.min_element_size * self.min_element_size:
            return True
        return area > self.max_element_size * self.max_element_size

    def propagates_bounds(self, node: RawNode) -> bool:
        return any(pattern.matches(node) for pattern in self.PROPAGATING_ELEMENTS)

    def should_exclude_child(self, node: SimplifiedNode) -> bool:
        """
        Apply the exception rules to a contained child.

        Returns:
            True if the child should be removed
        """
        raw = node.original_node

        # Text carries the label of its container
        if raw.is_text:
            return False

        if any(pattern.matches(raw) for pattern in self.EXCEPTION_ELEMENTS):
            return False
        if self._has_accessibility_properties(raw):
            return False
        if self._has_event_handlers(raw):
            return False
        if self._has_meaningful_name(raw):
            return False
        if node.is_compound_component:
            return False
        if node.is_shadow_host:
            return False
        if raw.tag in self.FORM_TAGS:
            return False
        if raw.tag in self.MEDIA_TAGS:
            return False
        if raw.tag == "iframe":
            return False
        return True

    def _has_accessibility_properties(self, raw: RawNode) -> bool:
        ax = raw.accessibility
        if ax is None:
            return False
        if ax.role and ax.role not in ("generic", "none", "presentation", "StaticText", "InlineTextBox"):
            return True
        if ax.has_name:
            return True
        return any(
            prop.name in self.AX_INTERACTIVE_PROPERTIES and prop.value is True
            for prop in ax.properties
        )

    def _has_event_handlers(self, raw: RawNode) -> bool:
        return any(raw.attributes.get(handler) for handler in self.EVENT_HANDLERS)

    @staticmethod
    def _has_meaningful_name(raw: RawNode) -> bool:
        if raw.get_attribute("aria-label").strip():
            return True
        if raw.get_attribute("title").strip():
            return True
        return bool(raw.accessibility and raw.accessibility.has_name)
