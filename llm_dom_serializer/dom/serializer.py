"""Six-stage DOM tree serialization for LLM consumption."""

import dataclasses
import hashlib
import json
import logging
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple

from llm_dom_serializer.core.config import SerializerConfig
from llm_dom_serializer.core.exceptions import SerializationFailed
from llm_dom_serializer.core.logging import log_serialization
from llm_dom_serializer.dom.bounding_box import BoundingBoxFilter
from llm_dom_serializer.dom.compound import CompoundComponentBuilder
from llm_dom_serializer.dom.interactive import InteractiveElementDetector
from llm_dom_serializer.dom.paint_order import PaintOrderAnalyzer
from llm_dom_serializer.dom.views import (
    CompoundComponent,
    DOMSelectorMap,
    NodeType,
    RawNode,
    SerializationResult,
    SerializationStats,
    SerializationTiming,
    SerializedDOMState,
    SimplifiedNode,
)

logger = logging.getLogger(__name__)

SIGNIFICANT_ATTRIBUTES = frozenset({
    "id", "class", "name", "type", "value", "placeholder", "title", "alt",
    "role", "aria-label", "aria-expanded", "aria-checked", "aria-disabled",
    "data-testid", "data-test", "href", "src", "onclick", "tabindex",
})

HASHED_STYLES = (
    "display", "visibility", "opacity", "background-color", "color",
    "cursor", "pointer-events", "position", "overflow", "overflow-x", "overflow-y",
)

HASHED_AX_PROPERTIES = frozenset({
    "disabled", "checked", "selected", "expanded", "pressed", "invalid",
})

WRAPPER_TAGS = frozenset({"div", "span"})


def compute_node_hash(
    raw: RawNode,
    compound_children: Optional[Sequence[CompoundComponent]] = None,
) -> str:
    """
    Content hash of a node for change detection.

    Covers node type, tag, trimmed text, significant attributes, a curated
    set of computed styles, accessibility role/name/description and state
    properties, and the compound component signatures. Bounds are not part
    of the hash, so reflow alone never marks a node as changed.

    Args:
        raw: Node to hash
        compound_children: Compound components attached to the node

    Returns:
        Hex digest
    """
    # Structured parts: values may contain any separator
    parts: List[List[Any]] = [
        ["type", int(raw.node_type)],
        ["tag", raw.tag],
        ["value", (raw.node_value or "").strip()],
    ]

    for key in sorted(raw.attributes):
        if key in SIGNIFICANT_ATTRIBUTES or key.startswith("data-") or key.startswith("aria-"):
            value = (raw.attributes[key] or "").strip()
            if value:
                parts.append(["attr", key, value])

    for key in HASHED_STYLES:
        value = raw.computed_styles.get(key)
        if value is not None and value not in ("initial", "auto"):
            parts.append(["style", key, value])

    ax = raw.accessibility
    if ax is not None:
        if ax.role and ax.role != raw.tag:
            parts.append(["role", ax.role])
        if ax.name and ax.name.strip():
            parts.append(["ax_name", ax.name.strip()])
        if ax.description and ax.description.strip():
            parts.append(["ax_desc", ax.description.strip()])
        for prop in ax.properties:
            if prop.name in HASHED_AX_PROPERTIES and prop.value is not None:
                parts.append(["ax", prop.name, str(prop.value)])

    if compound_children:
        parts.append(["compound", sorted(component.signature() for component in compound_children)])

    payload = json.dumps(parts, ensure_ascii=False, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class DOMTreeSerializer:
    """
    Turns a raw DOM snapshot into an indexed, filtered tree.

    Stages run in a fixed order: simplify, paint order filtering, structural
    optimization, bounding box filtering, index assignment and change
    detection. Every call works on its own freshly built tree, so one
    instance can serve several pages or threads at once.
    """

    def __init__(self, config: Optional[SerializerConfig] = None):
        """
        Initialize the serializer.

        Args:
            config: Pipeline configuration (defaults when None)
        """
        self.config = config or SerializerConfig()
        self.paint_order_analyzer = PaintOrderAnalyzer(
            opacity_threshold=self.config.opacity_threshold,
            enable_transparency_filtering=self.config.enable_transparency_filtering,
        )
        self.bounding_box_filter = BoundingBoxFilter(
            containment_threshold=self.config.containment_threshold,
            min_element_size=self.config.min_element_size,
            max_element_size=self.config.max_element_size,
        )
        self.compound_builder = CompoundComponentBuilder()

    def serialize(
        self,
        root: RawNode,
        previous_state: Optional[SerializedDOMState] = None,
    ) -> SerializationResult:
        """
        Serialize a raw DOM tree.

        Args:
            root: Root of the raw snapshot
            previous_state: State returned by the previous call on the same page

        Returns:
            SerializationResult with the new state, statistics and timings

        Raises:
            SerializationFailed: If anything unexpected goes wrong
        """
        try:
            return self._serialize(root, previous_state)
        except SerializationFailed:
            raise
        except Exception as e:
            logger.error(f"DOM serialization failed: {type(e).__name__}: {e}")
            raise SerializationFailed(e) from e

    def _serialize(
        self,
        root: RawNode,
        previous_state: Optional[SerializedDOMState],
    ) -> SerializationResult:
        timings: Dict[str, float] = {}
        stats = SerializationStats()
        started = time.perf_counter()

        stage_start = time.perf_counter()
        tree = self._create_simplified_tree(root)
        timings["create_simplified_tree"] = time.perf_counter() - stage_start
        stats.total_nodes = sum(1 for _ in tree.iter_nodes())

        if self.config.enable_paint_order_filtering:
            stage_start = time.perf_counter()
            paint_stats = self.paint_order_analyzer.filter_nodes(tree.iter_nodes())
            stats.occluded_nodes = paint_stats.occluded_nodes + paint_stats.transparent_nodes
            timings["paint_order_filtering"] = time.perf_counter() - stage_start

        stage_start = time.perf_counter()
        self._optimize_tree_structure(tree)
        timings["optimize_tree_structure"] = time.perf_counter() - stage_start

        if self.config.enable_bounding_box_filtering:
            stage_start = time.perf_counter()
            bbox_stats = self.bounding_box_filter.filter_tree(tree)
            self._remove_nodes(tree, lambda node: node.excluded_by_parent)
            stats.contained_nodes = bbox_stats.contained_nodes
            stats.size_filtered_nodes = bbox_stats.size_filtered_nodes
            timings["bounding_box_filtering"] = time.perf_counter() - stage_start

        stage_start = time.perf_counter()
        selector_map = self._assign_interactive_indices(tree)
        timings["assign_interactive_indices"] = time.perf_counter() - stage_start

        stage_start = time.perf_counter()
        node_hashes = self._mark_new_elements(tree, previous_state)
        timings["mark_new_elements"] = time.perf_counter() - stage_start

        timings["total"] = time.perf_counter() - started

        final_nodes = list(tree.iter_nodes())
        stats.simplified_nodes = len(final_nodes)
        stats.filtered_nodes = stats.occluded_nodes + stats.contained_nodes + stats.size_filtered_nodes
        stats.interactive_elements = len(selector_map)
        stats.new_elements = sum(1 for node in final_nodes if node.is_new)
        stats.compound_components = sum(1 for node in final_nodes if node.is_compound_component)

        timing = SerializationTiming(**timings)
        log_serialization(stats.model_dump(), timing.model_dump())

        state = SerializedDOMState(root=tree, selector_map=selector_map, node_hashes=node_hashes)
        return SerializationResult(state=state, stats=stats, timing=timing)

    # Stage 1: simplify

    def _create_simplified_tree(self, raw: RawNode) -> SimplifiedNode:
        root: Optional[SimplifiedNode] = None
        # (raw node, what hides it, parent in the simplified tree)
        stack: List[Tuple[RawNode, Optional[str], Optional[SimplifiedNode]]] = [(raw, None, None)]

        while stack:
            current, hidden_by, parent = stack.pop()
            display, hide_descendants = self._visibility(current, hidden_by)

            node = SimplifiedNode(
                original_node=current,
                should_display=display,
                is_shadow_host=current.is_shadow_host,
            )
            if display and self.config.enable_compound_components:
                self.compound_builder.build(node)

            if parent is None:
                root = node
            else:
                parent.children.append(node)

            for child in reversed(current.children_and_shadow_roots):
                stack.append((child, hide_descendants, node))

        return root

    @staticmethod
    def _visibility(raw: RawNode, hidden_by: Optional[str]) -> Tuple[bool, Optional[str]]:
        """
        Decide whether a node is displayed.

        Args:
            raw: Node to check
            hidden_by: "display" or "visibility" when an ancestor hides the
                subtree, None otherwise

        Returns:
            (whether the node is displayed, what hides its descendants)
        """
        if raw.node_type == NodeType.COMMENT_NODE:
            return False, hidden_by
        if raw.is_text:
            has_text = bool((raw.node_value or "").strip())
            return has_text and hidden_by is None, hidden_by
        if hidden_by == "display":
            return False, hidden_by

        display = raw.get_style("display")
        visibility = raw.get_style("visibility")

        if display == "none":
            return False, "display"
        if visibility == "hidden":
            return False, "visibility"
        # visibility:visible overrides a hidden ancestor, display:none does not
        if hidden_by == "visibility" and visibility != "visible":
            return False, hidden_by
        if raw.is_visible is False:
            return False, None
        return True, None

    # Stage 3: structural optimization

    def _optimize_tree_structure(self, root: SimplifiedNode) -> None:
        self._remove_nodes(root, lambda node: not node.should_display or node.ignored_by_paint_order)
        self._merge_text_runs(root)
        self._collapse_wrappers(root)

    def _remove_nodes(self, root: SimplifiedNode, predicate) -> None:
        """Drop matching nodes below ``root``, hoisting their surviving children."""
        # Reversed pre-order reaches every node after all of its descendants
        for node in reversed(list(root.iter_nodes())):
            kept: List[SimplifiedNode] = []
            for child in node.children:
                if predicate(child):
                    kept.extend(child.children)
                else:
                    kept.append(child)
            node.children = kept

    def _merge_text_runs(self, root: SimplifiedNode) -> None:
        for node in list(root.iter_nodes()):
            merged: List[SimplifiedNode] = []
            run: List[SimplifiedNode] = []

            for child in node.children:
                if child.original_node.is_text:
                    run.append(child)
                    continue
                merged.extend(self._combine_text_nodes(run))
                run = []
                merged.append(child)
            merged.extend(self._combine_text_nodes(run))

            node.children = merged

    @staticmethod
    def _combine_text_nodes(run: List[SimplifiedNode]) -> List[SimplifiedNode]:
        if len(run) < 2:
            return run
        first = run[0]
        text = " ".join(
            (n.original_node.node_value or "").strip()
            for n in run
            if (n.original_node.node_value or "").strip()
        )
        combined_raw = dataclasses.replace(first.original_node, node_value=text, children=[])
        return [SimplifiedNode(original_node=combined_raw, should_display=first.should_display)]

    def _collapse_wrappers(self, root: SimplifiedNode) -> None:
        for node in reversed(list(root.iter_nodes())):
            collapsed: List[SimplifiedNode] = []
            for child in node.children:
                while self._is_simple_wrapper(child):
                    child = child.children[0]
                collapsed.append(child)
            node.children = collapsed

    @staticmethod
    def _is_simple_wrapper(node: SimplifiedNode) -> bool:
        raw = node.original_node
        return (
            raw.tag in WRAPPER_TAGS
            and not raw.attributes
            and len(node.children) == 1
            and not node.is_compound_component
            and not node.is_shadow_host
            and not InteractiveElementDetector.is_interactive(raw)
        )

    # Stage 5: index assignment

    def _assign_interactive_indices(self, root: SimplifiedNode) -> DOMSelectorMap:
        candidates = [
            node for node in root.iter_nodes()
            if node.should_display and (
                node.is_compound_component
                or InteractiveElementDetector.is_interactive(node.original_node)
            )
        ]
        candidates.sort(key=lambda node: node.node_id)

        limit = self.config.max_interactive_elements
        if len(candidates) > limit:
            logger.debug(f"Capping interactive elements at {limit} (found {len(candidates)})")

        selector_map: DOMSelectorMap = {}
        for index, node in enumerate(candidates[:limit]):
            node.interactive_index = index
            selector_map[index] = node.original_node
        return selector_map

    # Stage 6: change detection

    @staticmethod
    def _mark_new_elements(
        root: SimplifiedNode,
        previous_state: Optional[SerializedDOMState],
    ) -> Dict[int, str]:
        previous_hashes = previous_state.node_hashes if previous_state is not None else None

        node_hashes: Dict[int, str] = {}
        for node in root.iter_nodes():
            node_hash = compute_node_hash(node.original_node, node.compound_children)
            node_hashes.setdefault(node.node_id, node_hash)
            if previous_hashes is None:
                node.is_new = True
            else:
                node.is_new = previous_hashes.get(node.node_id) != node_hash
        return node_hashes


def serialize_dom_tree(
    root: RawNode,
    previous_state: Optional[SerializedDOMState] = None,
    config: Optional[SerializerConfig] = None,
) -> SerializationResult:
    """
    High-level function to serialize a raw DOM tree.

    Args:
        root: Root of the raw snapshot
        previous_state: State from the previous call on the same page
        config: Pipeline configuration

    Returns:
        SerializationResult
    """
    return DOMTreeSerializer(config).serialize(root, previous_state)
