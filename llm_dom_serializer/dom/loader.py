"""Build RawNode trees from JSON-like snapshot dictionaries."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple, Union

from llm_dom_serializer.core.exceptions import DOMStructureError
from llm_dom_serializer.dom.views import (
    AccessibilityInfo,
    AXProperty,
    DOMRect,
    NodeType,
    RawNode,
)

logger = logging.getLogger(__name__)


def _first(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key, accepting camelCase and snake_case spellings."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _parse_bounds(value: Any) -> Optional[DOMRect]:
    """Parse ``{x, y, width, height}`` or ``[x, y, width, height]``; None if malformed."""
    if value is None:
        return None
    try:
        if isinstance(value, Mapping):
            return DOMRect(
                x=float(value.get("x", 0)),
                y=float(value.get("y", 0)),
                width=float(value["width"]),
                height=float(value["height"]),
            )
        if isinstance(value, (list, tuple)) and len(value) >= 4:
            return DOMRect(*(float(v) for v in value[:4]))
    except (KeyError, TypeError, ValueError):
        pass
    logger.debug(f"Ignoring malformed bounds: {value!r}")
    return None


def _parse_attributes(value: Any) -> Dict[str, str]:
    """Accept a mapping or CDP's flat ``[name, value, name, value]`` list."""
    if isinstance(value, Mapping):
        return {str(k): "" if v is None else str(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return {
            str(value[i]): str(value[i + 1])
            for i in range(0, len(value) - 1, 2)
        }
    if value:
        logger.debug(f"Ignoring malformed attributes: {value!r}")
    return {}


def _parse_styles(value: Any) -> Dict[str, str]:
    if isinstance(value, Mapping):
        return {str(k): str(v) for k, v in value.items() if v is not None}
    return {}


def _parse_ax_value(value: Any) -> Any:
    # CDP wraps values as {"type": ..., "value": ...}
    if isinstance(value, Mapping) and "value" in value:
        return value["value"]
    return value


def _parse_accessibility(value: Any) -> Optional[AccessibilityInfo]:
    if not isinstance(value, Mapping):
        return None

    properties: List[AXProperty] = []
    raw_props = value.get("properties") or []
    if isinstance(raw_props, Mapping):
        raw_props = [{"name": k, "value": v} for k, v in raw_props.items()]
    for prop in raw_props:
        if isinstance(prop, Mapping) and prop.get("name"):
            properties.append(AXProperty(name=str(prop["name"]), value=_parse_ax_value(prop.get("value"))))

    def text(key: str) -> Optional[str]:
        raw = _parse_ax_value(value.get(key))
        return None if raw is None else str(raw)

    return AccessibilityInfo(
        role=text("role"),
        name=text("name"),
        description=text("description"),
        properties=properties,
        ignored=bool(value.get("ignored", False)),
    )


def _parse_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_node_type(value: Any) -> NodeType:
    try:
        return NodeType(int(value))
    except (TypeError, ValueError):
        return NodeType.ELEMENT_NODE


def load_raw_tree(data: Mapping[str, Any]) -> RawNode:
    """
    Build a RawNode tree from a snapshot dictionary.

    Per-node facets that are missing or malformed (bounds, styles,
    accessibility) are dropped rather than rejected. Only structural
    problems raise.

    Args:
        data: Root node mapping (camelCase or snake_case keys)

    Returns:
        Root RawNode

    Raises:
        DOMStructureError: If a node has no usable id or the graph has a cycle
    """
    return _build_tree(data)


def _build_tree(data: Any) -> RawNode:
    root: Optional[RawNode] = None
    # (node data, ancestor ids, parent, parent field the node goes into)
    stack: List[Tuple[Any, Set[int], Optional[RawNode], str]] = [(data, set(), None, "")]

    while stack:
        item, ancestors, parent, slot = stack.pop()
        node = _build_node(item, ancestors)
        if parent is None:
            root = node
        elif slot == "content_document":
            parent.content_document = node
        else:
            getattr(parent, slot).append(node)

        lineage = ancestors | {node.node_id}
        content_document = _first(item, "contentDocument", "content_document")
        if content_document is not None:
            stack.append((content_document, lineage, node, "content_document"))
        for shadow_root in reversed(list(_first(item, "shadowRoots", "shadow_roots", default=[]))):
            stack.append((shadow_root, lineage, node, "shadow_roots"))
        for child in reversed(list(item.get("children") or [])):
            stack.append((child, lineage, node, "children"))

    return root


def _build_node(data: Any, ancestors: Set[int]) -> RawNode:
    """Build one node without its children, shadow roots or content document."""
    if not isinstance(data, Mapping):
        raise DOMStructureError(f"Expected a node mapping, got {type(data).__name__}")

    node_id = _parse_int(_first(data, "nodeId", "node_id"))
    if node_id is None:
        raise DOMStructureError("Node is missing a nodeId", details=str(dict(data).keys()))
    if node_id in ancestors:
        raise DOMStructureError(f"Node {node_id} is its own ancestor", node_id=node_id)

    layout = _first(data, "layout", "snapshot", default={})
    if not isinstance(layout, Mapping):
        layout = {}

    def facet(*keys: str) -> Any:
        return _first(data, *keys, default=_first(layout, *keys))

    backend_id = _parse_int(_first(data, "backendId", "backendNodeId", "backend_node_id"))
    node = RawNode(
        node_id=node_id,
        backend_node_id=node_id if backend_id is None else backend_id,
        node_type=_parse_node_type(_first(data, "nodeType", "node_type", default=1)),
        tag_name=str(_first(data, "tag", "tagName", "tag_name", "nodeName", "node_name", default="")),
        node_value=_first(data, "nodeValue", "node_value"),
        attributes=_parse_attributes(data.get("attributes")),
        shadow_root_type=_first(data, "shadowRootType", "shadow_root_type"),
        accessibility=_parse_accessibility(_first(data, "accessibility", "axNode", "ax_node")),
        bounds=_parse_bounds(facet("bounds")),
        computed_styles=_parse_styles(facet("computedStyles", "computed_styles")),
        paint_order=_parse_int(facet("paintOrder", "paint_order")),
        cursor_style=facet("cursorStyle", "cursor_style"),
        frame_id=_first(data, "frameId", "frame_id"),
        session_id=_first(data, "sessionId", "session_id"),
        is_visible=_first(data, "isVisible", "is_visible"),
        is_scrollable=bool(_first(data, "isScrollable", "is_scrollable", default=False)),
    )

    return node


def load_raw_tree_from_file(path: Union[str, Path]) -> RawNode:
    """
    Load a snapshot JSON file.

    The file may contain the root node directly or an object with a
    ``root`` key.
    """
    with open(path, "r", encoding="utf-8") as fh:
        try:
            data = json.load(fh)
        except json.JSONDecodeError as e:
            raise DOMStructureError(f"Snapshot {path} is not valid JSON", details=str(e)) from e
    if isinstance(data, Mapping) and "root" in data and isinstance(data["root"], Mapping):
        data = data["root"]
    return load_raw_tree(data)
