"""Interactive element detection with ordered boolean rules."""

from typing import Any, Dict

from llm_dom_serializer.dom.views import INTERACTIVE_ROLES, RawNode


class InteractiveElementDetector:
    """
    Decides whether a node is something a user can act on.

    Rules run in a fixed order and the first decisive rule wins. Native tags
    alone are a weak signal on component-library markup, so later rules fall
    back to ARIA, event handlers, icon-sized affordances and cursor style.
    """

    INTERACTIVE_TAGS = frozenset({
        "button", "input", "select", "textarea", "a",
        "details", "summary", "option", "optgroup",
    })

    INTERACTIVE_ROLES = INTERACTIVE_ROLES

    INTERACTIVE_EVENTS = (
        "onclick", "onmousedown", "onmouseup", "onkeydown", "onkeyup",
        "onkeypress", "ontouchstart", "ontouchend", "onsubmit", "tabindex",
    )

    SEARCH_PATTERNS = (
        "search", "magnify", "glass", "lookup", "find", "query", "filter",
        "search-icon", "search-btn", "search-button", "searchbox",
    )

    ICON_ATTRIBUTES = ("class", "role", "onclick", "data-action", "aria-label")

    MIN_IFRAME_SIZE = 100
    ICON_MIN_SIZE = 10
    ICON_MAX_SIZE = 50

    @classmethod
    def is_interactive(cls, node: RawNode) -> bool:
        """Check if the node is interactive."""
        if not node.is_element:
            return False

        tag = node.tag
        if tag in ("html", "body"):
            return False

        if tag in ("iframe", "frame") and node.bounds:
            if node.bounds.width >= cls.MIN_IFRAME_SIZE and node.bounds.height >= cls.MIN_IFRAME_SIZE:
                return True

        if cls._has_search_affordance(node.attributes):
            return True

        ax_result = cls._check_accessibility_properties(node)
        if ax_result is not None:
            return ax_result

        if tag in cls.INTERACTIVE_TAGS:
            return True

        if any(attr in node.attributes for attr in cls.INTERACTIVE_EVENTS):
            return True
        if node.attributes.get("role") in cls.INTERACTIVE_ROLES:
            return True

        if node.accessibility and node.accessibility.role in cls.INTERACTIVE_ROLES:
            return True

        if node.bounds and cls._is_icon_sized(node.bounds.width, node.bounds.height):
            if any(attr in node.attributes for attr in cls.ICON_ATTRIBUTES):
                return True

        return node.cursor_style == "pointer"

    @classmethod
    def _has_search_affordance(cls, attributes: Dict[str, str]) -> bool:
        """Icon-only search boxes often carry nothing but a class or id hint."""
        if not attributes:
            return False

        class_tokens = (attributes.get("class") or "").lower().split()
        if any(pattern in token for token in class_tokens for pattern in cls.SEARCH_PATTERNS):
            return True

        element_id = (attributes.get("id") or "").lower()
        if any(pattern in element_id for pattern in cls.SEARCH_PATTERNS):
            return True

        for name, value in attributes.items():
            if name.startswith("data-") and value:
                lowered = value.lower()
                if any(pattern in lowered for pattern in cls.SEARCH_PATTERNS):
                    return True

        return False

    @staticmethod
    def _check_accessibility_properties(node: RawNode):
        """
        Returns:
            False if the node is disabled or hidden, True on a positive
            signal, None if the properties are inconclusive
        """
        if not node.accessibility or not node.accessibility.properties:
            return None

        properties = node.accessibility.properties

        # Exclusions override every positive signal, wherever they appear
        for prop in properties:
            if prop.name in ("disabled", "hidden") and _truthy(prop.value):
                return False

        for prop in properties:
            if prop.name in ("focusable", "editable", "settable") and _truthy(prop.value):
                return True
            if prop.name in ("checked", "expanded", "pressed", "selected"):
                return True
            if prop.name in ("required", "autocomplete") and _truthy(prop.value):
                return True
            if prop.name == "keyshortcuts" and prop.value:
                return True

        return None

    @classmethod
    def _is_icon_sized(cls, width: float, height: float) -> bool:
        return (
            cls.ICON_MIN_SIZE <= width <= cls.ICON_MAX_SIZE and
            cls.ICON_MIN_SIZE <= height <= cls.ICON_MAX_SIZE
        )

    @classmethod
    def get_debug_info(cls, node: RawNode) -> Dict[str, Any]:
        """Get detailed debug information for element detection."""
        ax = node.accessibility
        return {
            "tag_name": node.tag or "unknown",
            "attributes": dict(node.attributes),
            "accessibility": {
                "role": ax.role if ax else None,
                "name": ax.name if ax else None,
                "properties": [(p.name, p.value) for p in ax.properties] if ax else [],
            },
            "visual": {
                "cursor": node.cursor_style,
                "is_visible": bool(node.is_visible),
                "bounds": (
                    {"width": node.bounds.width, "height": node.bounds.height}
                    if node.bounds else None
                ),
            },
            "detection": {"is_interactive": cls.is_interactive(node)},
        }


def _truthy(value: Any) -> bool:
    """AX values arrive as bools, strings ("true"/"false") or numbers."""
    if isinstance(value, str):
        return value.strip().lower() not in ("", "false", "0", "none", "null")
    return bool(value)
