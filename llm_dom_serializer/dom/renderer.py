"""Text rendering of a serialized DOM state for LLM prompts."""

import logging
from typing import List, Optional

from llm_dom_serializer.dom.views import RawNode, SerializedDOMState, SimplifiedNode

logger = logging.getLogger(__name__)

DEFAULT_ATTRIBUTES = [
    "aria-label", "placeholder", "type", "role",
    "href", "src", "alt", "title", "name", "value",
]

MAX_TEXT_LENGTH = 100
MAX_ATTRIBUTE_LENGTH = 50
MAX_INDENT = 5


class DOMTextRenderer:
    """
    Renders the indexed tree as one line per interactive element.

    Format: ``[index]<tag attributes>text</tag>``, indented by the number of
    indexed ancestors, with ``*`` in front of elements that are new since the
    previous state. Compound components follow their host, one per line.
    """

    def __init__(
        self,
        include_attributes: Optional[List[str]] = None,
        max_length: int = 40000,
    ):
        """
        Initialize the renderer.

        Args:
            include_attributes: Attributes to include (None = default set)
            max_length: Maximum length of output
        """
        self.include_attributes = include_attributes or list(DEFAULT_ATTRIBUTES)
        self.max_length = max_length

    def render(self, state: SerializedDOMState) -> str:
        """
        Render the state.

        Returns:
            Text representation, truncated to ``max_length`` characters
        """
        if state.root is None:
            return ""

        lines: List[str] = []
        stack = [(state.root, 0)]
        while stack:
            node, depth = stack.pop()
            child_depth = depth
            if node.interactive_index is not None:
                lines.append(self.render_element(node, depth))
                indent = "\t" * min(depth + 1, MAX_INDENT)
                for component in node.compound_children:
                    lines.append(f"{indent}{component.to_text()}")
                child_depth = depth + 1
            stack.extend((child, child_depth) for child in reversed(node.children))
        representation = "\n".join(lines)

        if len(representation) > self.max_length:
            representation = representation[:self.max_length]
            logger.debug(f"DOM representation truncated to {self.max_length} chars")

        return representation

    def render_element(self, node: SimplifiedNode, depth: int = 0) -> str:
        """
        Serialize a single indexed element to string format.

        Format: [index]<tag attributes>text</tag>
        """
        raw = node.original_node
        tag = raw.tag or "div"
        attrs = raw.attributes

        attr_parts = []
        for attr_name in self.include_attributes:
            value = attrs.get(attr_name)
            if value:
                # Truncate long values
                if len(value) > MAX_ATTRIBUTE_LENGTH:
                    value = value[:MAX_ATTRIBUTE_LENGTH - 3] + "..."
                attr_parts.append(f"{attr_name}='{value}'")

        # Add accessibility info
        ax = raw.accessibility
        if ax:
            if ax.role and "role" not in attrs and ax.role != tag:
                attr_parts.append(f"role='{ax.role}'")
            if ax.has_name and "aria-label" not in attrs:
                attr_parts.append(f"aria-label='{ax.name.strip()[:MAX_ATTRIBUTE_LENGTH]}'")

        attr_str = " " + " ".join(attr_parts) if attr_parts else ""

        text = collect_text(node)
        if len(text) > MAX_TEXT_LENGTH:
            text = text[:MAX_TEXT_LENGTH - 3] + "..."

        indent = "\t" * min(depth, MAX_INDENT)
        prefix = "*" if node.is_new else ""

        return f"{indent}{prefix}[{node.interactive_index}]<{tag}{attr_str}>{text}</{tag}>"


def collect_text(node: SimplifiedNode) -> str:
    """
    Concatenate the text below ``node``.

    Text belonging to nested indexed elements is left to them.
    """
    parts: List[str] = []
    stack = list(reversed(node.children))
    while stack:
        current = stack.pop()
        if current.interactive_index is not None:
            continue
        raw = current.original_node
        if raw.is_text:
            value = (raw.node_value or "").strip()
            if value:
                parts.append(value)
        stack.extend(reversed(current.children))
    return " ".join(parts)


def get_element_description(raw: RawNode) -> str:
    """
    Get a human-readable description of an element.

    Args:
        raw: Element node

    Returns:
        Description string like "button 'Submit'" or "input[type=text]"
    """
    tag = raw.tag or "element"
    attrs = raw.attributes
    ax = raw.accessibility

    text = " ".join(
        (child.node_value or "").strip()
        for child in raw.children
        if child.is_text and (child.node_value or "").strip()
    )

    # Try to get the best descriptive text
    label = (
        attrs.get("aria-label") or
        (ax.name if ax and ax.has_name else None) or
        attrs.get("title") or
        attrs.get("placeholder") or
        text
    )

    if label:
        label = label[:30] + "..." if len(label) > 30 else label

    # Build description based on tag
    if tag == "a":
        return f"link '{label}'" if label else "link"
    elif tag == "button":
        return f"button '{label}'" if label else "button"
    elif tag == "input":
        input_type = attrs.get("type", "text")
        desc = f"input[type={input_type}]"
        if label:
            desc += f" '{label}'"
        return desc
    elif tag == "select":
        return f"dropdown '{label}'" if label else "dropdown"
    elif tag == "textarea":
        return f"textarea '{label}'" if label else "textarea"
    else:
        return f"{tag} '{label}'" if label else tag
