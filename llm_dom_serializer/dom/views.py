"""Data models for raw DOM snapshots and their simplified, indexed form."""

from dataclasses import asdict, dataclass, field
from enum import IntEnum
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Tuple, Type, Union

from pydantic import BaseModel, Field

from llm_dom_serializer.core.exceptions import StaleIndexError


class NodeType(IntEnum):
    """DOM node types (matching W3C spec)."""
    ELEMENT_NODE = 1
    ATTRIBUTE_NODE = 2
    TEXT_NODE = 3
    CDATA_SECTION_NODE = 4
    PROCESSING_INSTRUCTION_NODE = 7
    COMMENT_NODE = 8
    DOCUMENT_NODE = 9
    DOCUMENT_TYPE_NODE = 10
    DOCUMENT_FRAGMENT_NODE = 11


INTERACTIVE_ROLES = frozenset({
    "button", "link", "menuitem", "menuitemcheckbox", "menuitemradio",
    "option", "tab", "treeitem", "gridcell", "combobox", "listbox",
    "textbox", "checkbox", "radio", "slider", "spinbutton", "search",
    "searchbox",
})


@dataclass
class DOMRect:
    """Bounding rectangle for a DOM element."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        """Get center X coordinate."""
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        """Get center Y coordinate."""
        return self.y + self.height / 2

    @property
    def area(self) -> float:
        """Get rectangle area (zero for degenerate rectangles)."""
        return max(0.0, self.width) * max(0.0, self.height)

    def intersects(self, other: "DOMRect") -> bool:
        """Check if this rect intersects with another."""
        return (
            self.x < other.right and
            self.right > other.x and
            self.y < other.bottom and
            self.bottom > other.y
        )

    def overlap_area(self, other: "DOMRect") -> float:
        """Area of the intersection of the two rectangles."""
        overlap_x = max(0.0, min(self.right, other.right) - max(self.x, other.x))
        overlap_y = max(0.0, min(self.bottom, other.bottom) - max(self.y, other.y))
        return overlap_x * overlap_y

    def contains_point(self, x: float, y: float) -> bool:
        """Check if point is inside rectangle."""
        return (
            self.x <= x <= self.right and
            self.y <= y <= self.bottom
        )


@dataclass
class AXProperty:
    """A single accessibility property as reported by the accessibility tree."""
    name: str
    value: Any = None


@dataclass
class AccessibilityInfo:
    """Accessibility information for an element."""
    role: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    properties: List[AXProperty] = field(default_factory=list)
    ignored: bool = False

    def get_property(self, name: str, default: Any = None) -> Any:
        """Return the value of the first property called ``name``."""
        for prop in self.properties:
            if prop.name == name:
                return prop.value
        return default

    def has_property(self, name: str) -> bool:
        return any(prop.name == name for prop in self.properties)

    @property
    def has_name(self) -> bool:
        return bool(self.name and self.name.strip())

    @property
    def is_interactive_role(self) -> bool:
        """Check if element has an interactive ARIA role."""
        return self.role in INTERACTIVE_ROLES if self.role else False


@dataclass(eq=False)
class RawNode:
    """
    Merged DOM + accessibility + layout record for one node.

    Supplied by the extraction collaborator and never mutated by the
    serialization pipeline. ``node_id`` is stable for one page lifetime and
    increases in document order.
    """

    # Node identification
    node_id: int
    backend_node_id: int
    node_type: NodeType

    # Node content
    tag_name: str = ""
    node_value: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)

    # Tree structure
    children: List["RawNode"] = field(default_factory=list)
    shadow_roots: List["RawNode"] = field(default_factory=list)
    shadow_root_type: Optional[str] = None
    content_document: Optional["RawNode"] = None

    # Accessibility
    accessibility: Optional[AccessibilityInfo] = None

    # Layout and paint
    bounds: Optional[DOMRect] = None
    computed_styles: Dict[str, str] = field(default_factory=dict)
    paint_order: Optional[int] = None
    cursor_style: Optional[str] = None

    # Frame info (for iframes)
    frame_id: Optional[str] = None
    session_id: Optional[str] = None

    is_visible: Optional[bool] = None
    is_scrollable: bool = False

    @property
    def tag(self) -> str:
        """Lower-case tag name for elements, empty string otherwise."""
        if self.node_type != NodeType.ELEMENT_NODE:
            return ""
        return (self.tag_name or "").lower()

    @property
    def is_element(self) -> bool:
        """Check if this is an element node."""
        return self.node_type == NodeType.ELEMENT_NODE

    @property
    def is_text(self) -> bool:
        """Check if this is a text node."""
        return self.node_type == NodeType.TEXT_NODE

    @property
    def is_shadow_host(self) -> bool:
        return bool(self.shadow_roots)

    @property
    def children_and_shadow_roots(self) -> List["RawNode"]:
        """Shadow roots first, then light DOM children, then the iframe document."""
        nodes = list(self.shadow_roots) + list(self.children)
        if self.content_document is not None:
            nodes.append(self.content_document)
        return nodes

    def get_attribute(self, name: str, default: str = "") -> str:
        """Safely get an attribute value."""
        value = self.attributes.get(name)
        return default if value is None else value

    def has_attribute(self, name: str) -> bool:
        """Check if attribute exists."""
        return name in self.attributes

    def get_style(self, name: str) -> Optional[str]:
        return self.computed_styles.get(name)

    def to_selector_info(self) -> Dict[str, Any]:
        """Convert to selector info for element interaction."""
        return {
            "node_id": self.node_id,
            "backend_node_id": self.backend_node_id,
            "tag_name": self.tag,
            "attributes": dict(self.attributes),
            "frame_id": self.frame_id,
            "session_id": self.session_id,
            "bounds": {
                "x": self.bounds.x,
                "y": self.bounds.y,
                "width": self.bounds.width,
                "height": self.bounds.height,
            } if self.bounds else None,
        }


ComponentValue = Union[float, str, None]


@dataclass(frozen=True)
class CompoundComponent:
    """
    Virtual sub-control of a native widget.

    Rendered as an annotation on its host element and resolved through the
    host at action time; it never receives its own interactive index.
    """
    name: str

    role: ClassVar[str] = ""

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["role"] = self.role
        return data

    def signature(self) -> str:
        """Stable textual form used for change-detection hashing."""
        parts = [f"{self.role}:{self.name}"]
        for key, value in sorted(asdict(self).items()):
            if key != "name" and value is not None:
                parts.append(f"{key}={value}")
        return "|".join(parts)

    def to_text(self) -> str:
        return f"({self.role}) {self.name}"


def _format_number(value: ComponentValue) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class SpinButton(CompoundComponent):
    valuemin: float = 0
    valuemax: float = 0
    valuenow: ComponentValue = None

    role: ClassVar[str] = "spinbutton"

    def to_text(self) -> str:
        return f"({self.role}) {self.name} [{_format_number(self.valuemin)}-{_format_number(self.valuemax)}]"


@dataclass(frozen=True)
class Button(CompoundComponent):
    description: str = ""
    formats: Optional[str] = None
    valuenow: ComponentValue = None

    role: ClassVar[str] = "button"

    def to_text(self) -> str:
        text = f"({self.role}) {self.name}"
        if self.formats:
            text += f" accepts={self.formats}"
        if self.valuenow is not None:
            text += f" value={_format_number(self.valuenow)}"
        return text


@dataclass(frozen=True)
class TextBox(CompoundComponent):
    valuemin: Optional[float] = None
    valuemax: Optional[float] = None
    valuenow: ComponentValue = None
    readonly: bool = False

    role: ClassVar[str] = "textbox"

    def to_text(self) -> str:
        text = f"({self.role}) {self.name}"
        if self.valuemin is not None or self.valuemax is not None:
            text += f" [{_format_number(self.valuemin)}-{_format_number(self.valuemax)}]"
        if self.valuenow is not None:
            text += f" value={_format_number(self.valuenow)}"
        if self.readonly:
            text += " readonly"
        return text


@dataclass(frozen=True)
class Slider(CompoundComponent):
    valuemin: float = 0
    valuemax: float = 100
    valuenow: ComponentValue = None

    role: ClassVar[str] = "slider"

    def to_text(self) -> str:
        text = f"({self.role}) {self.name} [{_format_number(self.valuemin)}-{_format_number(self.valuemax)}]"
        if self.valuenow is not None:
            text += f" value={_format_number(self.valuenow)}"
        return text


@dataclass(frozen=True)
class ListBox(CompoundComponent):
    options_count: int = 0
    first_options: Tuple[str, ...] = ()
    format_hint: Optional[str] = None

    role: ClassVar[str] = "listbox"

    def to_text(self) -> str:
        text = f"({self.role}) {self.name}: {self.options_count} options"
        if self.first_options:
            text += f" [{' | '.join(self.first_options)}]"
        if self.format_hint:
            text += f" format={self.format_hint}"
        return text


COMPOUND_VARIANTS: Dict[str, Type[CompoundComponent]] = {
    variant.role: variant
    for variant in (SpinButton, Button, TextBox, Slider, ListBox)
}


def build_compound_component(role: str, **fields: Any) -> CompoundComponent:
    """
    Create the compound component variant matching ``role``.

    Raises:
        ValueError: If the role has no variant
    """
    variant = COMPOUND_VARIANTS.get(role)
    if variant is None:
        raise ValueError(f"Unknown compound component role: {role!r}")
    return variant(**fields)


@dataclass(eq=False)
class SimplifiedNode:
    """Node of the simplified tree; owns its children and wraps exactly one RawNode."""

    original_node: RawNode
    children: List["SimplifiedNode"] = field(default_factory=list)

    # Flags set by pipeline stages
    should_display: bool = True
    ignored_by_paint_order: bool = False
    excluded_by_parent: bool = False
    is_shadow_host: bool = False
    is_compound_component: bool = False
    has_compound_children: bool = False
    is_new: bool = False

    compound_children: List[CompoundComponent] = field(default_factory=list)
    interactive_index: Optional[int] = None

    @property
    def node_id(self) -> int:
        return self.original_node.node_id

    @property
    def is_filtered(self) -> bool:
        return self.ignored_by_paint_order or self.excluded_by_parent

    def iter_nodes(self) -> Iterator["SimplifiedNode"]:
        """Yield this node and all descendants in depth-first pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


DOMSelectorMap = Dict[int, RawNode]


@dataclass(frozen=True)
class SerializedDOMState:
    """
    Result of one serialization call.

    Retained by the caller and passed back as ``previous_state`` on the next
    call; ``node_hashes`` is the content-hash cache used for change detection.
    """

    root: Optional[SimplifiedNode]
    selector_map: DOMSelectorMap = field(default_factory=dict)
    node_hashes: Dict[int, str] = field(default_factory=dict)

    def get_node(self, index: int) -> RawNode:
        """
        Resolve an interactive index to its RawNode.

        Raises:
            StaleIndexError: If the index is not in the selector map
        """
        node = self.selector_map.get(index)
        if node is None:
            raise StaleIndexError(index)
        return node

    def has_index(self, index: int) -> bool:
        return index in self.selector_map

    def get_selector(self, index: int) -> Optional[Dict[str, Any]]:
        """Get selector info for an element, or None if the index is stale."""
        node = self.selector_map.get(index)
        return node.to_selector_info() if node else None

    def iter_interactive(self) -> Iterator[SimplifiedNode]:
        """Yield indexed nodes in index order."""
        if self.root is None:
            return
        indexed = [n for n in self.root.iter_nodes() if n.interactive_index is not None]
        yield from sorted(indexed, key=lambda n: n.interactive_index)


class SerializationStats(BaseModel):
    """Counters describing one serialization call."""

    total_nodes: int = Field(default=0, description="Nodes in the simplified tree before filtering")
    simplified_nodes: int = Field(default=0, description="Nodes remaining in the final tree")
    filtered_nodes: int = Field(default=0, description="Nodes removed by paint order or bounding box filtering")
    occluded_nodes: int = Field(default=0, description="Nodes ignored by paint order filtering")
    contained_nodes: int = Field(default=0, description="Nodes excluded by containment in a parent")
    size_filtered_nodes: int = Field(default=0, description="Nodes excluded by the size filter")
    interactive_elements: int = Field(default=0, description="Indices assigned")
    new_elements: int = Field(default=0, description="Nodes flagged as new")
    compound_components: int = Field(default=0, description="Hosts with compound components")


class SerializationTiming(BaseModel):
    """Wall-clock duration of each stage, in seconds."""

    create_simplified_tree: float = 0.0
    paint_order_filtering: float = 0.0
    optimize_tree_structure: float = 0.0
    bounding_box_filtering: float = 0.0
    assign_interactive_indices: float = 0.0
    mark_new_elements: float = 0.0
    total: float = 0.0


@dataclass
class SerializationResult:
    """Serialized state plus observability data for one call."""

    state: SerializedDOMState
    stats: SerializationStats
    timing: SerializationTiming

    @property
    def selector_map(self) -> DOMSelectorMap:
        return self.state.selector_map
