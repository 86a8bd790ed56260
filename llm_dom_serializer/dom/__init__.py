"""DOM simplification, filtering, indexing and rendering."""

from llm_dom_serializer.dom.bounding_box import BoundingBoxFilter
from llm_dom_serializer.dom.compound import CompoundComponentBuilder
from llm_dom_serializer.dom.iframe import IframeProcessingResult, IframeProcessor
from llm_dom_serializer.dom.interactive import InteractiveElementDetector
from llm_dom_serializer.dom.loader import load_raw_tree, load_raw_tree_from_file
from llm_dom_serializer.dom.paint_order import PaintOrderAnalyzer
from llm_dom_serializer.dom.renderer import DOMTextRenderer, get_element_description
from llm_dom_serializer.dom.serializer import (
    DOMTreeSerializer,
    compute_node_hash,
    serialize_dom_tree,
)
from llm_dom_serializer.dom.views import (
    AccessibilityInfo,
    AXProperty,
    CompoundComponent,
    DOMRect,
    NodeType,
    RawNode,
    SerializationResult,
    SerializationStats,
    SerializedDOMState,
    SimplifiedNode,
)

__all__ = [
    "BoundingBoxFilter",
    "CompoundComponentBuilder",
    "IframeProcessor",
    "IframeProcessingResult",
    "InteractiveElementDetector",
    "PaintOrderAnalyzer",
    "DOMTreeSerializer",
    "DOMTextRenderer",
    "compute_node_hash",
    "serialize_dom_tree",
    "get_element_description",
    "load_raw_tree",
    "load_raw_tree_from_file",
    "AccessibilityInfo",
    "AXProperty",
    "CompoundComponent",
    "DOMRect",
    "NodeType",
    "RawNode",
    "SerializationResult",
    "SerializationStats",
    "SerializedDOMState",
    "SimplifiedNode",
]
