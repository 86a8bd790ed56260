"""
LLM DOM Serializer
==================

Turns a merged DOM + accessibility + layout snapshot of a rendered page into
a compact tree in which every actionable element carries a small integer
index, and reports which elements are new since the previous snapshot.

Main Components:
- DOMTreeSerializer: The six-stage serialization pipeline
- DOMTextRenderer: Text rendering of a serialized state for prompts
- IframeProcessor: Async expansion of iframe content documents
- load_raw_tree: Builds RawNode trees from JSON snapshots

Quick Start:
    >>> from llm_dom_serializer import DOMTreeSerializer, DOMTextRenderer, load_raw_tree_from_file
    >>>
    >>> root = load_raw_tree_from_file("snapshot.json")
    >>> serializer = DOMTreeSerializer()
    >>> result = serializer.serialize(root)
    >>> print(DOMTextRenderer().render(result.state))
    >>> # Next snapshot of the same page
    >>> result = serializer.serialize(next_root, previous_state=result.state)
"""

__version__ = "1.0.0"
__author__ = "DOM Serializer Team"

# Lazy imports for better performance
_LAZY_IMPORTS = {
    "DOMTreeSerializer": ("llm_dom_serializer.dom.serializer", "DOMTreeSerializer"),
    "serialize_dom_tree": ("llm_dom_serializer.dom.serializer", "serialize_dom_tree"),
    "DOMTextRenderer": ("llm_dom_serializer.dom.renderer", "DOMTextRenderer"),
    "IframeProcessor": ("llm_dom_serializer.dom.iframe", "IframeProcessor"),
    "InteractiveElementDetector": ("llm_dom_serializer.dom.interactive", "InteractiveElementDetector"),
    "RawNode": ("llm_dom_serializer.dom.views", "RawNode"),
    "SerializedDOMState": ("llm_dom_serializer.dom.views", "SerializedDOMState"),
    "load_raw_tree": ("llm_dom_serializer.dom.loader", "load_raw_tree"),
    "load_raw_tree_from_file": ("llm_dom_serializer.dom.loader", "load_raw_tree_from_file"),
    "Config": ("llm_dom_serializer.core.config", "Config"),
    "SerializerConfig": ("llm_dom_serializer.core.config", "SerializerConfig"),
    "IframeConfig": ("llm_dom_serializer.core.config", "IframeConfig"),
}


def __getattr__(name: str):
    """Lazy import mechanism for main components."""
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        from importlib import import_module
        module = import_module(module_path)
        attr = getattr(module, attr_name)
        globals()[name] = attr
        return attr
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    "DOMTreeSerializer",
    "serialize_dom_tree",
    "DOMTextRenderer",
    "IframeProcessor",
    "InteractiveElementDetector",
    "RawNode",
    "SerializedDOMState",
    "load_raw_tree",
    "load_raw_tree_from_file",
    "Config",
    "SerializerConfig",
    "IframeConfig",
    "__version__",
]
