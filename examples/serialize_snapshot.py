"""
Serialize Snapshot Example
==========================

This example serializes a saved checkout page, prints the indexed tree an
LLM agent would see, then serializes a second snapshot of the same page
(with the terms checkbox ticked) to show change detection.

Usage:
    python examples/serialize_snapshot.py
"""

import copy
import json
from pathlib import Path

from llm_dom_serializer import DOMTextRenderer, DOMTreeSerializer, load_raw_tree

SNAPSHOT = Path(__file__).parent / "checkout_page.json"


def tick_terms_checkbox(data: dict) -> dict:
    """Return a copy of the snapshot with the terms checkbox checked."""
    updated = copy.deepcopy(data)
    stack = [updated["root"]]
    while stack:
        node = stack.pop()
        if node.get("attributes", {}).get("id") == "terms":
            for prop in node["axNode"]["properties"]:
                if prop["name"] == "checked":
                    prop["value"]["value"] = "true"
        stack.extend(node.get("children", []))
    return updated


def main():
    data = json.loads(SNAPSHOT.read_text(encoding="utf-8"))

    serializer = DOMTreeSerializer()
    renderer = DOMTextRenderer()

    first = serializer.serialize(load_raw_tree(data["root"]))
    print(f"📄 {data['url']}\n")
    print(renderer.render(first.state))
    print(f"\n🔢 {first.stats.interactive_elements} interactive elements, "
          f"{first.stats.filtered_nodes} nodes filtered")

    second = serializer.serialize(
        load_raw_tree(tick_terms_checkbox(data)["root"]),
        previous_state=first.state,
    )
    print("\n✅ After ticking the terms checkbox:\n")
    print(renderer.render(second.state))

    for index in second.state.selector_map:
        node = second.state.get_node(index)
        print(f"[{index}] {node.tag} -> backend node {node.backend_node_id}")


if __name__ == "__main__":
    main()
