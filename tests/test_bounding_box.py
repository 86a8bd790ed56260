"""Tests for containment and size filtering."""

from builders import document, element, find, simplified, text
from llm_dom_serializer.dom.bounding_box import BoundingBoxFilter
from llm_dom_serializer.dom.views import DOMRect, SimplifiedNode


def run_filter(raw, **kwargs):
    root = simplified(raw)
    stats = BoundingBoxFilter(**kwargs).filter_tree(root)
    return root, stats


def inside_link(child):
    return document([element(1, "a", [child], attributes={"href": "/"}, bounds=(0, 0, 100, 40))])


class TestContainment:
    def test_svg_in_button_excluded(self):
        root, stats = run_filter(document([
            element(1, "button", [element(2, "svg", bounds=(10, 10, 20, 20))], bounds=(0, 0, 40, 40)),
        ]))

        assert find(root, 2).excluded_by_parent
        assert not find(root, 1).excluded_by_parent
        assert stats.contained_nodes == 1

    def test_partially_outside_child_kept(self):
        root, _ = run_filter(inside_link(element(2, "div", bounds=(50, 0, 100, 40))))
        assert not find(root, 2).excluded_by_parent

    def test_context_propagates_to_descendants(self):
        """A plain div between the link and the icon does not reset the context"""
        root, stats = run_filter(inside_link(
            element(2, "div", [element(3, "i", bounds=(5, 5, 20, 20))], bounds=(0, 0, 100, 40)),
        ))

        assert find(root, 2).excluded_by_parent
        assert find(root, 3).excluded_by_parent
        assert stats.contained_nodes == 2

    def test_no_context_outside_propagating_elements(self):
        root, stats = run_filter(document([
            element(1, "section", [element(2, "div", bounds=(0, 0, 50, 50))], bounds=(0, 0, 100, 100)),
        ]))

        assert not find(root, 2).excluded_by_parent
        assert stats.contained_nodes == 0

    def test_role_qualified_propagation(self):
        root, _ = run_filter(document([
            element(1, "div", [element(2, "span", bounds=(5, 5, 20, 20))],
                    attributes={"role": "button"}, bounds=(0, 0, 40, 40)),
            element(3, "div", [element(4, "span", bounds=(5, 55, 20, 20))],
                    ax_role="combobox", bounds=(0, 50, 40, 40)),
            element(5, "div", [element(6, "span", bounds=(5, 105, 20, 20))],
                    bounds=(0, 100, 40, 40)),
        ]))

        assert find(root, 2).excluded_by_parent
        assert find(root, 4).excluded_by_parent
        assert not find(root, 6).excluded_by_parent

    def test_threshold(self):
        child = element(2, "div", bounds=(0, 0, 100, 41))
        strict, _ = run_filter(inside_link(child))
        loose, _ = run_filter(inside_link(child), containment_threshold=0.9)

        assert not find(strict, 2).excluded_by_parent
        assert find(loose, 2).excluded_by_parent

    def test_deep_chain_inside_link(self):
        node = SimplifiedNode(original_node=element(2000, "i", bounds=(5, 5, 20, 20)))
        for node_id in range(1999, 1, -1):
            node = SimplifiedNode(original_node=element(node_id, "div", bounds=(0, 0, 100, 40)), children=[node])
        root = SimplifiedNode(
            original_node=element(1, "a", attributes={"href": "/"}, bounds=(0, 0, 100, 40)),
            children=[node],
        )

        stats = BoundingBoxFilter().filter_tree(root)

        assert stats.contained_nodes == 1999
        assert not root.excluded_by_parent


class TestExceptions:
    """Each exception rule keeps a contained child"""

    def assert_kept(self, child):
        root, _ = run_filter(inside_link(child))
        assert not find(root, 2).excluded_by_parent

    def test_interactive_exception_list(self):
        self.assert_kept(element(2, "input", bounds=(5, 5, 50, 20)))
        self.assert_kept(element(2, "span", attributes={"role": "link"}, bounds=(5, 5, 50, 20)))
        self.assert_kept(element(2, "canvas", bounds=(5, 5, 50, 20)))

    def test_accessibility_signals(self):
        self.assert_kept(element(2, "div", ax_role="img", bounds=(5, 5, 50, 20)))
        self.assert_kept(element(2, "div", ax_properties={"focusable": True}, bounds=(5, 5, 50, 20)))

    def test_generic_ax_role_not_an_exception(self):
        root, _ = run_filter(inside_link(element(2, "div", ax_role="generic", bounds=(5, 5, 50, 20))))
        assert find(root, 2).excluded_by_parent

    def test_event_handler(self):
        self.assert_kept(element(2, "div", attributes={"onmouseover": "hint()"}, bounds=(5, 5, 50, 20)))

    def test_meaningful_name(self):
        self.assert_kept(element(2, "svg", attributes={"aria-label": "Close"}, bounds=(5, 5, 20, 20)))
        self.assert_kept(element(2, "svg", attributes={"title": "Info"}, bounds=(5, 5, 20, 20)))

    def test_compound_host_and_shadow_host(self):
        raw = inside_link(element(2, "div", bounds=(5, 5, 50, 20)))
        root = simplified(raw)
        find(root, 2).is_compound_component = True
        BoundingBoxFilter().filter_tree(root)
        assert not find(root, 2).excluded_by_parent

        root = simplified(raw)
        find(root, 2).is_shadow_host = True
        BoundingBoxFilter().filter_tree(root)
        assert not find(root, 2).excluded_by_parent

    def test_media_and_iframe(self):
        self.assert_kept(element(2, "video", bounds=(5, 5, 50, 20)))
        self.assert_kept(element(2, "iframe", bounds=(5, 5, 50, 20)))

    def test_svg_is_not_media(self):
        root, _ = run_filter(inside_link(element(2, "svg", bounds=(5, 5, 20, 20))))
        assert find(root, 2).excluded_by_parent

    def test_text_never_excluded(self):
        root, _ = run_filter(inside_link(text(2, "Home", bounds=DOMRect(5, 5, 30, 15))))
        assert not find(root, 2).excluded_by_parent


class TestSizeFilter:
    def test_tiny_and_huge_elements(self):
        root, stats = run_filter(document([
            element(1, "div", bounds=(0, 0, 4, 4)),
            element(2, "div", bounds=(0, 0, 20001, 10000)),
            element(3, "div", bounds=(0, 0, 0, 50)),
            element(4, "div", bounds=(0, 0, 5, 5)),
        ]))

        assert find(root, 1).excluded_by_parent
        assert find(root, 2).excluded_by_parent
        assert find(root, 3).excluded_by_parent
        assert not find(root, 4).excluded_by_parent
        assert stats.size_filtered_nodes == 3

    def test_root_exempt(self):
        root, _ = run_filter(element(1, "div", bounds=(0, 0, 1, 1)))
        assert not root.excluded_by_parent

    def test_size_filter_disabled(self):
        root, _ = run_filter(document([element(1, "div", bounds=(0, 0, 1, 1))]), enable_size_filtering=False)
        assert not find(root, 1).excluded_by_parent

    def test_nodes_without_bounds_kept(self):
        root, _ = run_filter(document([element(1, "div")]))
        assert not find(root, 1).excluded_by_parent
