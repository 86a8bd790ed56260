"""Tests for the interactive element detector rules."""

from builders import element, text
from llm_dom_serializer.dom.interactive import InteractiveElementDetector


def is_interactive(node):
    return InteractiveElementDetector.is_interactive(node)


class TestInteractiveElementDetector:
    """Rules are evaluated in order; the first decisive rule wins"""

    def test_non_elements_and_document_tags(self):
        assert not is_interactive(text(1, "Click me"))
        assert not is_interactive(element(1, "html", attributes={"onclick": "x()"}))
        assert not is_interactive(element(1, "body", cursor_style="pointer"))

    def test_large_iframe(self):
        assert is_interactive(element(1, "iframe", bounds=(0, 0, 300, 200)))
        assert not is_interactive(element(1, "iframe", bounds=(0, 0, 300, 50)))
        assert is_interactive(element(1, "frame", bounds=(0, 0, 100, 100)))

    def test_search_affordance(self):
        assert is_interactive(element(1, "div", attributes={"class": "nav search-icon"}))
        assert is_interactive(element(1, "span", attributes={"id": "site-lookup"}))
        assert is_interactive(element(1, "i", attributes={"data-role": "open-magnify"}))
        assert not is_interactive(element(1, "div", attributes={"class": "header"}))

    def test_disabled_overrides_native_tag(self):
        button = element(1, "button", ax_properties={"focusable": True, "disabled": True})
        assert not is_interactive(button)

    def test_hidden_property(self):
        assert not is_interactive(element(1, "a", ax_properties={"hidden": "true"}))

    def test_false_disabled_is_ignored(self):
        assert is_interactive(element(1, "button", ax_properties={"disabled": False}))

    def test_ax_positive_signals(self):
        assert is_interactive(element(1, "div", ax_properties={"focusable": True}))
        assert is_interactive(element(1, "div", ax_properties={"expanded": False}))
        assert is_interactive(element(1, "div", ax_properties={"required": "true"}))
        assert is_interactive(element(1, "div", ax_properties={"keyshortcuts": "Alt+S"}))
        assert not is_interactive(element(1, "div", ax_properties={"focusable": False}))

    def test_native_tags(self):
        for tag in ("button", "input", "select", "textarea", "a", "details", "summary", "option"):
            assert is_interactive(element(1, tag)), tag

    def test_event_handlers_and_tabindex(self):
        assert is_interactive(element(1, "div", attributes={"onclick": "go()"}))
        assert is_interactive(element(1, "div", attributes={"tabindex": "0"}))

    def test_roles(self):
        assert is_interactive(element(1, "div", attributes={"role": "tab"}))
        assert is_interactive(element(1, "div", ax_role="menuitem"))
        assert not is_interactive(element(1, "div", attributes={"role": "presentation"}))

    def test_icon_sized_with_hint(self):
        assert is_interactive(element(1, "i", attributes={"class": "icon"}, bounds=(0, 0, 24, 24)))
        assert not is_interactive(element(1, "i", bounds=(0, 0, 24, 24)))
        assert not is_interactive(element(1, "i", attributes={"class": "icon"}, bounds=(0, 0, 80, 24)))

    def test_pointer_cursor(self):
        assert is_interactive(element(1, "div", cursor_style="pointer"))
        assert not is_interactive(element(1, "div", cursor_style="default"))

    def test_debug_info(self):
        info = InteractiveElementDetector.get_debug_info(
            element(1, "button", attributes={"id": "ok"}, bounds=(0, 0, 40, 20), ax_role="button")
        )
        assert info["tag_name"] == "button"
        assert info["accessibility"]["role"] == "button"
        assert info["visual"]["bounds"] == {"width": 40, "height": 20}
        assert info["detection"]["is_interactive"] is True
