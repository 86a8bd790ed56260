"""Tests for text rendering of serialized states."""

from builders import document, element, text
from llm_dom_serializer.dom.renderer import DOMTextRenderer, get_element_description
from llm_dom_serializer.dom.serializer import DOMTreeSerializer
from llm_dom_serializer.dom.views import SerializedDOMState


class TestDOMTextRenderer:
    def test_form_page(self, form_page):
        state = DOMTreeSerializer().serialize(form_page).state
        lines = DOMTextRenderer().render(state).splitlines()

        assert lines[0] == "*[0]<input type='text' value='Ada'></input>"
        assert lines[1] == "*[1]<input type='date'></input>"
        assert lines[2] == "\t(spinbutton) Day [1-31]"
        assert lines[3] == "\t(spinbutton) Month [1-12]"
        assert lines[4] == "\t(spinbutton) Year [1-275760]"
        assert lines[5] == "*[2]<button type='submit'>Submit</button>"

    def test_unchanged_elements_have_no_marker(self, form_page):
        serializer = DOMTreeSerializer()
        first = serializer.serialize(form_page)
        second = serializer.serialize(form_page, previous_state=first.state)

        output = DOMTextRenderer().render(second.state)
        assert "*" not in output
        assert output.startswith("[0]<input")

    def test_nested_indexed_elements_indented(self):
        root = document([
            element(1, "a", [
                text(2, "Account"),
                element(3, "button", [text(4, "Edit")], attributes={"aria-label": "Edit account"},
                        bounds=(60, 0, 30, 20)),
            ], attributes={"href": "/account"}),
        ])
        state = DOMTreeSerializer().serialize(root).state
        lines = DOMTextRenderer().render(state).splitlines()

        assert lines == [
            "*[0]<a href='/account'>Account</a>",
            "\t*[1]<button aria-label='Edit account'>Edit</button>",
        ]

    def test_accessibility_name_shown(self):
        root = document([element(1, "div", attributes={"role": "button"}, ax_name="Open menu")])
        state = DOMTreeSerializer().serialize(root).state

        assert DOMTextRenderer().render(state) == "*[0]<div role='button' aria-label='Open menu'></div>"

    def test_truncation(self):
        buttons = [element(i, "button", [text(100 + i, "x" * 150)]) for i in range(1, 20)]
        state = DOMTreeSerializer().serialize(document(buttons)).state

        line = DOMTextRenderer().render(state).splitlines()[0]
        assert line.endswith("...</button>")
        assert len(DOMTextRenderer(max_length=200).render(state)) == 200

    def test_custom_attributes(self):
        root = document([element(1, "a", attributes={"href": "/x", "id": "home"})])
        state = DOMTreeSerializer().serialize(root).state

        assert DOMTextRenderer(include_attributes=["id"]).render(state) == "*[0]<a id='home'></a>"

    def test_empty_state(self):
        assert DOMTextRenderer().render(SerializedDOMState(root=None)) == ""


class TestElementDescription:
    def test_descriptions(self):
        assert get_element_description(element(1, "button", [text(2, "Submit")])) == "button 'Submit'"
        assert get_element_description(element(1, "a")) == "link"
        assert get_element_description(
            element(1, "input", attributes={"type": "email", "placeholder": "you@example.com"})
        ) == "input[type=email] 'you@example.com'"
        assert get_element_description(element(1, "select", ax_name="Country")) == "dropdown 'Country'"

    def test_long_label_truncated(self):
        description = get_element_description(element(1, "div", attributes={"aria-label": "a" * 40}))
        assert description == f"div '{'a' * 30}...'"
