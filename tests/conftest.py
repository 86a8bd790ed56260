"""Shared fixtures for the test suite."""

import pytest

from builders import document, element, text
from llm_dom_serializer.dom.views import RawNode


@pytest.fixture
def form_page() -> RawNode:
    """A small page with a form; node 7 is a text input with a value."""
    return document([
        element(1, "html", [
            element(2, "body", [
                element(3, "h1", [text(4, "Sign up")], bounds=(0, 0, 400, 40)),
                element(5, "form", [
                    element(6, "label", [text(10, "Name")], attributes={"for": "name"}, bounds=(0, 50, 100, 20)),
                    element(7, "input", attributes={"id": "name", "type": "text", "value": "Ada"},
                            bounds=(110, 50, 200, 20)),
                    element(8, "input", attributes={"type": "date"}, bounds=(0, 80, 200, 20)),
                    element(9, "button", [text(11, "Submit")], attributes={"type": "submit"},
                            bounds=(0, 110, 80, 30)),
                ], bounds=(0, 50, 400, 100)),
            ], bounds=(0, 0, 800, 600)),
        ], bounds=(0, 0, 800, 600)),
    ])
