"""Virtual sub-controls for native widgets whose parts are not in the DOM."""

import logging
import re
from typing import List, Optional, Tuple

from llm_dom_serializer.dom.views import (
    Button,
    CompoundComponent,
    ListBox,
    NodeType,
    RawNode,
    SimplifiedNode,
    Slider,
    SpinButton,
    TextBox,
)

logger = logging.getLogger(__name__)

MAX_LISTED_OPTIONS = 4
FORMAT_SAMPLE_SIZE = 10
MAX_OPTION_TEXT = 30

# Ordered: the first pattern matching every sampled option wins
OPTION_FORMATS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    ("Country/State codes", re.compile(r"^[A-Z]{2,3}$")),
    ("Years", re.compile(r"^\d{4}$")),
    ("Dates", re.compile(r"^\d{1,2}[/.-]\d{1,2}[/.-]\d{2,4}$|^\d{4}-\d{2}-\d{2}$")),
    ("Email addresses", re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")),
    ("Numbers", re.compile(r"^-?\d+(\.\d+)?$")),
    ("Phone numbers", re.compile(r"^\+?[\d\s\-()]{7,}$")),
    ("Currency", re.compile(r"^[£€¥$]\s*\d+([.,]\d{2})?$|^\d+([.,]\d{2})?\s*[£€¥$]$")),
)


def _parse_number(value: Optional[str], default: Optional[float]) -> Optional[float]:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def detect_option_format(options: List[str]) -> Optional[str]:
    """
    Classify select options by sampling their text.

    Returns:
        A format hint such as "Years" or "Currency", or None
    """
    samples = [opt for opt in options[:FORMAT_SAMPLE_SIZE] if opt]
    if len(samples) < 2:
        return None
    for hint, pattern in OPTION_FORMATS:
        if all(pattern.match(sample) for sample in samples):
            return hint
    return None


class CompoundComponentBuilder:
    """
    Generates compound components for complex form controls and media.

    A date input, for example, becomes Day/Month/Year spin buttons so the
    model can see the bounds of each part.
    """

    SUPPORTED_INPUT_TYPES = frozenset({
        "date", "datetime-local", "month", "time", "number", "range",
        "file", "color", "week",
    })

    SUPPORTED_TAGS = frozenset({"input", "select", "video", "audio"})

    YEAR_MAX = 275760

    def can_virtualize(self, node: RawNode) -> bool:
        """Check if node can be virtualized as a compound component."""
        tag = node.tag
        if tag not in self.SUPPORTED_TAGS:
            return False

        input_type = node.get_attribute("type").lower()
        if input_type == "hidden":
            return False
        if tag == "input" and input_type not in self.SUPPORTED_INPUT_TYPES:
            return False

        if node.has_attribute("disabled") and node.get_attribute("disabled").lower() != "false":
            return False

        return True

    def supported_types(self) -> List[str]:
        """Get supported virtual component host types."""
        return sorted(self.SUPPORTED_INPUT_TYPES) + ["select", "video", "audio"]

    def build(self, node: SimplifiedNode) -> List[CompoundComponent]:
        """
        Attach compound components to ``node`` when its host type supports it.

        Returns:
            The components attached (empty when the node is not a host)
        """
        raw = node.original_node
        if not self.can_virtualize(raw):
            return []

        if raw.tag == "input":
            components = self._build_input(raw)
        elif raw.tag == "select":
            components = self._build_select(raw)
        else:
            components = self._build_media(raw)

        if components:
            node.compound_children = components
            node.is_compound_component = True
            node.has_compound_children = True
            logger.debug(f"Attached {len(components)} compound components to <{raw.tag}> node {raw.node_id}")
        return components

    def _build_input(self, raw: RawNode) -> List[CompoundComponent]:
        input_type = raw.get_attribute("type").lower()

        if input_type == "date":
            return self._date_parts()
        if input_type == "datetime-local":
            return self._date_parts() + [
                SpinButton("Hour", valuemin=0, valuemax=23),
                SpinButton("Minute", valuemin=0, valuemax=59),
            ]
        if input_type == "month":
            return [
                SpinButton("Month", valuemin=1, valuemax=12),
                SpinButton("Year", valuemin=1, valuemax=self.YEAR_MAX),
            ]
        if input_type == "time":
            return self._build_time(raw)
        if input_type == "week":
            return [SpinButton("Week", valuemin=1, valuemax=53)]
        if input_type == "number":
            return self._build_number(raw)
        if input_type == "range":
            minimum = _parse_number(raw.attributes.get("min"), 0.0)
            maximum = _parse_number(raw.attributes.get("max"), 100.0)
            value = _parse_number(raw.attributes.get("value"), minimum)
            return [Slider("Range", valuemin=minimum, valuemax=maximum, valuenow=value)]
        if input_type == "file":
            return self._build_file(raw)
        if input_type == "color":
            return [Button(
                "Color picker",
                description="Choose a color",
                valuenow=raw.get_attribute("value") or "#000000",
            )]
        return []

    def _date_parts(self) -> List[CompoundComponent]:
        return [
            SpinButton("Day", valuemin=1, valuemax=31),
            SpinButton("Month", valuemin=1, valuemax=12),
            SpinButton("Year", valuemin=1, valuemax=self.YEAR_MAX),
        ]

    def _build_time(self, raw: RawNode) -> List[CompoundComponent]:
        components: List[CompoundComponent] = [
            SpinButton("Hour", valuemin=0, valuemax=23),
            SpinButton("Minute", valuemin=0, valuemax=59),
        ]
        step = _parse_number(raw.attributes.get("step"), None)
        if step is not None and step < 60:
            components.append(SpinButton("Second", valuemin=0, valuemax=59))
        return components

    def _build_number(self, raw: RawNode) -> List[CompoundComponent]:
        minimum = _parse_number(raw.attributes.get("min"), None)
        maximum = _parse_number(raw.attributes.get("max"), None)
        step = _parse_number(raw.attributes.get("step"), 1.0) or 1.0
        value = _parse_number(raw.attributes.get("value"), minimum)
        step_text = f"{step:g}"
        return [
            Button("Increment", description=f"Increase value by {step_text}"),
            TextBox("Number", valuemin=minimum, valuemax=maximum, valuenow=value),
            Button("Decrement", description=f"Decrease value by {step_text}"),
        ]

    def _build_file(self, raw: RawNode) -> List[CompoundComponent]:
        description = "Select files"
        if raw.has_attribute("multiple") and raw.get_attribute("multiple").lower() != "false":
            description += " (multiple allowed)"
        capture = raw.get_attribute("capture")
        if capture:
            description += f" ({capture})"

        selected = None
        if raw.accessibility:
            value_text = raw.accessibility.get_property("valuetext")
            if value_text and str(value_text).strip().lower() not in ("no file chosen", "no file selected"):
                selected = str(value_text).strip()

        return [
            Button("Browse", description=description, formats=raw.get_attribute("accept") or None),
            TextBox("Selected files", valuenow=selected, readonly=True),
        ]

    def _build_select(self, raw: RawNode) -> List[CompoundComponent]:
        options = self._collect_option_texts(raw)

        first_options = tuple(
            text[:MAX_OPTION_TEXT] + ("..." if len(text) > MAX_OPTION_TEXT else "")
            for text in options[:MAX_LISTED_OPTIONS]
        )
        return [
            Button("Dropdown Toggle", description=f"{len(options)} options available"),
            ListBox(
                "Options",
                options_count=len(options),
                first_options=first_options,
                format_hint=detect_option_format(options),
            ),
        ]

    def _collect_option_texts(self, raw: RawNode) -> List[str]:
        """Option texts in document order, looking through optgroups."""
        texts: List[str] = []
        stack = list(reversed(raw.children))
        while stack:
            child = stack.pop()
            if child.tag == "option":
                text = " ".join(
                    (c.node_value or "").strip()
                    for c in child.children
                    if c.node_type == NodeType.TEXT_NODE and (c.node_value or "").strip()
                )
                text = text or (child.node_value or "").strip() or child.get_attribute("value").strip()
                if text:
                    texts.append(text)
            elif child.is_element:
                stack.extend(reversed(child.children))
        return texts

    def _build_media(self, raw: RawNode) -> List[CompoundComponent]:
        components: List[CompoundComponent] = [
            Button("Play/Pause", description="Play or pause the media"),
            Slider("Progress", valuemin=0, valuemax=100),
            Slider("Volume", valuemin=0, valuemax=100, valuenow=100),
        ]
        if raw.tag == "video":
            components.append(Button("Fullscreen", description="Toggle fullscreen mode"))
        return components
