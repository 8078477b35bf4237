"""Unit tests for header validation and event building."""

from __future__ import annotations

import pytest

from itmd.models.blocks import Paragraph, Point, Position
from itmd.models.event import Header, NoTime
from itmd.models.inline import Text
from itmd.pipeline.build import build_event_node, determine_base_type
from itmd.pipeline.validate import validate_header


class TestValidateHeader:
    """Soft structural checks."""

    def test_missing_event_type(self) -> None:
        """A header without event type gets one warning and is unchanged."""
        header = Header(time=NoTime())

        result, warnings = validate_header(header)

        assert result is header
        assert warnings == ["Missing event type"]

    def test_valid_header(self) -> None:
        """A header with an event type yields no warnings."""
        header = Header(event_type="lunch")

        assert validate_header(header) == (header, [])


class TestDetermineBaseType:
    """Base category lookup."""

    @pytest.mark.parametrize(
        "event_type",
        ["flight", "train", "drive", "ferry", "bus", "taxi", "subway", "cablecar", "rocket", "spaceship"],
    )
    def test_transportation(self, event_type: str) -> None:
        """Every transport token maps to transportation."""
        assert determine_base_type(event_type) == "transportation"

    @pytest.mark.parametrize("event_type", ["stay", "hotel", "ryokan", "hostel", "dormitory"])
    def test_stay(self, event_type: str) -> None:
        """Every lodging token maps to stay."""
        assert determine_base_type(event_type) == "stay"

    def test_case_insensitive(self) -> None:
        """Lookup ignores case."""
        assert determine_base_type("FLIGHT") == "transportation"
        assert determine_base_type("Ryokan") == "stay"

    @pytest.mark.parametrize("event_type", ["lunch", "museum", "", None])
    def test_everything_else_is_activity(self, event_type: str | None) -> None:
        """Unknown tokens are activities."""
        assert determine_base_type(event_type) == "activity"


class TestBuildEventNode:
    """Event node assembly from a header."""

    def test_copies_header_fields(self) -> None:
        """The event mirrors the header and keeps absorbed nodes verbatim."""
        header = Header(event_type="Hotel", title=[Text(value="Park Hyatt")], warnings=["invalid-time"])
        absorbed = [Paragraph(children=[Text(value="[] Hotel Park Hyatt")])]
        position = Position(start=Point(line=3, column=1), end=Point(line=4, column=10))

        event = build_event_node(header, absorbed, position)

        assert event.type == "itmdEvent"
        assert event.version == "1"
        assert event.event_type == "Hotel"
        assert event.base_type == "stay"
        assert event.title == [Text(value="Park Hyatt")]
        assert event.children == absorbed
        assert event.position == position
        assert event.warnings == ["invalid-time"]
        assert event.body is None
        assert event.prices == []

    def test_requires_event_type(self) -> None:
        """Building without an event type is a programming error."""
        with pytest.raises(ValueError, match="event type"):
            build_event_node(Header(), [])
