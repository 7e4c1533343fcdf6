"""Tests for uiautomator dump parsing."""

import pytest

from expo_android.ui_parser import (
    Bounds,
    Center,
    decode_xml_entities,
    parse_attributes,
    parse_bounds,
    parse_ui_elements,
)

from tests.data.sample_ui_dumps import (
    EMPTY_HIERARCHY_XML,
    LOGIN_SCREEN_XML,
    SAMPLE_UI_XML,
)


class TestDecodeXmlEntities:
    """Entity decoding for attribute values."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Hello &amp; World", "Hello & World"),
            ("&lt;b&gt;", "<b>"),
            ("&quot;quoted&quot; &apos;single&apos;", "\"quoted\" 'single'"),
            ("Line 1&#10;Line 2", "Line 1\nLine 2"),
            ("&#x41;&#X42;", "AB"),
            ("caf&#233;", "café"),
            ("plain text", "plain text"),
        ],
    )
    def test_known_entities(self, raw, expected):
        assert decode_xml_entities(raw) == expected

    def test_unknown_named_entity_is_dropped(self):
        assert decode_xml_entities("a&nbsp;b") == "ab"

    def test_out_of_range_code_point_is_dropped(self):
        assert decode_xml_entities("x&#x110000;y") == "xy"

    def test_decoding_is_single_pass(self):
        # "&amp;lt;" is the literal text "&lt;", not "<"
        assert decode_xml_entities("&amp;lt;") == "&lt;"

    def test_bare_ampersand_is_kept(self):
        assert decode_xml_entities("Tom & Jerry") == "Tom & Jerry"

    def test_oversized_decimal_reference_is_dropped(self):
        assert decode_xml_entities("a&#" + "9" * 5000 + ";b") == "ab"


class TestBounds:
    def test_parse_bounds(self):
        assert parse_bounds("[10,20][110,220]") == Bounds(10, 20, 110, 220)

    def test_parse_negative_bounds(self):
        assert parse_bounds("[-5,-10][20,30]") == Bounds(-5, -10, 20, 30)

    @pytest.mark.parametrize("value", [None, "", "garbage", "[1,2][3]", "[a,b][c,d]"])
    def test_malformed_bounds(self, value):
        assert parse_bounds(value) is None

    def test_center_rounds_half_up(self):
        assert Bounds(0, 0, 1, 1).center == Center(1, 1)
        assert Bounds(10, 20, 110, 220).center == Center(60, 120)
        assert Bounds(0, 0, 3, 5).center == Center(2, 3)

    def test_validity(self):
        assert Bounds(0, 0, 1, 1).is_valid
        assert not Bounds(300, 800, 300, 800).is_valid
        assert not Bounds(10, 10, 5, 20).is_valid
        assert not Bounds.zero().is_valid


class TestParseAttributes:
    def test_hyphenated_names_and_decoding(self):
        attrs = parse_attributes(
            '<node resource-id="com.app:id/x" content-desc="A &amp; B" text="" />'
        )
        assert attrs == {
            "resource-id": "com.app:id/x",
            "content-desc": "A & B",
            "text": "",
        }


class TestParseUIElements:
    """Parsing whole dumps into element lists."""

    def test_extracts_fields_and_decodes_entities(self):
        elements = parse_ui_elements(SAMPLE_UI_XML)
        assert len(elements) == 3

        first = elements[0]
        assert first.text == "Hello & World"
        assert first.resource_id == "com.app:id/title"
        assert first.class_name == "android.widget.TextView"
        assert first.content_desc == "Greeting"
        assert first.bounds == Bounds(10, 20, 110, 220)
        assert first.center == Center(60, 120)

        second = elements[1]
        assert second.text == "Line 1\nLine 2"

        third = elements[2]
        assert third.checkable is True
        assert third.checked is True
        assert third.clickable is True
        assert third.enabled is False
        assert third.selected is True

    def test_document_order_is_kept(self):
        elements = parse_ui_elements(LOGIN_SCREEN_XML)
        assert [element.index for element in elements] == [0, 1, 2, 3, 4, 5, 6]
        assert elements[4].text == "Sign In"

    def test_empty_inputs(self):
        assert parse_ui_elements("") == []
        assert parse_ui_elements(EMPTY_HIERARCHY_XML) == []
        assert parse_ui_elements("not xml at all") == []

    def test_missing_attributes_degrade(self):
        elements = parse_ui_elements("<node />")
        assert len(elements) == 1
        element = elements[0]
        assert element.index == 0
        assert element.text == ""
        assert element.class_name == ""
        assert element.bounds == Bounds.zero()
        assert element.clickable is False
        assert element.enabled is False

    def test_only_literal_true_sets_flags(self):
        element = parse_ui_elements('<node clickable="TRUE" checkable="1" enabled="true" />')[0]
        assert element.clickable is False
        assert element.checkable is False
        assert element.enabled is True

    def test_index_fallback_counts_every_element(self):
        xml = '<node index="7" /><node /><node index="x" /><node index="3abc" />'
        elements = parse_ui_elements(xml)
        assert [element.index for element in elements] == [7, 1, 2, 3]

    def test_malformed_bounds_become_zero(self):
        element = parse_ui_elements('<node text="A" bounds="[1,2]" />')[0]
        assert element.bounds == Bounds(0, 0, 0, 0)

    def test_oversized_numbers_degrade(self):
        huge = "1" * 5000
        elements = parse_ui_elements(
            f'<node index="7" /><node index="{huge}" bounds="[{huge},0][1,1]" />'
        )
        assert elements[1].index == 1
        assert elements[1].bounds == Bounds.zero()

    def test_to_dict_shape(self):
        data = parse_ui_elements(SAMPLE_UI_XML)[0].to_dict()
        assert data["class"] == "android.widget.TextView"
        assert data["bounds"] == {"x1": 10, "y1": 20, "x2": 110, "y2": 220}
        assert data["center"] == {"x": 60, "y": 120}
        assert data["resource_id"] == "com.app:id/title"
