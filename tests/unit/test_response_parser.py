"""Unit tests for the optimization reply parser."""
import pytest
from routeready.solver.response_parser import (
    ResponseParseError,
    extract_json_array,
    parse_record,
    parse_response,
)


class TestExtractJsonArray:
    """Test suite for extract_json_array."""

    def test_plain_array(self):
        assert extract_json_array('[{"id": "a"}]') == [{"id": "a"}]

    def test_prose_and_markdown_wrapped(self):
        text = (
            "Here is the optimized route:\n```json\n"
            '[{"id": "depot", "lat": 1.0, "lng": 2.0, "sequenceOrder": 0}]\n'
            "```\nLet me know if you need [anything] else."
        )
        data = extract_json_array(text)

        assert data[0]["id"] == "depot"

    def test_skips_non_json_brackets(self):
        text = 'Coordinates are [lat, lng]. Result: [{"id": "a", "lat": 1, "lng": 2}]'
        assert extract_json_array(text) == [{"id": "a", "lat": 1, "lng": 2}]

    @pytest.mark.parametrize("text", ["", "no json here", '{"id": "a"}', "[unclosed"])
    def test_missing_json(self, text):
        with pytest.raises(ResponseParseError):
            extract_json_array(text)


class TestParseRecord:
    """Test suite for parse_record."""

    def test_valid_record(self):
        record = parse_record({"id": "a", "lat": 40.7, "lng": -74.0, "sequenceOrder": 2, "isValid": True}, 0)

        assert record.id == "a"
        assert record.lat == 40.7
        assert record.lng == -74.0
        assert record.sequence_order == 2
        assert record.is_valid is True
        assert record.error is None

    def test_missing_coordinates_flagged(self):
        record = parse_record({"id": "a", "lat": "40.7", "sequenceOrder": 1}, 0)

        assert record.lat is None and record.lng is None
        assert record.is_valid is False
        assert "coordinates" in record.error

    def test_out_of_range_coordinates_flagged(self):
        record = parse_record({"id": "a", "lat": 140.0, "lng": 10.0}, 0)

        assert not record.has_coordinates
        assert record.is_valid is False

    def test_numeric_id_accepted(self):
        assert parse_record({"id": 7, "lat": 1, "lng": 1}, 0).id == "7"

    @pytest.mark.parametrize("item", [[1, 2], "a", {"lat": 1, "lng": 2}, {"id": "  "}])
    def test_rejects_invalid_items(self, item):
        with pytest.raises(ValueError):
            parse_record(item, 3)

    @pytest.mark.parametrize("value", [-1, 1.5, "2", True, None])
    def test_invalid_sequence_is_none(self, value):
        record = parse_record({"id": "a", "lat": 1, "lng": 1, "sequenceOrder": value}, 0)
        assert record.sequence_order is None


class TestParseResponse:
    """Test suite for parse_response."""

    def test_counts_rejected(self):
        text = '[{"id": "a", "lat": 1, "lng": 2}, "junk", {"lat": 3}]'
        records, rejected = parse_response(text)

        assert [r.id for r in records] == ["a"]
        assert rejected == 2
