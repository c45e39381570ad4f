"""
Tests for payload validation, formatting and file helpers
"""

import json

import pytest

from roof_estimator.exceptions import InvalidProjectSpecification, PricingConfigError
from roof_estimator.models.estimate import ShingleType
from roof_estimator.quote_engine import generate_estimate
from roof_estimator.utils import (
    format_currency,
    format_estimate_range,
    format_number,
    load_estimates_from_json,
    load_pricing_tables,
    project_from_payload,
    save_estimates_to_json,
    summarize_estimates,
    validate_project_payload,
)


class TestFormatting:
    @pytest.mark.parametrize("amount, expected", [
        (16289, "$16,289"),
        (0, "$0"),
        (999.5, "$1,000"),
        (1234.49, "$1,234"),
        (1250000, "$1,250,000"),
        (-1500, "-$1,500"),
    ])
    def test_format_currency(self, amount, expected):
        assert format_currency(amount) == expected

    @pytest.mark.parametrize("number, expected", [
        (2240, "2,240"),
        (25, "25"),
        (1234.5, "1,234.5"),
        (1.23456, "1.235"),
        (2.0, "2"),
        (1000000, "1,000,000"),
    ])
    def test_format_number(self, number, expected):
        assert format_number(number) == expected

    def test_format_estimate_range(self):
        assert format_estimate_range(14660, 18732) == "$14,660 - $18,732"


class TestPayloadValidation:
    def test_valid_payload(self, austin_payload):
        assert validate_project_payload(austin_payload) == []

    def test_missing_fields(self):
        errors = validate_project_payload({"roofSqft": 1800})

        assert "Missing required field: pitch" in errors
        assert "Missing required field: shingleType" in errors
        assert "Missing required field: stories" in errors
        assert "Missing required field: location" in errors

    def test_not_an_object(self):
        assert validate_project_payload(["roofSqft"]) == ["Project data must be an object"]

    @pytest.mark.parametrize("field, value, message", [
        ("roofSqft", 0, "roofSqft must be greater than zero"),
        ("roofSqft", "lots", "roofSqft must be a valid number"),
        ("roofSqft", True, "roofSqft must be a valid number"),
        ("pitchMultiplier", -1.1, "pitchMultiplier must be greater than zero"),
        ("stories", 0, "stories must be at least 1"),
        ("stories", 1.5, "stories must be a whole number"),
        ("chimneys", -1, "chimneys must be non-negative"),
        ("valleys", "two", "valleys must be a whole number"),
        ("shingleType", "metal", "shingleType must be one of: three-tab, architectural, premium"),
        ("location", 78701, "location must be text"),
        ("roofSqft", 1e308, "roofSqft must be at most 1,000,000"),
        ("pitchMultiplier", 1e308, "pitchMultiplier must be at most 3"),
    ])
    def test_invalid_values(self, austin_payload, field, value, message):
        austin_payload[field] = value
        assert validate_project_payload(austin_payload) == [message]

    def test_project_from_payload(self, austin_payload):
        project = project_from_payload(austin_payload)

        assert project.roof_floor_area_sqft == 2000
        assert project.pitch_multiplier == 1.12
        assert project.shingle_type is ShingleType.ARCHITECTURAL
        assert project.tear_off_layer_count == 1
        assert project.location_text == "Austin, TX"

    def test_numeric_strings_are_accepted(self, austin_payload):
        austin_payload.update({"roofSqft": "1850.5", "stories": "2", "chimneys": "0"})
        project = project_from_payload(austin_payload)

        assert project.roof_floor_area_sqft == 1850.5
        assert project.story_count == 2
        assert project.chimney_count == 0

    def test_missing_counts_default_to_zero(self, austin_payload):
        for field in ("tearOffLayers", "chimneys", "skylights", "valleys"):
            del austin_payload[field]
        project = project_from_payload(austin_payload)

        assert project.tear_off_layer_count == 0
        assert project.chimney_count == 0

    def test_pitch_multiplier_resolved_from_pitch(self, austin_payload):
        del austin_payload["pitchMultiplier"]
        austin_payload["pitch"] = "steep"

        assert project_from_payload(austin_payload).pitch_multiplier == 1.25

    def test_invalid_payload_raises_with_details(self, austin_payload):
        austin_payload["stories"] = 0
        austin_payload["roofSqft"] = -5

        with pytest.raises(InvalidProjectSpecification) as excinfo:
            project_from_payload(austin_payload)

        assert excinfo.value.status_code == 400
        assert len(excinfo.value.details) == 2


class TestFiles:
    def test_save_and_load_estimates(self, tmp_path, austin_project, denver_project):
        estimates = [generate_estimate(austin_project), generate_estimate(denver_project)]
        output = tmp_path / "estimates.json"

        assert save_estimates_to_json(estimates, output) is True
        assert load_estimates_from_json(output) == estimates

    def test_save_to_missing_directory_fails(self, tmp_path, austin_project):
        output = tmp_path / "missing" / "estimates.json"
        assert save_estimates_to_json([generate_estimate(austin_project)], output) is False

    def test_load_missing_file(self, tmp_path):
        assert load_estimates_from_json(tmp_path / "nope.json") == []

    def test_load_pricing_tables(self, tmp_path):
        pricing_file = tmp_path / "pricing.json"
        pricing_file.write_text(json.dumps({
            "additional": {"permitAllowance": 650},
            "pitchMultipliers": {"Barn": 1.5},
        }))

        tables = load_pricing_tables(pricing_file)

        assert tables.additional.permit_allowance == 650
        assert tables.additional.flashing_base == 200
        assert tables.pitch_multipliers["barn"] == 1.5

    def test_load_pricing_tables_errors(self, tmp_path):
        broken = tmp_path / "broken.json"
        broken.write_text("{not json")
        listing = tmp_path / "list.json"
        listing.write_text("[]")

        with pytest.raises(PricingConfigError):
            load_pricing_tables(broken)
        with pytest.raises(PricingConfigError):
            load_pricing_tables(listing)
        with pytest.raises(PricingConfigError):
            load_pricing_tables(tmp_path / "absent.json")

    def test_load_pricing_tables_rejects_text_prices(self, tmp_path):
        pricing_file = tmp_path / "pricing.json"
        pricing_file.write_text(json.dumps({"additional": {"permitAllowance": "650"}}))

        with pytest.raises(PricingConfigError):
            load_pricing_tables(pricing_file)


def test_summarize_estimates(austin_project, denver_project):
    austin = generate_estimate(austin_project)
    denver = generate_estimate(denver_project)

    summary = summarize_estimates([austin, denver, austin])

    assert summary["total_estimates"] == 3
    assert summary["total_value"] == 2 * austin.mid_estimate + denver.mid_estimate
    assert summary["shingle_breakdown"] == {"architectural": 2, "premium": 1}
    assert summary["total_squares"] == 2 * 25 + 21
    assert summarize_estimates([]) == {}
