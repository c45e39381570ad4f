"""
Tests for pricing tables and the region / pitch lookups
"""

from types import MappingProxyType

import pytest

from roof_estimator.exceptions import PricingConfigError
from roof_estimator.models.estimate import ShingleType
from roof_estimator.pricing import (
    DEFAULT_PRICING,
    NotFound,
    PitchMatch,
    PricingTables,
    Region,
    RegionMatch,
    lookup_pitch,
    lookup_region,
    regional_multiplier,
    resolve_pitch_multiplier,
)


class TestRegionLookup:
    def test_austin_is_southwest(self):
        match = lookup_region("Austin, TX")

        assert isinstance(match, RegionMatch)
        assert match.region.name == "Southwest"
        assert match.state == "TX"
        assert match.multiplier == 0.95

    def test_unknown_location_not_found(self):
        match = lookup_region("Somewhere Unknown")

        assert isinstance(match, NotFound)
        assert match.query == "Somewhere Unknown"
        assert regional_multiplier("Somewhere Unknown") == 1.00

    @pytest.mark.parametrize("location, expected", [
        ("Boston, MA", 1.15),
        ("miami, fl", 0.95),
        ("Columbus, OH 43004", 1.00),
        ("Phoenix AZ", 0.95),
        ("Denver,CO", 1.20),
        ("Portland, OR", 1.10),
        ("Honolulu, HI", 1.40),
        ("", 1.00),
    ])
    def test_regional_multipliers(self, location, expected):
        assert regional_multiplier(location) == expected

    def test_city_names_do_not_match_state_codes(self):
        # "Indianapolis" contains IN and "Memphis" contains ME, neither is a state code here
        assert regional_multiplier("Indianapolis") == 1.00
        assert regional_multiplier("Memphis, TN") == 0.95

    def test_first_region_in_table_order_wins(self):
        tables = DEFAULT_PRICING.with_overrides(regions=(
            Region("First", ("TX",), 1.50),
            Region("Second", ("TX",), 0.50),
        ))
        assert regional_multiplier("Dallas, TX", tables) == 1.50


class TestPitchLookup:
    @pytest.mark.parametrize("descriptor, key, multiplier", [
        ("6/12", "6/12", 1.12),
        ("Moderate", "moderate", 1.12),
        ("  FLAT ", "flat", 1.00),
        ("very steep", "very steep", 1.35),
        ("12/12", "12/12", 1.41),
        ("7:12", "7/12", 1.16),
        ("about a 9/12 pitch", "9/12", 1.25),
    ])
    def test_matches(self, descriptor, key, multiplier):
        match = lookup_pitch(descriptor)

        assert isinstance(match, PitchMatch)
        assert match.key == key
        assert match.multiplier == multiplier

    @pytest.mark.parametrize("descriptor", ["banana", "2/12", "16/12", ""])
    def test_unknown_pitch_defaults_to_moderate(self, descriptor):
        assert isinstance(lookup_pitch(descriptor), NotFound)
        assert resolve_pitch_multiplier(descriptor) == 1.12


class TestPricingTables:
    def test_default_tables(self):
        architectural = DEFAULT_PRICING.shingle_pricing(ShingleType.ARCHITECTURAL)

        assert architectural.material_per_square == 175
        assert architectural.labor_per_square == 275
        assert DEFAULT_PRICING.additional.tear_off_per_layer == 150
        assert DEFAULT_PRICING.additional.drip_edge_per_lf == 2.50
        assert DEFAULT_PRICING.waste_factor == 0.10
        assert [region.name for region in DEFAULT_PRICING.regions][:4] == [
            "Northeast", "Southeast", "Midwest", "Southwest",
        ]

    def test_tables_are_read_only(self):
        assert isinstance(DEFAULT_PRICING.shingles, MappingProxyType)
        with pytest.raises(TypeError):
            DEFAULT_PRICING.pitch_multipliers["6/12"] = 2.0
        with pytest.raises(AttributeError):
            DEFAULT_PRICING.waste_factor = 0.5

    def test_plain_dicts_are_frozen_and_normalized(self):
        tables = PricingTables(pitch_multipliers={"Moderate": 1.10, "Gentle": 1.02})

        assert isinstance(tables.pitch_multipliers, MappingProxyType)
        assert resolve_pitch_multiplier("gentle", tables) == 1.02
        assert resolve_pitch_multiplier("unknown", tables) == 1.10

    def test_pitch_table_requires_moderate(self):
        with pytest.raises(PricingConfigError):
            PricingTables(pitch_multipliers={"6/12": 1.12})

    def test_missing_shingle_pricing_rejected(self):
        with pytest.raises(PricingConfigError):
            PricingTables(shingles={ShingleType.PREMIUM: DEFAULT_PRICING.shingles[ShingleType.PREMIUM]})

    def test_from_dict_overlays_defaults(self):
        tables = PricingTables.from_dict({
            "shingles": {"premium": {"material": 250, "labor": 400}},
            "additional": {"permitAllowance": 650, "underlayment": {"synthetic": 30}},
            "complexity": {"twoStory": 1.2},
            "wasteFactor": 0.12,
        })

        assert tables.shingles[ShingleType.PREMIUM].material_per_square == 250
        assert tables.shingles[ShingleType.THREE_TAB].material_per_square == 100
        assert tables.additional.permit_allowance == 650
        assert tables.additional.synthetic_underlayment == 30
        assert tables.additional.chimney_flashing == 150
        assert tables.complexity.two_story == 1.2
        assert tables.complexity.three_story == 1.30
        assert tables.waste_factor == 0.12
        assert tables.regions == DEFAULT_PRICING.regions

    def test_to_dict_round_trip(self):
        assert PricingTables.from_dict(DEFAULT_PRICING.to_dict()) == DEFAULT_PRICING

    def test_from_dict_rejects_bad_data(self):
        with pytest.raises(PricingConfigError):
            PricingTables.from_dict({"shingles": {"metal": {"material": 1, "labor": 1}}})
        with pytest.raises(PricingConfigError):
            PricingTables.from_dict({"regions": [{"region": "Nowhere"}]})

    @pytest.mark.parametrize("data", [
        {"additional": {"permitAllowance": "650"}},
        {"complexity": {"twoStory": True}},
        {"pitchMultipliers": {"barn": None}},
        {"wasteFactor": float("inf")},
        {"shingles": {"premium": {"material": "215", "labor": 350}}},
    ])
    def test_from_dict_rejects_non_numeric_values(self, data):
        with pytest.raises(PricingConfigError, match="must be numbers"):
            PricingTables.from_dict(data)
