"""
Tests for the estimate data models
"""

import json
from dataclasses import FrozenInstanceError

import pytest

from roof_estimator.models.estimate import Estimate, LineItem, ProjectSpecification, ShingleType
from roof_estimator.quote_engine import generate_estimate


def test_shingle_display_names():
    assert ShingleType.THREE_TAB.display_name == "3-Tab Asphalt Shingles"
    assert ShingleType("premium") is ShingleType.PREMIUM


def test_project_wire_format(austin_project, austin_payload):
    assert austin_project.to_dict() == austin_payload
    assert ProjectSpecification.from_dict(austin_payload) == austin_project


def test_line_item_wire_format():
    item = LineItem(name="Drip Edge", quantity=193, unit="lf", unit_price=2.5,
                    line_total=483, description="Aluminum drip edge at all eaves and rakes")

    assert item.to_dict() == {
        "name": "Drip Edge",
        "description": "Aluminum drip edge at all eaves and rakes",
        "quantity": 193,
        "unit": "lf",
        "pricePerUnit": 2.5,
        "total": 483,
    }
    assert LineItem.from_dict(item.to_dict()) == item


def test_estimate_serializes_to_plain_data(austin_project, fixed_clock):
    estimate = generate_estimate(austin_project, clock=fixed_clock, id_factory=lambda _: "EST-TEST")
    data = estimate.to_dict()

    # Must survive a JSON round trip unchanged
    assert json.loads(json.dumps(data)) == data
    assert data["id"] == "EST-TEST"
    assert data["createdAt"] == "2025-03-14T15:09:26+00:00"
    assert data["roofArea"] == 2240
    assert data["squares"] == 25
    assert [item["name"] for item in data["lineItems"]][0] == "Architectural Shingles"
    assert Estimate.from_dict(data) == estimate


def test_estimate_is_immutable(austin_project):
    estimate = generate_estimate(austin_project)

    with pytest.raises(FrozenInstanceError):
        estimate.subtotal = 0
    with pytest.raises(FrozenInstanceError):
        estimate.project.story_count = 3
    assert isinstance(estimate.line_items, tuple)


def test_estimate_range(austin_project):
    estimate = generate_estimate(austin_project)
    assert estimate.estimate_range == (estimate.low_estimate, estimate.high_estimate)


def test_estimate_reads_utc_z_timestamps(austin_project, fixed_time):
    data = generate_estimate(austin_project, clock=lambda: fixed_time).to_dict()
    data["createdAt"] = "2025-03-14T15:09:26.000Z"

    assert Estimate.from_dict(data).created_at == fixed_time
