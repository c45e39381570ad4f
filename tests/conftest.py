"""
Pytest configuration and fixtures for the roof estimator test suite.
"""

from datetime import datetime, timezone

import pytest

from roof_estimator.app import create_app
from roof_estimator.config import AppConfig
from roof_estimator.models.estimate import ProjectSpecification, ShingleType

FIXED_TIME = datetime(2025, 3, 14, 15, 9, 26, tzinfo=timezone.utc)


@pytest.fixture
def fixed_time():
    return FIXED_TIME


@pytest.fixture
def fixed_clock(fixed_time):
    """Clock that always returns the same instant."""
    return lambda: fixed_time


@pytest.fixture
def austin_project():
    """Single-story architectural re-roof in Austin with one chimney."""
    return ProjectSpecification(
        roof_floor_area_sqft=2000,
        pitch_descriptor="6/12",
        pitch_multiplier=1.12,
        shingle_type=ShingleType.ARCHITECTURAL,
        story_count=1,
        tear_off_layer_count=1,
        chimney_count=1,
        skylight_count=0,
        valley_count=0,
        location_text="Austin, TX",
    )


@pytest.fixture
def denver_project():
    """Two-story premium roof on a steep pitch, no tear-off."""
    return ProjectSpecification(
        roof_floor_area_sqft=3000,
        pitch_descriptor="9/12",
        pitch_multiplier=1.25,
        shingle_type=ShingleType.PREMIUM,
        story_count=2,
        tear_off_layer_count=0,
        chimney_count=0,
        skylight_count=0,
        valley_count=0,
        location_text="Denver, CO",
    )


@pytest.fixture
def austin_payload():
    """Austin project as sent by the chat assistant."""
    return {
        "roofSqft": 2000,
        "pitch": "6/12",
        "pitchMultiplier": 1.12,
        "shingleType": "architectural",
        "stories": 1,
        "tearOffLayers": 1,
        "chimneys": 1,
        "skylights": 0,
        "valleys": 0,
        "location": "Austin, TX",
    }


@pytest.fixture
def app():
    """Flask application with default pricing."""
    flask_app = create_app(AppConfig(environment="testing", log_level="WARNING"))
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()
