"""
Utility functions for payload validation, display formatting and
estimate / pricing file handling
"""

import json
import logging
import math
from decimal import Decimal, ROUND_HALF_UP
from pathlib import Path
from typing import Dict, List, Optional, Union

from roof_estimator.exceptions import InvalidProjectSpecification, PricingConfigError
from roof_estimator.models.estimate import Estimate, ProjectSpecification, ShingleType
from roof_estimator.pricing import DEFAULT_PRICING, PricingTables, resolve_pitch_multiplier

logger = logging.getLogger(__name__)

REQUIRED_PROJECT_FIELDS = ["roofSqft", "pitch", "shingleType", "stories", "location"]
COUNT_FIELDS = ["tearOffLayers", "chimneys", "skylights", "valleys"]

# Upper limits keep every derived cost finite
MAX_ROOF_SQFT = 1_000_000
MAX_PITCH_MULTIPLIER = 3.0


def _as_number(value) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _as_whole(value) -> Optional[int]:
    number = _as_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def validate_project_payload(data: Dict) -> List[str]:
    """
    Validate project data from the intake conversation and return list of errors
    """
    if not isinstance(data, dict):
        return ["Project data must be an object"]

    errors = []

    for field in REQUIRED_PROJECT_FIELDS:
        if field not in data or data[field] is None:
            errors.append(f"Missing required field: {field}")

    if "roofSqft" in data and data["roofSqft"] is not None:
        area = _as_number(data["roofSqft"])
        if area is None:
            errors.append("roofSqft must be a valid number")
        elif area <= 0:
            errors.append("roofSqft must be greater than zero")
        elif area > MAX_ROOF_SQFT:
            errors.append(f"roofSqft must be at most {MAX_ROOF_SQFT:,}")

    if data.get("pitchMultiplier") is not None:
        multiplier = _as_number(data["pitchMultiplier"])
        if multiplier is None:
            errors.append("pitchMultiplier must be a valid number")
        elif multiplier <= 0:
            errors.append("pitchMultiplier must be greater than zero")
        elif multiplier > MAX_PITCH_MULTIPLIER:
            errors.append(f"pitchMultiplier must be at most {MAX_PITCH_MULTIPLIER:g}")

    if "stories" in data and data["stories"] is not None:
        stories = _as_whole(data["stories"])
        if stories is None:
            errors.append("stories must be a whole number")
        elif stories < 1:
            errors.append("stories must be at least 1")

    for field in COUNT_FIELDS:
        if data.get(field) is None:
            continue
        count = _as_whole(data[field])
        if count is None:
            errors.append(f"{field} must be a whole number")
        elif count < 0:
            errors.append(f"{field} must be non-negative")

    if "shingleType" in data and data["shingleType"] is not None:
        valid_types = [shingle.value for shingle in ShingleType]
        if data["shingleType"] not in valid_types:
            errors.append(f"shingleType must be one of: {', '.join(valid_types)}")

    for field in ("pitch", "location"):
        if field in data and data[field] is not None and not isinstance(data[field], str):
            errors.append(f"{field} must be text")

    return errors


def project_from_payload(data: Dict, tables: PricingTables = DEFAULT_PRICING) -> ProjectSpecification:
    """
    Validate and convert a project payload.
    Missing feature counts default to zero; a missing pitchMultiplier is
    resolved from the pitch description.
    """
    errors = validate_project_payload(data)
    if errors:
        raise InvalidProjectSpecification(errors)

    pitch_multiplier = _as_number(data.get("pitchMultiplier"))
    if pitch_multiplier is None:
        pitch_multiplier = resolve_pitch_multiplier(data["pitch"], tables)

    area = _as_number(data["roofSqft"])
    return ProjectSpecification(
        roof_floor_area_sqft=int(area) if area.is_integer() else area,
        pitch_descriptor=data["pitch"],
        pitch_multiplier=pitch_multiplier,
        shingle_type=ShingleType(data["shingleType"]),
        story_count=_as_whole(data["stories"]),
        tear_off_layer_count=_as_whole(data.get("tearOffLayers", 0) or 0),
        chimney_count=_as_whole(data.get("chimneys", 0) or 0),
        skylight_count=_as_whole(data.get("skylights", 0) or 0),
        valley_count=_as_whole(data.get("valleys", 0) or 0),
        location_text=data["location"],
    )


def format_currency(amount: float) -> str:
    """
    Format whole-dollar currency amount for display, e.g. $12,345
    """
    rounded = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(int(rounded)):,}"


def format_number(number: float) -> str:
    """
    Format number with thousands separators, keeping up to three decimals
    """
    rounded = Decimal(str(number)).quantize(Decimal("0.001"), rounding=ROUND_HALF_UP)
    if rounded == rounded.to_integral_value():
        return f"{int(rounded):,}"
    text = f"{rounded:,.3f}".rstrip("0")
    return text


def format_estimate_range(low: float, high: float) -> str:
    """
    Format estimate range for display
    """
    return f"{format_currency(low)} - {format_currency(high)}"


def save_estimates_to_json(estimates: List, output_path: Union[str, Path]) -> bool:
    """
    Save estimates to JSON file
    """
    try:
        estimates_data = []
        for estimate in estimates:
            if hasattr(estimate, "to_dict"):
                estimates_data.append(estimate.to_dict())
            else:
                estimates_data.append(estimate)

        with open(output_path, "w", encoding="utf-8") as file:
            json.dump(estimates_data, file, indent=2, default=str)

        return True
    except (OSError, TypeError) as e:
        logger.error("Error saving estimates to %s: %s", output_path, e)
        return False


def load_estimates_from_json(file_path: Union[str, Path]) -> List[Estimate]:
    """
    Load estimates previously written by save_estimates_to_json
    """
    try:
        with open(file_path, "r", encoding="utf-8") as file:
            data = json.load(file)
    except FileNotFoundError:
        logger.warning("Estimate file not found at %s", file_path)
        return []

    return [Estimate.from_dict(item) for item in data]


def load_pricing_tables(file_path: Union[str, Path],
                        base: PricingTables = DEFAULT_PRICING) -> PricingTables:
    """
    Load pricing overrides from a JSON file on top of the base tables
    """
    try:
        with open(file_path, "r", encoding="utf-8") as file:
            data = json.load(file)
    except (OSError, json.JSONDecodeError) as e:
        raise PricingConfigError(f"Could not read pricing file {file_path}: {e}") from e

    if not isinstance(data, dict):
        raise PricingConfigError(f"Pricing file {file_path} must contain a JSON object")

    tables = PricingTables.from_dict(data, base=base)
    logger.info("Loaded pricing overrides from %s", file_path)
    return tables


def summarize_estimates(estimates: List[Estimate]) -> Dict:
    """
    Generate summary statistics for a list of estimates
    """
    if not estimates:
        return {}

    shingle_counts = {}
    for estimate in estimates:
        shingle = estimate.project.shingle_type.value
        shingle_counts[shingle] = shingle_counts.get(shingle, 0) + 1

    total_value = sum(estimate.mid_estimate for estimate in estimates)

    return {
        "total_estimates": len(estimates),
        "total_value": total_value,
        "average_value": round(total_value / len(estimates), 2),
        "shingle_breakdown": shingle_counts,
        "total_squares": sum(estimate.square_count for estimate in estimates),
    }
