"""
Core Quote Engine Algorithm
Turns a roofing project specification into roof geometry, itemized line items
and a low/expected/high estimate range
"""

import logging
import math
import secrets
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, List, Optional

from roof_estimator.exceptions import InvalidProjectSpecification
from roof_estimator.models.estimate import Estimate, LineItem, ProjectSpecification, ShingleType
from roof_estimator.pricing import (
    DEFAULT_PRICING,
    PricingTables,
    regional_multiplier,
    resolve_pitch_multiplier,
)

logger = logging.getLogger(__name__)

LOW_RANGE_FACTOR = 0.90
HIGH_RANGE_FACTOR = 1.15

# Roof outline is approximated as a rectangle with length = 1.5 x width
ROOF_ASPECT_RATIO = 1.5

SQUARE_FT_PER_SQUARE = 100

_BASE36_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)"""
    return int(math.floor(value + 0.5))


def _plural(count: int, singular: str, plural: Optional[str] = None) -> str:
    if count == 1:
        return f"{count} {singular}"
    return f"{count} {plural or singular + 's'}"


def calculate_roof_footprint(floor_area_sqft: float, stories: int) -> int:
    """
    Approximate the roof footprint from conditioned floor area.
    Floors are assumed to stack, so footprint = floor area / stories.
    """
    return round_half_up(floor_area_sqft / stories)


def calculate_roof_area(footprint: float, pitch_multiplier: float) -> int:
    """Calculate the sloped roof area from the flat footprint and pitch"""
    return round_half_up(footprint * pitch_multiplier)


def calculate_squares(roof_area: float, waste_factor: float = DEFAULT_PRICING.waste_factor) -> int:
    """
    Number of squares (100 sqft) to purchase, including waste.
    Always rounds up since partial squares are bought whole.
    """
    # Decimal keeps exact multiples (1000 sqft at 10% -> 11) from drifting up.
    # Float ceil would give 34 for 3000 sqft instead of 33.
    with_waste = Decimal(str(roof_area)) * (1 + Decimal(str(waste_factor)))
    return math.ceil(with_waste / SQUARE_FT_PER_SQUARE)


def estimate_roof_perimeter(roof_area: float) -> int:
    """Estimate the eave and rake length of a 1.5:1 rectangle of the given area"""
    width = math.sqrt(roof_area / ROOF_ASPECT_RATIO)
    length = width * ROOF_ASPECT_RATIO
    return round_half_up(2 * (width + length))


def get_complexity_multiplier(stories: int, pitch_multiplier: float,
                              tables: PricingTables = DEFAULT_PRICING) -> float:
    """
    Labor complexity from story count and pitch steepness.
    The very steep penalty replaces the steep one, it does not stack.
    """
    complexity = tables.complexity

    multiplier = complexity.single_story
    if stories == 2:
        multiplier = complexity.two_story
    elif stories >= 3:
        multiplier = complexity.three_story

    if pitch_multiplier >= complexity.very_steep_threshold:
        multiplier *= complexity.very_steep_pitch
    elif pitch_multiplier >= complexity.steep_threshold:
        multiplier *= complexity.steep_pitch

    return multiplier


def _flashing_description(project: ProjectSpecification) -> str:
    features = []
    if project.chimney_count > 0:
        features.append(_plural(project.chimney_count, "chimney"))
    if project.skylight_count > 0:
        features.append(_plural(project.skylight_count, "skylight"))
    if project.valley_count > 0:
        features.append(_plural(project.valley_count, "valley"))

    if not features:
        return "Standard flashing package"
    return f"Including {', '.join(features)}"


def generate_line_items(project: ProjectSpecification, squares: int, roof_perimeter: int,
                        regional: float, tables: PricingTables = DEFAULT_PRICING) -> List[LineItem]:
    """
    Build the itemized cost breakdown in display order:
    shingles, underlayment, labor, tear-off (optional), flashing, drip edge, permit
    """
    items = []
    pricing = tables.shingle_pricing(project.shingle_type)
    costs = tables.additional
    complexity = get_complexity_multiplier(project.story_count, project.pitch_multiplier, tables)

    # 1. Shingles. Total comes from the unrounded price, not the rounded unit price.
    items.append(LineItem(
        name=project.shingle_type.display_name,
        description="Including starter strips and ridge caps",
        quantity=squares,
        unit="sq",
        unit_price=round_half_up(pricing.material_per_square * regional),
        line_total=round_half_up(squares * pricing.material_per_square * regional),
    ))

    # 2. Underlayment (not regionally adjusted)
    underlayment = round_half_up(costs.synthetic_underlayment)
    items.append(LineItem(
        name="Synthetic Underlayment",
        description="Ice and water shield at eaves and valleys",
        quantity=squares,
        unit="sq",
        unit_price=underlayment,
        line_total=squares * underlayment,
    ))

    # 3. Labor
    labor = round_half_up(pricing.labor_per_square * complexity * regional)
    items.append(LineItem(
        name="Installation Labor",
        description=f"{project.story_count}-story, {project.pitch_descriptor} pitch",
        quantity=squares,
        unit="sq",
        unit_price=labor,
        line_total=squares * labor,
    ))

    # 4. Tear-off
    if project.tear_off_layer_count > 0:
        tear_off = round_half_up(costs.tear_off_per_layer * project.tear_off_layer_count)
        items.append(LineItem(
            name="Tear-Off and Disposal",
            description=f"Remove {_plural(project.tear_off_layer_count, 'existing layer')}",
            quantity=squares,
            unit="sq",
            unit_price=tear_off,
            line_total=squares * tear_off,
        ))

    # 5. Flashing
    flashing = round_half_up(
        costs.flashing_base
        + project.chimney_count * costs.chimney_flashing
        + project.skylight_count * costs.skylight_flashing
        + project.valley_count * costs.valley_flashing
    )
    items.append(LineItem(
        name="Flashing and Sealants",
        description=_flashing_description(project),
        quantity=1,
        unit="lot",
        unit_price=flashing,
        line_total=flashing,
    ))

    # 6. Drip edge. Priced per foot in cents, only the total is rounded.
    items.append(LineItem(
        name="Drip Edge",
        description="Aluminum drip edge at all eaves and rakes",
        quantity=roof_perimeter,
        unit="lf",
        unit_price=costs.drip_edge_per_lf,
        line_total=round_half_up(roof_perimeter * costs.drip_edge_per_lf),
    ))

    # 7. Permit
    permit = round_half_up(costs.permit_allowance)
    items.append(LineItem(
        name="Permit Allowance",
        description="Building permit fees (may vary by municipality)",
        quantity=1,
        unit="ea",
        unit_price=permit,
        line_total=permit,
    ))

    return items


def validate_project(project: ProjectSpecification) -> List[str]:
    """Return a list of problems with an already-built project (empty if valid)"""
    errors = []

    if not isinstance(project.shingle_type, ShingleType):
        errors.append(f"Unsupported shingle type: {project.shingle_type}")
    if not _is_number(project.roof_floor_area_sqft) or project.roof_floor_area_sqft <= 0:
        errors.append("roofSqft must be greater than zero")
    if not _is_number(project.pitch_multiplier) or project.pitch_multiplier <= 0:
        errors.append("pitchMultiplier must be greater than zero")
    if not _is_whole(project.story_count) or project.story_count < 1:
        errors.append("stories must be a whole number of at least 1")

    counts = {
        "tearOffLayers": project.tear_off_layer_count,
        "chimneys": project.chimney_count,
        "skylights": project.skylight_count,
        "valleys": project.valley_count,
    }
    for name, value in counts.items():
        if not _is_whole(value) or value < 0:
            errors.append(f"{name} must be a non-negative whole number")

    return errors


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _is_whole(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _to_base36(number: int) -> str:
    digits = []
    while True:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36_DIGITS[remainder])
        if number == 0:
            break
    return "".join(reversed(digits))


def make_estimate_id(created_at: datetime) -> str:
    """Opaque estimate id derived from the creation time, e.g. EST-M3K9ZP1Q-4F2A"""
    millis = int(created_at.timestamp() * 1000)
    return f"EST-{_to_base36(millis)}-{secrets.token_hex(2).upper()}"


def generate_estimate(project: ProjectSpecification,
                      tables: PricingTables = DEFAULT_PRICING,
                      clock: Optional[Callable[[], datetime]] = None,
                      id_factory: Optional[Callable[[datetime], str]] = None,
                      validate: bool = False) -> Estimate:
    """
    Main estimate calculation function.
    Pure apart from the clock and id factory, which can be injected.
    """
    if validate:
        errors = validate_project(project)
        if errors:
            raise InvalidProjectSpecification(errors)

    # 1. Geometry and quantities
    footprint = calculate_roof_footprint(project.roof_floor_area_sqft, project.story_count)
    roof_area = calculate_roof_area(footprint, project.pitch_multiplier)
    squares = calculate_squares(roof_area, tables.waste_factor)
    perimeter = estimate_roof_perimeter(roof_area)

    # 2. Regional multiplier
    regional = regional_multiplier(project.location_text, tables)

    # 3. Line items
    line_items = generate_line_items(project, squares, perimeter, regional, tables)

    # 4. Totals and range
    subtotal = sum(item.line_total for item in line_items)
    low_estimate = round_half_up(subtotal * LOW_RANGE_FACTOR)
    high_estimate = round_half_up(subtotal * HIGH_RANGE_FACTOR)

    created_at = (clock or (lambda: datetime.now(timezone.utc)))()
    estimate_id = (id_factory or make_estimate_id)(created_at)

    logger.debug(
        "Estimate %s: %s sqft roof, %s squares, regional %.2f, subtotal %s",
        estimate_id, roof_area, squares, regional, subtotal,
    )

    return Estimate(
        id=estimate_id,
        created_at=created_at,
        project=project,
        roof_area_sqft=roof_area,
        square_count=squares,
        roof_perimeter_ft=perimeter,
        line_items=tuple(line_items),
        subtotal=subtotal,
        low_estimate=low_estimate,
        mid_estimate=subtotal,
        high_estimate=high_estimate,
    )


class EstimateEngine:
    """Estimate generator bound to one set of pricing tables"""

    def __init__(self, tables: Optional[PricingTables] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.tables = tables or DEFAULT_PRICING
        self.clock = clock

    def generate(self, project: ProjectSpecification, validate: bool = True) -> Estimate:
        return generate_estimate(project, self.tables, clock=self.clock, validate=validate)

    def resolve_pitch(self, descriptor: str) -> float:
        return resolve_pitch_multiplier(descriptor, self.tables)

    def regional_multiplier(self, location: str) -> float:
        return regional_multiplier(location, self.tables)
