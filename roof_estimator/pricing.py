"""
Roofing Pricing Tables
2025 industry averages. All costs are per square (100 sqft) unless noted.

Tables are held in an immutable PricingTables object so callers can build
alternate pricing (tests, regional deployments) without touching module state.
"""

import math
import re
from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple, Union

from roof_estimator.exceptions import PricingConfigError
from roof_estimator.models.estimate import ShingleType

NATIONAL_AVERAGE_MULTIPLIER = 1.00
DEFAULT_PITCH_KEY = "moderate"

_RATIO_PATTERN = re.compile(r"(\d+)[/:]12")
_TOKEN_PATTERN = re.compile(r"[A-Z]+")


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


@dataclass(frozen=True)
class ShinglePricing:
    """Base per-square material and labor prices for one shingle line"""
    material_per_square: float
    labor_per_square: float
    # Typical installed price band, informational only
    installed_low: float = 0.0
    installed_mid: float = 0.0
    installed_high: float = 0.0

    def to_dict(self) -> Dict:
        return {
            "material": self.material_per_square,
            "labor": self.labor_per_square,
            "installed": {
                "low": self.installed_low,
                "mid": self.installed_mid,
                "high": self.installed_high,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "ShinglePricing":
        installed = data.get("installed", {})
        return cls(
            material_per_square=data["material"],
            labor_per_square=data["labor"],
            installed_low=installed.get("low", 0.0),
            installed_mid=installed.get("mid", 0.0),
            installed_high=installed.get("high", 0.0),
        )


@dataclass(frozen=True)
class AdditionalCosts:
    """Fixed per-unit costs outside the shingle line"""
    tear_off_per_layer: float = 150.0
    synthetic_underlayment: float = 25.0
    felt_underlayment: float = 15.0
    flashing_base: float = 200.0
    chimney_flashing: float = 150.0
    skylight_flashing: float = 100.0
    valley_flashing: float = 75.0
    drip_edge_per_lf: float = 2.50
    permit_allowance: float = 400.0
    disposal_per_square: float = 25.0  # included in tear-off

    def to_dict(self) -> Dict:
        return {
            "tearOffPerLayer": self.tear_off_per_layer,
            "underlayment": {
                "synthetic": self.synthetic_underlayment,
                "feltPaper": self.felt_underlayment,
            },
            "flashingBase": self.flashing_base,
            "chimneyFlashing": self.chimney_flashing,
            "skylightFlashing": self.skylight_flashing,
            "valleyFlashing": self.valley_flashing,
            "dripEdge": self.drip_edge_per_lf,
            "permitAllowance": self.permit_allowance,
            "disposalPerSquare": self.disposal_per_square,
        }

    @classmethod
    def from_dict(cls, data: Dict, base: Optional["AdditionalCosts"] = None) -> "AdditionalCosts":
        base = base or cls()
        underlayment = data.get("underlayment", {})
        return cls(
            tear_off_per_layer=data.get("tearOffPerLayer", base.tear_off_per_layer),
            synthetic_underlayment=underlayment.get("synthetic", base.synthetic_underlayment),
            felt_underlayment=underlayment.get("feltPaper", base.felt_underlayment),
            flashing_base=data.get("flashingBase", base.flashing_base),
            chimney_flashing=data.get("chimneyFlashing", base.chimney_flashing),
            skylight_flashing=data.get("skylightFlashing", base.skylight_flashing),
            valley_flashing=data.get("valleyFlashing", base.valley_flashing),
            drip_edge_per_lf=data.get("dripEdge", base.drip_edge_per_lf),
            permit_allowance=data.get("permitAllowance", base.permit_allowance),
            disposal_per_square=data.get("disposalPerSquare", base.disposal_per_square),
        )


@dataclass(frozen=True)
class ComplexityMultipliers:
    """Labor multipliers for story count and steep pitch"""
    single_story: float = 1.0
    two_story: float = 1.15
    three_story: float = 1.30
    steep_pitch: float = 1.20       # pitch multiplier >= steep_threshold (8/12)
    very_steep_pitch: float = 1.35  # pitch multiplier >= very_steep_threshold (10/12)
    steep_threshold: float = 1.20
    very_steep_threshold: float = 1.30

    def to_dict(self) -> Dict:
        return {
            "singleStory": self.single_story,
            "twoStory": self.two_story,
            "threeStory": self.three_story,
            "steepPitch": self.steep_pitch,
            "verySteepPitch": self.very_steep_pitch,
            "steepThreshold": self.steep_threshold,
            "verySteepThreshold": self.very_steep_threshold,
        }

    @classmethod
    def from_dict(cls, data: Dict, base: Optional["ComplexityMultipliers"] = None) -> "ComplexityMultipliers":
        base = base or cls()
        return cls(
            single_story=data.get("singleStory", base.single_story),
            two_story=data.get("twoStory", base.two_story),
            three_story=data.get("threeStory", base.three_story),
            steep_pitch=data.get("steepPitch", base.steep_pitch),
            very_steep_pitch=data.get("verySteepPitch", base.very_steep_pitch),
            steep_threshold=data.get("steepThreshold", base.steep_threshold),
            very_steep_threshold=data.get("verySteepThreshold", base.very_steep_threshold),
        )


@dataclass(frozen=True)
class Region:
    name: str
    states: Tuple[str, ...]
    multiplier: float

    def to_dict(self) -> Dict:
        return {"region": self.name, "states": list(self.states), "multiplier": self.multiplier}

    @classmethod
    def from_dict(cls, data: Dict) -> "Region":
        return cls(
            name=data["region"],
            states=tuple(state.upper() for state in data["states"]),
            multiplier=data["multiplier"],
        )


# Lookup results. Defaults are applied by the caller, not the lookup.

@dataclass(frozen=True)
class RegionMatch:
    region: Region
    state: str

    @property
    def multiplier(self) -> float:
        return self.region.multiplier


@dataclass(frozen=True)
class PitchMatch:
    key: str
    multiplier: float


@dataclass(frozen=True)
class NotFound:
    query: str


RegionLookup = Union[RegionMatch, NotFound]
PitchLookup = Union[PitchMatch, NotFound]


DEFAULT_SHINGLES = {
    ShingleType.THREE_TAB: ShinglePricing(100, 200, 250, 350, 450),
    ShingleType.ARCHITECTURAL: ShinglePricing(175, 275, 400, 500, 600),
    ShingleType.PREMIUM: ShinglePricing(215, 350, 500, 600, 700),
}

DEFAULT_REGIONS = (
    Region("Northeast", ("CT", "ME", "MA", "NH", "NJ", "NY", "PA", "RI", "VT"), 1.15),
    Region("Southeast", ("AL", "FL", "GA", "KY", "MS", "NC", "SC", "TN", "VA", "WV"), 0.95),
    Region("Midwest", ("IL", "IN", "IA", "KS", "MI", "MN", "MO", "NE", "ND", "OH", "SD", "WI"), 1.00),
    Region("Southwest", ("AZ", "NM", "OK", "TX"), 0.95),
    Region("West", ("CA", "CO", "NV", "UT"), 1.20),
    Region("Pacific Northwest", ("OR", "WA", "ID", "MT", "WY"), 1.10),
    Region("Alaska/Hawaii", ("AK", "HI"), 1.40),
)

# Slope factor applied to the flat footprint
DEFAULT_PITCH_MULTIPLIERS = {
    "3/12": 1.03,
    "4/12": 1.05,
    "5/12": 1.08,
    "6/12": 1.12,
    "7/12": 1.16,
    "8/12": 1.20,
    "9/12": 1.25,
    "10/12": 1.30,
    "11/12": 1.36,
    "12/12": 1.41,
    "flat": 1.00,
    "low": 1.05,       # 4/12
    "standard": 1.08,  # 5/12
    "moderate": 1.12,  # 6/12
    "steep": 1.25,     # 9/12
    "very steep": 1.35,
}

DEFAULT_WASTE_FACTOR = 0.10


@dataclass(frozen=True)
class PricingTables:
    """Complete, read-only pricing configuration for the quote engine"""

    shingles: Mapping[ShingleType, ShinglePricing] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_SHINGLES)))
    additional: AdditionalCosts = field(default_factory=AdditionalCosts)
    complexity: ComplexityMultipliers = field(default_factory=ComplexityMultipliers)
    regions: Tuple[Region, ...] = DEFAULT_REGIONS
    pitch_multipliers: Mapping[str, float] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_PITCH_MULTIPLIERS)))
    waste_factor: float = DEFAULT_WASTE_FACTOR

    def __post_init__(self):
        # Freeze any plain dicts handed in by callers
        if not isinstance(self.shingles, MappingProxyType):
            object.__setattr__(self, "shingles", MappingProxyType(dict(self.shingles)))
        if not isinstance(self.pitch_multipliers, MappingProxyType):
            normalized = {key.lower().strip(): value for key, value in self.pitch_multipliers.items()}
            object.__setattr__(self, "pitch_multipliers", MappingProxyType(normalized))
        object.__setattr__(self, "regions", tuple(self.regions))
        missing = [shingle.value for shingle in ShingleType if shingle not in self.shingles]
        if missing:
            raise PricingConfigError(f"Missing shingle pricing for: {', '.join(missing)}")
        if DEFAULT_PITCH_KEY not in self.pitch_multipliers:
            raise PricingConfigError(f"Pitch table must define '{DEFAULT_PITCH_KEY}'")
        self._check_numbers()

    def _check_numbers(self):
        values = {"wasteFactor": self.waste_factor}
        for section in (self.additional, self.complexity):
            values.update((f.name, getattr(section, f.name)) for f in fields(section))
        for shingle, pricing in self.shingles.items():
            values.update((f"{shingle.value}.{f.name}", getattr(pricing, f.name)) for f in fields(pricing))
        values.update((f"regions.{region.name}", region.multiplier) for region in self.regions)
        values.update((f"pitchMultipliers.{key}", value) for key, value in self.pitch_multipliers.items())

        invalid = sorted(name for name, value in values.items() if not _is_number(value))
        if invalid:
            raise PricingConfigError(f"Pricing values must be numbers: {', '.join(invalid)}")

    def shingle_pricing(self, shingle_type: ShingleType) -> ShinglePricing:
        return self.shingles[shingle_type]

    def with_overrides(self, **changes) -> "PricingTables":
        return replace(self, **changes)

    def to_dict(self) -> Dict:
        """Convert tables to plain data (same shape accepted by from_dict)"""
        return {
            "shingles": {shingle.value: pricing.to_dict() for shingle, pricing in self.shingles.items()},
            "additional": self.additional.to_dict(),
            "complexity": self.complexity.to_dict(),
            "regions": [region.to_dict() for region in self.regions],
            "pitchMultipliers": dict(self.pitch_multipliers),
            "wasteFactor": self.waste_factor,
        }

    @classmethod
    def from_dict(cls, data: Dict, base: Optional["PricingTables"] = None) -> "PricingTables":
        """
        Build tables from plain data, overlaying on base (defaults if omitted).
        Sections absent from data keep the base values.
        """
        base = base or DEFAULT_PRICING
        try:
            shingles = dict(base.shingles)
            for key, value in data.get("shingles", {}).items():
                shingles[ShingleType(key)] = ShinglePricing.from_dict(value)

            regions = base.regions
            if "regions" in data:
                regions = tuple(Region.from_dict(region) for region in data["regions"])

            pitch_multipliers = dict(base.pitch_multipliers)
            pitch_multipliers.update(data.get("pitchMultipliers", {}))

            return cls(
                shingles=shingles,
                additional=AdditionalCosts.from_dict(data.get("additional", {}), base.additional),
                complexity=ComplexityMultipliers.from_dict(data.get("complexity", {}), base.complexity),
                regions=regions,
                pitch_multipliers=pitch_multipliers,
                waste_factor=data.get("wasteFactor", base.waste_factor),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise PricingConfigError(f"Invalid pricing table data: {e}") from e


DEFAULT_PRICING = PricingTables()


def lookup_region(location: str, tables: PricingTables = DEFAULT_PRICING) -> RegionLookup:
    """
    Find the pricing region for a free-form "City, ST" location.
    Regions are checked in table order and the first region owning one of the
    location's state codes wins. State codes are matched as whole words so
    that city names ("Austin", "Somewhere") do not hit codes like IN or ME.
    """
    tokens = set(_TOKEN_PATTERN.findall(location.upper()))
    for region in tables.regions:
        for state in region.states:
            if state in tokens:
                return RegionMatch(region=region, state=state)
    return NotFound(query=location)


def regional_multiplier(location: str, tables: PricingTables = DEFAULT_PRICING) -> float:
    """Regional multiplier for a location, national average when unknown"""
    match = lookup_region(location, tables)
    if isinstance(match, NotFound):
        return NATIONAL_AVERAGE_MULTIPLIER
    return match.multiplier


def lookup_pitch(descriptor: str, tables: PricingTables = DEFAULT_PRICING) -> PitchLookup:
    """
    Find the pitch multiplier for a descriptor such as "6/12", "7:12 pitch"
    or "moderate". Exact (case-insensitive) key first, then a rise/12 ratio.
    """
    normalized = descriptor.lower().strip()

    if normalized in tables.pitch_multipliers:
        return PitchMatch(key=normalized, multiplier=tables.pitch_multipliers[normalized])

    ratio = _RATIO_PATTERN.search(normalized)
    if ratio:
        key = f"{int(ratio.group(1))}/12"
        if key in tables.pitch_multipliers:
            return PitchMatch(key=key, multiplier=tables.pitch_multipliers[key])

    return NotFound(query=descriptor)


def resolve_pitch_multiplier(descriptor: str, tables: PricingTables = DEFAULT_PRICING) -> float:
    """Pitch multiplier for a descriptor, the moderate pitch when unknown"""
    match = lookup_pitch(descriptor, tables)
    if isinstance(match, NotFound):
        return tables.pitch_multipliers[DEFAULT_PITCH_KEY]
    return match.multiplier
