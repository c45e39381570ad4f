"""
Estimate Data Models
Defines the project specification handed over by the intake conversation
and the itemized estimate produced by the quote engine
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Tuple


class ShingleType(Enum):
    THREE_TAB = "three-tab"
    ARCHITECTURAL = "architectural"
    PREMIUM = "premium"

    @property
    def display_name(self) -> str:
        return SHINGLE_DISPLAY_NAMES[self]


SHINGLE_DISPLAY_NAMES = {
    ShingleType.THREE_TAB: "3-Tab Asphalt Shingles",
    ShingleType.ARCHITECTURAL: "Architectural Shingles",
    ShingleType.PREMIUM: "Premium Designer Shingles",
}


def _parse_timestamp(value: str) -> datetime:
    # fromisoformat only accepts a trailing Z from Python 3.11
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class ProjectSpecification:
    """Roofing project parameters collected by the intake conversation"""

    roof_floor_area_sqft: float
    pitch_descriptor: str
    pitch_multiplier: float
    shingle_type: ShingleType
    story_count: int
    tear_off_layer_count: int
    chimney_count: int
    skylight_count: int
    valley_count: int
    location_text: str

    def to_dict(self) -> Dict:
        """Convert to the wire format used by the chat hand-off"""
        return {
            "roofSqft": self.roof_floor_area_sqft,
            "pitch": self.pitch_descriptor,
            "pitchMultiplier": self.pitch_multiplier,
            "shingleType": self.shingle_type.value,
            "stories": self.story_count,
            "tearOffLayers": self.tear_off_layer_count,
            "chimneys": self.chimney_count,
            "skylights": self.skylight_count,
            "valleys": self.valley_count,
            "location": self.location_text,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "ProjectSpecification":
        """Create a project from wire data (no validation, see utils.project_from_payload)"""
        return cls(
            roof_floor_area_sqft=data["roofSqft"],
            pitch_descriptor=data["pitch"],
            pitch_multiplier=data["pitchMultiplier"],
            shingle_type=ShingleType(data["shingleType"]),
            story_count=data["stories"],
            tear_off_layer_count=data.get("tearOffLayers", 0),
            chimney_count=data.get("chimneys", 0),
            skylight_count=data.get("skylights", 0),
            valley_count=data.get("valleys", 0),
            location_text=data.get("location", ""),
        )


@dataclass(frozen=True)
class LineItem:
    """One priced row of an estimate"""

    name: str
    quantity: float
    unit: str  # "sq", "lf", "lot" or "ea"
    unit_price: float  # whole dollars except per-foot prices
    line_total: int
    description: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "description": self.description,
            "quantity": self.quantity,
            "unit": self.unit,
            "pricePerUnit": self.unit_price,
            "total": self.line_total,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "LineItem":
        return cls(
            name=data["name"],
            description=data.get("description"),
            quantity=data["quantity"],
            unit=data["unit"],
            unit_price=data["pricePerUnit"],
            line_total=data["total"],
        )


@dataclass(frozen=True)
class Estimate:
    """Complete itemized estimate with its low/expected/high range"""

    id: str
    created_at: datetime
    project: ProjectSpecification
    roof_area_sqft: int
    square_count: int
    roof_perimeter_ft: int
    line_items: Tuple[LineItem, ...] = field(default_factory=tuple)
    subtotal: int = 0
    low_estimate: int = 0
    mid_estimate: int = 0
    high_estimate: int = 0

    @property
    def estimate_range(self) -> Tuple[int, int]:
        return self.low_estimate, self.high_estimate

    def to_dict(self) -> Dict:
        """Convert to plain nested data for JSON serialization"""
        return {
            "id": self.id,
            "createdAt": self.created_at.isoformat(),
            "project": self.project.to_dict(),
            "roofArea": self.roof_area_sqft,
            "squares": self.square_count,
            "roofPerimeter": self.roof_perimeter_ft,
            "lineItems": [item.to_dict() for item in self.line_items],
            "subtotal": self.subtotal,
            "lowEstimate": self.low_estimate,
            "midEstimate": self.mid_estimate,
            "highEstimate": self.high_estimate,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Estimate":
        """Rebuild a persisted estimate"""
        return cls(
            id=data["id"],
            created_at=_parse_timestamp(data["createdAt"]),
            project=ProjectSpecification.from_dict(data["project"]),
            roof_area_sqft=data["roofArea"],
            square_count=data["squares"],
            roof_perimeter_ft=data["roofPerimeter"],
            line_items=tuple(LineItem.from_dict(item) for item in data["lineItems"]),
            subtotal=data["subtotal"],
            low_estimate=data["lowEstimate"],
            mid_estimate=data["midEstimate"],
            high_estimate=data["highEstimate"],
        )
