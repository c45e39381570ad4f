"""
Roof Estimator
Deterministic roofing cost estimates from conversational intake data
"""

from roof_estimator.exceptions import EstimatorError, InvalidProjectSpecification, PricingConfigError
from roof_estimator.models.estimate import Estimate, LineItem, ProjectSpecification, ShingleType
from roof_estimator.pricing import DEFAULT_PRICING, PricingTables, resolve_pitch_multiplier
from roof_estimator.quote_engine import EstimateEngine, generate_estimate
from roof_estimator.utils import format_currency, format_number, project_from_payload

__version__ = "1.0.0"

__all__ = [
    "DEFAULT_PRICING",
    "Estimate",
    "EstimateEngine",
    "EstimatorError",
    "InvalidProjectSpecification",
    "LineItem",
    "PricingConfigError",
    "PricingTables",
    "ProjectSpecification",
    "ShingleType",
    "format_currency",
    "format_number",
    "generate_estimate",
    "project_from_payload",
    "resolve_pitch_multiplier",
]
