from roof_estimator.models.estimate import (
    Estimate,
    LineItem,
    ProjectSpecification,
    ShingleType,
)

__all__ = ["Estimate", "LineItem", "ProjectSpecification", "ShingleType"]
