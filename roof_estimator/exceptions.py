"""Custom exceptions for the roof estimator package."""

from typing import List, Optional


class EstimatorError(Exception):
    """Base exception for all estimator errors."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class InvalidProjectSpecification(EstimatorError):
    """Raised when project parameters are missing or out of range."""

    def __init__(self, details: List[str], message: str = "Validation failed") -> None:
        super().__init__(message, status_code=400)
        self.details = list(details)

    def __str__(self) -> str:
        return f"{self.message}: {'; '.join(self.details)}"


class PricingConfigError(EstimatorError):
    """Raised when a pricing override file cannot be loaded."""

    pass
