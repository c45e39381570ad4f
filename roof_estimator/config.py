"""
Configuration management for the roof estimator service.

Settings come from environment variables; pricing tables may be overridden
with a JSON file named by ROOF_ESTIMATOR_PRICING_FILE.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from roof_estimator.pricing import DEFAULT_PRICING, PricingTables
from roof_estimator.utils import load_pricing_tables

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class AppConfig:
    """Application settings"""
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 5000
    enable_cors: bool = True

    # Optional JSON file with pricing overrides
    pricing_file: Optional[str] = None

    log_level: str = "INFO"

    def load_pricing(self) -> PricingTables:
        """Pricing tables for this deployment"""
        if not self.pricing_file:
            return DEFAULT_PRICING
        return load_pricing_tables(self.pricing_file)


def get_config() -> AppConfig:
    """Build configuration from environment variables"""
    config = AppConfig(
        environment=os.getenv("ROOF_ESTIMATOR_ENV", "development"),
        debug=_env_bool("ROOF_ESTIMATOR_DEBUG", False),
        host=os.getenv("ROOF_ESTIMATOR_HOST", "0.0.0.0"),
        port=int(os.getenv("ROOF_ESTIMATOR_PORT", "5000")),
        enable_cors=_env_bool("ROOF_ESTIMATOR_CORS", True),
        pricing_file=os.getenv("ROOF_ESTIMATOR_PRICING_FILE") or None,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
    return config


def configure_logging(level: str = "INFO") -> None:
    """Set up root logging for the service"""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
    logger.debug("Logging level set to %s", level)
