"""
Runtime configuration for the insight engine.

Settings are read from the environment (a .env file is loaded by main.py at
startup). Rule thresholds default to the values the store has always used
and can be overridden from a YAML file:

    thresholds:
      low_stock_max: 5
      slow_moving_min_stock: 20
"""

import os
import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional

import yaml

from pos_insights.insight_models import Period

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Thresholds:
    """Numeric cut-offs used by the rule evaluators and the advisor."""
    best_seller_restock_count: int = 5
    low_stock_max: int = 5
    trend_high_daily_sales: float = 10
    trend_mid_daily_sales: float = 5
    revenue_high_daily: float = 100000
    revenue_mid_daily: float = 50000
    slow_moving_min_stock: int = 20
    slow_moving_max_sales: int = 2
    premium_transaction_value: float = 10000
    diversity_min_products: int = 3


def load_thresholds(path: Optional[str]) -> Thresholds:
    """Loads threshold overrides from YAML. Unknown keys are rejected."""
    defaults = Thresholds()
    if not path:
        return defaults

    threshold_file = Path(path)
    if not threshold_file.exists():
        raise ValueError(f"Thresholds file not found: {threshold_file}")

    with open(threshold_file, "r") as f:
        data = yaml.safe_load(f) or {}

    overrides = data.get("thresholds", data) or {}
    if not isinstance(overrides, dict):
        raise ValueError(f"Thresholds file {threshold_file} must contain a mapping")

    known = {f.name for f in fields(Thresholds)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ValueError(f"Unknown threshold keys in {threshold_file}: {unknown}")

    coerced = {}
    for key, value in overrides.items():
        default_value = getattr(defaults, key)
        try:
            coerced[key] = type(default_value)(value)
        except (TypeError, ValueError):
            raise ValueError(f"Threshold '{key}' must be numeric, got {value!r}")

    logger.info(f"Loaded {len(coerced)} threshold overrides from {threshold_file}")
    return replace(defaults, **coerced)


class InsightSettings:
    """Configuration handed to the engine and the HTTP boundary."""

    def __init__(
        self,
        language: Optional[str] = None,
        timezone: Optional[str] = None,
        default_period: Optional[str] = None,
        thresholds: Optional[Thresholds] = None,
        cors_allow_origin: Optional[str] = None,
    ):
        self.language = (language or os.getenv("INSIGHTS_LANGUAGE", "en")).lower()
        self.timezone = timezone or os.getenv("STORE_TIMEZONE", "UTC")
        self.default_period = Period.parse(default_period or os.getenv("INSIGHTS_DEFAULT_PERIOD", "week"))
        if thresholds is None:
            thresholds = load_thresholds(os.getenv("INSIGHTS_THRESHOLDS_FILE"))
        self.thresholds = thresholds
        self.cors_allow_origin = cors_allow_origin or os.getenv("CORS_ALLOW_ORIGIN", "*")

    def with_language(self, language: Optional[str]) -> "InsightSettings":
        """Returns a copy using another message language."""
        if not language or language.lower() == self.language:
            return self
        return InsightSettings(
            language=language,
            timezone=self.timezone,
            default_period=self.default_period.value,
            thresholds=self.thresholds,
            cors_allow_origin=self.cors_allow_origin,
        )
