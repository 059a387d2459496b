"""
Centralized configuration with environment variable overrides.

Brand copy values, disambiguation thresholds, and catalog limits are
configurable here. Confidence scores for individual intent rules are
policy constants and live next to the rules themselves.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from concierge.logging_context import SessionIdFilter

load_dotenv()

logger = logging.getLogger(__name__)

VALID_SORTS = ("featured", "price_asc", "price_desc")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class BrandConfig:
    """Storefront details injected into concierge copy."""

    name: str = os.getenv("BRAND_NAME", "GlowGlitch")
    support_email: str = os.getenv("SUPPORT_EMAIL", "concierge@glowglitch.com")
    stylist_hours: str = os.getenv("STYLIST_HOURS", "Monday to Saturday, 9am to 7pm ET")
    return_window_days: int = _safe_int("RETURN_WINDOW_DAYS", "30")
    resize_free_within_days: int = _safe_int("RESIZE_FREE_WITHIN_DAYS", "60")
    warranty_years: int = _safe_int("WARRANTY_YEARS", "2")
    financing_partner: str = os.getenv("FINANCING_PARTNER", "Affirm")
    financing_min_purchase: int = _safe_int("FINANCING_MIN_PURCHASE", "250")


@dataclass(frozen=True)
class ConciergeConfig:
    """Thresholds for disambiguation and follow-up handling."""

    low_confidence_threshold: float = _safe_float("LOW_CONFIDENCE_THRESHOLD", "0.4")
    human_escalation_misses: int = _safe_int("HUMAN_ESCALATION_MISSES", "2")
    continuation_max_words: int = _safe_int("CONTINUATION_MAX_WORDS", "5")


@dataclass(frozen=True)
class CatalogConfig:
    """Product carousel settings."""

    max_results: int = _safe_int("CAROUSEL_MAX_RESULTS", "6")
    default_sort: str = os.getenv("DEFAULT_SORT", "featured")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    brand: BrandConfig = field(default_factory=BrandConfig)
    concierge: ConciergeConfig = field(default_factory=ConciergeConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    service_name: str = os.getenv("SERVICE_NAME", "concierge-engine")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if not 0.0 <= config.concierge.low_confidence_threshold <= 1.0:
        raise ValueError(
            "LOW_CONFIDENCE_THRESHOLD must be between 0.0 and 1.0, "
            f"got {config.concierge.low_confidence_threshold}"
        )
    if config.concierge.human_escalation_misses < 1:
        raise ValueError(
            "HUMAN_ESCALATION_MISSES must be >= 1, "
            f"got {config.concierge.human_escalation_misses}"
        )
    if config.concierge.continuation_max_words < 1:
        raise ValueError(
            "CONTINUATION_MAX_WORDS must be >= 1, "
            f"got {config.concierge.continuation_max_words}"
        )
    if config.catalog.max_results < 1:
        raise ValueError(
            f"CAROUSEL_MAX_RESULTS must be >= 1, got {config.catalog.max_results}"
        )
    if config.catalog.default_sort not in VALID_SORTS:
        raise ValueError(
            f"DEFAULT_SORT must be one of {VALID_SORTS}, got {config.catalog.default_sort!r}"
        )

    for name, value in [
        ("RETURN_WINDOW_DAYS", config.brand.return_window_days),
        ("RESIZE_FREE_WITHIN_DAYS", config.brand.resize_free_within_days),
        ("WARRANTY_YEARS", config.brand.warranty_years),
    ]:
        if value < 0:
            raise ValueError(f"{name} must be >= 0, got {value}")


LOG_FORMAT = "%(asctime)s [%(name)s] [%(session_id)s] %(levelname)s: %(message)s"


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, SessionIdFilter) for f in handler.filters):
            handler.addFilter(SessionIdFilter())
    logger.info("Configuration loaded for %s ('%s')", config.service_name, config.brand.name)
    return config


# Singleton instance
settings = load_config()
