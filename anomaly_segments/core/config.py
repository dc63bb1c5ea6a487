"""
Settings and environment management module for the anomaly segmentation engine.

This module provides centralized configuration management using pydantic-settings,
which automatically loads settings from environment variables and .env files.

The engine itself has no credentials or connections to configure. What it does have
is a set of heuristic thresholds (weekday/weekend skew, correlation agreement,
propagation window, insight triggers) that are not rigorously derived statistics.
They are exposed here so they can be tuned per deployment without code changes.

Environment Variables (all optional, prefix ANOMALY_SEGMENTS_):
- ANOMALY_SEGMENTS_WEEKDAY_SPIKE_RATIO: Weekday share for a weekday_spike call (default: 0.8)
- ANOMALY_SEGMENTS_WEEKEND_SPIKE_RATIO: Weekend share for a weekend_spike call (default: 0.7)
- ANOMALY_SEGMENTS_PROPAGATION_WINDOW_HOURS: Max hours between root and effect (default: 6)
- ANOMALY_SEGMENTS_MIN_CORRELATION_SAMPLES: Paired samples before a correlation is reported (default: 2)
- ANOMALY_SEGMENTS_LOG_LEVEL: Level used by configure_logging (default: INFO)

Usage:
    from anomaly_segments.core.config import get_settings

    settings = get_settings()
    window = settings.propagation_window_hours
"""

import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Engine settings loaded from environment variables.

    Attributes:
        weekday_spike_ratio: Minimum weekday share of anomalies for a weekday_spike pattern.
        weekend_spike_ratio: Minimum weekend share of anomalies for a weekend_spike pattern.
        periodic_day_ratio: Share of anomalies on a single weekday above which the
            pattern is periodic.
        consistent_confidence: Confidence reported for an evenly spread distribution.
        kpi_deviation_threshold: Relative deviation from the same-weekday mean that
            flags a daily aggregate.
        kpi_monitored_metrics: Daily aggregate metrics checked for deviation.
        min_correlation_samples: Minimum paired samples before a metric pair is reported.
        correlation_agreement_ratio: Share of agreeing (or opposing) samples required
            to call a correlation positive (or negative).
        propagation_window_hours: Max distance in hours between a root anomaly and
            its propagated effects.
        high_risk_critical_count: Critical anomalies in one campaign that mark it high risk.
        metric_concentration_ratio: Share of all anomalies on one metric that counts
            as concentration.
        time_pattern_insight_confidence: Confidence above which a time pattern becomes
            an insight.
        log_level: Logging level applied by configure_logging.
    """

    model_config = SettingsConfigDict(
        env_prefix='ANOMALY_SEGMENTS_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=False,
    )

    # =========================================================================
    # Temporal pattern thresholds
    # =========================================================================

    # 80% of anomalies on Mon-Fri is a decisive weekday call. The natural
    # weekday share of a uniform week is 5/7 (~0.71), so the bar sits above it.
    weekday_spike_ratio: float = Field(default=0.8, gt=0.0, le=1.0)

    # Weekend share above 0.7 (weekday share below 0.3). Natural weekend
    # share is 2/7 (~0.29).
    weekend_spike_ratio: float = Field(default=0.7, gt=0.0, le=1.0)

    # One weekday holding more than 40% of anomalies is treated as periodic
    periodic_day_ratio: float = Field(default=0.4, gt=0.0, le=1.0)

    consistent_confidence: float = Field(default=0.6, ge=0.0, le=1.0)

    # A day is flagged when it deviates more than 50% from its weekday mean
    kpi_deviation_threshold: float = Field(default=0.5, gt=0.0)

    kpi_monitored_metrics: List[str] = Field(
        default_factory=lambda: ['impressions', 'clicks', 'conversions', 'spend', 'revenue']
    )

    # =========================================================================
    # Correlation / propagation thresholds
    # =========================================================================

    # Single-sample pairs are never reported
    min_correlation_samples: int = Field(default=2, ge=1)

    correlation_agreement_ratio: float = Field(default=0.7, ge=0.5, le=1.0)

    propagation_window_hours: float = Field(default=6.0, gt=0.0)

    # =========================================================================
    # Insight triggers
    # =========================================================================

    high_risk_critical_count: int = Field(default=2, ge=1)

    metric_concentration_ratio: float = Field(default=0.4, gt=0.0, le=1.0)

    time_pattern_insight_confidence: float = Field(default=0.6, ge=0.0, le=1.0)

    # =========================================================================
    # Logging
    # =========================================================================

    log_level: str = 'INFO'


@lru_cache()
def get_settings() -> Settings:
    """
    Get the engine settings singleton.

    Returns a cached Settings instance so environment variables are only read
    once per process.

    Returns:
        Settings: The settings instance with all threshold values.

    Raises:
        pydantic.ValidationError: If an environment override has an invalid value
            (e.g. ANOMALY_SEGMENTS_WEEKDAY_SPIKE_RATIO=1.5).

    Note:
        To refresh settings in tests, clear the cache:
        >>> get_settings.cache_clear()
    """
    return Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging for host applications embedding the engine.

    The library only creates module loggers; call this once from the host's
    entry point if it has no logging setup of its own.

    Args:
        level: Logging level name. Defaults to Settings.log_level.
    """
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
