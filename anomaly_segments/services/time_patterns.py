"""
Temporal Pattern Detector.

Two independent analyses:

1. ANOMALY-BASED (analyze_time_patterns)
   Classifies the weekday/weekend split of anomaly detection times:
   - weekday share >= weekday_spike_ratio (0.8)  -> weekday_spike
   - weekend share >= weekend_spike_ratio (0.7)  -> weekend_spike
   - one weekday > periodic_day_ratio (0.4)      -> periodic
   - otherwise                                   -> consistent
   Confidence is the share backing the call, capped at 1.0, so a more skewed
   split always yields a higher confidence.

2. AGGREGATE-BASED (analyze_kpi_time_patterns)
   Works on raw daily KPI aggregates, independent of any anomalies. Computes
   weekday/weekend and per-weekday means with pandas and flags days that deviate
   more than kpi_deviation_threshold (50%) from the mean of all days sharing their
   weekday. Each Monday is only compared with the average of all Mondays.

Thresholds are heuristics, not derived statistics; see core.config.Settings.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
import logging

import pandas as pd

from anomaly_segments.core.config import Settings, get_settings
from anomaly_segments.models import (
    Anomaly,
    DailyAggregate,
    DayOfWeek,
    KPIAverages,
    KPIDeviation,
    KPITimePatternResult,
    TimePattern,
    TimePatternResult,
)
from anomaly_segments.services.scoring import (
    DAY_NAMES,
    WEEKEND_DAYS,
    calculate_time_distribution,
    coerce_aggregates,
    coerce_anomalies,
    ratio,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# DailyAggregate field -> KPI metric name
KPI_COLUMNS: Dict[str, str] = {
    "totalImpressions": "impressions",
    "totalClicks": "clicks",
    "totalConversions": "conversions",
    "totalSpend": "spend",
    "totalRevenue": "revenue",
}

KPI_METRICS: List[str] = list(KPI_COLUMNS.values())

RECOMMENDED_MONITORING: Dict[TimePattern, List[str]] = {
    TimePattern.WEEKDAY_SPIKE: [
        "Monitor weekday morning campaign performance closely",
        "Check that ad delivery hours line up with business activity hours",
        "Review whether weekend budget should be redistributed",
    ],
    TimePattern.WEEKEND_SPIKE: [
        "Analyze weekend consumer behavior patterns",
        "Test weekend-specific creatives",
        "Adjust weekend bidding strategy relative to weekdays",
    ],
    TimePattern.PERIODIC: [
        "Compare recurring events against anomaly timestamps",
        "Check for overlap with scheduled reports or automated jobs",
        "Review automation and budget schedule changes on that day",
    ],
    TimePattern.CONSISTENT: [
        "Keep monitoring evenly across all days",
        "Set a daily performance checkpoint",
        "Enable early-warning alerts for trend changes",
    ],
}


# =============================================================================
# Anomaly-Based Pattern Detection
# =============================================================================


def analyze_time_patterns(
    anomalies: Iterable[Union[Anomaly, Mapping[str, Any]]],
    settings: Optional[Settings] = None,
) -> TimePatternResult:
    """
    Classify when anomalies occur across the week.

    Args:
        anomalies: Detected anomalies (models or mappings)
        settings: Threshold overrides; defaults to get_settings()

    Returns:
        TimePatternResult with pattern, confidence, a details string naming the
        dominant period, and a non-empty list of monitoring actions

    Raises:
        AnalysisInputError: If any anomaly is malformed
    """
    settings = settings or get_settings()
    records = coerce_anomalies(anomalies)
    distribution = calculate_time_distribution(records)
    total = len(records)

    if total == 0:
        return TimePatternResult(
            pattern=TimePattern.CONSISTENT,
            confidence=0.0,
            details="No anomalies to analyze; no weekday or weekend concentration.",
            recommendedMonitoring=RECOMMENDED_MONITORING[TimePattern.CONSISTENT],
            distribution=distribution,
        )

    weekday_share = ratio(distribution.weekday, total)
    weekend_share = ratio(distribution.weekend, total)

    if weekday_share >= settings.weekday_spike_ratio:
        pattern = TimePattern.WEEKDAY_SPIKE
        confidence = weekday_share
        details = (
            f"Anomalies are concentrated on weekdays ({weekday_share * 100:.0f}% Mon-Fri). "
            f"They may be linked to business-day activity."
        )
    elif weekend_share >= settings.weekend_spike_ratio:
        pattern = TimePattern.WEEKEND_SPIKE
        confidence = weekend_share
        details = (
            f"Anomalies are concentrated on weekends ({weekend_share * 100:.0f}% Sat-Sun). "
            f"Check for shifts in consumer behavior."
        )
    else:
        # Monday-first order, so the earliest weekday wins ties
        top_day = max(DAY_NAMES, key=lambda d: distribution.byDayOfWeek[d])
        top_share = ratio(distribution.byDayOfWeek[top_day], total)

        if top_share > settings.periodic_day_ratio:
            pattern = TimePattern.PERIODIC
            confidence = top_share
            details = (
                f"Anomalies are concentrated on {top_day.value.capitalize()} "
                f"({top_share * 100:.0f}%). Check recurring events or scheduled activity."
            )
        else:
            pattern = TimePattern.CONSISTENT
            confidence = settings.consistent_confidence
            details = (
                "Anomalies are spread evenly across weekdays and weekends "
                "with no dominant period."
            )

    logger.debug(
        f"Time pattern {pattern.value} (weekday={distribution.weekday}, "
        f"weekend={distribution.weekend}, confidence={confidence:.2f})"
    )

    return TimePatternResult(
        pattern=pattern,
        confidence=min(1.0, confidence),
        details=details,
        recommendedMonitoring=list(RECOMMENDED_MONITORING[pattern]),
        distribution=distribution,
    )


# =============================================================================
# Aggregate-Based Pattern Detection
# =============================================================================


def _build_frame(aggregates: List[DailyAggregate]) -> pd.DataFrame:
    rows = [
        {
            "date": row.date,
            "weekday": row.date.weekday(),
            **{metric: float(getattr(row, field)) for field, metric in KPI_COLUMNS.items()},
        }
        for row in aggregates
    ]
    return pd.DataFrame(rows, columns=["date", "weekday", *KPI_METRICS])


def _averages(frame: pd.DataFrame) -> Optional[KPIAverages]:
    """Mean per KPI metric over the frame, None for an empty bucket."""
    if frame.empty:
        return None
    means = frame[KPI_METRICS].mean()
    return KPIAverages(
        **{metric: float(means[metric]) for metric in KPI_METRICS},
        sampleSize=len(frame),
    )


def _monitored_metrics(settings: Settings) -> List[str]:
    metrics = [m for m in settings.kpi_monitored_metrics if m in KPI_METRICS]
    unknown = sorted(set(settings.kpi_monitored_metrics) - set(KPI_METRICS))
    if unknown:
        logger.warning(f"Ignoring unknown KPI metrics in kpi_monitored_metrics: {unknown}")
    return metrics


def _find_deviations(
    df: pd.DataFrame,
    metrics: List[str],
    threshold: float,
) -> List[KPIDeviation]:
    """
    Compare each day against the mean of all days sharing its weekday.

    The baseline is the same per-weekday mean reported in dayOfWeekAvg. Weekdays
    with a single day have no history and are skipped; zero baselines are
    skipped rather than producing an infinite deviation.
    """
    deviations: List[KPIDeviation] = []
    if not metrics:
        return deviations

    for weekday, group in df.groupby("weekday", sort=True):
        if len(group) < 2:
            continue

        values = group[metrics]
        baseline = values.mean()
        safe_baseline = baseline.where(baseline != 0)
        deviation = (values - baseline).abs() / safe_baseline
        flagged = deviation > threshold

        for idx, row_flags in flagged.iterrows():
            if not row_flags.any():
                continue
            for metric in metrics:
                if not flagged.at[idx, metric]:
                    continue
                deviations.append(
                    KPIDeviation(
                        date=df.at[idx, "date"],
                        dayOfWeek=DAY_NAMES[int(weekday)],
                        metric=metric,
                        value=float(values.at[idx, metric]),
                        baseline=float(baseline[metric]),
                        deviation=float(deviation.at[idx, metric]),
                    )
                )

    deviations.sort(key=lambda d: (d.date, metrics.index(d.metric)))
    return deviations


def analyze_kpi_time_patterns(
    daily_aggregates: Iterable[Union[DailyAggregate, Mapping[str, Any]]],
    settings: Optional[Settings] = None,
) -> KPITimePatternResult:
    """
    Compute weekday/weekend baselines and flag deviating days from raw KPI data.

    Args:
        daily_aggregates: One row per calendar day (models or mappings)
        settings: Threshold overrides; defaults to get_settings()

    Returns:
        KPITimePatternResult with weekdayAvg/weekendAvg (None when the bucket is
        empty), dayOfWeekAvg for weekdays with data, and anomalyDays sorted by date

    Raises:
        AnalysisInputError: If any row is malformed
    """
    settings = settings or get_settings()
    aggregates = coerce_aggregates(daily_aggregates)

    if not aggregates:
        return KPITimePatternResult()

    df = _build_frame(aggregates)

    duplicate_count = int(df["date"].duplicated().sum())
    if duplicate_count:
        logger.warning(f"Daily aggregates contain {duplicate_count} duplicate date(s); each row is used as-is")

    weekend_mask = df["weekday"].isin(WEEKEND_DAYS)

    day_of_week_avg: Dict[DayOfWeek, KPIAverages] = {}
    for weekday, group in df.groupby("weekday", sort=True):
        averages = _averages(group)
        if averages is not None:
            day_of_week_avg[DAY_NAMES[int(weekday)]] = averages

    deviations = _find_deviations(
        df,
        _monitored_metrics(settings),
        settings.kpi_deviation_threshold,
    )
    anomaly_days = sorted({d.date for d in deviations})

    logger.info(
        f"KPI time pattern analysis: {len(df)} days, "
        f"{len(anomaly_days)} flagged, {len(day_of_week_avg)} weekdays with data"
    )

    return KPITimePatternResult(
        weekdayAvg=_averages(df[~weekend_mask]),
        weekendAvg=_averages(df[weekend_mask]),
        dayOfWeekAvg=day_of_week_avg,
        anomalyDays=anomaly_days,
        anomalyDetails=deviations,
    )
