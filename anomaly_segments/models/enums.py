"""
Enumeration definitions for the anomaly segmentation engine.

All enums inherit from both `str` and `Enum` so they serialize as plain strings
in Pydantic models and compare equal to the raw values produced by the upstream
anomaly detector.
"""

from enum import Enum


class Severity(str, Enum):
    """
    Qualitative severity assigned by the upstream anomaly detector.

    Ordinal weights live in services.scoring.SEVERITY_WEIGHTS:
    - critical: 3
    - warning: 2
    - info: 1
    """
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class AnomalyType(str, Enum):
    """
    Shape of a detected deviation.

    spike and drop are what the segmentation logic reasons about; the other
    values are produced by the detector for trend and budget checks and pass
    through unchanged.
    """
    SPIKE = "spike"
    DROP = "drop"
    TREND_REVERSAL = "trend_reversal"
    BUDGET_ANOMALY = "budget_anomaly"
    PERFORMANCE_DEGRADATION = "performance_degradation"
    UNUSUAL_PATTERN = "unusual_pattern"


class DetectionMethod(str, Enum):
    """
    Statistical method the detector used to flag the anomaly.
    """
    ZSCORE = "zscore"
    IQR = "iqr"
    MOVING_AVERAGE = "moving_average"
    THRESHOLD = "threshold"


class HistoricalTrend(str, Enum):
    """
    Trend of the metric over the detector's baseline window.
    """
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
    VOLATILE = "volatile"


class SegmentType(str, Enum):
    """
    Grouping key used to build segments.

    Only campaign segmentation is produced in this version.
    """
    CAMPAIGN = "campaign"


class MetricCategory(str, Enum):
    """
    Semantic metric buckets.

    - spend_related: spend, cpa, cpc, cpm, budget
    - engagement: ctr, clicks, impressions
    - conversion: conversions, cvr, roas, revenue
    """
    SPEND_RELATED = "spend_related"
    ENGAGEMENT = "engagement"
    CONVERSION = "conversion"


class DayOfWeek(str, Enum):
    """
    Day names, ordered to match datetime.weekday() (Monday == 0).
    """
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class TimePattern(str, Enum):
    """
    Qualitative classification of when anomalies occur.

    - weekday_spike: Concentrated on Mon-Fri
    - weekend_spike: Concentrated on Sat-Sun
    - periodic: Concentrated on one specific weekday
    - consistent: Spread across the week
    """
    WEEKDAY_SPIKE = "weekday_spike"
    WEEKEND_SPIKE = "weekend_spike"
    PERIODIC = "periodic"
    CONSISTENT = "consistent"


class CorrelationType(str, Enum):
    """
    Direction of co-movement between two metrics.
    """
    POSITIVE = "positive"
    NEGATIVE = "negative"


class InsightType(str, Enum):
    """
    Insight classification, in ranking order.
    """
    WARNING = "warning"
    RECOMMENDATION = "recommendation"
    INFO = "info"
