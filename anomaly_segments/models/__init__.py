"""
Package initialization file for engine models.

This module exports all Pydantic schemas and enumerations from schemas.py and
enums.py, making them importable from anomaly_segments.models directly.

Usage:
    from anomaly_segments.models import (
        Anomaly,
        DailyAggregate,
        Severity,
        SegmentAnalysisResult,
        # ... etc
    )
"""

# =============================================================================
# Enums
# =============================================================================

from anomaly_segments.models.enums import (
    Severity,
    AnomalyType,
    DetectionMethod,
    HistoricalTrend,
    SegmentType,
    MetricCategory,
    DayOfWeek,
    TimePattern,
    CorrelationType,
    InsightType,
)


# =============================================================================
# Schemas
# =============================================================================

from anomaly_segments.models.schemas import (
    # -------------------------------------------------------------------------
    # Inputs
    # -------------------------------------------------------------------------
    StatisticalBaseline,
    AnomalyDetail,
    Anomaly,
    DailyAggregate,

    # -------------------------------------------------------------------------
    # Segments and comparisons
    # -------------------------------------------------------------------------
    TimeDistribution,
    Segment,
    MetricAggregate,
    CampaignComparison,

    # -------------------------------------------------------------------------
    # Temporal patterns
    # -------------------------------------------------------------------------
    TimePatternResult,
    KPIAverages,
    KPIDeviation,
    KPITimePatternResult,

    # -------------------------------------------------------------------------
    # Categories, correlations, propagation
    # -------------------------------------------------------------------------
    MetricCategoryResult,
    Correlation,
    PropagationPath,

    # -------------------------------------------------------------------------
    # Insights and aggregate result
    # -------------------------------------------------------------------------
    Insight,
    SegmentAnalysisResult,
)


__all__ = [
    # Enums
    "Severity",
    "AnomalyType",
    "DetectionMethod",
    "HistoricalTrend",
    "SegmentType",
    "MetricCategory",
    "DayOfWeek",
    "TimePattern",
    "CorrelationType",
    "InsightType",
    # Inputs
    "StatisticalBaseline",
    "AnomalyDetail",
    "Anomaly",
    "DailyAggregate",
    # Segments and comparisons
    "TimeDistribution",
    "Segment",
    "MetricAggregate",
    "CampaignComparison",
    # Temporal patterns
    "TimePatternResult",
    "KPIAverages",
    "KPIDeviation",
    "KPITimePatternResult",
    # Categories, correlations, propagation
    "MetricCategoryResult",
    "Correlation",
    "PropagationPath",
    # Insights and aggregate result
    "Insight",
    "SegmentAnalysisResult",
]
