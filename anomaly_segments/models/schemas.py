"""
Pydantic models for the anomaly segmentation engine.

Input models (Anomaly, DailyAggregate) mirror the shapes produced by the upstream
anomaly detector and the KPI reporting repository. Output models are the
structured results of each analysis and are built fresh on every call.

Field names are camelCase to match the JSON contract consumed by the dashboard.

All models use Pydantic v2 syntax with field validation and examples.
"""

from datetime import datetime, date as DateType
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator

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
# Input Models
# =============================================================================


class StatisticalBaseline(BaseModel):
    """
    Baseline statistics the detector compared the current value against.
    """
    model_config = ConfigDict(frozen=True)

    mean: float = Field(..., description="Baseline mean")
    stdDev: float = Field(..., ge=0.0, description="Baseline standard deviation")
    median: float = Field(..., description="Baseline median")
    q1: float = Field(..., description="25th percentile")
    q3: float = Field(..., description="75th percentile")
    iqr: float = Field(..., ge=0.0, description="Interquartile range")
    min: float = Field(..., description="Minimum observed value")
    max: float = Field(..., description="Maximum observed value")
    percentile95: float = Field(..., description="95th percentile")
    sampleSize: int = Field(..., ge=0, description="Number of baseline samples")


class AnomalyDetail(BaseModel):
    """
    How the anomaly was detected.
    """
    model_config = ConfigDict(frozen=True)

    detectionMethod: DetectionMethod = Field(
        ...,
        description="Detection method (zscore, iqr, moving_average, threshold)"
    )
    zScore: Optional[float] = Field(default=None, description="Z-score of the current value")
    iqrDistance: Optional[float] = Field(default=None, description="Distance outside the IQR fence")
    movingAverageDeviation: Optional[float] = Field(
        default=None,
        description="Deviation from the moving average in percent"
    )
    baseline: Optional[StatisticalBaseline] = Field(default=None, description="Baseline statistics")
    historicalTrend: Optional[HistoricalTrend] = Field(default=None, description="Trend over the baseline window")


class Anomaly(BaseModel):
    """
    A single detected performance deviation.

    Read-only fact supplied by the anomaly detector. The engine never mutates it.
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "id": "anomaly-001",
                "campaignId": "cmp-123",
                "campaignName": "Spring Sale",
                "type": "spike",
                "severity": "warning",
                "metric": "ctr",
                "currentValue": 3.5,
                "previousValue": 2.0,
                "changePercent": 75.0,
                "message": "CTR increased 75%",
                "detectedAt": "2025-01-06T09:00:00",
                "detail": {"detectionMethod": "zscore", "zScore": 2.8, "historicalTrend": "stable"},
                "recommendations": ["Check recent creative changes"]
            }
        }
    )

    id: str = Field(..., min_length=1, description="Anomaly identifier")
    campaignId: str = Field(..., min_length=1, description="Campaign the anomaly belongs to")
    campaignName: str = Field(default="", description="Campaign display name")
    type: AnomalyType = Field(..., description="Deviation shape (spike, drop, ...)")
    severity: Severity = Field(..., description="Severity (critical, warning, info)")
    metric: str = Field(..., min_length=1, description="Metric name, lowercased (ctr, cpa, spend, ...)")
    currentValue: float = Field(default=0.0, description="Observed value")
    previousValue: float = Field(default=0.0, description="Reference value")
    changePercent: float = Field(..., description="Signed percent change vs. reference")
    message: str = Field(default="", description="Human-readable detector message")
    detectedAt: datetime = Field(..., description="Detection timestamp")
    detail: Optional[AnomalyDetail] = Field(default=None, description="Detection method and baseline")
    recommendations: List[str] = Field(default_factory=list, description="Detector recommendations")

    @field_validator("metric")
    @classmethod
    def normalize_metric(cls, v: str) -> str:
        """Store metric names lowercase."""
        return v.lower()


class DailyAggregate(BaseModel):
    """
    One calendar day of account-level KPI totals.

    Rows are assumed deduplicated by date upstream.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "date": "2025-01-06",
                "totalImpressions": 10000,
                "totalClicks": 500,
                "totalConversions": 50,
                "totalSpend": 100000.0,
                "totalRevenue": 500000.0
            }
        }
    )

    date: DateType = Field(..., description="Calendar day")
    totalImpressions: float = Field(..., ge=0, description="Impressions on the day")
    totalClicks: float = Field(..., ge=0, description="Clicks on the day")
    totalConversions: float = Field(..., ge=0, description="Conversions on the day")
    totalSpend: float = Field(..., ge=0, description="Spend on the day")
    totalRevenue: float = Field(..., ge=0, description="Revenue on the day")


# =============================================================================
# Segment Models
# =============================================================================


class TimeDistribution(BaseModel):
    """
    Weekday/weekend and per-day counts of anomaly detection times.
    """
    weekday: int = Field(default=0, ge=0, description="Anomalies detected Mon-Fri")
    weekend: int = Field(default=0, ge=0, description="Anomalies detected Sat-Sun")
    byDayOfWeek: Dict[DayOfWeek, int] = Field(
        default_factory=lambda: {day: 0 for day in DayOfWeek},
        description="Anomaly count per day name"
    )


class Segment(BaseModel):
    """
    Group of anomalies sharing a segment key (currently the campaign).

    severityScore is the sum of severity weights and is the ranking key.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "key": "cmp-123",
                "name": "Spring Sale",
                "segmentType": "campaign",
                "anomalyCount": 2,
                "severityScore": 5,
                "avgSeverityScore": 2.5,
                "dominantType": "spike",
                "mostAffectedMetric": "ctr"
            }
        }
    )

    key: str = Field(..., description="Segment key (campaign id)")
    name: str = Field(..., description="Human-readable segment name")
    segmentType: SegmentType = Field(default=SegmentType.CAMPAIGN, description="Grouping used")
    anomalies: List[Anomaly] = Field(default_factory=list, description="Anomalies in this segment")
    anomalyCount: int = Field(..., ge=0, description="Number of anomalies")
    severityScore: int = Field(..., ge=0, description="Sum of severity weights")
    avgSeverityScore: float = Field(..., ge=0.0, description="Mean severity weight")
    dominantType: Optional[AnomalyType] = Field(default=None, description="Most frequent anomaly type")
    mostAffectedMetric: Optional[str] = Field(default=None, description="Most frequent metric")
    timeDistribution: TimeDistribution = Field(
        default_factory=TimeDistribution,
        description="When the segment's anomalies were detected"
    )


class MetricAggregate(BaseModel):
    """
    Per-metric sub-aggregate inside a campaign comparison.
    """
    anomalyCount: int = Field(..., ge=0, description="Anomalies on this metric")
    avgChange: float = Field(..., description="Mean signed changePercent")


class CampaignComparison(BaseModel):
    """
    Structured comparison of one campaign's anomaly load.

    healthScore = max(0, 100 - anomalyCount*10 - avgSeverity*15); lower is worse.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "campaignId": "cmp-123",
                "campaignName": "Spring Sale",
                "anomalyCount": 3,
                "avgSeverity": 3.0,
                "healthScore": 25.0,
                "dominantAnomalyType": "drop",
                "metrics": {"ctr": {"anomalyCount": 2, "avgChange": -40.0}}
            }
        }
    )

    campaignId: str = Field(..., description="Campaign identifier")
    campaignName: str = Field(..., description="Campaign display name")
    anomalyCount: int = Field(..., ge=0, description="Number of anomalies")
    avgSeverity: float = Field(..., ge=0.0, description="Mean severity weight (unrounded)")
    healthScore: float = Field(..., ge=0.0, le=100.0, description="0-100 health score")
    dominantAnomalyType: Optional[AnomalyType] = Field(default=None, description="Most frequent anomaly type")
    metrics: Dict[str, MetricAggregate] = Field(default_factory=dict, description="Per-metric aggregates")


# =============================================================================
# Temporal Pattern Models
# =============================================================================


class TimePatternResult(BaseModel):
    """
    Classification of the anomaly detection-time distribution.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "pattern": "weekday_spike",
                "confidence": 0.9,
                "details": "Anomalies are concentrated on weekdays (90% Mon-Fri).",
                "recommendedMonitoring": ["Monitor weekday morning performance closely"]
            }
        }
    )

    pattern: TimePattern = Field(..., description="Detected pattern")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Pattern confidence")
    details: str = Field(..., description="Explanation naming the dominant period")
    recommendedMonitoring: List[str] = Field(..., min_length=1, description="Follow-up monitoring actions")
    distribution: TimeDistribution = Field(default_factory=TimeDistribution, description="Underlying counts")


class KPIAverages(BaseModel):
    """
    Mean daily KPI values over a bucket of days.
    """
    impressions: float = Field(default=0.0, description="Mean daily impressions")
    clicks: float = Field(default=0.0, description="Mean daily clicks")
    conversions: float = Field(default=0.0, description="Mean daily conversions")
    spend: float = Field(default=0.0, description="Mean daily spend")
    revenue: float = Field(default=0.0, description="Mean daily revenue")
    sampleSize: int = Field(default=0, ge=0, description="Days in the bucket")


class KPIDeviation(BaseModel):
    """
    One metric on one day that deviated from its weekday baseline.
    """
    date: DateType = Field(..., description="Flagged day")
    dayOfWeek: DayOfWeek = Field(..., description="Weekday of the flagged day")
    metric: str = Field(..., description="Metric that deviated")
    value: float = Field(..., description="Observed value")
    baseline: float = Field(..., description="Mean of all same-weekday days (the dayOfWeekAvg value)")
    deviation: float = Field(..., description="Relative deviation (|value - baseline| / baseline)")


class KPITimePatternResult(BaseModel):
    """
    Day-of-week baselines and deviating days computed from raw daily aggregates.

    Buckets with no days are None (weekday/weekend) or omitted (dayOfWeekAvg).
    """
    weekdayAvg: Optional[KPIAverages] = Field(default=None, description="Mean over Mon-Fri days")
    weekendAvg: Optional[KPIAverages] = Field(default=None, description="Mean over Sat-Sun days")
    dayOfWeekAvg: Dict[DayOfWeek, KPIAverages] = Field(
        default_factory=dict,
        description="Mean per weekday name (only weekdays with data)"
    )
    anomalyDays: List[DateType] = Field(default_factory=list, description="Days deviating from their weekday mean")
    anomalyDetails: List[KPIDeviation] = Field(default_factory=list, description="Per-metric deviations behind anomalyDays")


# =============================================================================
# Metric Category / Correlation / Propagation Models
# =============================================================================


class MetricCategoryResult(BaseModel):
    """
    Summary of anomalies falling in one semantic metric category.
    """
    category: MetricCategory = Field(..., description="Category key")
    name: str = Field(..., description="Category display name")
    anomalyCount: int = Field(..., ge=1, description="Anomalies in the category")
    avgSeverityScore: float = Field(..., ge=0.0, description="Mean severity weight")
    dominantType: AnomalyType = Field(..., description="Most frequent type, first-seen wins ties")
    mostAffectedMetric: str = Field(..., description="Most frequent metric in the category")
    anomalies: List[Anomaly] = Field(default_factory=list, description="Anomalies in the category")


class Correlation(BaseModel):
    """
    Co-movement between two metrics observed on the same campaign and day.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "metric1": "cpa",
                "metric2": "roas",
                "correlationType": "negative",
                "strength": 1.0,
                "sampleCount": 2,
                "description": "cpa and roas move in opposite directions."
            }
        }
    )

    metric1: str = Field(..., description="First metric (lexicographically smaller)")
    metric2: str = Field(..., description="Second metric")
    correlationType: CorrelationType = Field(..., description="positive or negative")
    strength: float = Field(..., ge=0.0, le=1.0, description="Share of samples agreeing with the type")
    sampleCount: int = Field(..., ge=1, description="Paired samples observed")
    description: str = Field(default="", description="Human-readable explanation")


class PropagationPath(BaseModel):
    """
    Root cause -> downstream effects chain within a single campaign.
    """
    rootAnomaly: Anomaly = Field(..., description="Earliest anomaly in the cluster")
    propagationChain: List[str] = Field(..., min_length=2, description="Metric names, root first")
    propagatedAnomalies: List[Anomaly] = Field(..., min_length=1, description="Downstream anomalies by time")
    impactScore: float = Field(..., ge=0.0, description="Mean severity weight over the cluster")


# =============================================================================
# Insight / Aggregate Result Models
# =============================================================================


class Insight(BaseModel):
    """
    Natural-language finding with optional concrete action items.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "high-risk-campaigns",
                "type": "warning",
                "title": "High-risk campaigns detected",
                "description": "1 campaign has 2 or more critical anomalies.",
                "confidence": 0.9,
                "relatedSegments": ["Spring Sale"],
                "actionItems": ["Review recent setting changes"]
            }
        }
    )

    id: str = Field(..., description="Stable insight identifier")
    type: InsightType = Field(..., description="warning, recommendation or info")
    title: str = Field(..., description="Short title")
    description: str = Field(..., description="Renderable description")
    confidence: float = Field(default=0.5, ge=0.0, le=1.0, description="Confidence 0-1")
    relatedSegments: List[str] = Field(default_factory=list, description="Names of related segments")
    actionItems: Optional[List[str]] = Field(default=None, description="Concrete next steps")


class SegmentAnalysisResult(BaseModel):
    """
    Aggregate result of analyze_segments.
    """
    segmentType: SegmentType = Field(default=SegmentType.CAMPAIGN, description="Grouping used")
    segments: List[Segment] = Field(default_factory=list, description="Segments ranked by severity")
    insights: List[Insight] = Field(default_factory=list, description="Ranked insights")
    correlations: List[Correlation] = Field(default_factory=list, description="Detected correlations")
    propagationPath: Optional[PropagationPath] = Field(default=None, description="First propagation cluster found")
    timePattern: Optional[TimePatternResult] = Field(default=None, description="Anomaly time pattern")
    campaignComparisons: List[CampaignComparison] = Field(default_factory=list, description="Worst campaigns first")
    metricCategories: Dict[MetricCategory, MetricCategoryResult] = Field(
        default_factory=dict,
        description="Per-category summaries"
    )
