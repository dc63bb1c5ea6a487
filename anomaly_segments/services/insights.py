"""
Insight Generator - deterministic rules over the already-computed analyses.

Rules are independent; any number may fire for one analysis:

    id                        type            fires when
    ------------------------  --------------  ---------------------------------------------
    high-risk-campaigns       warning         a campaign has >= 2 critical anomalies
    anomaly-propagation       warning         a propagation path was found
    healthy-status            recommendation  no anomaly is above info severity
    metric-concentration      info            one metric holds > 40% of anomalies
    time-pattern              info            a non-consistent time pattern, confidence > 0.6
    metric-correlation        info            at least one correlation was detected
    category-concentration    info            one category holds a majority of categorized anomalies

Insights are ranked warning -> recommendation -> info, keeping rule order
within a type. Every insight carries enough text to render without lookups.
"""

from typing import Dict, List, Optional
import logging

from anomaly_segments.core.config import Settings, get_settings
from anomaly_segments.models import (
    Anomaly,
    CampaignComparison,
    Correlation,
    Insight,
    InsightType,
    MetricCategory,
    MetricCategoryResult,
    PropagationPath,
    Segment,
    Severity,
    TimePattern,
    TimePatternResult,
)
from anomaly_segments.services.scoring import (
    SEVERITY_WEIGHTS,
    dominant_value,
    ratio,
)

logger = logging.getLogger(__name__)


INSIGHT_TYPE_ORDER: Dict[InsightType, int] = {
    InsightType.WARNING: 0,
    InsightType.RECOMMENDATION: 1,
    InsightType.INFO: 2,
}

MAX_SEVERITY_WEIGHT: int = max(SEVERITY_WEIGHTS.values())


# =============================================================================
# Individual Rules
# =============================================================================


def _high_risk_campaigns(
    segments: List[Segment],
    comparisons: List[CampaignComparison],
    settings: Settings,
) -> Optional[Insight]:
    high_risk = [
        s for s in segments
        if sum(1 for a in s.anomalies if a.severity == Severity.CRITICAL) >= settings.high_risk_critical_count
    ]
    if not high_risk:
        return None

    description = (
        f"{len(high_risk)} campaign(s) have {settings.high_risk_critical_count} or more "
        f"critical anomalies. Immediate review is required."
    )
    high_risk_keys = {s.key for s in high_risk}
    worst = next((c for c in comparisons if c.campaignId in high_risk_keys), None)
    if worst is not None:
        description += f" Lowest health score: {worst.campaignName} ({worst.healthScore:.0f}/100)."

    return Insight(
        id="high-risk-campaigns",
        type=InsightType.WARNING,
        title="High-risk campaigns detected",
        description=description,
        confidence=0.9,
        relatedSegments=[s.name for s in high_risk],
        actionItems=[
            "Check recent setting changes on the affected campaigns",
            "Review budget and targeting settings",
            "Monitor competitor activity",
        ],
    )


def _anomaly_propagation(
    propagation: Optional[PropagationPath],
    segments: List[Segment],
) -> Optional[Insight]:
    if propagation is None:
        return None

    root = propagation.rootAnomaly
    chain = " -> ".join(propagation.propagationChain)
    segment_name = next((s.name for s in segments if s.key == root.campaignId), root.campaignId)

    return Insight(
        id="anomaly-propagation",
        type=InsightType.WARNING,
        title=f"Anomaly propagation from {root.metric}",
        description=(
            f"In {segment_name}, a {root.severity.value} {root.metric} anomaly was followed by "
            f"{len(propagation.propagatedAnomalies)} related anomalies within hours: {chain}."
        ),
        confidence=min(1.0, propagation.impactScore / MAX_SEVERITY_WEIGHT),
        relatedSegments=[segment_name],
        actionItems=[
            f"Investigate the {root.metric} change first as the likely root cause",
            "Verify whether downstream metrics recover once the root cause is addressed",
        ],
    )


def _healthy_status(anomalies: List[Anomaly]) -> Optional[Insight]:
    if any(a.severity != Severity.INFO for a in anomalies):
        return None

    return Insight(
        id="healthy-status",
        type=InsightType.RECOMMENDATION,
        title="Overall status is healthy",
        description=(
            "No anomalies above info severity were detected. Campaigns are running "
            "normally; keep current settings and continue routine monitoring."
        ),
        confidence=0.8,
    )


def _metric_concentration(anomalies: List[Anomaly], settings: Settings) -> Optional[Insight]:
    top_metric = dominant_value(a.metric for a in anomalies)
    if top_metric is None:
        return None

    count = sum(1 for a in anomalies if a.metric == top_metric)
    share = ratio(count, len(anomalies))
    if count < 2 or share <= settings.metric_concentration_ratio:
        return None

    return Insight(
        id="metric-concentration",
        type=InsightType.INFO,
        title=f"Anomalies concentrated on {top_metric}",
        description=f"{share * 100:.0f}% of all anomalies ({count} of {len(anomalies)}) occurred on the {top_metric} metric.",
        confidence=share,
        actionItems=[
            f"Review all settings related to {top_metric}",
            f"Analyze correlations between {top_metric} and related metrics",
        ],
    )


def _time_pattern(time_pattern: Optional[TimePatternResult], settings: Settings) -> Optional[Insight]:
    if time_pattern is None or time_pattern.pattern == TimePattern.CONSISTENT:
        return None
    if time_pattern.confidence <= settings.time_pattern_insight_confidence:
        return None

    return Insight(
        id="time-pattern",
        type=InsightType.INFO,
        title="Time pattern detected",
        description=time_pattern.details,
        confidence=time_pattern.confidence,
        actionItems=list(time_pattern.recommendedMonitoring),
    )


def _metric_correlation(correlations: List[Correlation]) -> Optional[Insight]:
    if not correlations:
        return None

    strongest = correlations[0]
    pairs = ", ".join(
        f"{c.metric1}/{c.metric2} ({c.correlationType.value})" for c in correlations
    )
    return Insight(
        id="metric-correlation",
        type=InsightType.INFO,
        title=f"{len(correlations)} correlated metric pair(s) detected",
        description=f"{strongest.description} Correlated pairs: {pairs}.",
        confidence=strongest.strength,
        actionItems=[
            f"Treat {strongest.metric1} and {strongest.metric2} anomalies as one incident when they co-occur",
        ],
    )


def _category_concentration(
    categories: Dict[MetricCategory, MetricCategoryResult]
) -> Optional[Insight]:
    total = sum(r.anomalyCount for r in categories.values())
    if total < 2:
        return None

    top = max(categories.values(), key=lambda r: r.anomalyCount)
    share = ratio(top.anomalyCount, total)
    if share <= 0.5:
        return None

    return Insight(
        id="category-concentration",
        type=InsightType.INFO,
        title=f"{top.name} metrics account for most anomalies",
        description=(
            f"{top.anomalyCount} of {total} categorized anomalies are {top.name.lower()} "
            f"(mostly {top.mostAffectedMetric}, dominant type: {top.dominantType.value})."
        ),
        confidence=share,
    )


# =============================================================================
# Generator
# =============================================================================


def generate_insights(
    anomalies: List[Anomaly],
    segments: List[Segment],
    comparisons: Optional[List[CampaignComparison]] = None,
    categories: Optional[Dict[MetricCategory, MetricCategoryResult]] = None,
    correlations: Optional[List[Correlation]] = None,
    propagation: Optional[PropagationPath] = None,
    time_pattern: Optional[TimePatternResult] = None,
    settings: Optional[Settings] = None,
) -> List[Insight]:
    """
    Evaluate every insight rule and return the ranked insights that fired.

    Args:
        anomalies: Validated anomalies the analyses were computed from
        segments: Ranked segments
        comparisons: Campaign comparisons, worst first
        categories: Metric category summaries
        correlations: Detected correlations, strongest first
        propagation: First propagation path, if any
        time_pattern: Anomaly time pattern
        settings: Threshold overrides; defaults to get_settings()

    Returns:
        Insights ranked warning -> recommendation -> info
    """
    settings = settings or get_settings()

    candidates = [
        _high_risk_campaigns(segments, comparisons or [], settings),
        _anomaly_propagation(propagation, segments),
        _healthy_status(anomalies),
        _metric_concentration(anomalies, settings),
        _time_pattern(time_pattern, settings),
        _metric_correlation(correlations or []),
        _category_concentration(categories or {}),
    ]
    insights = [insight for insight in candidates if insight is not None]
    insights.sort(key=lambda i: INSIGHT_TYPE_ORDER[i.type])

    logger.debug(f"Generated insights: {[i.id for i in insights]}")
    return insights
