"""
Segment Builder and analysis orchestrator.

build_segments groups anomalies into one segment per campaign and ranks them by
severity score (sum of severity weights, critical=3 / warning=2 / info=1),
highest first. The sort is stable, so equally scored segments keep the order in
which their campaigns first appeared in the input.

analyze_segments is the main entry point. It validates the input once, then runs:
1. Segment Builder
2. Campaign Comparator
3. Metric Category Analyzer
4. Correlation Detector
5. Propagation Path Analyzer
6. Temporal Pattern Detector (anomaly-based)
and feeds their results to the Insight Generator.
"""

from typing import Any, Iterable, List, Mapping, Optional, Union
import logging

from anomaly_segments.core.config import Settings, get_settings
from anomaly_segments.models import (
    Anomaly,
    Segment,
    SegmentAnalysisResult,
    SegmentType,
)
from anomaly_segments.services.campaign_comparison import compare_campaigns
from anomaly_segments.services.correlation import detect_correlations
from anomaly_segments.services.insights import generate_insights
from anomaly_segments.services.metric_categories import analyze_by_metric
from anomaly_segments.services.propagation import find_propagation_path
from anomaly_segments.services.scoring import (
    calculate_time_distribution,
    campaign_display_name,
    coerce_anomalies,
    dominant_value,
    group_by_campaign,
    total_severity,
)
from anomaly_segments.services.time_patterns import analyze_time_patterns

logger = logging.getLogger(__name__)


def build_segments(
    anomalies: Iterable[Union[Anomaly, Mapping[str, Any]]]
) -> List[Segment]:
    """
    Group anomalies by campaign and rank the groups by severity score.

    Every input anomaly lands in exactly one segment.

    Args:
        anomalies: Detected anomalies (models or mappings)

    Returns:
        Segments sorted descending by severityScore, stable on ties; empty list
        for empty input

    Raises:
        AnalysisInputError: If any anomaly is malformed
    """
    records = coerce_anomalies(anomalies)
    segments: List[Segment] = []

    for campaign_id, campaign_anomalies in group_by_campaign(records).items():
        score = total_severity(campaign_anomalies)
        segments.append(
            Segment(
                key=campaign_id,
                name=campaign_display_name(campaign_anomalies, campaign_id),
                segmentType=SegmentType.CAMPAIGN,
                anomalies=campaign_anomalies,
                anomalyCount=len(campaign_anomalies),
                severityScore=score,
                avgSeverityScore=score / len(campaign_anomalies),
                dominantType=dominant_value(a.type for a in campaign_anomalies),
                mostAffectedMetric=dominant_value(a.metric for a in campaign_anomalies),
                timeDistribution=calculate_time_distribution(campaign_anomalies),
            )
        )

    segments.sort(key=lambda s: s.severityScore, reverse=True)
    return segments


def analyze_segments(
    anomalies: Iterable[Union[Anomaly, Mapping[str, Any]]],
    settings: Optional[Settings] = None,
) -> SegmentAnalysisResult:
    """
    Run the full segment analysis over a complete anomaly set.

    The whole analysis window must be collected before calling; partial or
    streaming input is not supported.

    Args:
        anomalies: Detected anomalies (models or mappings)
        settings: Threshold overrides; defaults to get_settings()

    Returns:
        SegmentAnalysisResult with ranked segments, ranked insights, correlations,
        the first propagation path (if any), and the supporting comparisons,
        categories and time pattern

    Raises:
        AnalysisInputError: If any anomaly is malformed
    """
    settings = settings or get_settings()
    records = coerce_anomalies(anomalies)

    segments = build_segments(records)
    comparisons = compare_campaigns(records)
    categories = analyze_by_metric(records)
    correlations = detect_correlations(records, settings=settings)
    propagation = find_propagation_path(records, settings=settings)
    time_pattern = analyze_time_patterns(records, settings=settings)

    insights = generate_insights(
        records,
        segments,
        comparisons=comparisons,
        categories=categories,
        correlations=correlations,
        propagation=propagation,
        time_pattern=time_pattern,
        settings=settings,
    )

    logger.info(
        f"Segment analysis: {len(records)} anomalies, {len(segments)} segments, "
        f"{len(correlations)} correlations, {len(insights)} insights, "
        f"propagation={'yes' if propagation else 'no'}"
    )

    return SegmentAnalysisResult(
        segmentType=SegmentType.CAMPAIGN,
        segments=segments,
        insights=insights,
        correlations=correlations,
        propagationPath=propagation,
        timePattern=time_pattern,
        campaignComparisons=comparisons,
        metricCategories=categories,
    )
