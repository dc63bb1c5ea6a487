"""
Metric Category Analyzer.

Buckets anomalies into fixed semantic categories and summarizes each one.
Category membership is an explicit constant table so it can be tested
independently of the scoring logic. Metrics outside the table are not
categorized (they still count in every other analysis).
"""

from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Union
import logging

from anomaly_segments.models import (
    Anomaly,
    MetricCategory,
    MetricCategoryResult,
)
from anomaly_segments.services.scoring import (
    coerce_anomalies,
    dominant_value,
    mean,
    severity_score,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Category Table
# =============================================================================

METRIC_CATEGORIES: Dict[MetricCategory, FrozenSet[str]] = {
    MetricCategory.SPEND_RELATED: frozenset({"spend", "cpa", "cpc", "cpm", "budget"}),
    MetricCategory.ENGAGEMENT: frozenset({"ctr", "clicks", "impressions"}),
    MetricCategory.CONVERSION: frozenset({"conversions", "cvr", "roas", "revenue"}),
}

CATEGORY_LABELS: Dict[MetricCategory, str] = {
    MetricCategory.SPEND_RELATED: "Spend-related",
    MetricCategory.ENGAGEMENT: "Engagement",
    MetricCategory.CONVERSION: "Conversion",
}


def get_metric_category(metric: str) -> Optional[MetricCategory]:
    """
    Look up the category of a metric name (case-insensitive).

    Returns:
        The category, or None when the metric is not mapped
    """
    key = metric.strip().lower()
    for category, members in METRIC_CATEGORIES.items():
        if key in members:
            return category
    return None


def analyze_by_metric(
    anomalies: Iterable[Union[Anomaly, Mapping[str, Any]]]
) -> Dict[MetricCategory, MetricCategoryResult]:
    """
    Summarize anomalies per metric category.

    Args:
        anomalies: Detected anomalies (models or mappings)

    Returns:
        Mapping in category declaration order, containing only categories with at
        least one anomaly. Each entry carries count, mean severity weight, dominant
        anomaly type (first-seen wins ties) and the most affected metric.

    Raises:
        AnalysisInputError: If any anomaly is malformed
    """
    records = coerce_anomalies(anomalies)
    buckets: Dict[MetricCategory, List[Anomaly]] = {category: [] for category in METRIC_CATEGORIES}
    unmapped: List[str] = []

    for anomaly in records:
        category = get_metric_category(anomaly.metric)
        if category is None:
            unmapped.append(anomaly.metric)
            continue
        buckets[category].append(anomaly)

    if unmapped:
        logger.debug(f"{len(unmapped)} anomalies on uncategorized metrics: {sorted(set(unmapped))}")

    results: Dict[MetricCategory, MetricCategoryResult] = {}
    for category, category_anomalies in buckets.items():
        if not category_anomalies:
            continue
        results[category] = MetricCategoryResult(
            category=category,
            name=CATEGORY_LABELS[category],
            anomalyCount=len(category_anomalies),
            avgSeverityScore=mean([severity_score(a.severity) for a in category_anomalies]),
            dominantType=dominant_value(a.type for a in category_anomalies),
            mostAffectedMetric=dominant_value(a.metric for a in category_anomalies),
            anomalies=category_anomalies,
        )

    return results
