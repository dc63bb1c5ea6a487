"""
Campaign Comparator - per-campaign anomaly load and health scoring.

Each campaign gets anomaly count, mean severity, per-metric sub-aggregates and a
0-100 health score:

    healthScore = max(0, 100 - anomalyCount * 10 - avgSeverity * 15)

Fewer and milder anomalies mean a healthier campaign. Results are sorted worst
first so the most at-risk campaign leads the list.
"""

from typing import Any, Dict, Iterable, List, Mapping, Union
import logging

from anomaly_segments.models import (
    Anomaly,
    CampaignComparison,
    MetricAggregate,
)
from anomaly_segments.services.scoring import (
    campaign_display_name,
    coerce_anomalies,
    dominant_value,
    group_by_campaign,
    mean,
    severity_score,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Health Score Constants
# =============================================================================

HEALTH_SCORE_MAX: float = 100.0

# Points deducted per anomaly
ANOMALY_COUNT_PENALTY: float = 10.0

# Points deducted per unit of mean severity weight
SEVERITY_PENALTY: float = 15.0


def calculate_health_score(anomaly_count: int, avg_severity: float) -> float:
    """
    Calculate a campaign health score, clamped to [0, 100].

    Args:
        anomaly_count: Number of anomalies on the campaign
        avg_severity: Mean severity weight of those anomalies

    Returns:
        Health score; 100 is a campaign with no anomalies
    """
    raw = HEALTH_SCORE_MAX - anomaly_count * ANOMALY_COUNT_PENALTY - avg_severity * SEVERITY_PENALTY
    return min(HEALTH_SCORE_MAX, max(0.0, raw))


def _aggregate_metrics(anomalies: List[Anomaly]) -> Dict[str, MetricAggregate]:
    changes: Dict[str, List[float]] = {}
    for anomaly in anomalies:
        changes.setdefault(anomaly.metric, []).append(anomaly.changePercent)
    return {
        metric: MetricAggregate(anomalyCount=len(values), avgChange=mean(values))
        for metric, values in changes.items()
    }


def compare_campaigns(
    anomalies: Iterable[Union[Anomaly, Mapping[str, Any]]]
) -> List[CampaignComparison]:
    """
    Build a structured comparison for every campaign with anomalies.

    Args:
        anomalies: Detected anomalies (models or mappings)

    Returns:
        One CampaignComparison per campaign, sorted ascending by healthScore,
        ties broken by campaign name then id

    Raises:
        AnalysisInputError: If any anomaly is malformed
    """
    records = coerce_anomalies(anomalies)
    comparisons: List[CampaignComparison] = []

    for campaign_id, campaign_anomalies in group_by_campaign(records).items():
        avg_severity = mean([severity_score(a.severity) for a in campaign_anomalies])
        comparisons.append(
            CampaignComparison(
                campaignId=campaign_id,
                campaignName=campaign_display_name(campaign_anomalies, campaign_id),
                anomalyCount=len(campaign_anomalies),
                avgSeverity=avg_severity,
                healthScore=calculate_health_score(len(campaign_anomalies), avg_severity),
                dominantAnomalyType=dominant_value(a.type for a in campaign_anomalies),
                metrics=_aggregate_metrics(campaign_anomalies),
            )
        )

    comparisons.sort(key=lambda c: (c.healthScore, c.campaignName, c.campaignId))

    logger.debug(f"Compared {len(comparisons)} campaigns across {len(records)} anomalies")
    return comparisons
