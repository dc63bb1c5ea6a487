"""
Propagation Path Analyzer - root cause -> downstream effects within a campaign.

Within one campaign, anomalies are ordered by detection time (same-instant ties
go to the more severe anomaly, then input order). Walking that order, the first
anomaly with at least one later anomaly inside propagation_window_hours becomes
the root, and every later anomaly inside the window becomes a propagated effect.

Only the first cluster found is returned, scanning campaigns in first-seen
order. Independent clusters in later campaigns are not surfaced; this is a
known scope limitation of the aggregate result, which carries a single path.
"""

from datetime import timedelta
from typing import Any, Iterable, List, Mapping, Optional, Union
import logging

from anomaly_segments.core.config import Settings, get_settings
from anomaly_segments.models import Anomaly, PropagationPath
from anomaly_segments.services.scoring import (
    coerce_anomalies,
    group_by_campaign,
    mean,
    severity_score,
)

logger = logging.getLogger(__name__)


def _order_by_detection(anomalies: List[Anomaly]) -> List[Anomaly]:
    indexed = list(enumerate(anomalies))
    indexed.sort(key=lambda pair: (pair[1].detectedAt, -severity_score(pair[1].severity), pair[0]))
    return [anomaly for _, anomaly in indexed]


def _first_cluster(ordered: List[Anomaly], window: timedelta) -> Optional[List[Anomaly]]:
    for i, root in enumerate(ordered):
        cluster = [root]
        for candidate in ordered[i + 1:]:
            if candidate.detectedAt - root.detectedAt > window:
                break
            cluster.append(candidate)
        if len(cluster) >= 2:
            return cluster
    return None


def find_propagation_path(
    anomalies: Iterable[Union[Anomaly, Mapping[str, Any]]],
    settings: Optional[Settings] = None,
) -> Optional[PropagationPath]:
    """
    Identify the first same-campaign cluster of anomalies close together in time.

    Args:
        anomalies: Detected anomalies (models or mappings)
        settings: Threshold overrides; defaults to get_settings()

    Returns:
        PropagationPath for the first qualifying cluster, or None when no campaign
        has two anomalies within the window

    Raises:
        AnalysisInputError: If any anomaly is malformed
    """
    settings = settings or get_settings()
    records = coerce_anomalies(anomalies)
    window = timedelta(hours=settings.propagation_window_hours)

    for campaign_id, campaign_anomalies in group_by_campaign(records).items():
        if len(campaign_anomalies) < 2:
            continue

        cluster = _first_cluster(_order_by_detection(campaign_anomalies), window)
        if cluster is None:
            continue

        root, propagated = cluster[0], cluster[1:]
        logger.debug(
            f"Propagation in campaign {campaign_id}: root {root.metric} "
            f"-> {[a.metric for a in propagated]}"
        )
        return PropagationPath(
            rootAnomaly=root,
            propagationChain=[a.metric for a in cluster],
            propagatedAnomalies=propagated,
            impactScore=mean([severity_score(a.severity) for a in cluster]),
        )

    return None
