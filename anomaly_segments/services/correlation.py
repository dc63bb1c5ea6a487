"""
Correlation Detector - metrics whose anomalies move together within a campaign.

Anomalies are bucketed by (campaignId, calendar day of detectedAt). Every pair of
anomalies on different metrics inside a bucket is one paired sample for that
unordered metric pair:

    sign(changePercent_1) * sign(changePercent_2) > 0  -> agreeing sample
    sign(changePercent_1) * sign(changePercent_2) < 0  -> opposing sample
    either change is 0                                 -> counted, neither side

A pair needs at least min_correlation_samples (2) samples to be considered, which
keeps single coincidences from being reported. It is positive when the agreeing
share exceeds correlation_agreement_ratio (0.7), negative when the opposing share
does, and otherwise not reported.
"""

from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union
import logging

import numpy as np

from anomaly_segments.core.config import Settings, get_settings
from anomaly_segments.models import (
    Anomaly,
    Correlation,
    CorrelationType,
)
from anomaly_segments.services.scoring import coerce_anomalies

logger = logging.getLogger(__name__)


def _bucket_by_campaign_day(anomalies: List[Anomaly]) -> Dict[Tuple[str, date], List[Anomaly]]:
    buckets: Dict[Tuple[str, date], List[Anomaly]] = {}
    for anomaly in anomalies:
        key = (anomaly.campaignId, anomaly.detectedAt.date())
        buckets.setdefault(key, []).append(anomaly)
    return buckets


def _collect_pair_samples(
    buckets: Dict[Tuple[str, date], List[Anomaly]]
) -> Dict[Tuple[str, str], List[float]]:
    """
    Sign products of changePercent for every cross-metric pair, in first-seen order.
    """
    samples: Dict[Tuple[str, str], List[float]] = {}
    for bucket in buckets.values():
        if len(bucket) < 2:
            continue
        for i in range(len(bucket)):
            for j in range(i + 1, len(bucket)):
                a1, a2 = bucket[i], bucket[j]
                if a1.metric == a2.metric:
                    continue
                pair = tuple(sorted((a1.metric, a2.metric)))
                product = float(np.sign(a1.changePercent) * np.sign(a2.changePercent))
                samples.setdefault(pair, []).append(product)
    return samples


def describe_correlation(metric1: str, metric2: str, correlation_type: CorrelationType) -> str:
    if correlation_type == CorrelationType.POSITIVE:
        return (
            f"{metric1} and {metric2} tend to move together. An anomaly in one "
            f"metric is likely to show up in the other."
        )
    return (
        f"{metric1} and {metric2} move in opposite directions. When one rises "
        f"the other tends to fall."
    )


def _classify(products: List[float], settings: Settings) -> Optional[Tuple[CorrelationType, float]]:
    signs = np.asarray(products)
    total = len(signs)
    agreeing = float(np.count_nonzero(signs > 0)) / total
    opposing = float(np.count_nonzero(signs < 0)) / total

    if agreeing > settings.correlation_agreement_ratio:
        return CorrelationType.POSITIVE, agreeing
    if opposing > settings.correlation_agreement_ratio:
        return CorrelationType.NEGATIVE, opposing
    return None


def detect_correlations(
    anomalies: Iterable[Union[Anomaly, Mapping[str, Any]]],
    settings: Optional[Settings] = None,
) -> List[Correlation]:
    """
    Find metric pairs whose anomalies move together or oppositely.

    Args:
        anomalies: Detected anomalies (models or mappings)
        settings: Threshold overrides; defaults to get_settings()

    Returns:
        Correlations sorted by strength descending, ties in first-seen pair order

    Raises:
        AnalysisInputError: If any anomaly is malformed
    """
    settings = settings or get_settings()
    records = coerce_anomalies(anomalies)
    samples = _collect_pair_samples(_bucket_by_campaign_day(records))

    correlations: List[Correlation] = []
    for (metric1, metric2), products in samples.items():
        if len(products) < settings.min_correlation_samples:
            continue
        classified = _classify(products, settings)
        if classified is None:
            continue
        correlation_type, strength = classified
        correlations.append(
            Correlation(
                metric1=metric1,
                metric2=metric2,
                correlationType=correlation_type,
                strength=strength,
                sampleCount=len(products),
                description=describe_correlation(metric1, metric2, correlation_type),
            )
        )

    # list.sort is stable, so equal strengths keep first-seen order
    correlations.sort(key=lambda c: -c.strength)

    logger.debug(f"Found {len(correlations)} correlations from {len(samples)} metric pairs")
    return correlations
