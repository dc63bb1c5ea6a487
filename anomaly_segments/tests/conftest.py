"""
Pytest Configuration and Shared Fixtures for the Anomaly Segments Tests.

This module provides:
- Data factories for Anomaly and DailyAggregate records with sensible defaults
- Calendar anchors (2025-01-06 is a Monday) so weekday logic is explicit
- Settings fixtures that bypass the environment-backed cache

All factories are deterministic; ids come from a counter, not randomness, so
idempotence checks compare byte-identical output.
"""

import itertools
from datetime import date, datetime, timedelta
from typing import Any, Dict, Generator, List

import pytest

from anomaly_segments.core.config import Settings, get_settings
from anomaly_segments.models import Anomaly, DailyAggregate


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Register custom markers.

    - properties: Cross-cutting invariants (ordering, bounds, idempotence)
    """
    config.addinivalue_line(
        'markers',
        'properties: marks invariant tests that hold for every input'
    )


# ============================================================
# CALENDAR ANCHORS
# ============================================================

# Monday 2025-01-06 09:00
MONDAY = datetime(2025, 1, 6, 9, 0, 0)
SATURDAY = datetime(2025, 1, 4, 9, 0, 0)

MONDAY_DATE = date(2025, 1, 6)


# ============================================================
# DATA FACTORIES
# ============================================================

_anomaly_ids = itertools.count(1)


def make_anomaly(**overrides: Any) -> Anomaly:
    """
    Create an Anomaly with realistic defaults.

    Defaults describe a warning-level CTR spike on campaign-1 detected on
    Monday 2025-01-06 09:00. Any field can be overridden by keyword.
    """
    data: Dict[str, Any] = {
        'id': f'anomaly-{next(_anomaly_ids)}',
        'campaignId': 'campaign-1',
        'campaignName': 'Test Campaign',
        'type': 'spike',
        'severity': 'warning',
        'metric': 'ctr',
        'currentValue': 3.5,
        'previousValue': 2.0,
        'changePercent': 75.0,
        'message': 'CTR increased 75%',
        'detectedAt': MONDAY,
        'detail': {
            'detectionMethod': 'zscore',
            'zScore': 2.8,
            'baseline': {
                'mean': 2.0, 'stdDev': 0.3, 'median': 2.0, 'q1': 1.7, 'q3': 2.3,
                'iqr': 0.6, 'percentile95': 2.6, 'sampleSize': 14, 'min': 1.5, 'max': 2.8,
            },
            'historicalTrend': 'stable',
        },
        'recommendations': ['Analyze the cause of the CTR change'],
    }
    data.update(overrides)
    return Anomaly.model_validate(data)


def make_aggregate(day: date, **overrides: Any) -> DailyAggregate:
    """
    Create a DailyAggregate for a calendar day with flat default totals.
    """
    data: Dict[str, Any] = {
        'date': day,
        'totalImpressions': 10000,
        'totalClicks': 500,
        'totalConversions': 50,
        'totalSpend': 100000,
        'totalRevenue': 500000,
    }
    data.update(overrides)
    return DailyAggregate.model_validate(data)


def days_from(start: datetime, count: int, step: timedelta = timedelta(days=1)) -> List[datetime]:
    return [start + step * i for i in range(count)]


# ============================================================
# SETTINGS FIXTURES
# ============================================================

@pytest.fixture
def settings() -> Settings:
    """Default settings, independent of the process environment."""
    return Settings(_env_file=None)


@pytest.fixture
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear the get_settings cache before and after a test that sets env vars."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ============================================================
# SAMPLE DATA FIXTURES
# ============================================================

@pytest.fixture
def mixed_anomalies() -> List[Anomaly]:
    """
    Three campaigns with different severity loads.

    - c1 "Campaign 1": critical ctr, warning cpa (score 5)
    - c2 "Campaign 2": info ctr (score 1)
    - c3 "Campaign 3": critical spend, critical roas, info clicks (score 7)
    """
    return [
        make_anomaly(campaignId='c1', campaignName='Campaign 1', severity='critical', metric='ctr'),
        make_anomaly(campaignId='c1', campaignName='Campaign 1', severity='warning', metric='cpa',
                     detectedAt=MONDAY + timedelta(days=1)),
        make_anomaly(campaignId='c2', campaignName='Campaign 2', severity='info', metric='ctr'),
        make_anomaly(campaignId='c3', campaignName='Campaign 3', severity='critical', metric='spend',
                     type='drop', changePercent=-45.0, detectedAt=MONDAY + timedelta(days=2)),
        make_anomaly(campaignId='c3', campaignName='Campaign 3', severity='critical', metric='roas',
                     type='drop', changePercent=-30.0, detectedAt=MONDAY + timedelta(days=3)),
        make_anomaly(campaignId='c3', campaignName='Campaign 3', severity='info', metric='clicks',
                     detectedAt=MONDAY + timedelta(days=4)),
    ]
