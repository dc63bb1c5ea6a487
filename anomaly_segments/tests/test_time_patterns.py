"""
Tests for the Temporal Pattern Detector.

Covers:
- Anomaly-based weekday/weekend/periodic/consistent classification
- KPI-based day-of-week baselines from raw daily aggregates
- Deviation flagging against the same-weekday mean
"""

import math
from datetime import date, timedelta
from typing import List

import pytest

from anomaly_segments.core.config import Settings
from anomaly_segments.core.errors import AnalysisInputError
from anomaly_segments.models import Anomaly, DayOfWeek, TimePattern
from anomaly_segments.services.time_patterns import (
    analyze_kpi_time_patterns,
    analyze_time_patterns,
)
from anomaly_segments.tests.conftest import (
    MONDAY,
    MONDAY_DATE,
    SATURDAY,
    days_from,
    make_aggregate,
    make_anomaly,
)


def anomalies_at(moments) -> List[Anomaly]:
    return [make_anomaly(detectedAt=moment) for moment in moments]


# =============================================================================
# Anomaly-Based Patterns
# =============================================================================


class TestAnalyzeTimePatterns:

    def test_weekday_spike(self, settings: Settings) -> None:
        # Monday through Friday
        result = analyze_time_patterns(anomalies_at(days_from(MONDAY, 5)), settings=settings)

        assert result.pattern == TimePattern.WEEKDAY_SPIKE
        assert result.confidence > 0.7
        assert 'weekday' in result.details
        assert result.recommendedMonitoring

    def test_weekend_spike(self, settings: Settings) -> None:
        # Saturday and Sunday only
        moments = days_from(SATURDAY, 2) * 2
        result = analyze_time_patterns(anomalies_at(moments), settings=settings)

        assert result.pattern == TimePattern.WEEKEND_SPIKE
        assert result.confidence == 1.0
        assert 'weekend' in result.details

    def test_even_week_is_consistent(self, settings: Settings) -> None:
        # one anomaly per day, Monday through Sunday
        result = analyze_time_patterns(anomalies_at(days_from(MONDAY, 7)), settings=settings)

        assert result.pattern == TimePattern.CONSISTENT
        assert result.confidence == settings.consistent_confidence
        assert len(result.recommendedMonitoring) > 0

    def test_single_day_concentration_is_periodic(self, settings: Settings) -> None:
        moments = [
            MONDAY, MONDAY, MONDAY,
            MONDAY + timedelta(days=2),
            SATURDAY, SATURDAY + timedelta(days=1),
        ]
        result = analyze_time_patterns(anomalies_at(moments), settings=settings)

        assert result.pattern == TimePattern.PERIODIC
        assert result.confidence == pytest.approx(0.5)
        assert 'Monday' in result.details

    def test_distribution_is_reported(self, settings: Settings) -> None:
        result = analyze_time_patterns(anomalies_at([MONDAY, SATURDAY]), settings=settings)

        assert result.distribution.weekday == 1
        assert result.distribution.weekend == 1
        assert result.distribution.byDayOfWeek[DayOfWeek.SATURDAY] == 1

    def test_empty_input(self, settings: Settings) -> None:
        result = analyze_time_patterns([], settings=settings)

        assert result.pattern == TimePattern.CONSISTENT
        assert result.confidence == 0.0
        assert result.recommendedMonitoring

    def test_thresholds_come_from_settings(self) -> None:
        # four of five on weekdays is exactly 0.8; a stricter bar rejects it
        moments = days_from(MONDAY, 4) + [SATURDAY]
        strict = Settings(_env_file=None, weekday_spike_ratio=0.9)

        assert analyze_time_patterns(anomalies_at(moments), settings=Settings(_env_file=None)).pattern \
            == TimePattern.WEEKDAY_SPIKE
        assert analyze_time_patterns(anomalies_at(moments), settings=strict).pattern \
            != TimePattern.WEEKDAY_SPIKE

    @pytest.mark.properties
    def test_more_skew_means_more_confidence(self, settings: Settings) -> None:
        skewed = analyze_time_patterns(anomalies_at(days_from(MONDAY, 5)), settings=settings)
        weaker = analyze_time_patterns(
            anomalies_at(days_from(MONDAY, 5) * 2 + [SATURDAY, SATURDAY]),
            settings=settings,
        )

        assert skewed.pattern == weaker.pattern == TimePattern.WEEKDAY_SPIKE
        assert skewed.confidence > weaker.confidence


# =============================================================================
# KPI-Based Patterns
# =============================================================================


class TestAnalyzeKpiTimePatterns:

    def test_weekday_and_weekend_averages(self, settings: Settings) -> None:
        # Monday 2025-01-06 through Sunday 2025-01-12
        aggregates = [
            make_aggregate(day, totalClicks=150 if day.weekday() >= 5 else 550)
            for day in (MONDAY_DATE + timedelta(days=i) for i in range(7))
        ]
        result = analyze_kpi_time_patterns(aggregates, settings=settings)

        assert result.weekdayAvg.clicks == 550
        assert result.weekdayAvg.sampleSize == 5
        assert result.weekendAvg.clicks == 150
        assert result.weekendAvg.sampleSize == 2
        assert set(result.dayOfWeekAvg) == set(DayOfWeek)

    def test_day_of_week_average(self, settings: Settings) -> None:
        aggregates = [
            make_aggregate(MONDAY_DATE, totalSpend=100000),
            make_aggregate(MONDAY_DATE + timedelta(days=7), totalSpend=150000),
        ]
        result = analyze_kpi_time_patterns(aggregates, settings=settings)

        assert result.dayOfWeekAvg[DayOfWeek.MONDAY].spend == 125000
        assert result.dayOfWeekAvg[DayOfWeek.MONDAY].sampleSize == 2
        assert DayOfWeek.TUESDAY not in result.dayOfWeekAvg
        assert result.weekendAvg is None

    def test_flags_day_far_from_its_weekday_mean(self, settings: Settings) -> None:
        # four Mondays; the last one spends 3x the others
        mondays = [MONDAY_DATE + timedelta(weeks=i) for i in range(4)]
        aggregates = [make_aggregate(day) for day in mondays[:3]]
        aggregates.append(make_aggregate(mondays[3], totalSpend=300000))
        result = analyze_kpi_time_patterns(aggregates, settings=settings)

        assert result.anomalyDays == [mondays[3]]
        assert len(result.anomalyDetails) == 1
        detail = result.anomalyDetails[0]
        assert detail.metric == 'spend'
        assert detail.dayOfWeek == DayOfWeek.MONDAY
        assert detail.baseline == 150000
        assert detail.deviation == pytest.approx(1.0)

    def test_two_week_window_spike_does_not_flag_normal_sibling(self, settings: Settings) -> None:
        # 14 flat days, second Monday spends 3x; each weekday has two samples
        days = [MONDAY_DATE + timedelta(days=i) for i in range(14)]
        spike_day = date(2025, 1, 13)
        aggregates = [
            make_aggregate(day, totalSpend=300000 if day == spike_day else 100000)
            for day in days
        ]
        result = analyze_kpi_time_patterns(aggregates, settings=settings)

        assert MONDAY_DATE not in result.anomalyDays
        assert result.dayOfWeekAvg[DayOfWeek.MONDAY].spend == 200000

    def test_three_week_spike_flags_only_spike_day(self, settings: Settings) -> None:
        days = [MONDAY_DATE + timedelta(days=i) for i in range(21)]
        spike_day = date(2025, 1, 20)
        aggregates = [
            make_aggregate(day, totalSpend=300000 if day == spike_day else 100000)
            for day in days
        ]
        result = analyze_kpi_time_patterns(aggregates, settings=settings)

        assert result.anomalyDays == [spike_day]

    def test_drop_flags_only_drop_day(self, settings: Settings) -> None:
        mondays = [MONDAY_DATE + timedelta(weeks=i) for i in range(3)]
        aggregates = [
            make_aggregate(mondays[0], totalSpend=100000),
            make_aggregate(mondays[1], totalSpend=100000),
            make_aggregate(mondays[2], totalSpend=10000),
        ]
        result = analyze_kpi_time_patterns(aggregates, settings=settings)

        assert result.anomalyDays == [mondays[2]]
        assert result.anomalyDetails[0].baseline == pytest.approx(70000)

    def test_compares_only_same_weekday(self, settings: Settings) -> None:
        # weekends are naturally quieter; that alone is not a deviation
        aggregates = []
        for week in range(2):
            for offset in range(7):
                day = MONDAY_DATE + timedelta(weeks=week, days=offset)
                busy = day.weekday() < 5
                aggregates.append(make_aggregate(day, totalClicks=500 if busy else 100))
        result = analyze_kpi_time_patterns(aggregates, settings=settings)

        assert result.anomalyDays == []

    def test_single_sample_weekday_is_not_flagged(self, settings: Settings) -> None:
        aggregates = [
            make_aggregate(MONDAY_DATE, totalSpend=100),
            make_aggregate(MONDAY_DATE + timedelta(days=1), totalSpend=900000),
        ]
        result = analyze_kpi_time_patterns(aggregates, settings=settings)

        assert result.anomalyDays == []

    def test_zero_baseline_is_skipped(self, settings: Settings) -> None:
        aggregates = [
            make_aggregate(MONDAY_DATE, totalConversions=0),
            make_aggregate(MONDAY_DATE + timedelta(weeks=1), totalConversions=0),
        ]
        result = analyze_kpi_time_patterns(aggregates, settings=settings)

        assert result.anomalyDays == []
        assert all(not math.isnan(v) for v in result.dayOfWeekAvg[DayOfWeek.MONDAY].model_dump().values())

    def test_monitored_metrics_limit_flagging(self) -> None:
        mondays = [MONDAY_DATE + timedelta(weeks=i) for i in range(4)]
        aggregates = [make_aggregate(day) for day in mondays[:3]]
        aggregates.append(make_aggregate(mondays[3], totalSpend=300000))
        clicks_only = Settings(_env_file=None, kpi_monitored_metrics=['clicks'])

        assert analyze_kpi_time_patterns(aggregates, settings=clicks_only).anomalyDays == []

    def test_accepts_plain_mappings(self, settings: Settings) -> None:
        rows = [
            {
                'date': '2025-01-06',
                'totalImpressions': 10000,
                'totalClicks': 500,
                'totalConversions': 50,
                'totalSpend': 100000,
                'totalRevenue': 500000,
            },
        ]
        result = analyze_kpi_time_patterns(rows, settings=settings)

        assert result.weekdayAvg.impressions == 10000
        assert result.dayOfWeekAvg[DayOfWeek.MONDAY].sampleSize == 1

    def test_malformed_row_raises(self, settings: Settings) -> None:
        with pytest.raises(AnalysisInputError):
            analyze_kpi_time_patterns([{'date': 'yesterday'}], settings=settings)

    def test_empty_input(self, settings: Settings) -> None:
        result = analyze_kpi_time_patterns([], settings=settings)

        assert result.weekdayAvg is None
        assert result.weekendAvg is None
        assert result.dayOfWeekAvg == {}
        assert result.anomalyDays == []

    @pytest.mark.properties
    def test_anomaly_days_sorted(self, settings: Settings) -> None:
        tuesdays = [date(2025, 1, 7) + timedelta(weeks=i) for i in range(3)]
        mondays = [MONDAY_DATE + timedelta(weeks=i) for i in range(3)]
        aggregates = [
            make_aggregate(tuesdays[2], totalClicks=1500),
            make_aggregate(tuesdays[0]),
            make_aggregate(tuesdays[1]),
            make_aggregate(mondays[0], totalRevenue=1500000),
            make_aggregate(mondays[1]),
            make_aggregate(mondays[2]),
        ]
        result = analyze_kpi_time_patterns(aggregates, settings=settings)

        assert result.anomalyDays == sorted(result.anomalyDays)
        assert result.anomalyDays == [mondays[0], tuesdays[2]]
