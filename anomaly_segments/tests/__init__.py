'''
Anomaly Segments Test Suite

Test Modules:
-------------
- test_scoring.py: Severity weights, helpers, input validation
- test_segmentation.py: Segment ranking and the analyze_segments orchestrator
- test_campaign_comparison.py: Health score formula and ordering
- test_time_patterns.py: Anomaly-based and KPI-based temporal patterns
- test_metric_categories.py: Category table and per-category summaries
- test_correlation.py: Positive/negative co-movement and sample thresholds
- test_propagation.py: Root cause chains and the first-cluster limitation
- test_insights.py: Insight rules and ranking
- test_config.py: Settings defaults and environment overrides

Running Tests:
--------------
    pip install -e .[test]
    pytest anomaly_segments/tests -v

Configuration:
--------------
See conftest.py for shared fixtures and data factories.
'''

# This file enables importing factories from conftest

__all__ = []
