"""
Engine Services Module

This module contains the analysis services of the anomaly segmentation engine.
Each service is a set of pure, stateless functions over in-memory collections.

Services:
- scoring: Severity weights, statistical helpers, input validation
- segmentation: Segment Builder and the analyze_segments orchestrator
- campaign_comparison: Per-campaign health scoring
- time_patterns: Weekday/weekend pattern detection (anomalies and raw KPIs)
- metric_categories: Semantic metric category summaries
- correlation: Cross-metric co-movement detection
- propagation: Root cause -> effect chains within a campaign
- insights: Rule-based natural-language insights

Public operations:
- analyze_segments(anomalies) -> SegmentAnalysisResult
- compare_campaigns(anomalies) -> List[CampaignComparison]
- analyze_time_patterns(anomalies) -> TimePatternResult
- analyze_kpi_time_patterns(daily_aggregates) -> KPITimePatternResult
- analyze_by_metric(anomalies) -> Dict[MetricCategory, MetricCategoryResult]
"""

# =============================================================================
# Severity Model / Helpers
# =============================================================================

from anomaly_segments.services.scoring import (
    SEVERITY_WEIGHTS,
    severity_score,
    coerce_anomalies,
    coerce_aggregates,
)

# =============================================================================
# Campaign Comparator
# =============================================================================

from anomaly_segments.services.campaign_comparison import (
    compare_campaigns,
    calculate_health_score,
)

# =============================================================================
# Temporal Pattern Detector
# =============================================================================

from anomaly_segments.services.time_patterns import (
    analyze_time_patterns,
    analyze_kpi_time_patterns,
)

# =============================================================================
# Metric Category Analyzer
# =============================================================================

from anomaly_segments.services.metric_categories import (
    METRIC_CATEGORIES,
    analyze_by_metric,
    get_metric_category,
)

# =============================================================================
# Correlation / Propagation / Insights
# =============================================================================

from anomaly_segments.services.correlation import detect_correlations
from anomaly_segments.services.propagation import find_propagation_path
from anomaly_segments.services.insights import generate_insights

# =============================================================================
# Segment Builder / Orchestrator
# =============================================================================

from anomaly_segments.services.segmentation import (
    build_segments,
    analyze_segments,
)


__all__ = [
    # Severity model
    "SEVERITY_WEIGHTS",
    "severity_score",
    "coerce_anomalies",
    "coerce_aggregates",
    # Campaign comparator
    "compare_campaigns",
    "calculate_health_score",
    # Temporal patterns
    "analyze_time_patterns",
    "analyze_kpi_time_patterns",
    # Metric categories
    "METRIC_CATEGORIES",
    "analyze_by_metric",
    "get_metric_category",
    # Correlation / propagation / insights
    "detect_correlations",
    "find_propagation_path",
    "generate_insights",
    # Segments
    "build_segments",
    "analyze_segments",
]
