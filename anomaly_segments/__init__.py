"""
Anomaly Segments Package.

Segmentation and correlation analysis engine for detected ad performance
anomalies. Turns a flat list of anomalies (and raw daily KPI aggregates) into
ranked segments, campaign health scores, temporal patterns, cross-metric
correlations, propagation chains and human-readable insights.

Subpackages:
    - core: Configuration and error types
    - models: Pydantic schemas and enums
    - services: Pure analysis functions

All operations are synchronous and stateless; nothing is persisted and no
network I/O is performed.

Usage:
    from anomaly_segments import analyze_segments

    result = analyze_segments(anomalies)
    for insight in result.insights:
        print(insight.title)
"""

from anomaly_segments.services import (
    analyze_segments,
    compare_campaigns,
    analyze_time_patterns,
    analyze_kpi_time_patterns,
    analyze_by_metric,
)

__version__ = "1.0.0"

__all__ = [
    "analyze_segments",
    "compare_campaigns",
    "analyze_time_patterns",
    "analyze_kpi_time_patterns",
    "analyze_by_metric",
    "__version__",
]
