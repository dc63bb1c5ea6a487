"""
Core infrastructure package for the anomaly segmentation engine.

Provides:
- Configuration management via pydantic-settings
- The input validation error raised by every public operation

This module re-exports key components from submodules for convenient importing:

    from anomaly_segments.core import get_settings, AnalysisInputError

Instead of:

    from anomaly_segments.core.config import get_settings
    from anomaly_segments.core.errors import AnalysisInputError
"""

from anomaly_segments.core.config import Settings, get_settings, configure_logging
from anomaly_segments.core.errors import AnalysisInputError, InputErrorDetail

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "AnalysisInputError",
    "InputErrorDetail",
]
