"""
Severity model, statistical helpers and input coercion shared by every analysis.

SEVERITY_WEIGHTS is the single ordinal mapping used wherever severity is
aggregated, so segment ranking, campaign health and insight triggers always
agree on what "more severe" means.

Input coercion lets callers pass either validated models or plain mappings
(e.g. rows decoded from JSON). Mappings are validated with pydantic and any
failure is re-raised as AnalysisInputError listing every offending item.
"""

from datetime import datetime, date
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional, Sequence, TypeVar, Union
import logging

from pydantic import BaseModel, ValidationError

from anomaly_segments.core.errors import AnalysisInputError, InputErrorDetail
from anomaly_segments.models import (
    Anomaly,
    DailyAggregate,
    DayOfWeek,
    Severity,
    TimeDistribution,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Hashable)
ModelT = TypeVar("ModelT", bound=BaseModel)


# =============================================================================
# Severity Model
# =============================================================================

SEVERITY_WEIGHTS: Dict[Severity, int] = {
    Severity.CRITICAL: 3,
    Severity.WARNING: 2,
    Severity.INFO: 1,
}

# Saturday and Sunday, per datetime.weekday()
WEEKEND_DAYS = (5, 6)

DAY_NAMES: List[DayOfWeek] = list(DayOfWeek)


def severity_score(severity: Union[Severity, str]) -> int:
    """
    Return the ordinal weight of a severity.

    Args:
        severity: Severity enum member or its raw string value

    Returns:
        3 for critical, 2 for warning, 1 for info

    Raises:
        AnalysisInputError: If the severity is not one of the known values
    """
    try:
        return SEVERITY_WEIGHTS[Severity(severity)]
    except ValueError:
        raise AnalysisInputError(
            f"Unknown severity {severity!r}; expected one of "
            f"{', '.join(s.value for s in Severity)}"
        ) from None


def total_severity(anomalies: Iterable[Anomaly]) -> int:
    return sum(severity_score(a.severity) for a in anomalies)


# =============================================================================
# Statistical Helpers
# =============================================================================


def mean(values: Sequence[float]) -> float:
    """
    Calculate the arithmetic mean of a list of values.

    Args:
        values: List of numeric values

    Returns:
        Arithmetic mean, or 0 if empty list
    """
    if not values:
        return 0.0
    return sum(values) / len(values)


def ratio(part: float, whole: float) -> float:
    """Share of part in whole, 0 when whole is 0."""
    if whole == 0:
        return 0.0
    return part / whole


def dominant_value(values: Iterable[T]) -> Optional[T]:
    """
    Return the most frequent value, first-seen winning ties.

    Args:
        values: Values in input order

    Returns:
        Most frequent value, or None if there are no values
    """
    counts: Dict[T, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    best: Optional[T] = None
    best_count = 0
    # dicts preserve insertion order, so strict > keeps the first-seen value
    for value, count in counts.items():
        if count > best_count:
            best, best_count = value, count
    return best


# =============================================================================
# Calendar Helpers
# =============================================================================


def day_of_week(moment: Union[datetime, date]) -> DayOfWeek:
    return DAY_NAMES[moment.weekday()]


def is_weekend(moment: Union[datetime, date]) -> bool:
    return moment.weekday() in WEEKEND_DAYS


def calculate_time_distribution(anomalies: Iterable[Anomaly]) -> TimeDistribution:
    """
    Count anomaly detection times per weekday name and weekday/weekend bucket.

    Each timestamp is classified by its own calendar day (timezone-aware values
    keep their offset, naive values are taken as-is).
    """
    distribution = TimeDistribution()
    for anomaly in anomalies:
        distribution.byDayOfWeek[day_of_week(anomaly.detectedAt)] += 1
        if is_weekend(anomaly.detectedAt):
            distribution.weekend += 1
        else:
            distribution.weekday += 1
    return distribution


# =============================================================================
# Grouping
# =============================================================================


def group_by_campaign(anomalies: Iterable[Anomaly]) -> Dict[str, List[Anomaly]]:
    """
    Group anomalies by campaignId, preserving first-seen campaign order.

    Args:
        anomalies: Anomalies in input order

    Returns:
        Dictionary mapping campaign ids to their anomalies in input order
    """
    groups: Dict[str, List[Anomaly]] = {}
    for anomaly in anomalies:
        groups.setdefault(anomaly.campaignId, []).append(anomaly)
    return groups


def campaign_display_name(anomalies: Sequence[Anomaly], campaign_id: str) -> str:
    """First non-empty campaign name in the group, falling back to the id."""
    for anomaly in anomalies:
        if anomaly.campaignName:
            return anomaly.campaignName
    return campaign_id


# =============================================================================
# Input Coercion
# =============================================================================


def _coerce(
    items: Optional[Iterable[Union[ModelT, Mapping[str, Any]]]],
    model: type,
    label: str,
) -> List[ModelT]:
    if items is None:
        raise AnalysisInputError(f"{label} input must be a sequence, got None")
    if isinstance(items, (str, bytes, Mapping)):
        raise AnalysisInputError(
            f"{label} input must be a sequence of records, got {type(items).__name__}"
        )

    coerced: List[ModelT] = []
    errors: List[InputErrorDetail] = []

    for index, item in enumerate(items):
        if isinstance(item, model):
            coerced.append(item)
            continue
        if not isinstance(item, Mapping):
            errors.append(InputErrorDetail(
                index=index,
                field="<record>",
                message=f"expected {model.__name__} or mapping, got {type(item).__name__}"
            ))
            continue
        try:
            coerced.append(model.model_validate(item))
        except ValidationError as e:
            for err in e.errors():
                errors.append(InputErrorDetail(
                    index=index,
                    field=".".join(str(part) for part in err["loc"]) or "<record>",
                    message=err["msg"]
                ))

    if errors:
        logger.warning(f"Rejected {label} input: {len(errors)} validation error(s)")
        raise AnalysisInputError(
            f"Invalid {label} input: {len(errors)} validation error(s)",
            errors=errors
        )

    return coerced


def coerce_anomalies(
    items: Optional[Iterable[Union[Anomaly, Mapping[str, Any]]]]
) -> List[Anomaly]:
    """
    Validate analysis input into a list of Anomaly models.

    Args:
        items: Anomaly models or mappings with the Anomaly shape

    Returns:
        List of Anomaly models in input order

    Raises:
        AnalysisInputError: If the input is not a sequence, any item is malformed,
            or timezone-aware and naive detectedAt values are mixed
    """
    anomalies: List[Anomaly] = _coerce(items, Anomaly, "anomaly")

    aware = [a.detectedAt.tzinfo is not None for a in anomalies]
    if any(aware) and not all(aware):
        first_naive = aware.index(False)
        raise AnalysisInputError(
            "Invalid anomaly input: detectedAt mixes timezone-aware and naive timestamps",
            errors=[InputErrorDetail(
                index=first_naive,
                field="detectedAt",
                message="naive timestamp in an input containing timezone-aware timestamps"
            )]
        )

    return anomalies


def coerce_aggregates(
    items: Optional[Iterable[Union[DailyAggregate, Mapping[str, Any]]]]
) -> List[DailyAggregate]:
    """
    Validate analysis input into a list of DailyAggregate models.

    Raises:
        AnalysisInputError: If the input is not a sequence or any row is malformed
    """
    return _coerce(items, DailyAggregate, "daily aggregate")
