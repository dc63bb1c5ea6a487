"""
Error types raised by the analysis engine.

The engine performs no I/O, so the taxonomy is narrow: the only failure mode is
input that does not match the Anomaly / DailyAggregate shapes. Degenerate input
(empty lists, empty buckets) is not an error.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class InputErrorDetail(BaseModel):
    """
    Validation error detail for a single offending input item.
    """
    index: Optional[int] = Field(
        default=None,
        ge=0,
        description="Position of the offending item in the input sequence"
    )
    field: str = Field(
        ...,
        description="Field with validation error"
    )
    message: str = Field(
        ...,
        description="Error message"
    )


class AnalysisInputError(ValueError):
    """
    Raised when an analysis input does not conform to the expected shape.

    Carries every problem found so callers can report them at once instead of
    fixing one field per round trip.
    """

    def __init__(self, message: str, errors: Optional[List[InputErrorDetail]] = None):
        super().__init__(message)
        self.errors: List[InputErrorDetail] = errors or []

    def __str__(self) -> str:
        base = super().__str__()
        if not self.errors:
            return base
        lines = [
            f"  [{e.index}] {e.field}: {e.message}" if e.index is not None
            else f"  {e.field}: {e.message}"
            for e in self.errors
        ]
        return base + "\n" + "\n".join(lines)
