"""
Timeline assembly: merged, ordered and deduplicated ChangeEvents with a
derived summary.
"""

from .assembler import Timeline, assemble_timeline, build_timeline
from .summary import (
    SOURCE_PRIORITY,
    DataQuality,
    EmploymentSpan,
    TimelineSummary,
    assess_data_quality,
    employment_span,
)

__all__ = [
    "DataQuality",
    "EmploymentSpan",
    "SOURCE_PRIORITY",
    "Timeline",
    "TimelineSummary",
    "assemble_timeline",
    "assess_data_quality",
    "build_timeline",
    "employment_span",
]
