"""
cao_model: CAO wage-scale resolution and employment timeline engine.
"""

from .exceptions import (
    AmbiguousInputError,
    CaoModelError,
    ConfigError,
    DataQualityWarning,
    InputError,
    NotFoundError,
    OutOfRangeError,
)
from .config import EngineSettings, load_settings
from .wage_scales import WageScaleTable, WageTableProvider, default_wage_table
from .resolution import (
    DetectionResult,
    WageResolver,
    get_available_steps,
    get_progression,
    resolve_forward,
    resolve_reverse,
)
from .normalization import ChangeEvent, EmploymentRecord, normalize_records
from .timeline import Timeline, assemble_timeline, build_timeline
from .projection import ProgressionForecast, project_progression

__all__ = [
    "AmbiguousInputError",
    "CaoModelError",
    "ChangeEvent",
    "ConfigError",
    "DataQualityWarning",
    "DetectionResult",
    "EmploymentRecord",
    "EngineSettings",
    "InputError",
    "NotFoundError",
    "OutOfRangeError",
    "ProgressionForecast",
    "Timeline",
    "WageResolver",
    "WageScaleTable",
    "WageTableProvider",
    "assemble_timeline",
    "build_timeline",
    "default_wage_table",
    "get_available_steps",
    "get_progression",
    "load_settings",
    "normalize_records",
    "project_progression",
    "resolve_forward",
    "resolve_reverse",
]
