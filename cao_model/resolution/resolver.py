import logging
from typing import Any, List, Optional, Tuple, Union

from cao_model.config.models import DEFAULT_SETTINGS, EngineSettings
from cao_model.utils.date_utils import DateLike
from cao_model.wage_scales.models import WageAmounts, WageScaleDefinition
from cao_model.wage_scales.provider import WageTableProvider
from cao_model.wage_scales.table import WageScaleTable

from .forward import get_available_steps, resolve_forward
from .progression import ProgressionStep, get_progression
from .reverse import DetectionResult, resolve_reverse

logger = logging.getLogger(__name__)


class WageResolver:
    """
    Lookup facade over a wage table snapshot.

    Bound to either a fixed ``WageScaleTable`` or a ``WageTableProvider``.
    With a provider, each call takes the provider's snapshot once at the
    start, so a refresh during the call does not affect it.
    """

    def __init__(
        self,
        source: Union[WageScaleTable, WageTableProvider],
        settings: Optional[EngineSettings] = None,
    ):
        self._source = source
        self.settings = settings or DEFAULT_SETTINGS

    @property
    def table(self) -> WageScaleTable:
        if isinstance(self._source, WageTableProvider):
            return self._source.current()
        return self._source

    def resolve_forward(self, scale: int, step: int, as_of: DateLike) -> WageAmounts:
        return resolve_forward(self.table, scale, step, as_of)

    def resolve_reverse(
        self, salary: Any, as_of: DateLike, scale_hint: Optional[str] = None
    ) -> DetectionResult:
        return resolve_reverse(self.table, salary, as_of, scale_hint, self.settings)

    def get_progression(self, scale: int, step: int) -> List[ProgressionStep]:
        return get_progression(self.table, scale, step, self.settings.wage_basis)

    def get_available_steps(self, scale: int, as_of: DateLike) -> List[int]:
        return get_available_steps(self.table, scale, as_of)

    def list_scales(self, active_only: bool = True) -> List[WageScaleDefinition]:
        return self.table.list_scales(active_only)

    def find_step_for_salary(
        self, salary: Any, as_of: DateLike, scale_hint: Optional[str] = None
    ) -> Tuple[int, int]:
        """(scale, step) of the best reverse match, ignoring confidence."""
        result = self.resolve_reverse(salary, as_of, scale_hint)
        return result.scale, result.nearest_step
