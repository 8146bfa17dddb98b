"""
Holder of the current wage-table snapshot.

Resolution functions never look a table up themselves; callers ask the
provider for ``current()`` once and pass that snapshot along. ``refresh()``
builds a complete new table before swapping the reference, so a reader
either sees the old snapshot or the new one.
"""

import logging
import os
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from cao_model.exceptions import ConfigError

from .loader import default_wage_table, load_from_yaml, load_rates_from_parquet
from .table import WageScaleTable

logger = logging.getLogger(__name__)

WAGE_TABLE_ENV_VAR = "CAO_MODEL_WAGE_TABLE"

TableLoader = Callable[[], WageScaleTable]


def loader_from_path(path: Optional[str] = None, strict_validation: bool = True) -> TableLoader:
    """
    Build a loader for a YAML or Parquet wage table.

    Priority: explicit ``path``, then the ``CAO_MODEL_WAGE_TABLE`` environment
    variable, then the built-in default table.
    """
    path = path or os.getenv(WAGE_TABLE_ENV_VAR)
    if not path:
        return default_wage_table

    p = Path(path)
    if p.suffix.lower() == ".parquet":
        return lambda: load_rates_from_parquet(p, strict_validation=strict_validation)
    return lambda: load_from_yaml(p, strict_validation=strict_validation)


class WageTableProvider:
    """Thread-safe owner of the current WageScaleTable snapshot.

    Args:
        loader: Zero-argument callable returning a fresh WageScaleTable
        refresh_interval_seconds: Age after which ``refresh_if_stale`` reloads
        clock: Monotonic time source, replaceable in tests
    """

    def __init__(
        self,
        loader: Optional[TableLoader] = None,
        refresh_interval_seconds: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._loader = loader or default_wage_table
        self._interval = refresh_interval_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._table: Optional[WageScaleTable] = None
        self._loaded_at: float = 0.0
        self._stale = True

    @classmethod
    def from_table(cls, table: WageScaleTable, **kwargs) -> "WageTableProvider":
        """Provider serving a fixed snapshot until explicitly refreshed."""
        provider = cls(loader=lambda: table, **kwargs)
        provider.refresh()
        return provider

    def current(self) -> WageScaleTable:
        """Return the current snapshot, loading it on first use."""
        table = self._table
        if table is None:
            return self.refresh()
        return table

    def refresh(self) -> WageScaleTable:
        """Load a new snapshot and swap it in.

        On failure the previous snapshot stays in place and the error is
        re-raised.
        """
        with self._lock:
            previous = self._table
            try:
                table = self._loader()
            except ConfigError:
                logger.error(
                    "Wage table refresh failed, keeping snapshot %s",
                    previous.version if previous is not None else None,
                    exc_info=True,
                )
                raise
            self._table = table
            self._loaded_at = self._clock()
            self._stale = False

        if previous is None or previous.version != table.version:
            logger.info(
                "Wage table snapshot now %s (was %s)",
                table.version,
                previous.version if previous is not None else None,
            )
        return table

    def invalidate(self) -> None:
        """Mark the snapshot stale; the next ``refresh_if_stale`` reloads it."""
        with self._lock:
            self._stale = True
        logger.debug("Wage table snapshot invalidated")

    @property
    def is_stale(self) -> bool:
        if self._stale or self._table is None:
            return True
        return (self._clock() - self._loaded_at) >= self._interval

    def refresh_if_stale(self) -> WageScaleTable:
        if self.is_stale:
            return self.refresh()
        return self.current()
