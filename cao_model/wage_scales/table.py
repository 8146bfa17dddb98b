# cao_model/wage_scales/table.py
"""
Immutable, versioned snapshot of CAO wage scales and their dated rates.

A ``WageScaleTable`` is built once from reference data and then only read.
Every lookup in ``cao_model.resolution`` takes the snapshot as an explicit
argument, so a refresh elsewhere never changes a table a caller is using.
"""

import logging
from dataclasses import asdict
from datetime import date, datetime
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

import pandas as pd

from cao_model.exceptions import ConfigError, NotFoundError
from cao_model.schema import (
    EFFECTIVE_DATE,
    HOURLY_WAGE,
    MONTHLY_WAGE,
    SCALE_NUMBER,
    STEP_NUMBER,
    WAGE_RATE_COLS,
    WAGE_RATE_DTYPES,
    WAGE_RATE_KEY,
    YEARLY_WAGE,
)

from .models import WageRate, WageScaleDefinition

logger = logging.getLogger(__name__)

__all__ = ["WageScaleTable", "rates_to_frame"]


def rates_to_frame(rates: Union[Iterable[WageRate], pd.DataFrame]) -> pd.DataFrame:
    """Convert WageRate objects (or a raw frame) into a typed rate DataFrame."""
    if isinstance(rates, pd.DataFrame):
        df = rates.copy()
    else:
        df = pd.DataFrame([asdict(r) for r in rates])

    if df.empty:
        empty_df = pd.DataFrame(columns=WAGE_RATE_COLS)
        return empty_df.astype(WAGE_RATE_DTYPES)

    missing_cols = [c for c in (SCALE_NUMBER, STEP_NUMBER, EFFECTIVE_DATE) if c not in df.columns]
    if missing_cols:
        raise ConfigError(f"Wage rates are missing required columns: {missing_cols}")
    for col in (HOURLY_WAGE, MONTHLY_WAGE, YEARLY_WAGE):
        if col not in df.columns:
            df[col] = pd.NA

    df[EFFECTIVE_DATE] = pd.to_datetime(df[EFFECTIVE_DATE], errors="coerce")
    if df[EFFECTIVE_DATE].isna().any():
        raise ConfigError("Wage rates contain missing or unparseable effective dates")
    for col in (HOURLY_WAGE, MONTHLY_WAGE, YEARLY_WAGE):
        df[col] = pd.to_numeric(df[col], errors="coerce")
    df = df[WAGE_RATE_COLS].astype(WAGE_RATE_DTYPES)
    return df


class WageScaleTable:
    """Read-only wage table snapshot.

    Args:
        scales: Scale definitions keyed by scale number
        rates: WageRate rows or a frame with the wage-rate columns
        version: Snapshot identifier; a content hash is used when omitted
        loaded_at: When the reference data was loaded
        strict_validation: Raise on rates for unknown scales or out-of-range
            steps; otherwise drop them with a warning

    Raises:
        ConfigError: For duplicate (scale, step, effective_date) keys, or
            invalid rows in strict mode
    """

    def __init__(
        self,
        scales: Mapping[int, WageScaleDefinition],
        rates: Union[Iterable[WageRate], pd.DataFrame],
        version: Optional[str] = None,
        loaded_at: Optional[datetime] = None,
        strict_validation: bool = True,
    ):
        self._scales: Dict[int, WageScaleDefinition] = dict(scales)
        df = rates_to_frame(rates)
        df = self._validate(df, strict_validation)
        self._rates = df.sort_values(WAGE_RATE_KEY, kind="mergesort").reset_index(drop=True)
        self._version = version or self._fingerprint()
        self._loaded_at = loaded_at or datetime.now()
        logger.info(
            "Built wage table %s: %d scales, %d rates",
            self._version,
            len(self._scales),
            len(self._rates),
        )

    def _validate(self, df: pd.DataFrame, strict: bool) -> pd.DataFrame:
        if df.empty:
            return df

        dup_mask = df.duplicated(subset=WAGE_RATE_KEY, keep=False)
        if dup_mask.any():
            dups = df.loc[dup_mask, WAGE_RATE_KEY].drop_duplicates()
            raise ConfigError(
                f"Duplicate wage rates for keys: {dups.to_dict(orient='records')}"
            )

        known = df[SCALE_NUMBER].isin(list(self._scales.keys()))
        if not known.all():
            unknown = sorted(df.loc[~known, SCALE_NUMBER].unique().tolist())
            msg = f"Wage rates reference unknown scales: {unknown}"
            if strict:
                raise ConfigError(msg)
            logger.warning("%s; dropping %d rows", msg, int((~known).sum()))
            df = df[known]

        in_range = pd.Series(
            [self._scales[s].has_step(t) for s, t in zip(df[SCALE_NUMBER], df[STEP_NUMBER])],
            index=df.index,
            dtype=bool,
        )
        if not in_range.all():
            bad = df.loc[~in_range, [SCALE_NUMBER, STEP_NUMBER]].drop_duplicates()
            msg = f"Wage rates with steps outside their scale range: {bad.to_dict(orient='records')}"
            if strict:
                raise ConfigError(msg)
            logger.warning("%s; dropping %d rows", msg, int((~in_range).sum()))
            df = df[in_range]

        return df

    def _fingerprint(self) -> str:
        if self._rates.empty:
            return "empty"
        digest = int(pd.util.hash_pandas_object(self._rates.astype(str), index=False).sum()) & 0xFFFFFFFFFFFF
        return f"{digest:012x}"

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @property
    def version(self) -> str:
        return self._version

    @property
    def loaded_at(self) -> datetime:
        return self._loaded_at

    @property
    def scales(self) -> Mapping[int, WageScaleDefinition]:
        return MappingProxyType(self._scales)

    @property
    def rates(self) -> pd.DataFrame:
        """A copy of all rates, sorted by (scale, step, effective_date)."""
        return self._rates.copy()

    def __len__(self) -> int:
        return len(self._rates)

    def __repr__(self) -> str:
        return f"WageScaleTable(version={self._version!r}, scales={len(self._scales)}, rates={len(self._rates)})"

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_scale(self, scale_number: int) -> WageScaleDefinition:
        """Get a scale definition by number."""
        try:
            return self._scales[scale_number]
        except KeyError:
            raise NotFoundError(f"Wage scale {scale_number} not found")

    def list_scales(self, active_only: bool = True) -> List[WageScaleDefinition]:
        """Scale definitions ordered by number; inactive scales only on request."""
        scales = sorted(self._scales.values(), key=lambda s: s.scale_number)
        if active_only:
            scales = [s for s in scales if s.is_active]
        return scales

    def scale_categories(self) -> List[str]:
        return sorted({s.scale_category for s in self._scales.values()})

    def pairs(self) -> List[Tuple[int, int]]:
        """All (scale, step) pairs that have at least one rate."""
        keys = self._rates[[SCALE_NUMBER, STEP_NUMBER]].drop_duplicates()
        return [(int(s), int(t)) for s, t in keys.itertuples(index=False)]

    def history(self, scale_number: int, step_number: int) -> pd.DataFrame:
        """Rates of one (scale, step), oldest first. Empty if the pair is unknown."""
        mask = (self._rates[SCALE_NUMBER] == scale_number) & (
            self._rates[STEP_NUMBER] == step_number
        )
        return self._rates.loc[mask].reset_index(drop=True)

    def effective_rates(self, as_of: date) -> pd.DataFrame:
        """For every (scale, step), the row with the greatest effective_date <= as_of.

        Pairs whose first rate lies after ``as_of`` are absent from the result.
        """
        cutoff = pd.Timestamp(as_of)
        eligible = self._rates[self._rates[EFFECTIVE_DATE] <= cutoff]
        # rows are sorted by key, so the last row per pair is the newest one
        return eligible.groupby([SCALE_NUMBER, STEP_NUMBER], sort=True).tail(1).reset_index(drop=True)

    def iter_rates(self) -> Iterator[WageRate]:
        for row in self._rates.itertuples(index=False):
            yield row_to_rate(row._asdict())


def _opt_float(value) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)


def row_to_rate(row: Mapping) -> WageRate:
    """Convert one wage-rate frame row into a WageRate."""
    return WageRate(
        scale_number=int(row[SCALE_NUMBER]),
        step_number=int(row[STEP_NUMBER]),
        effective_date=pd.Timestamp(row[EFFECTIVE_DATE]).date(),
        monthly_wage=_opt_float(row[MONTHLY_WAGE]),
        hourly_wage=_opt_float(row[HOURLY_WAGE]),
        yearly_wage=_opt_float(row[YEARLY_WAGE]),
    )
