# cao_model/normalization/records.py
"""
Pydantic models for raw employment records.

Payroll exports are loose: fields are missing, spelled differently, or use
``0001-01-01T00:00:00`` for "no end date". The models accept those shapes
and turn every missing optional value into None. Nothing is defaulted to
zero, so later percent-change math cannot invent a change.
"""

import logging
import math
import numbers
from datetime import date
from typing import Any, ClassVar, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from cao_model.schema import CONTRACT_FIXED_TERM, CONTRACT_PERMANENT
from cao_model.utils.date_utils import to_date

logger = logging.getLogger(__name__)

_CONTRACT_TYPE_ALIASES = {
    "permanent": CONTRACT_PERMANENT,
    "vast": CONTRACT_PERMANENT,
    "indefinite": CONTRACT_PERMANENT,
    "fixed": CONTRACT_FIXED_TERM,
    "fixed_term": CONTRACT_FIXED_TERM,
    "fixed-term": CONTRACT_FIXED_TERM,
    "temporary": CONTRACT_FIXED_TERM,
    "bepaalde_tijd": CONTRACT_FIXED_TERM,
}


def _lenient_date(value: Any) -> Optional[date]:
    try:
        return to_date(value)
    except (TypeError, ValueError):
        logger.debug("Unparseable date %r treated as missing", value)
        return None


def _parse_number(value: Any) -> Tuple[Optional[float], bool]:
    """
    Lenient number parsing for payroll exports.

    Returns ``(number, ok)``. Blanks and NaN are missing, not malformed.
    Decimal commas are accepted ("22,50", "1.234,56").
    """
    if value is None:
        return None, True
    if isinstance(value, bool):
        return None, False
    if isinstance(value, numbers.Real):
        number = float(value)
        if math.isnan(number):
            return None, True
        return (number, True) if math.isfinite(number) else (None, False)
    if not isinstance(value, str):
        return None, False
    text = value.strip().replace(" ", "")
    if not text:
        return None, True
    if "," in text:
        if "." in text and text.rfind(".") > text.rfind(","):
            text = text.replace(",", "")
        else:
            text = text.replace(".", "").replace(",", ".")
    try:
        number = float(text)
    except ValueError:
        return None, False
    if math.isnan(number):
        return None, True
    return (number, True) if math.isfinite(number) else (None, False)


class _RawModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # Fields reported by ``missing_fields`` when None
    OPTIONAL_FIELDS: ClassVar[Tuple[str, ...]] = ()
    # Numeric fields parsed leniently; unparseable values become None
    NUMBER_FIELDS: ClassVar[Tuple[str, ...]] = ()

    malformed_fields: List[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def parse_numbers(cls, data: Any) -> Any:
        if not isinstance(data, dict) or not cls.NUMBER_FIELDS:
            return data
        data = dict(data)
        malformed = list(data.get("malformed_fields") or [])
        for name in cls.NUMBER_FIELDS:
            alias = cls.model_fields[name].validation_alias
            keys = [c for c in alias.choices if isinstance(c, str)] if alias else [name]
            for key in keys:
                if key not in data:
                    continue
                number, ok = _parse_number(data[key])
                if not ok:
                    logger.debug("Unparseable %s %r treated as missing", name, data[key])
                    if name not in malformed:
                        malformed.append(name)
                data[key] = number
        data["malformed_fields"] = malformed
        return data

    @property
    def missing_fields(self) -> List[str]:
        """Names of optional fields that were absent or empty in the source."""
        return [name for name in self.OPTIONAL_FIELDS if getattr(self, name) is None]


class SalaryEntry(_RawModel):
    start_date: Optional[date] = Field(
        None, validation_alias=AliasChoices("start_date", "startDate", "effective_date")
    )
    hourly_wage: Optional[float] = Field(
        None, validation_alias=AliasChoices("hourly_wage", "hour_wage", "hourlyWage")
    )
    monthly_wage: Optional[float] = Field(
        None, validation_alias=AliasChoices("monthly_wage", "month_wage", "monthlyWage")
    )
    yearly_wage: Optional[float] = Field(
        None, validation_alias=AliasChoices("yearly_wage", "year_wage", "yearlyWage")
    )
    reason: Optional[str] = Field(
        None, validation_alias=AliasChoices("reason", "wage_reason")
    )
    is_active: Optional[bool] = None

    OPTIONAL_FIELDS: ClassVar[Tuple[str, ...]] = (
        "start_date",
        "hourly_wage",
        "monthly_wage",
        "yearly_wage",
        "reason",
    )
    NUMBER_FIELDS: ClassVar[Tuple[str, ...]] = ("hourly_wage", "monthly_wage", "yearly_wage")

    @field_validator("start_date", mode="before")
    @classmethod
    def parse_dates(cls, value: Any) -> Optional[date]:
        return _lenient_date(value)

    def payload(self) -> dict:
        return {
            "hourly_wage": self.hourly_wage,
            "monthly_wage": self.monthly_wage,
            "yearly_wage": self.yearly_wage,
            "reason": self.reason,
        }


class HoursEntry(_RawModel):
    start_date: Optional[date] = Field(
        None, validation_alias=AliasChoices("start_date", "startDate", "effective_date")
    )
    hours_per_week: Optional[float] = Field(
        None, validation_alias=AliasChoices("hours_per_week", "hoursPerWeek", "hours")
    )
    days_per_week: Optional[float] = Field(
        None, validation_alias=AliasChoices("days_per_week", "daysPerWeek", "days")
    )
    parttime_factor: Optional[float] = Field(
        None, validation_alias=AliasChoices("parttime_factor", "parttimeFactor")
    )
    employee_type: Optional[str] = Field(
        None, validation_alias=AliasChoices("employee_type", "employeeType")
    )
    is_active: Optional[bool] = None

    OPTIONAL_FIELDS: ClassVar[Tuple[str, ...]] = (
        "start_date",
        "hours_per_week",
        "days_per_week",
        "parttime_factor",
    )
    NUMBER_FIELDS: ClassVar[Tuple[str, ...]] = ("hours_per_week", "days_per_week", "parttime_factor")

    @field_validator("start_date", mode="before")
    @classmethod
    def parse_dates(cls, value: Any) -> Optional[date]:
        return _lenient_date(value)

    def payload(self) -> dict:
        return {
            "hours_per_week": self.hours_per_week,
            "days_per_week": self.days_per_week,
            "parttime_factor": self.parttime_factor,
            "employee_type": self.employee_type,
        }


class EmploymentRecord(_RawModel):
    """One contract of a person as delivered by the system of record."""

    record_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("record_id", "id", "contract_id")
    )
    start_date: Optional[date] = Field(
        None, validation_alias=AliasChoices("start_date", "startDate")
    )
    end_date: Optional[date] = Field(
        None, validation_alias=AliasChoices("end_date", "endDate")
    )
    contract_type: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("contract_type", "employment_type", "employmentType"),
    )
    salary_entries: List[SalaryEntry] = Field(
        default_factory=list, validation_alias=AliasChoices("salary_entries", "salary")
    )
    hours_entries: List[HoursEntry] = Field(
        default_factory=list, validation_alias=AliasChoices("hours_entries", "hours")
    )
    is_active: Optional[bool] = None
    source: Optional[str] = Field(
        None, validation_alias=AliasChoices("source", "data_source")
    )

    OPTIONAL_FIELDS: ClassVar[Tuple[str, ...]] = (
        "record_id",
        "start_date",
        "end_date",
        "contract_type",
        "is_active",
    )

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, value: Any) -> Optional[date]:
        return _lenient_date(value)

    @field_validator("record_id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("contract_type", mode="before")
    @classmethod
    def normalize_contract_type(cls, value: Any) -> Any:
        if value is None:
            return None
        key = str(value).strip().lower()
        if not key:
            return None
        if key not in _CONTRACT_TYPE_ALIASES:
            logger.debug("Unrecognized contract type %r kept as-is", value)
            return key
        return _CONTRACT_TYPE_ALIASES[key]

    @field_validator("salary_entries", "hours_entries", mode="before")
    @classmethod
    def none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def resolved_contract_type(self) -> str:
        """Explicit contract type, else permanent when open-ended."""
        if self.contract_type:
            return self.contract_type
        return CONTRACT_PERMANENT if self.end_date is None else CONTRACT_FIXED_TERM
