# cao_model/normalization/normalizer.py
"""
Turn raw employment records into ChangeEvents.

Per record (one contract):
  - one ``contract_start`` event, plus ``contract_end`` when an end date is
    known; future end dates carry expiry details
  - one ``salary_change`` per salary entry and one ``hours_change`` per hours
    entry, oldest first, each carrying the previous entry of the same
    contract and the percent change against it

Across records a ``contract_conversion`` is emitted when a fixed-term
contract is followed by a permanent one. Everything here is a pure function
of its arguments; ``now`` is passed in rather than read from the clock when
determinism matters.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, Union

from pydantic import ValidationError

from cao_model.config.models import DEFAULT_SETTINGS, EngineSettings
from cao_model.exceptions import DataQualityWarning, InputError, data_quality_warning
from cao_model.schema import (
    EVT_CONTRACT_CONVERSION,
    EVT_CONTRACT_END,
    EVT_CONTRACT_START,
    EVT_HOURS_CHANGE,
    EVT_SALARY_CHANGE,
)
from cao_model.utils.date_utils import to_date, today
from cao_model.utils.decimal_helpers import percent_change

from .events import ChangeEvent, active_contract_keys, enforce_single_current
from .extract import (
    HOURS_FIELDS,
    SALARY_FIELDS,
    SOURCE_PREVIOUS_VALUE,
    extract_hours,
    extract_salary,
    parse_payload,
    value_from_payload,
)
from .milestones import expiry_details, is_conversion
from .records import EmploymentRecord, HoursEntry, SalaryEntry

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "contract"

# Event types that never describe the present state
_NEVER_CURRENT = {EVT_CONTRACT_END, EVT_CONTRACT_CONVERSION}

RecordLike = Union[EmploymentRecord, Mapping[str, Any]]
Entry = Union[SalaryEntry, HoursEntry]


@dataclass
class NormalizationResult:
    events: List[ChangeEvent] = field(default_factory=list)
    warnings: List[DataQualityWarning] = field(default_factory=list)
    # keys of contract_start events active on the evaluation date, taken
    # before current flags are reduced to one per event type
    active_keys: Set[Tuple] = field(default_factory=set)

    def extend(self, other: "NormalizationResult") -> None:
        self.events.extend(other.events)
        self.warnings.extend(other.warnings)
        self.active_keys |= other.active_keys


def coerce_record(record: RecordLike) -> EmploymentRecord:
    """Validate a raw mapping into an EmploymentRecord.

    Raises:
        InputError: If the record structure cannot be validated.
    """
    if isinstance(record, EmploymentRecord):
        return record
    try:
        return EmploymentRecord.model_validate(record)
    except ValidationError as e:
        raise InputError(f"Invalid employment record: {e}") from e


def _iso(d: Optional[date]) -> Optional[str]:
    return d.isoformat() if d else None


def _contract_start_is_current(record: EmploymentRecord, now: date) -> bool:
    if record.is_active is not None:
        return record.is_active
    if record.start_date is None or record.start_date > now:
        return False
    return record.end_date is None or record.end_date >= now


def _current_position(
    dated: Sequence[Tuple[Optional[date], int, Entry, bool]],
    now: date,
    event_type: str,
    entity_id: str,
    warnings: List[DataQualityWarning],
) -> Optional[int]:
    """Index into ``dated`` of the entry describing the present state."""
    flagged = [pos for pos, item in enumerate(dated) if item[2].is_active is True]
    if flagged:
        if len(flagged) > 1:
            warnings.append(
                data_quality_warning(
                    "multiple_active_entries",
                    f"{len(flagged)} {event_type} entries flagged active; using the latest",
                    entity_id=entity_id,
                    event_type=event_type,
                )
            )
        return flagged[-1]
    if any(item[2].is_active is not None for item in dated):
        # Explicit flags present and none of them active
        return None
    started = [pos for pos, item in enumerate(dated) if item[0] is not None and item[0] <= now]
    return started[-1] if started else None


def _entry_events(
    record: EmploymentRecord,
    entries: Sequence[Entry],
    event_type: str,
    metric: str,
    entity_id: str,
    now: date,
    source: str,
) -> NormalizationResult:
    result = NormalizationResult()
    dated: List[Tuple[Optional[date], int, Entry, bool]] = []
    for idx, entry in enumerate(entries):
        entry_date = entry.start_date
        low_confidence = False
        if entry_date is None:
            entry_date = record.start_date
            low_confidence = True
            result.warnings.append(
                data_quality_warning(
                    "missing_entry_date",
                    f"{event_type} entry {idx} has no start date; using contract start "
                    f"{_iso(entry_date)}",
                    entity_id=entity_id,
                    record_id=record.record_id,
                    entry_index=idx,
                )
            )
        if entry.malformed_fields:
            low_confidence = True
            result.warnings.append(
                data_quality_warning(
                    "malformed_field",
                    f"{event_type} entry {idx} has unparseable "
                    f"{', '.join(entry.malformed_fields)}; treated as missing",
                    entity_id=entity_id,
                    record_id=record.record_id,
                    entry_index=idx,
                    fields=list(entry.malformed_fields),
                )
            )
        dated.append((entry_date, idx, entry, low_confidence))

    dated.sort(key=lambda item: (item[0] is None, item[0] or date.min, item[1]))
    current_pos = _current_position(dated, now, event_type, entity_id, result.warnings)

    previous: Optional[Entry] = None
    for pos, (entry_date, idx, entry, low_confidence) in enumerate(dated):
        if previous is None:
            previous_value = None
            pct = None
            notes: Tuple[str, ...] = ("initial",)
        else:
            previous_value = previous.payload()
            pct = percent_change(getattr(previous, metric), getattr(entry, metric))
            notes = ()
            if pct is None:
                result.warnings.append(
                    data_quality_warning(
                        "percent_change_unknown",
                        f"Cannot compute {metric} change for {event_type} on {_iso(entry_date)}",
                        entity_id=entity_id,
                        record_id=record.record_id,
                        previous=getattr(previous, metric),
                        current=getattr(entry, metric),
                    )
                )
        if entry.missing_fields:
            logger.debug(
                "%s entry %s of %s missing %s", event_type, idx, entity_id, entry.missing_fields
            )
        result.events.append(
            ChangeEvent(
                entity_id=entity_id,
                date=entry_date,
                event_type=event_type,
                current_value=entry.payload(),
                previous_value=previous_value,
                percent_change=pct,
                is_current=pos == current_pos,
                source=source,
                record_id=record.record_id,
                low_confidence=low_confidence,
                notes=notes,
            )
        )
        previous = entry
    return result


def normalize_record(
    record: RecordLike,
    entity_id: str,
    now: Optional[Any] = None,
    source: Optional[str] = None,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> NormalizationResult:
    """Events of a single contract record."""
    now = to_date(now) or today()
    rec = coerce_record(record)
    source = source or rec.source or DEFAULT_SOURCE
    result = NormalizationResult()

    contract_type = rec.resolved_contract_type
    start_low_confidence = rec.start_date is None
    if start_low_confidence:
        result.warnings.append(
            data_quality_warning(
                "missing_start_date",
                "Employment record has no start date",
                entity_id=entity_id,
                record_id=rec.record_id,
            )
        )

    result.events.append(
        ChangeEvent(
            entity_id=entity_id,
            date=rec.start_date,
            event_type=EVT_CONTRACT_START,
            current_value={
                "contract_type": contract_type,
                "start_date": _iso(rec.start_date),
                "end_date": _iso(rec.end_date),
            },
            is_current=_contract_start_is_current(rec, now),
            source=source,
            record_id=rec.record_id,
            low_confidence=start_low_confidence,
        )
    )

    if rec.end_date is not None:
        end_value = {"contract_type": contract_type, "end_date": _iso(rec.end_date)}
        end_value.update(expiry_details(rec.end_date, now, settings))
        result.events.append(
            ChangeEvent(
                entity_id=entity_id,
                date=rec.end_date,
                event_type=EVT_CONTRACT_END,
                current_value=end_value,
                is_current=False,
                source=source,
                record_id=rec.record_id,
            )
        )

    result.extend(
        _entry_events(
            rec, rec.salary_entries, EVT_SALARY_CHANGE, "hourly_wage", entity_id, now, source
        )
    )
    result.extend(
        _entry_events(
            rec, rec.hours_entries, EVT_HOURS_CHANGE, "hours_per_week", entity_id, now, source
        )
    )
    return result


def normalize_records(
    records: Iterable[RecordLike],
    entity_id: str,
    now: Optional[Any] = None,
    source: Optional[str] = None,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> NormalizationResult:
    """
    Events of all contracts of one person.

    Percent changes are computed within each contract; they do not carry
    over from one contract to the next.
    """
    now = to_date(now) or today()
    recs = sorted(
        (coerce_record(r) for r in records),
        key=lambda r: (r.start_date is None, r.start_date or date.min),
    )
    result = NormalizationResult()
    for rec in recs:
        result.extend(normalize_record(rec, entity_id, now, source, settings))

    for prev, nxt in zip(recs, recs[1:]):
        prev_type = prev.resolved_contract_type
        next_type = nxt.resolved_contract_type
        if not is_conversion(prev_type, next_type):
            continue
        result.events.append(
            ChangeEvent(
                entity_id=entity_id,
                date=nxt.start_date,
                event_type=EVT_CONTRACT_CONVERSION,
                previous_value={"contract_type": prev_type, "record_id": prev.record_id},
                current_value={"contract_type": next_type, "record_id": nxt.record_id},
                source=source or nxt.source or DEFAULT_SOURCE,
                record_id=nxt.record_id,
                low_confidence=nxt.start_date is None,
            )
        )

    result.active_keys = active_contract_keys(result.events)
    result.events, extra = enforce_single_current(result.events)
    result.warnings.extend(extra)
    logger.debug(
        "Normalized %d records of %s into %d events (%d warnings)",
        len(recs),
        entity_id,
        len(result.events),
        len(result.warnings),
    )
    return result


def _payload_dict(payload: Any) -> Optional[dict]:
    data = parse_payload(payload)
    if data is None:
        return None
    if isinstance(data, Mapping):
        return dict(data)
    return {"value": data}


def _history_contract_open(start: ChangeEvent, events: Sequence[ChangeEvent], now: date) -> bool:
    """Whether a history contract_start shows a contract still open on ``now``.

    The payload must say so: an explicit ``is_active`` flag, or an end date
    key that is empty or not before ``now``. A contract_end row between the
    start and ``now`` closes it.
    """
    for e in events:
        if e.event_type == EVT_CONTRACT_END and e.date and start.date <= e.date < now:
            return False
    payload = start.current_value
    for key in ("is_active", "isActive"):
        if key in payload:
            return bool(payload[key])
    for key in ("end_date", "endDate"):
        if key in payload:
            try:
                end = to_date(payload[key])
            except (TypeError, ValueError):
                return False
            return end is None or end >= now
    return False


def normalize_history_rows(
    rows: Iterable[Mapping[str, Any]],
    entity_id: str,
    now: Optional[Any] = None,
    source: str = "history",
) -> NormalizationResult:
    """
    Convert externally sourced history rows into ChangeEvents.

    Rows look like ``{event_type, event_date, previous_value, new_value,
    salary_at_event, hours_at_event}``. Salary and hours values go through
    the extraction fallback chain. Per event type the latest row dated on or
    before ``now`` is current; a contract_start only when its payload shows
    the contract still open.
    """
    now = to_date(now) or today()
    result = NormalizationResult()

    for idx, row in enumerate(rows):
        event_type = str(row.get("event_type") or "unknown").strip()
        try:
            event_date = to_date(row.get("event_date") or row.get("effective_date"))
        except (TypeError, ValueError):
            event_date = None
        row_source = row.get("data_source") or row.get("source") or source
        record_id = row.get("id")
        low_confidence = event_date is None
        if event_date is None:
            result.warnings.append(
                data_quality_warning(
                    "missing_event_date",
                    f"History row {idx} ({event_type}) has no usable date",
                    entity_id=entity_id,
                    row_index=idx,
                )
            )

        previous_value = _payload_dict(row.get("previous_value"))
        current_value = _payload_dict(row.get("new_value")) or {}
        pct = None
        if event_type in (EVT_SALARY_CHANGE, EVT_HOURS_CHANGE):
            if event_type == EVT_SALARY_CHANGE:
                extracted = extract_salary(row)
                fields, key = SALARY_FIELDS, "monthly_wage"
            else:
                extracted = extract_hours(row)
                fields, key = HOURS_FIELDS, "hours_per_week"
            previous = value_from_payload(row.get("previous_value"), fields)
            if extracted.source == SOURCE_PREVIOUS_VALUE:
                # the only value found is the old one; no change can be derived
                previous = None
            current_value = {key: extracted.value, "value_source": extracted.source}
            previous_value = {key: previous} if previous is not None else None
            pct = percent_change(previous, extracted.value)
            if extracted.value is None:
                low_confidence = True
                result.warnings.append(
                    data_quality_warning(
                        "missing_value",
                        f"No {key} found in history row {idx} ({event_type})",
                        entity_id=entity_id,
                        row_index=idx,
                    )
                )

        result.events.append(
            ChangeEvent(
                entity_id=entity_id,
                date=event_date,
                event_type=event_type,
                current_value=current_value,
                previous_value=previous_value,
                percent_change=pct,
                source=str(row_source),
                record_id=str(record_id) if record_id is not None else None,
                low_confidence=low_confidence,
            )
        )

    latest = {}
    for i, event in enumerate(result.events):
        if event.event_type in _NEVER_CURRENT or event.date is None or event.date > now:
            continue
        best = latest.get(event.event_type)
        if best is None or event.date >= result.events[best].date:
            latest[event.event_type] = i
    for i in latest.values():
        event = result.events[i]
        if event.event_type == EVT_CONTRACT_START and not _history_contract_open(
            event, result.events, now
        ):
            continue
        result.events[i] = event.with_current(True)
    result.active_keys = active_contract_keys(result.events)

    logger.debug("Converted %d history rows of %s", len(result.events), entity_id)
    return result
