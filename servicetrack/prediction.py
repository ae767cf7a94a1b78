"""
Maintenance urgency engine.

Turns a collection of service records into ranked MaintenanceStatus
predictions. Pure: the same records, cycle table and reference time
always produce the same list, and no input makes it raise.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from .calculations import (
    calc_next_recommended_date,
    calc_progress_percentage,
    calc_years_elapsed,
    classify_urgency,
)
from .cycle import DEFAULT_CYCLES, OTHER, CycleTable, normalize_category
from .maintenance_status import MaintenanceStatus
from .service_record import ServiceRecord

logger = logging.getLogger(__name__)


def id_sort_key(value: Any) -> Tuple[int, Any]:
    """Total ordering over mixed id types (numbers before strings, None last)."""
    if value is None:
        return (2, "")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, value)
    return (1, str(value))


def rank_key(status: MaintenanceStatus):
    """
    Sort key: urgency rank desc, then years elapsed desc.

    Customer id and service type settle any remaining tie so the order
    does not depend on input order.
    """
    return (
        -status.urgency.rank,
        -status.years_elapsed,
        id_sort_key(status.customer_id),
        status.service_type.lower(),
    )


def latest_by_group(
    records: Iterable[ServiceRecord],
) -> "OrderedDict[Tuple[Any, str], Tuple[ServiceRecord, date]]":
    """
    Most recent record per (customer_id, service type) group.

    Service types group case-insensitively; a missing type groups as
    'other'. Records whose date cannot be parsed are skipped.
    """
    latest: "OrderedDict[Tuple[Any, str], Tuple[ServiceRecord, date]]" = OrderedDict()
    for record in records:
        service_date = record.parsed_date
        if service_date is None:
            logger.debug(
                f"Skipping record {record.record_id!r}: unparseable date "
                f"{record.service_date!r}"
            )
            continue
        key = (record.customer_id, normalize_category(record.service_type))
        current = latest.get(key)
        if current is None or (service_date, id_sort_key(record.record_id)) > (
            current[1],
            id_sort_key(current[0].record_id),
        ):
            latest[key] = (record, service_date)
    return latest


def _now(now: Optional[Union[date, datetime]]) -> Union[date, datetime]:
    return now if now is not None else datetime.now()


def predict_maintenance(
    records: Iterable[ServiceRecord],
    cycle_table: CycleTable = DEFAULT_CYCLES,
    now: Optional[Union[date, datetime]] = None,
) -> List[MaintenanceStatus]:
    """
    Calculate ranked maintenance statuses for a record collection.

    Logic:
    - Group by (customer, service type), keep only the latest-dated record
    - Look up {early, standard, late} for the type ('other' if unknown)
    - years elapsed = (now - last) / 365.25 days, truncated to 0.1
    - overdue >= late, high >= standard, medium >= early, else low
    - next recommended = last + standard calendar years
    - progress = years / standard, clamped to [0, 100] percent
    - Sort by urgency desc, then years elapsed desc
    """
    reference = _now(now)
    statuses = []
    for (customer_id, _), (record, last_date) in latest_by_group(records).items():
        category = cycle_table.resolve(record.service_type)
        cycle = cycle_table.lookup(record.service_type)
        years = calc_years_elapsed(last_date, reference)
        try:
            next_date = calc_next_recommended_date(last_date, cycle.standard)
        except (ValueError, OverflowError):
            logger.debug(f"Skipping record {record.record_id!r}: date out of range")
            continue
        label = str(record.service_type or "").strip() or OTHER
        statuses.append(
            MaintenanceStatus(
                customer_id=customer_id,
                service_type=label,
                category=category,
                record_id=record.record_id,
                last_service_date=last_date,
                years_elapsed=years,
                urgency=classify_urgency(years, cycle),
                next_recommended_date=next_date,
                progress_percentage=calc_progress_percentage(years, cycle.standard),
                cycle=cycle,
            )
        )
    statuses.sort(key=rank_key)
    return statuses


def predict_due_maintenance(
    records: Iterable[ServiceRecord],
    cycle_table: CycleTable = DEFAULT_CYCLES,
    categories: Optional[Iterable[str]] = None,
    now: Optional[Union[date, datetime]] = None,
) -> List[MaintenanceStatus]:
    """
    Ranked statuses that have reached their early threshold.

    Args:
        categories: If given, only service types resolving to one of these
            table categories are considered.
    """
    wanted = None
    if categories is not None:
        wanted = {normalize_category(c) for c in categories}
    if wanted is not None:
        records = [r for r in records if cycle_table.resolve(r.service_type) in wanted]
    return [s for s in predict_maintenance(records, cycle_table, now) if s.is_due]


@dataclass
class YearSummary:
    """Due statuses whose next recommended date falls on or before a year."""

    year: int
    total: int = 0
    by_category: Dict[str, int] = field(default_factory=dict)


def summarize_by_year(
    statuses: Iterable[MaintenanceStatus], start_year: int, span: int = 10
) -> List[YearSummary]:
    """Per-year counts of due statuses, from start_year through start_year + span."""
    due = [s for s in statuses if s.is_due]
    summaries = []
    for year in range(start_year, start_year + span + 1):
        summary = YearSummary(year=year)
        for status in due:
            if status.next_recommended_date.year <= year:
                summary.total += 1
                summary.by_category[status.category] = (
                    summary.by_category.get(status.category, 0) + 1
                )
        summaries.append(summary)
    return summaries
