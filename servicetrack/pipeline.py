"""Filter and sort pipeline for service record collections."""

import locale
from dataclasses import dataclass, fields, replace
from datetime import date
from typing import Any, Iterable, List, Optional

from .service_record import DateLike, ServiceRecord, parse_service_date

SORT_FIELDS = (
    "service_date",
    "amount",
    "customer_id",
    "record_id",
    "service_type",
    "service_description",
    "status",
)
DATE_FIELDS = ("service_date",)
NUMERIC_FIELDS = ("amount",)


@dataclass(frozen=True)
class RecordFilter:
    """Filter criteria. Fields left as None match everything."""

    customer_id: Any = None
    service_type: Optional[str] = None
    date_from: Optional[DateLike] = None
    date_to: Optional[DateLike] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    status: Optional[str] = None

    def merge(self, **changes) -> "RecordFilter":
        """Copy with the given fields replaced; unknown names raise TypeError."""
        return replace(self, **changes)

    @property
    def is_active(self) -> bool:
        return any(
            getattr(self, f.name) not in (None, "") for f in fields(self)
        )


@dataclass(frozen=True)
class SortSpec:
    """Single-field sort order."""

    field: str = "service_date"
    direction: str = "desc"

    def __post_init__(self):
        if self.field not in SORT_FIELDS:
            raise ValueError(f"Unknown sort field: {self.field!r}")
        if self.direction not in ("asc", "desc"):
            raise ValueError(f"Sort direction must be 'asc' or 'desc', got {self.direction!r}")


DEFAULT_SORT = SortSpec()


def _as_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _matches(record: ServiceRecord, criteria: RecordFilter) -> bool:
    if criteria.customer_id not in (None, "") and record.customer_id != criteria.customer_id:
        return False

    if criteria.service_type:
        service_type = (record.service_type or "").lower()
        if criteria.service_type.lower() not in service_type:
            return False

    if criteria.date_from is not None or criteria.date_to is not None:
        service_date = record.parsed_date
        if service_date is None:
            return False
        date_from = parse_service_date(criteria.date_from)
        date_to = parse_service_date(criteria.date_to)
        if date_from is not None and service_date < date_from:
            return False
        if date_to is not None and service_date > date_to:
            return False

    if criteria.min_amount is not None or criteria.max_amount is not None:
        amount = _as_number(record.amount)
        if amount is None:
            return False
        if criteria.min_amount is not None and amount < criteria.min_amount:
            return False
        if criteria.max_amount is not None and amount > criteria.max_amount:
            return False

    if criteria.status and record.status != criteria.status:
        return False

    return True


def apply_filters(
    records: Iterable[ServiceRecord], criteria: Optional[RecordFilter] = None
) -> List[ServiceRecord]:
    """Records matching every set criterion (logical AND)."""
    if criteria is None:
        return list(records)
    return [r for r in records if _matches(r, criteria)]


def _sort_value(record: ServiceRecord, field: str):
    if field in DATE_FIELDS:
        return record.parsed_date or date.min
    if field in NUMERIC_FIELDS:
        return _as_number(getattr(record, field)) or 0.0
    value = getattr(record, field)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, value, "")
    return (1, 0, locale.strxfrm(str(value or "")))


def sort_records(
    records: Iterable[ServiceRecord], sort_spec: SortSpec = DEFAULT_SORT
) -> List[ServiceRecord]:
    """Stable sort on one field; equal keys keep their input order."""
    return sorted(
        records,
        key=lambda r: _sort_value(r, sort_spec.field),
        reverse=sort_spec.direction == "desc",
    )


def filter_and_sort(
    records: Iterable[ServiceRecord],
    criteria: Optional[RecordFilter] = None,
    sort_spec: SortSpec = DEFAULT_SORT,
) -> List[ServiceRecord]:
    """Ordered view: filters first, then sort."""
    return sort_records(apply_filters(records, criteria), sort_spec)


def keyword_search(records: Iterable[ServiceRecord], keyword: str) -> List[ServiceRecord]:
    """Case-insensitive keyword match on service type, description and status."""
    needle = keyword.strip().lower()
    if not needle:
        return []
    results = []
    for record in records:
        haystacks = (record.service_type, record.service_description, record.status)
        if any(h and needle in str(h).lower() for h in haystacks):
            results.append(record)
    return results
