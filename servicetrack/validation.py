"""Local validation of record input before any gateway call."""

from datetime import date
from typing import List, Optional

from .service_record import STATUSES, ServiceRecordInput, parse_service_date

MAX_SERVICE_TYPE_LENGTH = 50
MAX_DESCRIPTION_LENGTH = 1000
MIN_AMOUNT = 0
MAX_AMOUNT = 10_000_000


def validate_record_input(
    data: ServiceRecordInput, partial: bool = False, today: Optional[date] = None
) -> List[str]:
    """
    Validate a create/update payload. Returns list of errors.

    Args:
        partial: Update mode; required fields may be omitted but not blanked.
        today: Reference date for the no-future-dates rule (defaults to today).
    """
    errors = []
    today = today or date.today()

    # Blank counts as missing; an update may omit these but not clear them
    if _is_blank(data.customer_id):
        if not partial or data.customer_id is not None:
            errors.append("Customer is required")

    if _is_blank(data.service_date):
        if not partial or data.service_date is not None:
            errors.append("Service date is required")
    else:
        service_date = parse_service_date(data.service_date)
        if service_date is None:
            errors.append(f"Service date is not a valid date: {data.service_date!r}")
        elif service_date > today:
            errors.append("Service date cannot be in the future")

    if data.amount is not None:
        try:
            amount = float(data.amount)
        except (TypeError, ValueError):
            errors.append(f"Amount must be a number, got {data.amount!r}")
        else:
            if amount != amount or amount < MIN_AMOUNT:
                errors.append("Amount must be 0 or more")
            elif amount > MAX_AMOUNT:
                errors.append(f"Amount must be {MAX_AMOUNT:,} or less")

    text_fields = (
        ("Service type", data.service_type, MAX_SERVICE_TYPE_LENGTH),
        ("Service description", data.service_description, MAX_DESCRIPTION_LENGTH),
        ("Photo path", data.photo_path, None),
    )
    for label, value, max_length in text_fields:
        if value is None:
            continue
        if not isinstance(value, str):
            errors.append(f"{label} must be text, got {value!r}")
        elif max_length is not None and len(value) > max_length:
            errors.append(f"{label} must be {max_length} characters or fewer")

    if data.status is not None and data.status not in STATUSES:
        errors.append(
            f"Status must be one of {', '.join(STATUSES)}, got {data.status!r}"
        )

    return errors


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
