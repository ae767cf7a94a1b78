"""ServiceRecord class for customer service history."""

from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Any, Dict, Optional, Union

DateLike = Union[date, str]

STATUSES = ("completed", "pending", "cancelled", "in-progress")


def parse_service_date(value: Any) -> Optional[date]:
    """
    Coerce a service date to a date.

    Accepts date, datetime and ISO strings ('2024-12-15' or a full
    timestamp). Returns None for anything that cannot be parsed.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


class ServiceRecord:
    """A record of service performed for a customer."""

    def __init__(
            self,
            record_id: Any,
            customer_id: Any,
            service_date: DateLike,
            service_type: Optional[str] = None,
            service_description: Optional[str] = None,
            amount: Optional[float] = None,
            status: Optional[str] = None,
            photo_path: Optional[str] = None,
            created_at: Optional[str] = None,
            updated_at: Optional[str] = None,
    ):
        self._record_id = record_id
        self.customer_id = customer_id
        self.service_date = service_date
        self.service_type = service_type
        self.service_description = service_description
        self.amount = amount
        self.status = status
        self.photo_path = photo_path
        self.created_at = created_at
        self.updated_at = updated_at

    @property
    def record_id(self) -> Any:
        """Unique identifier, fixed at creation."""
        return self._record_id

    @property
    def parsed_date(self) -> Optional[date]:
        return parse_service_date(self.service_date)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ServiceRecord):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return (
            f"ServiceRecord(record_id={self.record_id!r}, "
            f"customer_id={self.customer_id!r}, "
            f"service_date={self.service_date!r}, "
            f"service_type={self.service_type!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the stored dict format (camelCase keys, None omitted)."""
        service_date = self.service_date
        if isinstance(service_date, date):
            service_date = service_date.isoformat()
        d: Dict[str, Any] = {
            "recordId": self.record_id,
            "customerId": self.customer_id,
            "serviceDate": service_date,
        }
        optional = [
            ("serviceType", self.service_type),
            ("serviceDescription", self.service_description),
            ("amount", self.amount),
            ("status", self.status),
            ("photoPath", self.photo_path),
            ("createdAt", self.created_at),
            ("updatedAt", self.updated_at),
        ]
        for key, value in optional:
            if value is not None:
                d[key] = value
        return d

    @classmethod
    def from_dict(cls, dct: Dict[str, Any]) -> "ServiceRecord":
        return cls(
            dct["recordId"],
            dct["customerId"],
            dct["serviceDate"],
            dct.get("serviceType"),
            dct.get("serviceDescription"),
            dct.get("amount"),
            dct.get("status"),
            dct.get("photoPath"),
            dct.get("createdAt"),
            dct.get("updatedAt"),
        )


@dataclass
class ServiceRecordInput:
    """Create/update payload. Fields left as None are not supplied."""

    customer_id: Any = None
    service_date: Optional[DateLike] = None
    service_type: Optional[str] = None
    service_description: Optional[str] = None
    amount: Optional[float] = None
    status: Optional[str] = None
    photo_path: Optional[str] = None

    def changes(self) -> Dict[str, Any]:
        """Only the fields that were supplied."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }
