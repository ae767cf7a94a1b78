"""MaintenanceStatus dataclass for derived maintenance predictions."""

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, TYPE_CHECKING

from .urgency import Urgency

if TYPE_CHECKING:
    from .cycle import MaintenanceCycle


@dataclass(frozen=True)
class MaintenanceStatus:
    """Predicted next action for one (customer, service type) group."""

    customer_id: Any
    service_type: str
    category: str
    record_id: Any
    last_service_date: date
    years_elapsed: float
    urgency: Urgency
    next_recommended_date: date
    progress_percentage: float
    cycle: "MaintenanceCycle"

    @property
    def is_due(self) -> bool:
        """True once the early threshold has been reached."""
        return self.years_elapsed >= self.cycle.early

    @property
    def key(self):
        return (self.customer_id, self.service_type)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "customerId": self.customer_id,
            "serviceType": self.service_type,
            "category": self.category,
            "recordId": self.record_id,
            "lastServiceDate": self.last_service_date.isoformat(),
            "yearsElapsed": self.years_elapsed,
            "urgencyLevel": self.urgency.value,
            "nextRecommendedDate": self.next_recommended_date.isoformat(),
            "progressPercentage": self.progress_percentage,
            "standardCycleYears": self.cycle.standard,
        }
