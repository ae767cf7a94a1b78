"""
Customer service history tracking core.

This package keeps per-consumer record caches consistent and predicts
maintenance urgency from service history:
- ServiceRecord / ServiceRecordInput: Stored records and mutation payloads
- PersistenceGateway: Async storage interface (in-memory and YAML file stores)
- EntityCache: One consumer's snapshot with loading/error state
- ChangeBroadcaster: Fans change signals out to every live cache
- RecordFilter / SortSpec / filter_and_sort: Filter and sort pipeline
- CycleTable / predict_maintenance: Maintenance urgency engine
"""

from .urgency import Urgency
from .result import ErrorCode, Result, ServiceError
from .service_record import ServiceRecord, ServiceRecordInput, parse_service_date
from .cycle import DEFAULT_CYCLES, CycleTable, MaintenanceCycle
from .maintenance_status import MaintenanceStatus
from .calculations import (
    calc_next_recommended_date,
    calc_progress_percentage,
    calc_years_elapsed,
    classify_urgency,
)
from .pipeline import RecordFilter, SortSpec, filter_and_sort, keyword_search
from .prediction import predict_due_maintenance, predict_maintenance, summarize_by_year
from .validation import validate_record_input
from .broadcaster import ChangeBroadcaster, Subscription
from .gateway import InMemoryGateway, PersistenceGateway, YamlFileGateway
from .cache import EntityCache
from .debounce import DebouncedSearch
from .loader import load_cycle_table

__all__ = [
    "Urgency",
    "ErrorCode",
    "Result",
    "ServiceError",
    "ServiceRecord",
    "ServiceRecordInput",
    "parse_service_date",
    "DEFAULT_CYCLES",
    "CycleTable",
    "MaintenanceCycle",
    "MaintenanceStatus",
    "calc_next_recommended_date",
    "calc_progress_percentage",
    "calc_years_elapsed",
    "classify_urgency",
    "RecordFilter",
    "SortSpec",
    "filter_and_sort",
    "keyword_search",
    "predict_due_maintenance",
    "predict_maintenance",
    "summarize_by_year",
    "validate_record_input",
    "ChangeBroadcaster",
    "Subscription",
    "EntityCache",
    "InMemoryGateway",
    "PersistenceGateway",
    "YamlFileGateway",
    "DebouncedSearch",
    "load_cycle_table",
]
