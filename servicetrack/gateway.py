"""
Persistence gateways.

The cache talks to storage only through PersistenceGateway: four async
operations, each returning a Result. Two implementations ship here, an
in-memory store and a YAML file store.
"""

import abc
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .pipeline import RecordFilter, apply_filters
from .result import ErrorCode, Result
from .service_record import ServiceRecord, ServiceRecordInput

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now().isoformat(timespec="seconds")


def _not_found(record_id: Any) -> Result:
    return Result.fail(ErrorCode.NOT_FOUND, f"Service record {record_id!r} not found")


def build_record(record_id: Any, data: ServiceRecordInput) -> ServiceRecord:
    """New record from create input; status defaults to 'completed'."""
    now = _timestamp()
    service_date = data.service_date
    if hasattr(service_date, "isoformat"):
        service_date = service_date.isoformat()
    return ServiceRecord(
        record_id=record_id,
        customer_id=data.customer_id,
        service_date=service_date,
        service_type=data.service_type,
        service_description=data.service_description,
        amount=data.amount,
        status=data.status or "completed",
        photo_path=data.photo_path,
        created_at=now,
        updated_at=now,
    )


def apply_changes(record: ServiceRecord, data: ServiceRecordInput) -> ServiceRecord:
    """Copy of record with the supplied input fields applied. record_id is kept."""
    d = record.to_dict()
    updated = ServiceRecord.from_dict(d)
    for name, value in data.changes().items():
        if name == "service_date" and hasattr(value, "isoformat"):
            value = value.isoformat()
        setattr(updated, name, value)
    updated.updated_at = _timestamp()
    return updated


class PersistenceGateway(abc.ABC):
    """Request/response interface to durable storage."""

    @abc.abstractmethod
    async def fetch(self, record_filter: Optional[RecordFilter] = None) -> Result:
        """Result with a list of ServiceRecord matching record_filter."""

    @abc.abstractmethod
    async def create(self, data: ServiceRecordInput) -> Result:
        """Result with the created ServiceRecord."""

    @abc.abstractmethod
    async def update(self, record_id: Any, data: ServiceRecordInput) -> Result:
        """Result with the updated ServiceRecord, NOT_FOUND if missing."""

    @abc.abstractmethod
    async def delete(self, record_id: Any) -> Result:
        """Result with no data, NOT_FOUND if missing."""


class InMemoryGateway(PersistenceGateway):
    """Gateway holding records in a dict, with sequential integer ids."""

    def __init__(self, records: Optional[List[ServiceRecord]] = None):
        self._records: Dict[Any, ServiceRecord] = {}
        for record in records or []:
            self._records[record.record_id] = record
        numeric_ids = [k for k in self._records if isinstance(k, int)]
        self._next_id = max(numeric_ids, default=0) + 1
        self.calls: List[str] = []

    async def fetch(self, record_filter: Optional[RecordFilter] = None) -> Result:
        self.calls.append("fetch")
        records = [ServiceRecord.from_dict(r.to_dict()) for r in self._records.values()]
        return Result.ok(apply_filters(records, record_filter))

    async def create(self, data: ServiceRecordInput) -> Result:
        self.calls.append("create")
        record = build_record(self._next_id, data)
        self._next_id += 1
        self._records[record.record_id] = record
        return Result.ok(record)

    async def update(self, record_id: Any, data: ServiceRecordInput) -> Result:
        self.calls.append("update")
        if record_id not in self._records:
            return _not_found(record_id)
        record = apply_changes(self._records[record_id], data)
        self._records[record_id] = record
        return Result.ok(record)

    async def delete(self, record_id: Any) -> Result:
        self.calls.append("delete")
        if record_id not in self._records:
            return _not_found(record_id)
        del self._records[record_id]
        return Result.ok()


class YamlFileGateway(PersistenceGateway):
    """
    Gateway backed by a YAML file of the form ``records: [...]``.

    Every operation loads the raw YAML, applies its change and writes the
    whole file back. A missing file reads as an empty collection.

    File access is blocking and never awaits, so each operation runs to
    completion on the event loop and concurrent mutations cannot interleave.
    """

    def __init__(self, filename: Union[str, Path]):
        self.filename = Path(filename)

    def _load(self) -> Dict[str, Any]:
        if not self.filename.exists():
            return {"records": []}
        with open(self.filename, "r") as fp:
            data = yaml.load(fp, Loader=yaml.SafeLoader) or {}
        if data.get("records") is None:
            data["records"] = []
        return data

    def _save(self, data: Dict[str, Any]) -> None:
        with open(self.filename, "w") as fp:
            yaml.dump(
                data,
                fp,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
                width=120,
            )

    @staticmethod
    def _index_of(records: List[Dict[str, Any]], record_id: Any) -> Optional[int]:
        for index, entry in enumerate(records):
            if entry.get("recordId") == record_id:
                return index
        return None

    def _storage_error(self, action: str, exc: Exception) -> Result:
        logger.error(f"Failed to {action} {self.filename}: {exc}")
        return Result.fail(ErrorCode.SERVER_ERROR, f"Failed to {action} {self.filename}: {exc}")

    async def fetch(self, record_filter: Optional[RecordFilter] = None) -> Result:
        try:
            data = self._load()
            records = [ServiceRecord.from_dict(d) for d in data["records"]]
        except (OSError, yaml.YAMLError, KeyError, TypeError, AttributeError) as e:
            return self._storage_error("read", e)
        return Result.ok(apply_filters(records, record_filter))

    async def create(self, data: ServiceRecordInput) -> Result:
        try:
            stored = self._load()
            ids = [r.get("recordId") for r in stored["records"]]
            next_id = max((i for i in ids if isinstance(i, int)), default=0) + 1
            record = build_record(next_id, data)
            stored["records"].append(record.to_dict())
            self._save(stored)
        except (OSError, yaml.YAMLError, TypeError, AttributeError) as e:
            return self._storage_error("write", e)
        return Result.ok(record)

    async def update(self, record_id: Any, data: ServiceRecordInput) -> Result:
        try:
            stored = self._load()
            index = self._index_of(stored["records"], record_id)
            if index is None:
                return _not_found(record_id)
            record = apply_changes(ServiceRecord.from_dict(stored["records"][index]), data)
            stored["records"][index] = record.to_dict()
            self._save(stored)
        except (OSError, yaml.YAMLError, KeyError, TypeError, AttributeError) as e:
            return self._storage_error("write", e)
        return Result.ok(record)

    async def delete(self, record_id: Any) -> Result:
        try:
            stored = self._load()
            index = self._index_of(stored["records"], record_id)
            if index is None:
                return _not_found(record_id)
            del stored["records"][index]
            self._save(stored)
        except (OSError, yaml.YAMLError, TypeError, AttributeError) as e:
            return self._storage_error("write", e)
        return Result.ok()
