"""
Entity cache: one consumer's snapshot of service records.

Each cache owns its own copy of the records it was asked for, plus a
loading flag and the last error. Mutations go through the gateway, then
the mutating cache refetches its own snapshot and calls the shared
broadcaster, which makes every other live cache refetch silently.
Consistency across caches is eventual: refetches settle independently.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Awaitable, Callable, List, Optional, Set, Tuple, Union

from .broadcaster import ChangeBroadcaster
from .cycle import COMMON_SERVICE_TYPES, DEFAULT_CYCLES, CycleTable
from .maintenance_status import MaintenanceStatus
from .pipeline import DEFAULT_SORT, RecordFilter, SortSpec, filter_and_sort
from .prediction import predict_due_maintenance, predict_maintenance
from .result import ErrorCode, Result, ServiceError
from .service_record import ServiceRecord, ServiceRecordInput
from .gateway import PersistenceGateway
from .validation import validate_record_input

logger = logging.getLogger(__name__)

# (level, text) for user-facing messages; level is info, success or error
MessageCallback = Callable[[str, str], None]


@dataclass(frozen=True)
class CacheSnapshot:
    """Point-in-time view of a cache for consumers."""

    records: Tuple[ServiceRecord, ...]
    loading: bool
    error: Optional[ServiceError]


class EntityCache:
    """
    Per-consumer snapshot of service records kept in step via a broadcaster.

    Args:
        gateway: Storage the cache reads from and writes through.
        broadcaster: Shared change broadcaster; the cache subscribes on init.
        scope: Filter sent to the gateway on every fetch (e.g. one customer).
        on_message: Optional sink for user-facing status messages.
        name: Label used in log lines.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        broadcaster: ChangeBroadcaster,
        scope: Optional[RecordFilter] = None,
        on_message: Optional[MessageCallback] = None,
        name: Optional[str] = None,
    ):
        self.gateway = gateway
        self.broadcaster = broadcaster
        self.scope = scope
        self.on_message = on_message
        self.name = name or f"cache-{id(self):x}"

        self._records: Tuple[ServiceRecord, ...] = ()
        self._in_flight = 0
        self._notifying = False
        self._tasks: Set["asyncio.Task"] = set()
        self.error: Optional[ServiceError] = None
        self.initialized = False
        self.stale = False
        self.notifications_received = 0

        self.filters = RecordFilter()
        self.sort = DEFAULT_SORT

        self._subscription = broadcaster.subscribe(self._on_change)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return not self._subscription.active

    def close(self) -> None:
        """Unsubscribe from the broadcaster. Pending refetches still finish."""
        self._subscription.unsubscribe()

    def __enter__(self) -> "EntityCache":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    async def wait_idle(self) -> None:
        """Wait for refetches started by change notifications to settle."""
        while True:
            pending = [t for t in self._tasks if not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    # -------------------------------------------------------------------------
    # Snapshot
    # -------------------------------------------------------------------------

    @property
    def records(self) -> List[ServiceRecord]:
        return list(self._records)

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    def snapshot(self) -> CacheSnapshot:
        return CacheSnapshot(self._records, self.loading, self.error)

    @property
    def visible(self) -> List[ServiceRecord]:
        """Snapshot after the current filters and sort order."""
        return filter_and_sort(self._records, self.filters, self.sort)

    # -------------------------------------------------------------------------
    # Fetch
    # -------------------------------------------------------------------------

    async def fetch(
        self, record_filter: Optional[RecordFilter] = None, silent: bool = False
    ) -> Result:
        """
        Load records from the gateway and replace the snapshot.

        A given record_filter becomes the cache's scope for later refetches.
        On failure the error is recorded and the previous snapshot kept.
        Overlapping fetches are not cancelled: the last one to resolve wins.
        """
        if record_filter is not None:
            self.scope = record_filter

        self._in_flight += 1
        try:
            result = await self._call("fetch", self.gateway.fetch, self.scope)
        finally:
            self._in_flight -= 1

        if result.success:
            self._records = tuple(result.data or ())
            self.error = None
            self.initialized = True
            self.stale = False
            logger.debug(f"{self.name}: loaded {len(self._records)} record(s)")
            if not silent:
                if self._records:
                    self._message("success", "Service records loaded")
                else:
                    self._message("info", "No service records yet. Add the first one.")
        else:
            self.error = result.error
            logger.warning(
                f"{self.name}: fetch failed, keeping {len(self._records)} "
                f"cached record(s): {result.error}"
            )
            if not silent:
                self._message("error", result.error.message)
        return result

    async def refresh(self, silent: bool = False) -> Result:
        """Refetch the current scope. silent suppresses user-facing messages."""
        if not silent:
            self._message("info", "Refreshing service records...")
        return await self.fetch(silent=silent)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def create(self, data: ServiceRecordInput) -> Result:
        errors = validate_record_input(data)
        if errors:
            return self._invalid(errors)
        result = await self._call("create", self.gateway.create, data)
        return await self._after_mutation(result, "Service record created")

    async def update(self, record_id: Any, data: ServiceRecordInput) -> Result:
        errors = []
        if record_id is None or record_id == "":
            errors.append("Record id is required")
        if not data.changes():
            errors.append("Nothing to update")
        errors.extend(validate_record_input(data, partial=True))
        if errors:
            return self._invalid(errors)
        result = await self._call("update", self.gateway.update, record_id, data)
        return await self._after_mutation(result, "Service record updated")

    async def delete(self, record_id: Any) -> Result:
        if record_id is None or record_id == "":
            return self._invalid(["Record id is required"])
        result = await self._call("delete", self.gateway.delete, record_id)
        return await self._after_mutation(result, "Service record deleted")

    async def _after_mutation(self, result: Result, success_message: str) -> Result:
        if not result.success:
            self.error = result.error
            self._message("error", result.error.message)
            return result

        self._message("success", success_message)
        await self.fetch(silent=True)
        self._broadcast()
        return result

    def _invalid(self, errors: List[str]) -> Result:
        logger.info(f"{self.name}: rejected input: {'; '.join(errors)}")
        self._message("error", "\n".join(errors))
        return Result.fail(ErrorCode.VALIDATION_ERROR, "\n".join(errors), errors)

    # -------------------------------------------------------------------------
    # Change propagation
    # -------------------------------------------------------------------------

    def _broadcast(self) -> None:
        self._notifying = True
        try:
            self.broadcaster.notify()
        finally:
            self._notifying = False

    def _on_change(self) -> None:
        # Our own notify: this cache has already refetched
        if self._notifying:
            return
        self.notifications_received += 1
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.stale = True
            logger.warning(f"{self.name}: change notified outside an event loop, marked stale")
            return
        task = loop.create_task(self.refresh(silent=True))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    # -------------------------------------------------------------------------
    # Gateway calls
    # -------------------------------------------------------------------------

    async def _call(self, operation: str, func: Callable[..., Awaitable[Result]], *args) -> Result:
        """
        Await a gateway call, turning escaped exceptions into a failed Result.

        A failure reported without an error is given a SERVER_ERROR so
        callers can always rely on result.error when success is False.
        """
        try:
            result = await func(*args)
        except (ConnectionError, TimeoutError, asyncio.TimeoutError) as e:
            logger.warning(f"{self.name}: {operation} network failure: {e}")
            return Result.fail(ErrorCode.NETWORK_ERROR, f"Network error during {operation}: {e}")
        except Exception as e:
            logger.exception(f"{self.name}: {operation} failed")
            return Result.fail(ErrorCode.SERVER_ERROR, f"Server error during {operation}: {e}")
        if not result.success and result.error is None:
            logger.warning(f"{self.name}: {operation} failed without an error")
            return Result.fail(ErrorCode.SERVER_ERROR, f"Server error during {operation}")
        return result

    def _message(self, level: str, text: str) -> None:
        if self.on_message is not None:
            self.on_message(level, text)

    # -------------------------------------------------------------------------
    # Filters and sort
    # -------------------------------------------------------------------------

    def set_filters(self, **changes) -> None:
        """Merge filter fields into the current filters (e.g. status='pending')."""
        self.filters = self.filters.merge(**changes)
        if self.filters.is_active:
            logger.debug(f"{self.name}: filters now {self.filters}")

    def clear_filters(self) -> None:
        """Reset filters and sort order to newest first."""
        self.filters = RecordFilter()
        self.sort = DEFAULT_SORT

    def set_sort(self, field: Union[str, SortSpec], direction: str = "desc") -> None:
        self.sort = field if isinstance(field, SortSpec) else SortSpec(field, direction)

    # -------------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------------

    def maintenance(
        self,
        cycle_table: CycleTable = DEFAULT_CYCLES,
        now: Optional[Union[date, datetime]] = None,
    ) -> List[MaintenanceStatus]:
        """Ranked maintenance predictions for the visible records."""
        return predict_maintenance(self.visible, cycle_table, now)

    def due_maintenance(
        self,
        cycle_table: CycleTable = DEFAULT_CYCLES,
        categories=None,
        now: Optional[Union[date, datetime]] = None,
    ) -> List[MaintenanceStatus]:
        return predict_due_maintenance(self.visible, cycle_table, categories, now)

    def records_by_customer(self, customer_id: Any) -> List[ServiceRecord]:
        return [r for r in self._records if r.customer_id == customer_id]

    def latest_record_by_customer(self, customer_id: Any) -> Optional[ServiceRecord]:
        """Most recent record for a customer; records with bad dates sort last."""
        records = self.records_by_customer(customer_id)
        if not records:
            return None
        return max(records, key=lambda r: r.parsed_date or date.min)

    def total_amount_by_customer(self, customer_id: Any) -> float:
        return sum(r.amount or 0 for r in self.records_by_customer(customer_id))

    def service_types(self) -> List[str]:
        """Well-known service types merged with those in use, sorted."""
        used = {r.service_type for r in self._records if r.service_type}
        return sorted(set(COMMON_SERVICE_TYPES) | used)

    @property
    def record_count(self) -> int:
        return len(self.visible)

    @property
    def has_records(self) -> bool:
        return len(self._records) > 0
