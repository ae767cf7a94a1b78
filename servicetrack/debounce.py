"""Debounced keyword search over a cache's records."""

import asyncio
import logging
from typing import Callable, List, Optional

from .pipeline import keyword_search
from .service_record import ServiceRecord

logger = logging.getLogger(__name__)

DEFAULT_DELAY = 0.3


class DebouncedSearch:
    """
    Delay a keystroke-triggered search until typing pauses.

    Each trigger() restarts the timer; only the last keyword is searched.
    cancel() clears a pending timer and cancels a search already running.

    Args:
        source: Returns the records to search (usually cache.visible).
        on_result: Receives (keyword, matches) when a search completes.
        delay: Seconds to wait after the last trigger.
    """

    def __init__(
        self,
        source: Callable[[], List[ServiceRecord]],
        on_result: Callable[[str, List[ServiceRecord]], None],
        delay: float = DEFAULT_DELAY,
    ):
        self.source = source
        self.on_result = on_result
        self.delay = delay
        self._timer: Optional[asyncio.TimerHandle] = None
        self._task: Optional["asyncio.Task"] = None

    @property
    def pending(self) -> bool:
        return self._timer is not None or (self._task is not None and not self._task.done())

    def trigger(self, keyword: str) -> None:
        """Schedule a search for keyword, replacing any pending one."""
        self.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.delay, self._fire, keyword)

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.debug("Cancelled running search")
        self._task = None

    def _fire(self, keyword: str) -> None:
        self._timer = None
        self._task = asyncio.get_running_loop().create_task(self._search(keyword))

    async def _search(self, keyword: str) -> None:
        # Yield once so a cancel() issued right after the timer fired still wins
        await asyncio.sleep(0)
        matches = keyword_search(self.source(), keyword)
        logger.debug(f"Search {keyword!r}: {len(matches)} match(es)")
        self.on_result(keyword, matches)

    async def wait(self) -> None:
        """Wait for the pending search, if any, to finish."""
        while self._timer is not None:
            await asyncio.sleep(self.delay / 2 or 0.001)
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)
