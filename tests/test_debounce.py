#!/usr/bin/env python3
"""Tests for the debounced keyword search."""
import asyncio

from servicetrack import DebouncedSearch, ServiceRecord

RECORDS = [
    ServiceRecord(1, 1, "2024-12-15", "exterior-paint", "South wall"),
    ServiceRecord(2, 2, "2024-12-10", "roof-repair", "Typhoon damage"),
    ServiceRecord(3, 1, "2024-12-05", "roof-paint", "Ridge line"),
]


class TestDebouncedSearch:
    """Tests for DebouncedSearch."""

    def test_rapid_triggers_search_once(self):
        results = []

        async def scenario():
            search = DebouncedSearch(lambda: RECORDS, lambda k, m: results.append((k, m)), delay=0.01)
            for keyword in ("r", "ro", "roo", "roof"):
                search.trigger(keyword)
            assert search.pending
            await search.wait()
            assert not search.pending

        asyncio.run(scenario())
        assert len(results) == 1
        keyword, matches = results[0]
        assert keyword == "roof"
        assert [r.record_id for r in matches] == [2, 3]

    def test_cancel_before_delay(self):
        results = []

        async def scenario():
            search = DebouncedSearch(lambda: RECORDS, lambda k, m: results.append(k), delay=0.01)
            search.trigger("wall")
            search.cancel()
            assert not search.pending
            await asyncio.sleep(0.03)

        asyncio.run(scenario())
        assert results == []

    def test_separate_pauses_search_each_time(self):
        results = []

        async def scenario():
            search = DebouncedSearch(lambda: RECORDS, lambda k, m: results.append(k), delay=0.01)
            search.trigger("wall")
            await search.wait()
            search.trigger("ridge")
            await search.wait()

        asyncio.run(scenario())
        assert results == ["wall", "ridge"]

    def test_searches_current_source(self):
        records = []
        results = []

        async def scenario():
            search = DebouncedSearch(lambda: records, lambda k, m: results.append(m), delay=0.01)
            search.trigger("typhoon")
            records.extend(RECORDS)
            await search.wait()

        asyncio.run(scenario())
        assert [r.record_id for r in results[0]] == [2]
