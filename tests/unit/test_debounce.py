"""Tests for intent classification and the debounce scheduler."""

import asyncio

import pytest

from indexer_console.utils.debounce import DebounceScheduler, SearchIntent, intent_for_fields
from tests.unit.fakes.timing import wait_for

DELAYS = {
    SearchIntent.TEXT_CHANGED: 0.08,
    SearchIntent.FILTERS_CHANGED: 0.04,
    SearchIntent.PAGE_CHANGED: 0,
}


class TestIntentForFields:
    def test_free_text(self) -> None:
        assert intent_for_fields(["search"]) == SearchIntent.TEXT_CHANGED
        assert intent_for_fields(["objeto", "agencia"]) == SearchIntent.TEXT_CHANGED

    def test_structured(self) -> None:
        assert intent_for_fields(["pais"]) == SearchIntent.FILTERS_CHANGED
        assert intent_for_fields(["search", "user_tag_ids"]) == SearchIntent.FILTERS_CHANGED

    def test_paging(self) -> None:
        assert intent_for_fields(["page"]) == SearchIntent.PAGE_CHANGED
        assert intent_for_fields(["page_size", "page"]) == SearchIntent.PAGE_CHANGED

    def test_nothing(self) -> None:
        assert intent_for_fields([]) is None


@pytest.mark.asyncio
class TestDebounceScheduler:
    async def _make(self, timers):
        calls = []

        async def action():
            calls.append(asyncio.get_running_loop().time())

        return DebounceScheduler(timers, action, DELAYS), calls

    async def test_burst_of_text_changes_fires_once(self, timers) -> None:
        debouncer, calls = await self._make(timers)
        for _ in range(5):
            await debouncer.dispatch(SearchIntent.TEXT_CHANGED)
            await asyncio.sleep(0.01)
        assert calls == []
        await wait_for(lambda: calls)
        await asyncio.sleep(0.12)
        assert len(calls) == 1

    async def test_at_most_one_pending_per_class(self, timers) -> None:
        debouncer, _ = await self._make(timers)
        await debouncer.dispatch(SearchIntent.FILTERS_CHANGED)
        await debouncer.dispatch(SearchIntent.FILTERS_CHANGED)
        keys = [key for key in timers.pending_keys() if key.endswith(":filters")]
        assert len(keys) == 1

    async def test_page_change_runs_immediately(self, timers) -> None:
        debouncer, calls = await self._make(timers)
        await debouncer.dispatch(SearchIntent.PAGE_CHANGED)
        assert len(calls) == 1

    async def test_immediate_cancels_pending(self, timers) -> None:
        debouncer, calls = await self._make(timers)
        await debouncer.dispatch(SearchIntent.TEXT_CHANGED)
        await debouncer.dispatch(SearchIntent.PAGE_CHANGED)
        assert not debouncer.is_pending(SearchIntent.TEXT_CHANGED)
        await asyncio.sleep(0.15)
        assert len(calls) == 1

    async def test_close_cancels_everything(self, timers) -> None:
        debouncer, calls = await self._make(timers)
        await debouncer.dispatch(SearchIntent.TEXT_CHANGED)
        await debouncer.dispatch(SearchIntent.FILTERS_CHANGED)
        debouncer.close()
        await debouncer.dispatch(SearchIntent.PAGE_CHANGED)
        await asyncio.sleep(0.15)
        assert calls == []
