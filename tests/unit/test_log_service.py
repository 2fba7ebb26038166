"""Tests for incremental log tailing."""

import asyncio

import pytest

from indexer_console.core.errors import TransientNetworkFailure
from indexer_console.models.process import LogResponse
from indexer_console.services.log_service import LogTailer, fetch_tail
from tests.unit.fakes.api import make_logs
from tests.unit.fakes.timing import wait_for

pytestmark = pytest.mark.asyncio

T1, T2, T3 = "2024-01-15T10:00:01", "2024-01-15T10:00:02", "2024-01-15T10:00:03"


class TestFetchTail:
    async def test_first_call_has_no_since(self, api) -> None:
        api.queue("get_logs", make_logs(T1, T2, T3))
        batch = await fetch_tail(api, 42, None)
        assert api.calls_to("get_logs") == [{"process_id": 42, "since": None}]
        assert len(batch.new_entries) == 3
        assert batch.next_cursor == T3

    async def test_empty_batch_keeps_cursor(self, api) -> None:
        api.queue("get_logs", LogResponse(logs=[], last_timestamp="2030-01-01T00:00:00"))
        batch = await fetch_tail(api, 42, T3)
        assert batch.new_entries == []
        assert batch.next_cursor == T3

    async def test_cursor_falls_back_to_last_entry(self, api) -> None:
        response = make_logs(T1, T2)
        response.last_timestamp = None
        api.queue("get_logs", response)
        batch = await fetch_tail(api, 42, None)
        assert batch.next_cursor == T2


class TestLogTailer:
    async def test_scenario_three_entries_then_empty(self, api, timers) -> None:
        api.queue("get_logs", make_logs(T1, T2, T3), make_logs())
        api.defaults["get_logs"] = make_logs()
        tailer = LogTailer(api, timers, 42, interval=10)

        await tailer.start()
        assert len(tailer.entries) == 3
        assert tailer.cursor == T3

        await tailer.refresh()
        assert api.calls_to("get_logs")[1] == {"process_id": 42, "since": T3}
        assert len(tailer.entries) == 3
        assert tailer.cursor == T3
        tailer.stop()

    async def test_entries_appended_in_server_order(self, api, timers) -> None:
        api.queue("get_logs", make_logs(T1, T2), make_logs(T3, T3))
        api.defaults["get_logs"] = make_logs()
        tailer = LogTailer(api, timers, 42, interval=10)
        await tailer.start()
        before = list(tailer.entries)
        await tailer.refresh()
        assert tailer.entries[:2] == before
        assert len(tailer.entries) == 4
        assert [e.timestamp for e in tailer.entries] == [T1, T2, T3, T3]
        tailer.stop()

    async def test_polls_on_interval(self, api, timers) -> None:
        api.defaults["get_logs"] = make_logs()
        tailer = LogTailer(api, timers, 42, interval=0.03)
        await tailer.start()
        await wait_for(lambda: len(api.calls_to("get_logs")) >= 3)
        tailer.stop()

    async def test_failure_keeps_sequence(self, api, timers) -> None:
        api.queue("get_logs", make_logs(T1), TransientNetworkFailure("timeout"))
        tailer = LogTailer(api, timers, 42, interval=10)
        await tailer.start()
        await tailer.refresh()
        assert len(tailer.entries) == 1
        assert tailer.cursor == T1
        assert timers.is_pending(tailer.timer_key)
        tailer.stop()

    async def test_switch_resets_sequence_and_cursor(self, api, timers) -> None:
        api.queue("get_logs", make_logs(T1, T2), make_logs(T1))
        api.defaults["get_logs"] = make_logs()
        tailer = LogTailer(api, timers, 42, interval=10)
        await tailer.start()
        await tailer.switch(43)
        assert api.calls_to("get_logs")[-1] == {"process_id": 43, "since": None}
        assert len(tailer.entries) == 1
        assert tailer.cursor == T1
        tailer.stop()

    async def test_switch_drops_in_flight_response(self, api, timers) -> None:
        gate = asyncio.get_running_loop().create_future()
        api.queue("get_logs", make_logs(T1), gate, make_logs(T3))
        api.defaults["get_logs"] = make_logs()
        tailer = LogTailer(api, timers, 42, interval=10)
        await tailer.start()
        in_flight = asyncio.ensure_future(tailer.refresh())
        await asyncio.sleep(0)
        await tailer.switch(43)
        gate.set_result(make_logs(T2))
        await in_flight
        assert [e.timestamp for e in tailer.entries] == [T3]
        tailer.stop()

    async def test_drain_fetches_once_more_and_stops(self, api, timers) -> None:
        api.queue("get_logs", make_logs(T1), make_logs(T2))
        tailer = LogTailer(api, timers, 42, interval=10)
        await tailer.start()
        await tailer.drain()
        assert len(tailer.entries) == 2
        assert not tailer.running
        assert not timers.is_pending(tailer.timer_key)
