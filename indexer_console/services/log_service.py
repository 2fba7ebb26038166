"""
Log tailer - incremental log polling with a timestamp watermark
"""

import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from indexer_console.core.config import settings
from indexer_console.models.process import LogEntry
from indexer_console.utils.poller import Poller
from indexer_console.utils.scheduler import TimerScheduler

logger = logging.getLogger(__name__)


class TailBatch(BaseModel):
    """Entries received by one tail call and the cursor to use next"""
    new_entries: List[LogEntry] = Field(default_factory=list)
    next_cursor: Optional[str] = None


async def fetch_tail(client, process_id: int, cursor: Optional[str]) -> TailBatch:
    """
    Fetch log entries newer than cursor
    
    The server decides what is new. An empty batch leaves the cursor where it
    was, whatever watermark came back with it.
    
    Args:
        client: ApiClient
        process_id: Process ID
        cursor: Timestamp of the last received entry, None for full history
        
    Returns:
        TailBatch: New entries in server order and the next cursor
    """
    response = await client.get_logs(process_id, since=cursor)
    if not response.logs:
        return TailBatch(new_entries=[], next_cursor=cursor)
    
    next_cursor = response.last_timestamp or response.logs[-1].timestamp
    return TailBatch(new_entries=response.logs, next_cursor=next_cursor)


class LogTailer(Poller):
    """
    Ever-growing, ordered log of one process
    
    Keeps polling after the process is terminal, residual shutdown logs can
    still arrive. Use drain() to fetch one last time and stop.
    """
    
    name = "log-tail"
    
    def __init__(self, client, timers: TimerScheduler, process_id: int,
                 interval: Optional[float] = None, on_change=None):
        super().__init__(timers, interval if interval is not None else settings.LOG_TAIL_POLL_SECONDS, on_change)
        self.client = client
        self.process_id = process_id
        self.entries: List[LogEntry] = []
        self.cursor: Optional[str] = None
        self.loaded = False
    
    async def fetch(self) -> TailBatch:
        return await fetch_tail(self.client, self.process_id, self.cursor)
    
    def apply(self, result: TailBatch) -> bool:
        self.entries.extend(result.new_entries)
        self.cursor = result.next_cursor
        self.loaded = True
        return True
    
    async def switch(self, process_id: int):
        """Follow another process from the start of its history"""
        if process_id == self.process_id:
            return
        self.process_id = process_id
        self.entries = []
        self.cursor = None
        self.loaded = False
        self._sequence.invalidate()
        logger.debug(f"{self.timer_key}: now tailing process {process_id}")
        await self.refresh()
    
    async def drain(self):
        """One final fetch, then stop"""
        await self.refresh()
        self.stop()
