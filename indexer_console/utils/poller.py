"""
Base class for periodic pollers

A poller fetches, awaits the response, applies it and only then arms its
next timer, so requests of one poller never pile up. start()/stop() tie the
timer to the lifetime of the view that owns the poller.
"""

import itertools
import logging
from typing import Any, Callable, Optional

from indexer_console.core.errors import ConsoleError
from indexer_console.utils.scheduler import TimerScheduler
from indexer_console.utils.sequence import RequestSequence

logger = logging.getLogger(__name__)

_poller_ids = itertools.count(1)


class Poller:
    """Fetch -> await -> apply -> schedule next"""
    
    name = "poller"
    
    def __init__(self, timers: TimerScheduler, interval: float,
                 on_change: Optional[Callable[["Poller"], Any]] = None):
        self.timers = timers
        self.interval = interval
        self.on_change = on_change
        self.last_error: Optional[Exception] = None
        self._running = False
        self._sequence = RequestSequence()
        self.timer_key = f"{self.name}-{next(_poller_ids)}"
    
    @property
    def running(self) -> bool:
        return self._running
    
    async def fetch(self) -> Any:
        raise NotImplementedError
    
    def apply(self, result: Any) -> bool:
        """Store a fetched result; return False to stop polling"""
        raise NotImplementedError
    
    def handle_error(self, error: Exception) -> bool:
        """Fetch failed; log it and try again on the next tick"""
        logger.warning(f"{self.timer_key}: fetch failed, retrying in {self.interval}s: {error}")
        return True
    
    async def start(self):
        """Begin polling with an immediate fetch"""
        if self._running:
            return
        self._running = True
        logger.debug(f"{self.timer_key}: started")
        await self.refresh()
    
    def stop(self):
        """Cancel the pending timer and ignore any response still in flight"""
        self._running = False
        self.timers.cancel(self.timer_key)
        self._sequence.invalidate()
        logger.debug(f"{self.timer_key}: stopped")
    
    async def refresh(self):
        """Fetch now, outside the regular cadence; supersedes any fetch in flight"""
        if not self._running:
            return
        
        self.timers.cancel(self.timer_key)
        token = self._sequence.next()
        
        try:
            result = await self.fetch()
        except (ConsoleError, ValueError) as e:
            if not self._is_live(token):
                return
            self.last_error = e
            keep_polling = self.handle_error(e)
        else:
            if not self._is_live(token):
                logger.debug(f"{self.timer_key}: dropping superseded response")
                return
            self.last_error = None
            keep_polling = self.apply(result)
        
        if keep_polling:
            self.timers.schedule(self.timer_key, self.interval, self.refresh)
        else:
            self._running = False
        self._notify()
    
    def _is_live(self, token: int) -> bool:
        return self._running and self._sequence.is_current(token)
    
    def _notify(self):
        if self.on_change is not None:
            self.on_change(self)
