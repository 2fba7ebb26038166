"""
Debounce scheduler for search intents

State changes are turned into typed intents. Each intent class has one
policy: a quiet period, or immediate execution. At most one action per class
is pending; a new trigger of the same class replaces it.
"""

import logging
from enum import Enum
from typing import Awaitable, Callable, Dict, Iterable, Optional

from indexer_console.core.config import settings
from indexer_console.models.search import PAGING_FIELDS
from indexer_console.utils.scheduler import TimerScheduler

logger = logging.getLogger(__name__)


class SearchIntent(str, Enum):
    TEXT_CHANGED = "text"        # free-text inputs, change on every keystroke
    FILTERS_CHANGED = "filters"  # selects, tag ids, date pickers
    PAGE_CHANGED = "page"        # page and page size, discrete actions


FREE_TEXT_FIELDS = frozenset({'search', 'objeto', 'agencia'})


def intent_for_fields(fields: Iterable[str]) -> Optional[SearchIntent]:
    """
    Classify a set of changed filter fields
    
    Paging wins over filters, filters over free text: the most urgent class
    decides. None when nothing changed.
    """
    fields = set(fields)
    if not fields:
        return None
    if fields & PAGING_FIELDS:
        return SearchIntent.PAGE_CHANGED
    if fields - FREE_TEXT_FIELDS:
        return SearchIntent.FILTERS_CHANGED
    return SearchIntent.TEXT_CHANGED


def default_delays() -> Dict[SearchIntent, float]:
    return {
        SearchIntent.TEXT_CHANGED: settings.SEARCH_TEXT_DEBOUNCE_SECONDS,
        SearchIntent.FILTERS_CHANGED: settings.SEARCH_FILTER_DEBOUNCE_SECONDS,
        SearchIntent.PAGE_CHANGED: 0,
    }


class DebounceScheduler:
    """Coalesces bursts of intents into one call of action"""
    
    def __init__(self, timers: TimerScheduler, action: Callable[[], Awaitable],
                 delays: Optional[Dict[SearchIntent, float]] = None, name: str = "debounce"):
        self.timers = timers
        self.action = action
        self.delays = delays if delays is not None else default_delays()
        self.name = name
        self._closed = False
    
    def _key(self, intent: SearchIntent) -> str:
        return f"{self.name}:{intent.value}"
    
    def is_pending(self, intent: SearchIntent) -> bool:
        return self.timers.is_pending(self._key(intent))
    
    async def dispatch(self, intent: SearchIntent):
        """
        Apply the policy of the intent class
        
        Immediate intents run the action now (awaited); debounced intents
        replace the pending timer of their class.
        """
        if self._closed:
            return
        
        delay = self.delays.get(intent, 0)
        if delay <= 0:
            self.cancel_all()
            await self.action()
            return
        
        self.timers.schedule(self._key(intent), delay, self._fire, intent)
        logger.debug(f"{self.name}: {intent.value} scheduled in {delay}s")
    
    async def _fire(self, intent: SearchIntent):
        if self._closed:
            return
        # The action reads the latest state, pending timers of other classes are redundant
        self.cancel_all()
        await self.action()
    
    def cancel(self, intent: SearchIntent) -> bool:
        return self.timers.cancel(self._key(intent))
    
    def cancel_all(self):
        for intent in SearchIntent:
            self.timers.cancel(self._key(intent))
    
    def close(self):
        """Teardown: cancel everything, ignore later dispatches"""
        self._closed = True
        self.cancel_all()
