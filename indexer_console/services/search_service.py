"""
Search controller - drives the publication search

Filter changes become intents for the debounce scheduler; every search
carries a sequence token and only the newest response reaches the store.
"""

import itertools
import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional

from indexer_console.core.errors import ConsoleError, ServerRejection, ServiceUnavailable, ValidationFailure
from indexer_console.models.search import PAGE_SIZES, SearchFilterState, SearchResultPage
from indexer_console.services.result_store import ResultPageStore
from indexer_console.utils.debounce import DebounceScheduler, SearchIntent, intent_for_fields
from indexer_console.utils.query_builder import build_search_payload, parse_tag_ids
from indexer_console.utils.scheduler import TimerScheduler
from indexer_console.utils.sequence import RequestSequence

logger = logging.getLogger(__name__)

_controller_ids = itertools.count(1)

MSG_UNAVAILABLE = "Search backend unavailable"
MSG_BACKEND_ERROR = "Search backend error"
MSG_GENERIC = "Search failed"


class SearchState(str, Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    SETTLED = "settled"
    ERRORED = "errored"


def describe_search_error(error: Exception) -> str:
    """
    User-facing message for a failed search
    
    503 and 500 get their own messages, other rejections with a server
    message are shown verbatim, anything else gets the generic one.
    """
    if isinstance(error, ServiceUnavailable):
        return MSG_UNAVAILABLE if error.status_code == 503 else MSG_BACKEND_ERROR
    if isinstance(error, ServerRejection) and error.detail:
        return error.detail
    return MSG_GENERIC


class SearchController:
    """
    Search interaction: filter state, debounced dispatch, result store
    
    States: idle -> searching -> settled | errored. A new search while one is
    in flight supersedes it.
    """
    
    def __init__(self, client, timers: TimerScheduler,
                 filters: Optional[SearchFilterState] = None,
                 store: Optional[ResultPageStore] = None,
                 delays: Optional[Dict[SearchIntent, float]] = None,
                 on_change: Optional[Callable[["SearchController"], Any]] = None):
        self.client = client
        self.filters = filters or SearchFilterState()
        self.store = store or ResultPageStore()
        self.on_change = on_change
        self.state = SearchState.IDLE
        self.error_message: Optional[str] = None
        self.requests_sent = 0
        self._sequence = RequestSequence()
        self._closed = False
        self.debouncer = DebounceScheduler(timers, self.search, delays,
                                           name=f"search-{next(_controller_ids)}")
    
    @property
    def results(self) -> Optional[SearchResultPage]:
        """
        Last successful page for the current filters
        
        Kept across failed searches with the same filters; None once the
        filters have moved on, so an old page never shows under new filters.
        """
        if not self.store.is_current(self.filters):
            return None
        return self.store.page
    
    @property
    def results_are_stale(self) -> bool:
        """The stored page belongs to an older filter state"""
        return self.store.has_results and not self.store.is_current(self.filters)
    
    async def start(self):
        """Initial load"""
        await self.search()
    
    def stop(self):
        """Teardown: no pending search fires, no response in flight is applied"""
        self._closed = True
        self.debouncer.close()
        self._sequence.invalidate()
    
    async def update(self, **changes):
        """
        Change filter fields and dispatch the matching intent
        
        Raises:
            ValueError: Unknown field or invalid value
        """
        new_filters = self.filters.with_changes(**changes)
        changed = new_filters.changed_fields(self.filters)
        if not changed:
            return
        
        self.filters = new_filters
        intent = intent_for_fields(changed)
        logger.debug(f"Filters changed {changed} -> {intent.value}")
        await self.debouncer.dispatch(intent)
    
    async def set_search_text(self, text: str):
        await self.update(search=text)
    
    async def set_tag_ids(self, text: str):
        """Free-text tag input, e.g. '12, 7, 3'"""
        await self.update(user_tag_ids=parse_tag_ids(text))
    
    async def set_page(self, page: int):
        await self.update(page=self.store.clamp_page(page, self.filters.page_size))
    
    async def set_page_size(self, page_size: int):
        """
        Change the page size, keeping the page clamped to the new page count
        
        Raises:
            ValidationFailure: Page size not offered
        """
        if page_size not in PAGE_SIZES:
            raise ValidationFailure(f"Page size must be one of {list(PAGE_SIZES)}")
        page = self.store.clamp_page(self.filters.page, page_size)
        await self.update(page_size=page_size, page=page)
    
    async def reset_filters(self):
        """Back to the default filters; drops the stored page"""
        self.debouncer.cancel_all()
        self.filters = SearchFilterState()
        self.store.clear()
        await self.search()
    
    def active_filter_count(self) -> int:
        defaults = SearchFilterState()
        return sum(1 for name in self.filters.changed_fields(defaults)
                   if name not in ('page', 'page_size'))
    
    async def search(self):
        """Run one search with the current filters"""
        if self._closed:
            return
        
        filters = self.filters
        page = self.store.clamp_page(filters.page, filters.page_size)
        if page != filters.page:
            filters = filters.with_changes(page=page)
            self.filters = filters
        
        payload = build_search_payload(filters)
        token = self._sequence.next()
        self.requests_sent += 1
        self.state = SearchState.SEARCHING
        self._notify()
        
        try:
            result = await self.client.search(payload)
        except (ConsoleError, ValueError) as e:
            if not self._sequence.is_current(token):
                return
            self.state = SearchState.ERRORED
            self.error_message = describe_search_error(e)
            logger.warning(f"Search failed: {e}")
        else:
            if not self._sequence.is_current(token):
                logger.debug("Dropping superseded search response")
                return
            self.store.apply(filters, result)
            self.state = SearchState.SETTLED
            self.error_message = None
            logger.info(f"Search settled: {result.total} results, page {result.pagina}/{result.paginas}")
        
        self._notify()
    
    def _notify(self):
        if self.on_change is not None:
            self.on_change(self)
