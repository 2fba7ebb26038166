"""
Result page store - last successful search page and the filters behind it
"""

import logging
from typing import Optional

from indexer_console.models.search import SearchFilterState, SearchResultPage

logger = logging.getLogger(__name__)


class ResultPageStore:
    """Holds one SearchResultPage together with the SearchFilterState that produced it"""
    
    def __init__(self):
        self.page: Optional[SearchResultPage] = None
        self.filters: Optional[SearchFilterState] = None
    
    @property
    def has_results(self) -> bool:
        return self.page is not None
    
    @property
    def total(self) -> Optional[int]:
        return self.page.total if self.page is not None else None
    
    def apply(self, filters: SearchFilterState, page: SearchResultPage):
        self.filters = filters
        self.page = page
    
    def clear(self):
        self.filters = None
        self.page = None
    
    def is_current(self, filters: SearchFilterState) -> bool:
        """True if the stored page was produced by exactly these filters"""
        return self.page is not None and self.filters == filters
    
    def paginas_for(self, page_size: int) -> Optional[int]:
        """Page count for a page size, from the last known total (None if unknown)"""
        if self.page is None:
            return None
        if self.page.total <= 0:
            return 1
        return (self.page.total + page_size - 1) // page_size
    
    def clamp_page(self, page: int, page_size: int) -> int:
        """Clamp a page number to [1, paginas] for the given page size"""
        paginas = self.paginas_for(page_size)
        if paginas is not None:
            page = min(page, paginas)
        return max(page, 1)
