"""
Indexer process models
"""

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List, Literal, Union

INDEXER_TYPES = ('index-licitacion', 'index-scraper-publications', 'index-bulk', 'sync-since')
PROCESS_STATUSES = ('running', 'completed', 'failed', 'stopped')
TERMINAL_STATUSES = frozenset({'completed', 'failed', 'stopped'})

TYPE_LABELS = {
    'index-licitacion': 'Index publication',
    'index-scraper-publications': 'Index scraper',
    'index-bulk': 'Bulk index',
    'sync-since': 'Sync since date',
}


class Indeterminate(BaseModel):
    """No total known, no percentage can be computed"""
    kind: Literal["indeterminate"] = "indeterminate"
    message: Optional[str] = None


class Bounded(BaseModel):
    """Progress against a known total"""
    kind: Literal["bounded"] = "bounded"
    current: int = 0
    total: int
    message: Optional[str] = None
    
    @property
    def percentage(self) -> float:
        return min(100.0, self.current / self.total * 100)


class Counted(BaseModel):
    """Running indexed/failed counters without a total"""
    kind: Literal["counted"] = "counted"
    indexed: int = 0
    failed: int = 0
    message: Optional[str] = None


ProgressSnapshot = Union[Indeterminate, Bounded, Counted]


class IndexerProgress(BaseModel):
    """Progress information as reported by the server (every field optional)"""
    current: Optional[int] = None
    total: Optional[int] = None
    indexed: Optional[int] = None
    failed: Optional[int] = None
    message: Optional[str] = None
    
    def snapshot(self) -> ProgressSnapshot:
        """Collapse the optional fields into one variant"""
        if self.total:
            return Bounded(current=self.current or 0, total=self.total, message=self.message)
        if self.indexed is not None or self.failed is not None:
            return Counted(indexed=self.indexed or 0, failed=self.failed or 0, message=self.message)
        return Indeterminate(message=self.message)


class IndexerProcess(BaseModel):
    """Read-only snapshot of a server-side indexer process"""
    id: int
    type: str
    status: str  # running, completed, failed, stopped
    params: Optional[Dict[str, Any]] = None
    started_at: str
    completed_at: Optional[str] = None
    progress: Optional[IndexerProgress] = None
    error_message: Optional[str] = None
    user_id: Optional[int] = None
    
    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
    
    @property
    def type_label(self) -> str:
        return TYPE_LABELS.get(self.type, self.type)
    
    def progress_snapshot(self) -> ProgressSnapshot:
        if self.progress is None:
            return Indeterminate()
        return self.progress.snapshot()


class StartIndexerRequest(BaseModel):
    """Request to start an indexer process"""
    type: str = Field(..., description="Type: index-licitacion, index-scraper-publications, index-bulk, sync-since")
    params: Dict[str, Any] = Field(default_factory=dict, description="Parameters for the indexer (varies by type)")


class LogEntry(BaseModel):
    """Single log entry"""
    timestamp: str
    level: str
    message: str


class LogResponse(BaseModel):
    """Response of the log polling endpoint"""
    logs: List[LogEntry] = Field(default_factory=list)
    last_timestamp: Optional[str] = None
    has_more: bool = False
