"""
Pydantic Models (Schemas)
"""

# Process models
from indexer_console.models.process import (
    INDEXER_TYPES,
    PROCESS_STATUSES,
    TERMINAL_STATUSES,
    Indeterminate,
    Bounded,
    Counted,
    ProgressSnapshot,
    IndexerProgress,
    IndexerProcess,
    StartIndexerRequest,
    LogEntry,
    LogResponse,
)

# Search models
from indexer_console.models.search import (
    PAGE_SIZES,
    SearchFilterState,
    TagModel,
    Publication,
    SearchResultPage,
)

# Auth models
from indexer_console.models.auth import (
    LoginRequest,
    UserInfo,
    TokenResponse,
)

__all__ = [
    # Process
    "INDEXER_TYPES",
    "PROCESS_STATUSES",
    "TERMINAL_STATUSES",
    "Indeterminate",
    "Bounded",
    "Counted",
    "ProgressSnapshot",
    "IndexerProgress",
    "IndexerProcess",
    "StartIndexerRequest",
    "LogEntry",
    "LogResponse",
    # Search
    "PAGE_SIZES",
    "SearchFilterState",
    "TagModel",
    "Publication",
    "SearchResultPage",
    # Auth
    "LoginRequest",
    "UserInfo",
    "TokenResponse",
]
