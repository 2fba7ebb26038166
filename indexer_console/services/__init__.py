"""
Console services
"""

from indexer_console.services.result_store import (
    ResultPageStore,
)

from indexer_console.services.search_service import (
    SearchState,
    SearchController,
    describe_search_error,
)

from indexer_console.services.process_service import (
    JobState,
    JobStatusPoller,
    JobListPoller,
    start_job,
)

from indexer_console.services.log_service import (
    TailBatch,
    LogTailer,
    fetch_tail,
)

__all__ = [
    # Search
    "ResultPageStore",
    "SearchState",
    "SearchController",
    "describe_search_error",
    # Processes
    "JobState",
    "JobStatusPoller",
    "JobListPoller",
    "start_job",
    # Logs
    "TailBatch",
    "LogTailer",
    "fetch_tail",
]
