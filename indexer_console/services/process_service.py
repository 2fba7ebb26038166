"""
Process service - watching and driving indexer processes

JobStatusPoller follows one process until it is terminal, JobListPoller
refreshes the filtered process list, start_job() launches a new process.
"""

import inspect
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional, Union

from indexer_console.core.config import settings
from indexer_console.core.errors import ApiError, ValidationFailure
from indexer_console.models.process import (
    INDEXER_TYPES,
    PROCESS_STATUSES,
    IndexerProcess,
    StartIndexerRequest,
)
from indexer_console.utils.poller import Poller
from indexer_console.utils.query_builder import build_start_params
from indexer_console.utils.scheduler import TimerScheduler

logger = logging.getLogger(__name__)

Confirm = Callable[[], Union[bool, Awaitable[bool]]]


class JobState(str, Enum):
    LOADING = "loading"
    POLLING = "polling"
    TERMINAL = "terminal"
    NOT_FOUND = "not_found"


class JobStatusPoller(Poller):
    """
    Detail view poller for one process
    
    loading -> polling while the process runs, -> terminal once it is
    completed/failed/stopped (no more fetches), -> not_found on 404.
    """
    
    name = "job-status"
    
    def __init__(self, client, timers: TimerScheduler, process_id: int,
                 interval: Optional[float] = None, on_change=None):
        super().__init__(timers, interval if interval is not None else settings.JOB_STATUS_POLL_SECONDS, on_change)
        self.client = client
        self.process_id = process_id
        self.process: Optional[IndexerProcess] = None
        self.state = JobState.LOADING
        self.busy = False
        self.fetch_count = 0
    
    async def fetch(self) -> IndexerProcess:
        self.fetch_count += 1
        return await self.client.get_indexer(self.process_id)
    
    def apply(self, result: IndexerProcess) -> bool:
        self.process = result
        if result.is_terminal:
            self.state = JobState.TERMINAL
            logger.info(f"Process {self.process_id} finished with status {result.status}")
            return False
        self.state = JobState.POLLING
        return True
    
    def handle_error(self, error: Exception) -> bool:
        if isinstance(error, ApiError) and error.status_code == 404:
            self.state = JobState.NOT_FOUND
            logger.warning(f"Process {self.process_id} not found")
            return False
        return super().handle_error(error)
    
    async def stop_job(self, confirm: Confirm) -> bool:
        """
        Ask the server to stop the process
        
        Args:
            confirm: Callback (sync or async) asking the operator to confirm
            
        Returns:
            bool: False if the operator declined
            
        Raises:
            ValidationFailure: Process not known to be running, or a stop is already pending
            ApiError: Server refused; local state is left untouched
        """
        if self.busy:
            raise ValidationFailure("A stop request is already pending")
        if self.process is None or self.process.status != 'running':
            raise ValidationFailure(f"Process {self.process_id} is not running")
        
        confirmed = confirm()
        if inspect.isawaitable(confirmed):
            confirmed = await confirmed
        if not confirmed:
            return False
        
        self.busy = True
        self._notify()
        try:
            await self.client.stop_indexer(self.process_id)
        finally:
            self.busy = False
            self._notify()
        
        logger.info(f"Stop requested for process {self.process_id}")
        await self.refresh()
        return True


class JobListPoller(Poller):
    """
    List view poller
    
    Fixed cadence whatever the jobs' states; filter changes refetch at once and
    responses for the previous filters are dropped.
    """
    
    name = "job-list"
    
    def __init__(self, client, timers: TimerScheduler, status: Optional[str] = None,
                 type: Optional[str] = None, interval: Optional[float] = None, on_change=None):
        super().__init__(timers, interval if interval is not None else settings.JOB_LIST_POLL_SECONDS, on_change)
        self.client = client
        self.status = _check_choice(status, PROCESS_STATUSES, "status")
        self.type = _check_choice(type, INDEXER_TYPES, "type")
        self.jobs: List[IndexerProcess] = []
        self.loaded = False
    
    async def fetch(self) -> List[IndexerProcess]:
        return await self.client.list_indexers(status=self.status, type=self.type)
    
    def apply(self, result: List[IndexerProcess]) -> bool:
        self.jobs = result
        self.loaded = True
        return True
    
    async def set_filters(self, status: Optional[str] = None, type: Optional[str] = None):
        """
        Replace the status/type filters and refetch immediately
        
        Raises:
            ValidationFailure: Unknown status or type
        """
        self.status = _check_choice(status, PROCESS_STATUSES, "status")
        self.type = _check_choice(type, INDEXER_TYPES, "type")
        logger.debug(f"Process list filters: status={self.status} type={self.type}")
        await self.refresh()


def _check_choice(value: Optional[str], choices, label: str) -> Optional[str]:
    if not value:
        return None
    if value not in choices:
        raise ValidationFailure(f"Invalid {label}. Must be one of: {list(choices)}")
    return value


async def start_job(client, type: str, publicacion_id: Any = None, scraper_id: Any = None,
                    since: Optional[str] = None) -> IndexerProcess:
    """
    Validate and start an indexer process
    
    Args:
        client: ApiClient
        type: Indexer type
        publicacion_id: Publication ID (index-licitacion)
        scraper_id: Scraper ID (index-scraper-publications)
        since: datetime-local value (index-scraper-publications, sync-since)
        
    Returns:
        IndexerProcess: The new process
        
    Raises:
        ValidationFailure: Invalid input, nothing was sent
        ApiError: Server refused the request
    """
    params = build_start_params(type, publicacion_id=publicacion_id,
                                scraper_id=scraper_id, since=since)
    process = await client.start_indexer(StartIndexerRequest(type=type, params=params))
    logger.info(f"Started indexer process {process.id}: type={type}, params={params}")
    return process
