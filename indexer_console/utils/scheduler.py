"""
Keyed one-shot timers on top of APScheduler's AsyncIOScheduler

Every pending action has a key; scheduling a key again replaces the pending
job, cancelling a key drops it. Jobs are coroutine functions and run on the
event loop, never in a thread.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

logger = logging.getLogger(__name__)

JOB_DEFAULTS = {
    # A late timer still fires; the event loop may have been busy
    "misfire_grace_time": None,
    "coalesce": True,
    # A job re-armed from inside its own callback shares the job id
    "max_instances": 16,
}


class TimerScheduler:
    """Named one-shot timers for pollers and debouncers"""
    
    def __init__(self, scheduler: Optional[AsyncIOScheduler] = None):
        self._scheduler = scheduler or AsyncIOScheduler(job_defaults=JOB_DEFAULTS, timezone="UTC")
    
    @property
    def running(self) -> bool:
        return self._scheduler.running
    
    def start(self):
        """Start the underlying scheduler (needs a running event loop)"""
        if not self._scheduler.running:
            self._scheduler.start()
            logger.debug("Timer scheduler started")
    
    def shutdown(self):
        """Drop every pending timer and stop the scheduler"""
        if self._scheduler.running:
            self._scheduler.remove_all_jobs()
            self._scheduler.shutdown(wait=False)
            logger.debug("Timer scheduler stopped")
    
    def schedule(self, key: str, delay: float, func: Callable[..., Awaitable], *args):
        """
        Run func(*args) once after delay seconds, replacing any pending timer with this key
        
        Args:
            key: Timer name
            delay: Seconds from now
            func: Coroutine function to run
        """
        run_date = datetime.now(timezone.utc) + timedelta(seconds=max(delay, 0))
        self._scheduler.add_job(
            func,
            trigger=DateTrigger(run_date=run_date),
            args=list(args),
            id=key,
            name=key,
            replace_existing=True,
        )
    
    def cancel(self, key: str) -> bool:
        """Cancel the pending timer for key; False if nothing was pending"""
        try:
            self._scheduler.remove_job(key)
            return True
        except JobLookupError:
            return False
    
    def is_pending(self, key: str) -> bool:
        return self._scheduler.get_job(key) is not None
    
    def pending_keys(self):
        return [job.id for job in self._scheduler.get_jobs()]
