"""
Command line console - start, watch and search indexer processes
"""

import argparse
import asyncio
import getpass
import logging
import sys
from typing import List, Optional

from indexer_console.api.client import ApiClient
from indexer_console.core.config import settings
from indexer_console.core.errors import ConsoleError, ServerRejection
from indexer_console.core.logging_config import setup_logging
from indexer_console.core.session import SessionStore
from indexer_console.models.process import (
    INDEXER_TYPES,
    PROCESS_STATUSES,
    Bounded,
    Counted,
    IndexerProcess,
    LogEntry,
)
from indexer_console.models.search import PAGE_SIZES, SearchFilterState
from indexer_console.services.log_service import LogTailer
from indexer_console.services.process_service import JobListPoller, JobState, JobStatusPoller, start_job
from indexer_console.services.search_service import SearchController, SearchState
from indexer_console.utils.query_builder import format_date_for_input, parse_tag_ids
from indexer_console.utils.scheduler import TimerScheduler

logger = logging.getLogger(__name__)


# ---------- Rendering ----------

def format_progress(process: IndexerProcess) -> str:
    snapshot = process.progress_snapshot()
    if isinstance(snapshot, Bounded):
        text = f"{snapshot.current} / {snapshot.total} ({round(snapshot.percentage)}%)"
    elif isinstance(snapshot, Counted):
        text = f"{snapshot.indexed} indexed"
        if snapshot.failed:
            text += f", {snapshot.failed} failed"
    else:
        text = "-"
    if snapshot.message:
        text += f" - {snapshot.message}"
    return text


def format_process(process: IndexerProcess) -> str:
    line = f"#{process.id:<6} {process.status:<10} {process.type_label:<18} started {process.started_at}"
    if process.completed_at:
        line += f", finished {process.completed_at}"
    line += f"  {format_progress(process)}"
    if process.error_message:
        line += f"\n        error: {process.error_message}"
    return line


def format_log(entry: LogEntry) -> str:
    return f"{entry.timestamp} [{entry.level}] {entry.message}"


# ---------- Commands ----------

async def cmd_login(client: ApiClient, session: SessionStore, args) -> int:
    password = args.password or getpass.getpass("Password: ")
    user = await session.login(client, args.username, password)
    print(f"✓ Logged in as {user.username} ({user.role})")
    return 0


async def cmd_logout(client: ApiClient, session: SessionStore, args) -> int:
    session.logout()
    print("✓ Logged out")
    return 0


async def cmd_start(client: ApiClient, session: SessionStore, args) -> int:
    process = await start_job(client, args.type, publicacion_id=args.publicacion_id,
                              scraper_id=args.scraper_id, since=args.since)
    print(f"✓ Indexer started: process #{process.id}")
    return 0


async def cmd_jobs(client: ApiClient, session: SessionStore, args) -> int:
    if args.once:
        jobs = await client.list_indexers(status=args.status, type=args.type)
        _print_jobs(jobs)
        return 0
    
    timers = TimerScheduler()
    timers.start()
    poller = JobListPoller(client, timers, status=args.status, type=args.type,
                           on_change=lambda p: _print_jobs(p.jobs) if p.last_error is None else None)
    try:
        await poller.start()
        await asyncio.Event().wait()
    finally:
        poller.stop()
        timers.shutdown()
    return 0


def _print_jobs(jobs: List[IndexerProcess]):
    print(f"--- {len(jobs)} process(es) ---")
    if not jobs:
        print("No processes found")
    for job in jobs:
        print(format_process(job))


async def cmd_watch(client: ApiClient, session: SessionStore, args) -> int:
    timers = TimerScheduler()
    timers.start()
    finished = asyncio.Event()
    printed = {"logs": 0}
    
    def on_status(poller: JobStatusPoller):
        if poller.process is not None and poller.last_error is None:
            print(format_process(poller.process))
        if poller.state in (JobState.TERMINAL, JobState.NOT_FOUND):
            finished.set()
    
    def on_logs(tailer: LogTailer):
        for entry in tailer.entries[printed["logs"]:]:
            print(format_log(entry))
        printed["logs"] = len(tailer.entries)
    
    status_poller = JobStatusPoller(client, timers, args.process_id, on_change=on_status)
    tailer = LogTailer(client, timers, args.process_id, on_change=on_logs)
    try:
        await status_poller.start()
        await tailer.start()
        
        if args.stop and status_poller.state == JobState.POLLING:
            await status_poller.stop_job(_confirm_stop)
        
        await finished.wait()
        if status_poller.state == JobState.NOT_FOUND:
            print(f"✗ Process {args.process_id} not found")
            return 1
        
        if settings.LOG_TAIL_STOP_ON_TERMINAL:
            await tailer.drain()
        else:
            # Residual shutdown logs may still arrive
            await asyncio.Event().wait()
    finally:
        status_poller.stop()
        tailer.stop()
        timers.shutdown()
    return 0


async def _confirm_stop() -> bool:
    answer = await asyncio.get_running_loop().run_in_executor(
        None, input, "Are you sure you want to stop this process? [y/N] ")
    return answer.strip().lower() in ("y", "yes")


async def cmd_search(client: ApiClient, session: SessionStore, args) -> int:
    filters = SearchFilterState(
        page=args.page,
        page_size=args.page_size,
        search=args.text or "",
        incluirVencidos="1" if args.include_expired else "0",
        soloVigentes="1" if args.only_current else None,
        objeto=args.objeto or "",
        agencia=args.agencia or "",
        pais=args.pais or "",
        rubro=args.rubro or "",
        apertura_fr=format_date_for_input(args.date_from or ""),
        apertura_to=format_date_for_input(args.date_to or ""),
        user_tag_ids=parse_tag_ids(args.tags or ""),
        filter_mode=args.mode,
    )
    timers = TimerScheduler()
    timers.start()
    controller = SearchController(client, timers, filters=filters)
    try:
        await controller.start()
    finally:
        controller.stop()
        timers.shutdown()
    
    if controller.state == SearchState.ERRORED:
        print(f"✗ {controller.error_message}")
        return 1
    
    results = controller.results
    print(f"{results.total} results - page {results.pagina} of {results.paginas}")
    if not results.publicaciones:
        print("No results")
    for pub in results.publicaciones:
        status = "open" if pub.vigente else "closed"
        print(f"#{pub.id:<8} {pub.apertura or '-':<20} {status:<7} {pub.pais_nombre or pub.pais or '-':<12} {pub.objeto or ''}")
    return 0


COMMANDS = {
    "login": cmd_login,
    "logout": cmd_logout,
    "start": cmd_start,
    "jobs": cmd_jobs,
    "watch": cmd_watch,
    "search": cmd_search,
}

# Commands that work without a stored session
PUBLIC_COMMANDS = {"login", "logout"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="indexer-console", description="Growin indexer console")
    parser.add_argument("--api-url", default=None, help="Indexer service base URL")
    parser.add_argument("--log-level", default=None, help="Logging level (default from LOG_LEVEL)")
    sub = parser.add_subparsers(dest="command", required=True)
    
    p = sub.add_parser("login", help="Log in and store the session")
    p.add_argument("username")
    p.add_argument("--password", default=None)
    
    sub.add_parser("logout", help="Forget the stored session")
    
    p = sub.add_parser("start", help="Start an indexer process")
    p.add_argument("type", choices=INDEXER_TYPES)
    p.add_argument("--publicacion-id", default=None)
    p.add_argument("--scraper-id", default=None)
    p.add_argument("--since", default=None, help="YYYY-MM-DDTHH:MM")
    
    p = sub.add_parser("jobs", help="Watch the process list")
    p.add_argument("--status", choices=PROCESS_STATUSES, default=None)
    p.add_argument("--type", choices=INDEXER_TYPES, default=None)
    p.add_argument("--once", action="store_true", help="Print once and exit")
    
    p = sub.add_parser("watch", help="Follow one process and its logs")
    p.add_argument("process_id", type=int)
    p.add_argument("--stop", action="store_true", help="Ask to stop the process")
    
    p = sub.add_parser("search", help="Search indexed publications")
    p.add_argument("text", nargs="?", default=None)
    p.add_argument("--objeto", default=None)
    p.add_argument("--agencia", default=None)
    p.add_argument("--pais", default=None)
    p.add_argument("--rubro", default=None)
    p.add_argument("--from", dest="date_from", default=None, help="YYYY-MM-DD or DD/MM/YYYY")
    p.add_argument("--to", dest="date_to", default=None, help="YYYY-MM-DD or DD/MM/YYYY")
    p.add_argument("--tags", default=None, help="Comma separated tag IDs")
    p.add_argument("--mode", choices=("all", "user_tags"), default="all")
    p.add_argument("--include-expired", action="store_true")
    p.add_argument("--only-current", action="store_true")
    p.add_argument("--page", type=int, default=1)
    p.add_argument("--page-size", type=int, choices=PAGE_SIZES, default=15)
    return parser


def error_text(error: ConsoleError) -> str:
    """Server rejections are shown with the server's own message"""
    if isinstance(error, ServerRejection) and error.detail:
        return error.detail
    return str(error)


async def run(args) -> int:
    session = SessionStore(settings.SESSION_FILE)
    session.init()
    if args.command not in PUBLIC_COMMANDS and not session.is_authenticated:
        print("✗ Not logged in. Run: indexer-console login <username>")
        return 1
    
    async with ApiClient(base_url=args.api_url, session=session) as client:
        try:
            return await COMMANDS[args.command](client, session, args)
        except ConsoleError as e:
            print(f"✗ {error_text(e)}")
            return 1


def main(argv: Optional[List[str]] = None):
    """Main function"""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level or settings.LOG_LEVEL)
    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
