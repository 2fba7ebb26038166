import pytest
import pytest_asyncio

from indexer_console.utils.scheduler import TimerScheduler
from tests.unit.fakes.api import FakeApiClient


@pytest_asyncio.fixture
async def timers():
    scheduler = TimerScheduler()
    scheduler.start()
    yield scheduler
    scheduler.shutdown()


@pytest.fixture
def api() -> FakeApiClient:
    return FakeApiClient()
