import os

# Set environment variables BEFORE any imports that might use settings
STORAGE_URL = "http://storage.test"
os.environ["STORAGE_URL"] = STORAGE_URL
os.environ["LOG_LEVEL"] = "DEBUG"

import pytest
import pytest_asyncio
import respx
from fastapi.testclient import TestClient

from invoicing.api.deps import get_event_bus
from invoicing.core.context import RequestContext
from invoicing.events.bus import EventBus, MessageAddress
from invoicing.main import app

TENANT_HEADERS = {"x-okapi-tenant": "diku", "x-okapi-token": "test-token"}


class RecordingEventBus(EventBus):
    """Bus for API tests: records what would be published or spawned, runs nothing."""

    def __init__(self):
        super().__init__()
        self.published = []
        self.spawned = 0

    def publish(self, address, body, headers=None):
        self.published.append((address, body, dict(headers or {})))

    def spawn(self, coro):
        coro.close()
        self.spawned += 1


@pytest.fixture(scope="function")
def storage():
    """Mock the storage service; every test declares the routes it expects."""
    with respx.mock(base_url=STORAGE_URL, assert_all_called=False) as mock:
        yield mock


@pytest.fixture(scope="function")
def ctx() -> RequestContext:
    return RequestContext(okapi_headers=dict(TENANT_HEADERS))


@pytest_asyncio.fixture(scope="function")
async def bus():
    """A started event bus, stopped (and drained) after the test."""
    event_bus = EventBus()
    await event_bus.start()
    yield event_bus
    await event_bus.stop()


@pytest.fixture(scope="function")
def published(bus: EventBus) -> list:
    """Messages delivered to the invoice totals address."""
    messages = []

    async def record(message):
        messages.append(message)

    bus.subscribe(MessageAddress.INVOICE_TOTALS, record)
    return messages


@pytest.fixture(scope="function")
def recording_bus() -> RecordingEventBus:
    return RecordingEventBus()


@pytest.fixture(scope="function")
def client(recording_bus: RecordingEventBus):
    """Create a test client with the event bus dependency overridden."""
    app.dependency_overrides[get_event_bus] = lambda: recording_bus

    yield TestClient(app, headers=TENANT_HEADERS)

    app.dependency_overrides.clear()
