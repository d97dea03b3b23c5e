"""Pytest configuration and fixtures for filestash.

HTTP tests use app.main:app through httpx ASGITransport. The transport does
not run the lifespan, so the app_state fixture wires app.state by hand with
a local backend under tmp_path and an in-memory counter store.
"""

from collections.abc import Iterator

import pytest
from httpx import ASGITransport, AsyncClient

from app.application.services.file_service import FileService
from app.application.services.quota_service import QuotaService
from app.infrastructure.external.storage.local_storage import LocalStorageBackend
from app.main import app

TEST_UPLOAD_LIMIT = 1024
TEST_DOWNLOAD_LIMIT = 2048


class InMemoryCounterStore:
    """Counter store double with Redis GET/INCRBY/EXPIRE/TTL semantics.

    Set fail=True to make every command raise, as an unreachable Redis would.
    """

    def __init__(self) -> None:
        self.values: dict[str, int] = {}
        self.ttls: dict[str, int] = {}
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise ConnectionError("counter store unreachable")

    async def get(self, key: str) -> str | None:
        self._check()
        value = self.values.get(key)
        return None if value is None else str(value)

    async def incrby(self, key: str, amount: int) -> int:
        self._check()
        self.values[key] = self.values.get(key, 0) + amount
        return self.values[key]

    async def expire(self, key: str, seconds: int) -> bool:
        self._check()
        if key not in self.values:
            return False
        self.ttls[key] = seconds
        return True

    async def ttl(self, key: str) -> int:
        self._check()
        if key not in self.values:
            return -2
        return self.ttls.get(key, -1)

    async def ping(self) -> bool:
        return not self.fail


@pytest.fixture
def counter_store() -> InMemoryCounterStore:
    """Fresh in-memory counter store."""
    return InMemoryCounterStore()


@pytest.fixture
def local_backend(tmp_path) -> LocalStorageBackend:
    """Local storage backend rooted in a per-test directory."""
    return LocalStorageBackend(str(tmp_path / "uploads"))


@pytest.fixture
def app_state(local_backend, counter_store) -> Iterator[object]:
    """Wire file and quota services onto app.state; restore afterwards."""
    app.state.file_service = FileService(local_backend, inactivity_period="30d")
    app.state.counter_store = counter_store
    app.state.quota_service = QuotaService(
        counter_store,
        daily_upload_limit=TEST_UPLOAD_LIMIT,
        daily_download_limit=TEST_DOWNLOAD_LIMIT,
    )
    yield app.state
    app.state.file_service = None
    app.state.counter_store = None
    app.state.quota_service = None


@pytest.fixture
async def client(app_state) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
