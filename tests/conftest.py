"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))


class FakeLLM:
    """Streams a fixed reply in chunks and records what it was asked."""

    def __init__(self, chunks=("Hello", " there", "!"), error: Exception | None = None):
        self.chunks = list(chunks)
        self.error = error
        self.calls: list[dict] = []

    async def stream(self, messages, system=None, max_tokens=2048, temperature=0.7):
        self.calls.append({"messages": messages, "system": system})
        if self.error:
            raise self.error
        for chunk in self.chunks:
            yield chunk


class FakeObjectStorage:
    """Uploads succeed unless the file name is listed in `fail_names`."""

    def __init__(self, fail_names=()):
        self.fail_names = set(fail_names)
        self.uploaded: list[str] = []

    async def upload(self, filename, content, mime_type):
        if filename in self.fail_names:
            raise RuntimeError(f"Storage rejected {filename}")
        self.uploaded.append(filename)
        return f"https://cdn.example.com/{filename}"


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def mock_memory():
    """Memory client that remembers nothing."""
    memory = Mock()
    memory.search_memories = AsyncMock(return_value=[])
    memory.get_memories = AsyncMock(return_value=[])
    memory.add_memory = AsyncMock(return_value=None)
    return memory


@pytest.fixture
def object_storage():
    return FakeObjectStorage(fail_names={"broken.pdf"})


@pytest.fixture
def settings():
    from chat_core.config import Settings

    # Minimum bcrypt cost keeps account tests fast
    return Settings(bcrypt_rounds=4)


@pytest_asyncio.fixture
async def storage():
    """Create in-memory storage for testing."""
    from chat_core.storage import Storage

    st = Storage(":memory:")
    await st.init()
    yield st
    await st.close()


@pytest.fixture
def application(settings, fake_llm, mock_memory, object_storage):
    """Application wired to fakes; not started."""
    from chat_core.app import Application

    return Application(
        settings=settings,
        db_path=":memory:",
        llm_provider=fake_llm,
        memory_client=mock_memory,
        object_storage=object_storage,
    )


@pytest.fixture
def api_client(application):
    """TestClient running the app lifespan."""
    from fastapi.testclient import TestClient

    from chat_core.api import create_fastapi_app

    with TestClient(create_fastapi_app(application)) as client:
        yield client


@pytest_asyncio.fixture
async def asgi_client(application):
    """httpx.AsyncClient talking to the app in-process."""
    import httpx

    from chat_core.api import create_fastapi_app

    fastapi_app = create_fastapi_app(application)
    await application.start()
    transport = httpx.ASGITransport(app=fastapi_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    await application.stop()
