"""
Test Configuration

Shared fixtures for the unit and integration suites.
"""

import pytest

from agentrun.config.settings import get_settings
from agentrun.models import LLMRegistry, StubLLM
from agentrun.observability.logging import BufferHandler, LogLevel, configure_logging
from agentrun.sessions import InMemorySessionService

from tests.fixtures import make_context


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are re-read for every test so env overrides stay local."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def log_buffer():
    """Route all engine logs into a buffer."""
    buffer = BufferHandler(level=LogLevel.DEBUG)
    configure_logging(level=LogLevel.DEBUG, handlers=[buffer])
    yield buffer
    configure_logging()


@pytest.fixture
def session_service():
    """Empty in-memory session store."""
    return InMemorySessionService()


@pytest.fixture
async def stored_session(session_service):
    """A session that exists in the store."""
    return await session_service.create_session(app_name="test-app", user_id="test-user")


@pytest.fixture
def ctx():
    """Invocation context over a detached session."""
    return make_context()


@pytest.fixture
def stub_llm():
    return StubLLM()


@pytest.fixture
def registry():
    """Registry with only the stub backend."""
    return LLMRegistry.with_defaults()
