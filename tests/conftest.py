"""Shared pytest fixtures."""

import pytest
import pytest_asyncio

from agora.config import Config
from agora.core.core import Core
from agora.core.modules.session.models import Session
from agora.core.modules.store.memory import MemorySessionStore


def build_config(**overrides: object) -> Config:
    """Create a test configuration that ignores the environment's .env file."""
    values: dict[str, object] = {
        "database_url": "mongodb://localhost:27017/agora_test",
        "host": "127.0.0.1",
        "port": 8000,
        "debug": True,
        "sweep_enabled": False,
    }
    values.update(overrides)
    return Config(_env_file=None, **values)  # type: ignore[arg-type]


@pytest.fixture
def config_factory():
    """Build configurations with individual settings overridden."""
    return build_config


@pytest.fixture
def config():
    return build_config()


@pytest.fixture
def store():
    return MemorySessionStore()


@pytest.fixture
def core(config, store):
    """Core wired to the in-process store; services need no startup for it."""
    return Core(config, store)


@pytest_asyncio.fixture
async def session(core) -> Session:
    """An open session with no actions."""
    return await core.services.session.create_session("Weekly all-hands", "Questions for leadership", "normal")
