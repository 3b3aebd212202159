"""Pytest configuration and shared fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from vitalis.config.schema import VitalisConfig
from vitalis.llm.client import CompletionResponse
from vitalis.memory.storage import MemoryStorage


@pytest.fixture
def default_config() -> VitalisConfig:
    """Provide a default configuration for tests."""
    return VitalisConfig()


@pytest.fixture
def tmp_config(tmp_path) -> VitalisConfig:
    """Configuration that keeps the database inside the test's tmp dir."""
    config = VitalisConfig()
    config.memory.storage_path = str(tmp_path / "vitalis.db")
    return config


@pytest.fixture
def storage(tmp_path) -> MemoryStorage:
    """Create a temporary storage instance for testing."""
    return MemoryStorage(tmp_path / "test_memory.db")


@pytest.fixture
def user_id(storage: MemoryStorage) -> str:
    """A provisioned user."""
    return storage.create_user().id


def _make_llm(*answers: str, model: str = "test-model") -> MagicMock:
    """Mock LLM client whose ``complete`` returns the given answers in turn."""
    llm = MagicMock()
    llm.model = model
    llm.complete = AsyncMock(side_effect=[CompletionResponse(content=a) for a in answers])
    llm.close = AsyncMock()
    return llm


@pytest.fixture
def make_llm():
    """Factory for mock LLM clients returning canned answers."""
    return _make_llm
