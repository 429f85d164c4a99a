import pytest
from dotenv import load_dotenv

from search_fakes import BASE_URL, ScriptedSearchServer

# Load environment variables from .env file for tests
load_dotenv()


@pytest.fixture
def scripted_server():
    """Factory fixture: scripted_server(reply, reply, ...)."""

    def _make(*replies) -> ScriptedSearchServer:
        return ScriptedSearchServer(replies)

    return _make


@pytest.fixture
def mock_env(monkeypatch):
    """Fixture to mock environment variables for testing."""
    env_vars = {
        "SEARCH_API_BASE_URL": BASE_URL,
        "SEARCH_TIMEOUT_S": "5",
        "API_KEYS": "test-key-1,test-key-2",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars
