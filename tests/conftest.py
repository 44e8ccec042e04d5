"""
Shared fixtures.
"""
import pytest
from clockbar.config import Settings, REQUIRED_KEYS, OPTIONAL_KEYS
from clockbar.integrations.clockify_client import ClockifyClient

BASE_URL = "https://api.clockify.test"
ENTRIES_URL = f"{BASE_URL}/v1/workspaces/ws123/user/user123/time-entries"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's real Clockify settings out of the tests."""
    for key in (*REQUIRED_KEYS, *OPTIONAL_KEYS, "LOCK_DIR", "TRACKER_URL", "HTTP_TIMEOUT",
                "PROMPT_TIMEOUT", "LOG_LEVEL", "LOG_JSON"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        API_TOKEN="test_key",
        BASE_URL=BASE_URL,
        WORKSPACE_ID="ws123",
        MY_USER_ID="user123",
        PROJECT_ID="proj123",
        LOCK_DIR=str(tmp_path / "lock"),
    )


@pytest.fixture
def clockify_client(settings):
    """Create a test Clockify client."""
    return ClockifyClient.from_settings(settings)


def make_entry(entry_id, start, end=None, **extra):
    """Clockify time-entry payload."""
    entry = {
        "id": entry_id,
        "description": "",
        "userId": "user123",
        "billable": False,
        "projectId": "proj123",
        "timeInterval": {"start": start, "end": end, "duration": None},
        "workspaceId": "ws123",
        "isLocked": False,
    }
    entry.update(extra)
    return entry


@pytest.fixture
def entry():
    return make_entry
