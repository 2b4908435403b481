"""Tests for settings and exceptions."""

import pytest
from pydantic import ValidationError

from taskpilot.core.config import Settings
from taskpilot.core.exceptions import EmptyBatchError, InvalidBatchError, RemoteApiError


def test_settings_defaults(monkeypatch):
    """Test the defaults used when nothing is configured."""
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    settings = Settings(_env_file=None)

    assert settings.ASANA_API_URL == "https://app.asana.com/api/1.0"
    assert settings.ASANA_PAGE_SIZE == 100
    assert settings.LOG_LEVEL == "INFO"
    assert settings.API_PREFIX == "/api/v1"


def test_settings_read_environment(monkeypatch):
    """Test that environment variables override defaults and are normalized."""
    monkeypatch.setenv("ASANA_API_URL", "https://asana.internal/api/1.0/")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("ASANA_PAGE_SIZE", "25")

    settings = Settings(_env_file=None)

    assert settings.ASANA_API_URL == "https://asana.internal/api/1.0"
    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.ASANA_PAGE_SIZE == 25


def test_page_size_is_bounded(monkeypatch):
    """Test that the page size cannot exceed the service maximum."""
    monkeypatch.setenv("ASANA_PAGE_SIZE", "500")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_remote_api_error_rendering():
    """Test that RemoteApiError names the call and status."""
    with_status = RemoteApiError("Forbidden", status_code=403, method="POST", path="/tags")
    without_response = RemoteApiError("timed out", method="GET", path="/tasks/1")

    assert str(with_status) == "POST /tags failed (403): Forbidden"
    assert str(without_response) == "GET /tasks/1 failed (no response): timed out"
    assert str(RemoteApiError("plain")) == "plain"


def test_empty_batch_is_an_invalid_batch():
    """Test that EmptyBatchError is caught as InvalidBatchError."""
    with pytest.raises(InvalidBatchError, match="no actions"):
        raise EmptyBatchError()
