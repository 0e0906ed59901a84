import logging

import pytest

from zendesk_api import server
from zendesk_api.client import RetryPolicy


@pytest.fixture(autouse=True)
def reset_client_cache(monkeypatch):
    # Ensure each test starts with a clean client/settings cache.
    server._reset_client_cache_for_tests()
    for key in [*server.REQUIRED_ENV_VARS, *server.OPTIONAL_ENV_VARS]:
        monkeypatch.delenv(key, raising=False)
    yield
    server._reset_client_cache_for_tests()


def set_required(monkeypatch):
    monkeypatch.setenv("ZENDESK_SUBDOMAIN", "demo")
    monkeypatch.setenv("ZENDESK_EMAIL", "agent@example.com")
    monkeypatch.setenv("ZENDESK_API_KEY", "token")


def test_get_settings_returns_expected(monkeypatch):
    set_required(monkeypatch)

    settings = server.get_settings()

    assert settings["ZENDESK_SUBDOMAIN"] == "demo"
    assert settings["ZENDESK_EMAIL"] == "agent@example.com"
    assert settings["ZENDESK_API_KEY"] == "token"
    assert settings["ZENDESK_API_VERSION"] == "v2"


def test_get_settings_raises_when_env_missing():
    with pytest.raises(RuntimeError) as excinfo:
        server.get_settings()

    message = str(excinfo.value).lower()
    assert "missing required environment variables" in message
    for key in server.REQUIRED_ENV_VARS:
        assert key.lower() in message


def test_client_built_from_settings(monkeypatch):
    set_required(monkeypatch)
    monkeypatch.setenv("ZENDESK_RETRY_MAX_ATTEMPTS", "4")
    monkeypatch.setenv("ZENDESK_RETRY_MAX_WAIT", "90")

    client = server.get_zendesk_client()

    assert client is server.get_zendesk_client()
    assert client.subdomain == "demo"
    assert client.auth_header.startswith("Basic ")
    assert client.retry_policy == RetryPolicy(max_attempts=4, max_total_wait=90.0)


def test_unified_seconds_flag(monkeypatch):
    set_required(monkeypatch)
    monkeypatch.setenv("ZENDESK_RETRY_UNIFIED_SECONDS", "yes")

    policy = server.get_zendesk_client().retry_policy

    assert policy.write_unit == 1.0
    assert policy.delay_for("POST", 5) == 5


@pytest.mark.parametrize("attempts,wait", [("many", "10"), ("0", "10"), ("3", "a while")])
def test_invalid_retry_settings_raise(monkeypatch, attempts, wait):
    set_required(monkeypatch)
    monkeypatch.setenv("ZENDESK_RETRY_MAX_ATTEMPTS", attempts)
    monkeypatch.setenv("ZENDESK_RETRY_MAX_WAIT", wait)

    with pytest.raises(RuntimeError):
        server.get_zendesk_client()


def test_configure_logging_idempotent():
    # Remove any pre-existing handlers for a clean slate.
    original_handlers = list(server.logger.handlers)
    original_level = server.logger.level
    original_propagate = server.logger.propagate
    for handler in original_handlers:
        server.logger.removeHandler(handler)

    try:
        server.configure_logging()
        first_count = len(server.logger.handlers)
        # Calling configure_logging again should not add extra handlers.
        server.configure_logging()
        second_count = len(server.logger.handlers)

        assert first_count == 1
        assert second_count == first_count
        assert isinstance(server.logger.handlers[0], logging.Handler)
        assert server.logger.propagate is False
    finally:
        # Restore original state so other modules aren't affected.
        for handler in list(server.logger.handlers):
            server.logger.removeHandler(handler)
        for handler in original_handlers:
            server.logger.addHandler(handler)
        server.logger.setLevel(original_level)
        server.logger.propagate = original_propagate
