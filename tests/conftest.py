"""Shared fixtures for itmd tests."""

from __future__ import annotations

import logging
from collections.abc import Generator

import pytest

from itmd.services import Policy, Services, make_default_services

_ENV_VARS = (
    "LOG_LEVEL",
    "ITMD_DEFAULT_TIMEZONE",
    "ITMD_DEFAULT_CURRENCY",
    "ITMD_ALLOWED_URL_SCHEMES",
)


@pytest.fixture()
def monkeypatch_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set every itmd environment variable to a valid value.

    Also patches ``load_dotenv`` so that a real ``.env`` file on disk does not
    override the test values.

    Returns the dict of variables so tests can inspect or override values.
    """
    monkeypatch.setattr("itmd.config.load_dotenv", lambda *_a, **_kw: None)
    env_vars = {
        "LOG_LEVEL": "WARNING",
        "ITMD_DEFAULT_TIMEZONE": "Europe/Madrid",
        "ITMD_DEFAULT_CURRENCY": "eur",
        "ITMD_ALLOWED_URL_SCHEMES": "https, mailto",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove all itmd-related environment variables.

    Patches ``load_dotenv`` so a real ``.env`` file cannot re-inject values
    that the test explicitly removed.
    """
    monkeypatch.setattr("itmd.config.load_dotenv", lambda *_a, **_kw: None)
    for key in _ENV_VARS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def services() -> Services:
    """Services with no default timezone or currency."""
    return make_default_services()


@pytest.fixture()
def madrid_services() -> Services:
    """Services defaulting to Europe/Madrid and EUR."""
    return make_default_services(Policy(default_timezone="Europe/Madrid", default_currency="EUR"))


@pytest.fixture(autouse=True)
def _reset_root_logger() -> Generator[None, None, None]:
    """Reset the root logger after each test to prevent handler leaks."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
