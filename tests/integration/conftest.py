"""Pytest fixtures for running against a live Vault and PostgreSQL."""
from __future__ import annotations

import os
from pathlib import Path

import pytest

_LIVE_ENV = "DYNAMIC_SECRETS_LIVE"


def _live_enabled() -> bool:
    return os.environ.get(_LIVE_ENV, "").strip().lower() in {"1", "true", "yes"}


@pytest.fixture(scope="session")
def live_config_path() -> Path:
    """Return the config file used by the live run.

    Live tests are skipped unless ``DYNAMIC_SECRETS_LIVE=1``. They expect the
    AppRole identifiers and ``VAULT_ADDR`` in the environment and read the
    database section from ``DYNAMIC_SECRETS_CONFIG_PATH`` (``config.json`` by
    default).
    """

    if not _live_enabled():
        pytest.skip(f"set {_LIVE_ENV}=1 to run against a live Vault and database")
    return Path(os.environ.get("DYNAMIC_SECRETS_CONFIG_PATH", "config.json"))
