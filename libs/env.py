"""Environment helpers for resolving service addresses.

These utilities centralize how the Vault address is derived so we can
support both Docker-based development and native execution on the host
machine. The helpers look at specific environment variables first and then
fall back to shared defaults that adapt when ``ENVIRONMENT=native``.
"""
from __future__ import annotations

import os

DEFAULT_VAULT_ADDR_DOCKER = "http://dynamic-secrets-vault:8200"
DEFAULT_VAULT_ADDR_NATIVE = "http://localhost:8200"


def get_environment(default: str = "dev") -> str:
    """Return the active environment name.

    The value is read from the ``ENVIRONMENT`` variable if present and
    normalized to lowercase. When the variable is missing ``default`` is
    returned.
    """

    return os.getenv("ENVIRONMENT", default).strip().lower()


def is_native_environment(env: str | None = None) -> bool:
    """Return ``True`` when the environment corresponds to ``native``."""

    env_name = env if env is not None else get_environment()
    return env_name.lower() == "native"


def _choose_native_aware_default(docker_default: str, native_default: str) -> str:
    """Select the appropriate default based on the active environment."""

    if is_native_environment():
        return native_default
    return docker_default


def get_vault_addr(*, env_var: str | None = None) -> str:
    """Return the Vault address for the current environment.

    ``env_var`` allows callers to prioritise a service specific variable while
    still falling back to ``VAULT_ADDR``. When neither is defined the Docker
    network host is returned, or ``localhost`` for native execution.
    """

    env_vars: list[str | None] = []
    if env_var:
        env_vars.append(env_var)
    env_vars.append("VAULT_ADDR")
    for variable in env_vars:
        if not variable:
            continue
        value = os.getenv(variable)
        if value:
            return value
    return _choose_native_aware_default(
        DEFAULT_VAULT_ADDR_DOCKER, DEFAULT_VAULT_ADDR_NATIVE
    )


__all__ = [
    "DEFAULT_VAULT_ADDR_DOCKER",
    "DEFAULT_VAULT_ADDR_NATIVE",
    "get_environment",
    "get_vault_addr",
    "is_native_environment",
]
