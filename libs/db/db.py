"""Database configuration and connection helpers."""
from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Callable

import psycopg2
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError

from libs.secrets import DatabaseCredentials

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_SECTION = "database"
_CREDENTIAL_FIELDS = frozenset({"username", "password"})
_NEEDS_QUOTING = re.compile(r"[\s'\\]")


class DatabaseConfigError(Exception):
    """Raised when the database configuration cannot be loaded."""


class DatabaseConfig(BaseModel):
    """Connection parameters for the target database.

    ``host``, ``port``, ``database`` and ``secret_role`` come from the
    configuration file. ``username`` and ``password`` stay empty until
    :meth:`with_secrets` merges credentials issued by the secret provider.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    host: StrictStr
    port: StrictInt = Field(ge=1, le=65535)
    database: StrictStr
    secret_role: StrictStr
    username: str | None = None
    password: str | None = Field(default=None, repr=False)

    @property
    def has_credentials(self) -> bool:
        return self.username is not None and self.password is not None

    def with_secrets(self, credentials: DatabaseCredentials | None) -> "DatabaseConfig":
        """Return a copy carrying ``credentials``.

        ``None`` leaves the configuration untouched. Credentials can only be
        merged once.
        """

        if credentials is None:
            return self
        if self.has_credentials:
            raise ValueError("Database credentials have already been merged")
        return self.model_copy(
            update={"username": credentials.username, "password": credentials.password}
        )

    def connection_string(self) -> str:
        """Return the libpq ``key=value`` connection descriptor."""

        pairs = (
            ("host", self.host),
            ("port", str(self.port)),
            ("user", self.username or ""),
            ("password", self.password or ""),
            ("dbname", self.database),
        )
        return " ".join(f"{key}={_quote_value(value)}" for key, value in pairs)


def _quote_value(value: str) -> str:
    """Quote ``value`` the way libpq expects when it is empty or has separators."""

    if value and not _NEEDS_QUOTING.search(value):
        return value
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def load_database_config(
    path: str | Path, *, section: str = DEFAULT_CONFIG_SECTION
) -> DatabaseConfig:
    """Load the ``section`` object of the JSON file at ``path``.

    Raises:
        DatabaseConfigError: If the file cannot be read or parsed, the section
            is missing, or a required field is absent or has the wrong type.
    """

    config_path = Path(path)
    try:
        with open(config_path, "r", encoding="utf-8") as handle:
            raw = handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise DatabaseConfigError(f"Failed to read config file at {config_path}: {exc}") from exc

    try:
        document = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise DatabaseConfigError(f"Failed to parse JSON config at {config_path}: {exc}") from exc

    if not isinstance(document, dict) or not isinstance(document.get(section), dict):
        raise DatabaseConfigError(
            f"Missing '{section}' object in config at {config_path}\n"
            f"Required format:\n"
            f'{{"{section}": {{"host": "...", "port": 5432, "database": "...", '
            f'"secret_role": "..."}}}}'
        )

    payload = {
        key: value for key, value in document[section].items() if key not in _CREDENTIAL_FIELDS
    }
    try:
        config = DatabaseConfig.model_validate(payload)
    except ValidationError as exc:
        problems = "; ".join(
            f"{section}.{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise DatabaseConfigError(f"Invalid config at {config_path}: {problems}") from exc

    logger.info(
        "Database configuration loaded",
        extra={"config_path": str(config_path), "db_host": config.host, "db_port": config.port},
    )
    return config


def is_connection_open(
    config: DatabaseConfig,
    *,
    connect: Callable[[str], Any] = psycopg2.connect,
) -> bool:
    """Open a single connection from the config descriptor and report its open state.

    Only the connection handshake goes over the wire; the handle is closed
    again before returning.
    """

    connection = connect(config.connection_string())
    try:
        return connection.closed == 0
    finally:
        connection.close()


__all__ = [
    "DatabaseConfig",
    "DatabaseConfigError",
    "is_connection_open",
    "load_database_config",
]
