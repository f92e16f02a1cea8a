"""Load config, obtain dynamic credentials from Vault and try one connection.

Each step returns a :class:`StepResult` instead of raising, so the run
stops at the first failed step and reports why. The whole run is::

    load config -> resolve identifiers -> authenticate -> fetch credentials
    -> connect -> report
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Generic, TypeVar

from libs.db.db import (
    DatabaseConfig,
    DatabaseConfigError,
    is_connection_open,
    load_database_config,
)
from libs.secrets import (
    AuthStrategy,
    CredentialPayloadError,
    CredentialProvider,
    MissingIdentifiersError,
    SecretProviderError,
    VaultDatabaseCredentialProvider,
    build_auth_strategy,
)

from .config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONNECTED_MESSAGE = "Connected"
NOT_CONNECTED_MESSAGE = "Could not connect"
AUTHENTICATION_FAILED_MESSAGE = "Unable to authenticate to Vault"


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    MISSING_IDENTIFIERS = "missing_identifiers"
    AUTHENTICATION = "authentication"
    NO_CREDENTIALS = "no_credentials"
    CONNECTION = "connection"


# Only these kinds end the process with a non-zero exit code.
_FATAL_KINDS = frozenset(
    {ErrorKind.CONFIGURATION, ErrorKind.MISSING_IDENTIFIERS, ErrorKind.NO_CREDENTIALS}
)


@dataclass(frozen=True, slots=True)
class StepError:
    kind: ErrorKind
    message: str


@dataclass(frozen=True, slots=True)
class StepResult(Generic[T]):
    """Outcome of a single step: either ``value`` or ``error`` is set."""

    value: T | None = None
    error: StepError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "StepResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "StepResult[T]":
        return cls(error=StepError(kind=kind, message=message))


@dataclass(frozen=True, slots=True)
class RunReport:
    """Console message and exit code produced by a run."""

    status: str
    message: str
    exit_code: int = 0
    error_kind: ErrorKind | None = None

    @property
    def connected(self) -> bool:
        return self.status == "connected"

    @classmethod
    def from_error(cls, error: StepError) -> "RunReport":
        return cls(
            status="failed",
            message=error.message,
            exit_code=1 if error.kind in _FATAL_KINDS else 0,
            error_kind=error.kind,
        )


ProviderFactory = Callable[[Settings, AuthStrategy], CredentialProvider]
ConnectionCheck = Callable[[DatabaseConfig], bool]


def build_provider(settings: Settings, auth: AuthStrategy) -> CredentialProvider:
    return VaultDatabaseCredentialProvider(
        settings.vault_addr,
        auth=auth,
        verify=settings.tls_verify,
        database_mount=settings.vault_database_mount,
        namespace=settings.vault_namespace,
    )


def load_configuration(path: str | Path, *, role: str | None = None) -> StepResult[DatabaseConfig]:
    try:
        config = load_database_config(path)
    except DatabaseConfigError as exc:
        logger.error("Database configuration rejected: %s", exc)
        return StepResult.failure(ErrorKind.CONFIGURATION, str(exc))
    if role:
        config = config.model_copy(update={"secret_role": role})
    return StepResult.success(config)


def resolve_auth_strategy(settings: Settings) -> StepResult[AuthStrategy]:
    try:
        strategy = build_auth_strategy(
            settings.vault_auth_method,
            role_id=settings.approle_role_id,
            secret_id=settings.approle_secret_id,
            token=settings.vault_token,
            approle_mount=settings.vault_approle_mount,
        )
    except MissingIdentifiersError as exc:
        logger.error("Vault identifiers missing for %s auth", settings.vault_auth_method)
        return StepResult.failure(ErrorKind.MISSING_IDENTIFIERS, str(exc))
    except SecretProviderError as exc:
        return StepResult.failure(ErrorKind.CONFIGURATION, str(exc))
    return StepResult.success(strategy)


def authenticate(provider: CredentialProvider) -> StepResult[CredentialProvider]:
    if not provider.authenticate():
        return StepResult.failure(ErrorKind.AUTHENTICATION, AUTHENTICATION_FAILED_MESSAGE)
    return StepResult.success(provider)


def fetch_credentials(
    provider: CredentialProvider, config: DatabaseConfig
) -> StepResult[DatabaseConfig]:
    """Ask ``provider`` for credentials and merge them into ``config``."""

    try:
        credentials = provider.generate_credentials(config.secret_role)
    except CredentialPayloadError as exc:
        return StepResult.failure(ErrorKind.NO_CREDENTIALS, str(exc))

    merged = config.with_secrets(credentials)
    if not merged.has_credentials:
        return StepResult.failure(
            ErrorKind.NO_CREDENTIALS,
            f"No database credentials issued for role '{config.secret_role}'",
        )
    return StepResult.success(merged)


def connect(
    config: DatabaseConfig, *, connection_check: ConnectionCheck = is_connection_open
) -> StepResult[bool]:
    try:
        is_open = connection_check(config)
    except Exception as exc:
        logger.warning(
            "Connection attempt failed: %s",
            exc,
            extra={"db_host": config.host, "db_port": config.port},
        )
        return StepResult.failure(ErrorKind.CONNECTION, str(exc))
    return StepResult.success(is_open)


def run(
    settings: Settings,
    *,
    config_path: str | Path | None = None,
    role: str | None = None,
    provider_factory: ProviderFactory = build_provider,
    connection_check: ConnectionCheck = is_connection_open,
) -> RunReport:
    loaded = load_configuration(config_path or settings.config_path, role=role)
    if not loaded.ok:
        return RunReport.from_error(loaded.error)

    strategy = resolve_auth_strategy(settings)
    if not strategy.ok:
        return RunReport.from_error(strategy.error)

    session = authenticate(provider_factory(settings, strategy.value))
    if not session.ok:
        return RunReport.from_error(session.error)

    merged = fetch_credentials(session.value, loaded.value)
    if not merged.ok:
        return RunReport.from_error(merged.error)

    attempt = connect(merged.value, connection_check=connection_check)
    if not attempt.ok:
        return RunReport.from_error(attempt.error)

    if attempt.value:
        logger.info("Connected to database", extra={"db_host": merged.value.host})
        return RunReport(status="connected", message=CONNECTED_MESSAGE)
    return RunReport(status="not_connected", message=NOT_CONNECTED_MESSAGE)


__all__ = [
    "AUTHENTICATION_FAILED_MESSAGE",
    "CONNECTED_MESSAGE",
    "ErrorKind",
    "NOT_CONNECTED_MESSAGE",
    "RunReport",
    "StepError",
    "StepResult",
    "authenticate",
    "build_provider",
    "connect",
    "fetch_credentials",
    "load_configuration",
    "resolve_auth_strategy",
    "run",
]
