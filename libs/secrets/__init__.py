"""Unified interface for obtaining dynamic database credentials."""
from __future__ import annotations

from .base import (
    AppRoleAuth,
    AuthStrategy,
    CredentialPayloadError,
    CredentialProvider,
    DatabaseCredentials,
    MissingIdentifiersError,
    SecretProviderError,
    TokenAuth,
)
from .providers import VaultDatabaseCredentialProvider

APPROLE_IDENTIFIERS_MESSAGE = (
    "APPROLE_ROLE_ID and APPROLE_SECRET_ID environment variables must be set"
)
TOKEN_IDENTIFIER_MESSAGE = "VAULT_TOKEN must be set for the token auth method"


def build_auth_strategy(
    method: str,
    *,
    role_id: str | None = None,
    secret_id: str | None = None,
    token: str | None = None,
    approle_mount: str = "approle",
) -> AuthStrategy:
    """Return the authentication strategy for ``method``.

    Identifiers are passed in explicitly so callers decide where they come
    from. A missing identifier is fatal: no strategy is built and nothing is
    sent to Vault.
    """

    normalized = method.strip().lower()

    if normalized == "approle":
        if not role_id or not secret_id:
            raise MissingIdentifiersError(APPROLE_IDENTIFIERS_MESSAGE)
        return AppRoleAuth(role_id=role_id, secret_id=secret_id, mount_point=approle_mount)
    if normalized == "token":
        if not token:
            raise MissingIdentifiersError(TOKEN_IDENTIFIER_MESSAGE)
        return TokenAuth(token=token)

    raise SecretProviderError(f"Unknown Vault auth method: {method}")


__all__ = [
    "APPROLE_IDENTIFIERS_MESSAGE",
    "AppRoleAuth",
    "AuthStrategy",
    "CredentialPayloadError",
    "CredentialProvider",
    "DatabaseCredentials",
    "MissingIdentifiersError",
    "SecretProviderError",
    "TOKEN_IDENTIFIER_MESSAGE",
    "TokenAuth",
    "VaultDatabaseCredentialProvider",
    "build_auth_strategy",
]
