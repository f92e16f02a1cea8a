"""Providers for generating dynamic database credentials."""
from __future__ import annotations

import logging
from typing import Any

import hvac
import requests
from hvac import exceptions as hvac_exceptions

from .base import AuthStrategy, DatabaseCredentials

logger = logging.getLogger(__name__)


class VaultDatabaseCredentialProvider:
    """Generate credentials from HashiCorp Vault's database secrets engine.

    The provider authenticates once with the configured strategy and then
    issues one ``creds/<role>`` request per :meth:`generate_credentials`
    call. Nothing is cached: every call yields a fresh lease whose expiry is
    owned by Vault.
    """

    name = "vault"

    def __init__(
        self,
        url: str,
        *,
        auth: AuthStrategy,
        verify: bool | str = True,
        database_mount: str = "database",
        namespace: str | None = None,
        client: Any | None = None,
    ) -> None:
        self._client = client if client is not None else hvac.Client(
            url=url, verify=verify, namespace=namespace
        )
        self._auth = auth
        self._url = url
        self._database_mount = database_mount.strip("/")

    @property
    def url(self) -> str:
        return self._url

    @property
    def auth_method(self) -> str:
        return self._auth.method

    def authenticate(self) -> bool:
        try:
            self._auth.login(self._client)
            authenticated = bool(self._client.is_authenticated())
        except hvac_exceptions.VaultError as exc:
            logger.warning(
                "Vault rejected %s login: %s",
                self._auth.method,
                exc,
                extra={"vault_addr": self._url},
            )
            return False
        except requests.exceptions.RequestException as exc:
            logger.warning(
                "Vault unreachable during %s login: %s",
                self._auth.method,
                exc,
                extra={"vault_addr": self._url},
            )
            return False

        if authenticated:
            logger.info(
                "Authenticated to Vault",
                extra={"vault_addr": self._url, "auth_method": self._auth.method},
            )
        else:
            logger.warning(
                "Vault session is not authenticated",
                extra={"vault_addr": self._url, "auth_method": self._auth.method},
            )
        return authenticated

    def is_authenticated(self) -> bool:
        try:
            return bool(self._client.is_authenticated())
        except (hvac_exceptions.VaultError, requests.exceptions.RequestException):
            return False

    def generate_credentials(self, role: str) -> DatabaseCredentials | None:
        try:
            response = self._client.secrets.database.generate_credentials(
                name=role,
                mount_point=self._database_mount,
            )
        except hvac_exceptions.InvalidPath:
            logger.warning(
                "No database role named %s under mount %s", role, self._database_mount
            )
            return None
        except hvac_exceptions.VaultError as exc:
            logger.warning("Vault refused credentials for role %s: %s", role, exc)
            return None
        except requests.exceptions.RequestException as exc:
            logger.warning("Vault unreachable while generating credentials for %s: %s", role, exc)
            return None

        if not response:
            logger.warning("Vault returned an empty response for role %s", role)
            return None

        credentials = DatabaseCredentials.from_response(response)
        logger.info(
            "Issued database credentials",
            extra={
                "secret_role": role,
                "db_user": credentials.username,
                "lease_id": response.get("lease_id"),
            },
        )
        return credentials


__all__ = ["VaultDatabaseCredentialProvider"]
