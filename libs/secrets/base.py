"""Common types for dynamic credential providers."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol


class SecretProviderError(RuntimeError):
    """Raised when a secret provider is misconfigured or misbehaves."""


class MissingIdentifiersError(SecretProviderError):
    """Raised when the identifiers required to authenticate are not set."""


class CredentialPayloadError(SecretProviderError):
    """Raised when a credential response does not carry a username/password."""


@dataclass(frozen=True, slots=True)
class DatabaseCredentials:
    """Short-lived username/password pair issued for a database role."""

    username: str
    password: str = field(repr=False)

    @classmethod
    def from_response(cls, response: Mapping[str, Any]) -> "DatabaseCredentials":
        """Build credentials from a ``{"data": {"username", "password"}}`` body."""

        data = response.get("data")
        if not isinstance(data, Mapping):
            raise CredentialPayloadError("Credential response is missing the 'data' object")
        username = data.get("username")
        password = data.get("password")
        if not isinstance(username, str) or not isinstance(password, str):
            raise CredentialPayloadError(
                "Credential response must contain string 'username' and 'password' fields"
            )
        return cls(username=username, password=password)


class AuthStrategy(Protocol):
    """Interface implemented by all Vault authentication strategies."""

    method: str

    def login(self, client: Any) -> None:
        """Authenticate ``client`` in place.

        Strategies may raise the underlying client's exceptions; providers
        translate those into a boolean authentication state.
        """


@dataclass(frozen=True, slots=True)
class AppRoleAuth:
    """Authenticate with a pre-provisioned AppRole role id / secret id pair."""

    role_id: str
    secret_id: str = field(repr=False)
    mount_point: str = "approle"
    method: str = field(default="approle", init=False)

    def login(self, client: Any) -> None:
        client.auth.approle.login(
            role_id=self.role_id,
            secret_id=self.secret_id,
            mount_point=self.mount_point,
        )


@dataclass(frozen=True, slots=True)
class TokenAuth:
    """Authenticate with an already issued Vault token."""

    token: str = field(repr=False)
    method: str = field(default="token", init=False)

    def login(self, client: Any) -> None:
        client.token = self.token


class CredentialProvider(Protocol):
    """Interface implemented by dynamic database credential providers."""

    name: str

    def authenticate(self) -> bool:
        """Authenticate once and return whether the session is usable."""

    def generate_credentials(self, role: str) -> DatabaseCredentials | None:
        """Return a fresh credential pair for ``role``.

        Providers should return ``None`` when no credentials were issued
        instead of raising an exception. Malformed responses still raise
        :class:`CredentialPayloadError` to help callers troubleshoot.
        """


__all__ = [
    "AppRoleAuth",
    "AuthStrategy",
    "CredentialPayloadError",
    "CredentialProvider",
    "DatabaseCredentials",
    "MissingIdentifiersError",
    "SecretProviderError",
    "TokenAuth",
]
