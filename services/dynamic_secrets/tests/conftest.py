from __future__ import annotations

import json
from pathlib import Path

import pytest

from libs.secrets import DatabaseCredentials
from services.dynamic_secrets.app.config import Settings, get_settings

_SETTINGS_ENV = (
    "APPROLE_ROLE_ID",
    "APPROLE_SECRET_ID",
    "VAULT_TOKEN",
    "VAULT_ADDR",
    "VAULT_AUTH_METHOD",
    "VAULT_VERIFY",
    "VAULT_CACERT",
    "VAULT_NAMESPACE",
    "VAULT_APPROLE_MOUNT",
    "VAULT_DATABASE_MOUNT",
    "DYNAMIC_SECRETS_CONFIG_PATH",
    "DYNAMIC_SECRETS_LOG_LEVEL",
    "ENVIRONMENT",
)


class FakeProvider:
    """In-memory stand-in for the Vault credential provider."""

    name = "fake"

    def __init__(
        self,
        *,
        authenticated: bool = True,
        credentials: DatabaseCredentials | None = DatabaseCredentials("u1", "p1"),
    ) -> None:
        self._authenticated = authenticated
        self._credentials = credentials
        self.authenticate_calls = 0
        self.requested_roles: list[str] = []

    def authenticate(self) -> bool:
        self.authenticate_calls += 1
        return self._authenticated

    def generate_credentials(self, role: str) -> DatabaseCredentials | None:
        self.requested_roles.append(role)
        return self._credentials


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "database": {
                    "host": "db.internal",
                    "port": 5432,
                    "database": "orders",
                    "secret_role": "readonly",
                }
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def settings(config_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        APPROLE_ROLE_ID="role-id",
        APPROLE_SECRET_ID="secret-id",
        VAULT_ADDR="http://vault.test:8200",
        DYNAMIC_SECRETS_CONFIG_PATH=str(config_path),
    )


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def fake_provider_cls() -> type[FakeProvider]:
    return FakeProvider
