"""Environment configuration for the dynamic secrets connection check."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from libs.env import get_vault_addr

SERVICE_NAME = "dynamic-secrets"


class Settings(BaseSettings):
    """Settings loaded from environment variables and an optional ``.env`` file."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, populate_by_name=True, extra="ignore"
    )

    approle_role_id: str | None = Field(
        None,
        alias="APPROLE_ROLE_ID",
        description="AppRole role id used to log in to Vault",
        repr=False,
    )
    approle_secret_id: str | None = Field(
        None,
        alias="APPROLE_SECRET_ID",
        description="AppRole secret id used to log in to Vault",
        repr=False,
    )
    vault_token: str | None = Field(
        None,
        alias="VAULT_TOKEN",
        description="Vault token used when the auth method is 'token'",
        repr=False,
    )
    vault_addr: str = Field(default_factory=get_vault_addr, alias="VAULT_ADDR")
    vault_auth_method: str = Field(
        "approle",
        alias="VAULT_AUTH_METHOD",
        description="Vault auth method: 'approle' or 'token'",
    )
    vault_verify: bool = Field(True, alias="VAULT_VERIFY")
    vault_ca_cert: str | None = Field(
        None,
        alias="VAULT_CACERT",
        description="CA bundle used to verify Vault when TLS is enabled",
    )
    vault_namespace: str | None = Field(None, alias="VAULT_NAMESPACE")
    vault_approle_mount: str = Field("approle", alias="VAULT_APPROLE_MOUNT")
    vault_database_mount: str = Field("database", alias="VAULT_DATABASE_MOUNT")
    config_path: str = Field("config.json", alias="DYNAMIC_SECRETS_CONFIG_PATH")
    log_level: str = Field("INFO", alias="DYNAMIC_SECRETS_LOG_LEVEL")

    @property
    def tls_verify(self) -> bool | str:
        if self.vault_ca_cert:
            return self.vault_ca_cert
        return self.vault_verify


@lru_cache()
def get_settings() -> Settings:
    return Settings()
