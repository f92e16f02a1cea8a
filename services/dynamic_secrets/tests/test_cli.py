from __future__ import annotations

import pytest

from services.dynamic_secrets.app import cli, pipeline


@pytest.fixture
def wired_cli(monkeypatch, provider):
    """Route the CLI through the real pipeline with a fake provider and database."""

    factory_calls = []
    monkeypatch.setattr(cli, "configure_logging", lambda service_name, level: None)

    def fake_run(settings, **kwargs):
        def factory(cfg, auth):
            factory_calls.append(auth)
            return provider

        return pipeline.run(
            settings, provider_factory=factory, connection_check=lambda config: True, **kwargs
        )

    monkeypatch.setattr(cli, "run", fake_run)
    return factory_calls


def test_cli_prints_connected(monkeypatch, capsys, config_path, wired_cli):
    monkeypatch.setenv("APPROLE_ROLE_ID", "role-id")
    monkeypatch.setenv("APPROLE_SECRET_ID", "secret-id")

    exit_code = cli.main(["--config", str(config_path)])

    assert exit_code == 0
    assert capsys.readouterr().out == "Connected\n"
    assert len(wired_cli) == 1


def test_cli_missing_identifiers_exits_non_zero(capsys, config_path, wired_cli, provider):
    exit_code = cli.main(["--config", str(config_path)])

    assert exit_code == 1
    assert capsys.readouterr().out == (
        "APPROLE_ROLE_ID and APPROLE_SECRET_ID environment variables must be set\n"
    )
    assert wired_cli == []
    assert provider.authenticate_calls == 0


def test_cli_role_override(monkeypatch, config_path, wired_cli, provider):
    monkeypatch.setenv("APPROLE_ROLE_ID", "role-id")
    monkeypatch.setenv("APPROLE_SECRET_ID", "secret-id")

    cli.main(["--config", str(config_path), "--role", "readwrite"])

    assert provider.requested_roles == ["readwrite"]


def test_cli_reads_config_path_from_environment(monkeypatch, capsys, config_path, wired_cli):
    monkeypatch.setenv("APPROLE_ROLE_ID", "role-id")
    monkeypatch.setenv("APPROLE_SECRET_ID", "secret-id")
    monkeypatch.setenv("DYNAMIC_SECRETS_CONFIG_PATH", str(config_path))

    assert cli.main([]) == 0
    assert capsys.readouterr().out == "Connected\n"


def test_cli_configures_logging_with_requested_level(monkeypatch, config_path):
    levels = []
    monkeypatch.setattr(cli, "configure_logging", lambda name, level: levels.append((name, level)))
    report = pipeline.RunReport(status="connected", message="Connected")
    monkeypatch.setattr(cli, "run", lambda settings, **kwargs: report)

    cli.main(["--config", str(config_path), "--log-level", "DEBUG"])
    cli.main(["--config", str(config_path)])

    assert levels == [("dynamic-secrets", "DEBUG"), ("dynamic-secrets", "INFO")]


def test_cli_unknown_auth_method_exits_non_zero(monkeypatch, capsys, config_path, wired_cli):
    monkeypatch.setenv("VAULT_AUTH_METHOD", "kubernetes")

    exit_code = cli.main(["--config", str(config_path)])

    assert exit_code == 1
    assert capsys.readouterr().out == "Unknown Vault auth method: kubernetes\n"
    assert wired_cli == []


def test_cli_invalid_setting_exits_non_zero(monkeypatch, capsys, config_path, wired_cli):
    monkeypatch.setenv("VAULT_VERIFY", "sometimes")

    exit_code = cli.main(["--config", str(config_path)])

    assert exit_code == 1
    out = capsys.readouterr().out
    assert out.startswith("Invalid settings:")
    assert "VAULT_VERIFY" in out
    assert wired_cli == []
