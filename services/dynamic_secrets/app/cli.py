"""Command line entrypoint that connects to the database with Vault-issued credentials."""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from pydantic import ValidationError

from libs.observability import configure_logging, run_context

from .config import SERVICE_NAME, get_settings
from .pipeline import RunReport, run


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fetch short-lived database credentials from Vault and try to connect"
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to the JSON configuration file (default: config.json)",
    )
    parser.add_argument(
        "--role", default=None, help="Override the database.secret_role from the config file"
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: INFO)")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = get_settings()
    except ValidationError as exc:
        print(f"Invalid settings: {exc}")
        return 1
    configure_logging(SERVICE_NAME, args.log_level or settings.log_level)

    with run_context():
        report: RunReport = run(settings, config_path=args.config_path, role=args.role)

    print(report.message)
    return report.exit_code


if __name__ == "__main__":  # pragma: no cover - CLI
    sys.exit(main())
