"""Deployment preflight checks for the HealX inventory backend.

Usage:
    python scripts/db_preflight.py

Checks database and auto-restock settings before deployment.
Exits non-zero when any required control fails.
"""

from __future__ import annotations

import os
import sys


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _int_env(name: str, default: int) -> int | None:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return None


def run() -> int:
    environment = os.getenv("ENVIRONMENT", "development").strip().lower()
    database_url = os.getenv("DATABASE_URL", "sqlite:///./healx.db")
    auto_create_tables = _bool_env("AUTO_CREATE_TABLES", True)
    scheduler_enabled = _bool_env("RESTOCK_SCHEDULER_ENABLED", True)
    interval = _int_env("RESTOCK_INTERVAL_SECONDS", 60)
    admin_email = os.getenv("ADMIN_EMAIL", "inventory-admin@healx.local")

    checks: list[tuple[str, bool, str]] = [
        (
            "ENVIRONMENT is explicitly set",
            bool(environment),
            f"ENVIRONMENT={environment or '<empty>'}",
        ),
        (
            "RESTOCK_INTERVAL_SECONDS is a positive integer",
            interval is not None and interval >= 1,
            f"RESTOCK_INTERVAL_SECONDS={os.getenv('RESTOCK_INTERVAL_SECONDS', '60')}",
        ),
    ]

    if scheduler_enabled:
        checks.append((
            "ADMIN_EMAIL is set for restock confirmations",
            bool(admin_email.strip()),
            f"ADMIN_EMAIL={admin_email or '<empty>'}",
        ))

    if environment in {"production", "prod"}:
        checks.extend(
            [
                (
                    "DATABASE_URL is not SQLite",
                    "sqlite" not in database_url.lower(),
                    f"DATABASE_URL={database_url}",
                ),
                (
                    "AUTO_CREATE_TABLES is disabled",
                    not auto_create_tables,
                    f"AUTO_CREATE_TABLES={auto_create_tables}",
                ),
            ]
        )

    has_failures = False
    print("HealX Deployment Preflight")
    print(f"- environment: {environment}")
    print(f"- restock scheduler: {'enabled' if scheduler_enabled else 'disabled'}")
    for title, ok, detail in checks:
        marker = "PASS" if ok else "FAIL"
        print(f"[{marker}] {title} ({detail})")
        if not ok:
            has_failures = True

    if has_failures:
        print("\nPreflight failed. Resolve failed checks before deployment.")
        return 1

    print("\nPreflight passed.")
    return 0


if __name__ == "__main__":
    sys.exit(run())
