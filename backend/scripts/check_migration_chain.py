"""Static checks for the Alembic revision files under alembic/versions.

Usage:
    python scripts/check_migration_chain.py

Checks:
- every revision id is unique and matches its file name prefix
- every down_revision exists (except root)
- there is exactly one root and exactly one head revision
- every revision defines upgrade() and downgrade()
"""

from __future__ import annotations

import re
import sys
from pathlib import Path


REVISION_RE = re.compile(r'^revision\s*=\s*["\']([^"\']+)["\']', re.MULTILINE)
DOWN_RE = re.compile(r'^down_revision\s*=\s*(.+)$', re.MULTILINE)
FUNC_RE = re.compile(r'^def (upgrade|downgrade)\(', re.MULTILINE)


def _extract_scalar(raw: str) -> str | None:
    raw = raw.strip()
    if raw in {"None", ""}:
        return None
    if raw.startswith(("'", '"')) and raw.endswith(("'", '"')):
        return raw[1:-1]
    return None


def check_versions(versions_dir: Path) -> tuple[list[str], list[str]]:
    """Return ``(errors, heads)`` for the revision files in ``versions_dir``."""
    files = sorted(versions_dir.glob("*.py"))
    revisions: dict[str, Path] = {}
    down_map: dict[str, str | None] = {}
    errors: list[str] = []

    for file in files:
        text = file.read_text(encoding="utf-8")
        rev_m = REVISION_RE.search(text)
        down_m = DOWN_RE.search(text)

        if not rev_m:
            errors.append(f"{file.name}: missing revision")
            continue

        rev = rev_m.group(1)
        if rev in revisions:
            errors.append(f"Duplicate revision id {rev} in {file.name} and {revisions[rev].name}")
        revisions[rev] = file
        if not file.name.startswith(f"{rev}_"):
            errors.append(f"{file.name}: file name does not start with revision id {rev}")

        defined = set(FUNC_RE.findall(text))
        for func in ("upgrade", "downgrade"):
            if func not in defined:
                errors.append(f"{file.name}: missing {func}()")

        down_map[rev] = _extract_scalar(down_m.group(1)) if down_m else None

    for rev, down in down_map.items():
        if down is not None and down not in revisions:
            errors.append(f"Revision {rev} references missing down_revision {down}")

    roots = [r for r, d in down_map.items() if d is None]
    if revisions and len(roots) != 1:
        errors.append(f"Expected exactly one root revision, found {len(roots)} ({roots})")

    referenced = {d for d in down_map.values() if d is not None}
    heads = [r for r in revisions if r not in referenced]
    if len(heads) != 1:
        errors.append(f"Expected exactly one head revision, found {len(heads)} ({heads})")

    return errors, heads


def main() -> int:
    versions_dir = Path(__file__).resolve().parents[1] / "alembic" / "versions"
    errors, heads = check_versions(versions_dir)

    print("Migration chain check")
    print(f"- directory: {versions_dir}")

    if errors:
        for err in errors:
            print(f"[FAIL] {err}")
        return 1

    print(f"[PASS] single head: {heads[0]}")
    print("[PASS] revision/down_revision integrity checks")
    return 0


if __name__ == "__main__":
    sys.exit(main())
