"""Finalize all open attendance records.

Cron example (a few seconds after midnight):
    0 0 * * * cd /srv/attendance-ledger && python scripts/reset_day.py
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT / "src") not in sys.path:
    sys.path.insert(0, str(REPO_ROOT / "src"))

from dotenv import load_dotenv

from attendance_ledger.config import get_settings_module
from attendance_ledger.container import build_container
from attendance_ledger.main import configure_logging


def main() -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(db_config=settings.DB_CONFIG)
    summary = container.attendance_service.reset_attendance_for_new_day()

    print(f"OK: finalized {len(summary.finalized)} record(s), {len(summary.failures)} failure(s)")
    for employee_id, error in summary.failures:
        print(f"  {employee_id}: {error.code.value} {error.message}", file=sys.stderr)
    return 1 if summary.failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
