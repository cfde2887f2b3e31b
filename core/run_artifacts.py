"""Run report written at the end of a binding generation run."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any

DEFAULT_REPORT_DIR = "output/run_reports"


def write_run_report(
    report: dict[str, Any],
    run_id: str,
    status: str,
    output_dir: str = DEFAULT_REPORT_DIR,
) -> str:
    """Write ``<output_dir>/<run_id>.json`` and return its path.

    ``status`` is one of success, partial_success or failed.
    """
    os.makedirs(output_dir, exist_ok=True)
    payload = dict(report)
    payload["status"] = status
    payload.setdefault("run_id", run_id)
    payload.setdefault("timestamp_utc", datetime.now(timezone.utc).isoformat())
    path = os.path.join(output_dir, f"{run_id}.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True, default=str)
    return path
