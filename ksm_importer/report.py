"""
取り込みレポート(JSON)の出力ヘルパー。
"""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone

from ksm_importer.models import ImportSummary


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def build_import_report(
    summary: ImportSummary,
    ksm_path: str,
    db_path: str,
    generated_at: str | None = None,
) -> dict:
    return {
        "ksm_path": ksm_path,
        "db_path": db_path,
        "generated_at": generated_at or utc_now_iso(),
        "scores_found": summary.scores_found,
        "scores_imported": summary.scores_imported,
        "failed_imports": len(summary.fail_messages),
        "fail_messages": list(summary.fail_messages),
    }


def write_import_report(report_path: str, report: dict):
    os.makedirs(os.path.dirname(report_path) or ".", exist_ok=True)
    with open(report_path, "w", encoding="utf-8") as file_obj:
        json.dump(report, file_obj, ensure_ascii=False, indent=2)
        file_obj.write("\n")
