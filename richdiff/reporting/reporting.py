# richdiff/richdiff/reporting/reporting.py
from __future__ import annotations
import json
import os
from typing import Any, Dict

from richdiff.problems import DisplaySummary


def assemble_report(
    summary: DisplaySummary,
    *,
    expected_name: str,
    theme: str = "light",
    title: str | None = None,
) -> Dict[str, Any]:
    """
    Build the JSON-ready report consumed by the HTML renderer:
      - every key of DisplaySummary.as_dict()
      - expected_filename, theme, title
      - shown: number of entries in `problems`
    """
    theme = str(theme or "light").strip().lower()
    if theme not in {"light", "dark"}:
        theme = "light"

    body = summary.as_dict()
    return {
        "title": title or f"Differences in {summary.actual_file_label}",
        "theme": theme,
        "expected_filename": expected_name,
        **body,
        "shown": len(body["problems"]),
    }


def write_json(report: Dict[str, Any], path: str) -> str:
    out_dir = os.path.dirname(os.path.abspath(path))
    os.makedirs(out_dir, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False)
    return path
