# richdiff/richdiff/reporting/html.py
from __future__ import annotations
import os
from datetime import datetime
from typing import Any, Dict, List

from dominate import document, tags
from dominate.util import raw

from richdiff.reporting.table import render_table_block

# ----------------------------
# Texts & styling
# ----------------------------

STYLE = """
body { font-family: sans-serif; margin: 2em; background: #fff; color: #222; }
body[data-theme="dark"] { background: #1e1e1e; color: #ddd; }
.report-table { border-collapse: collapse; width: 100%; }
.report-table th, .report-table td { border: 1px solid #aaa; padding: 4px 8px; text-align: left; }
.swatch { display: inline-block; width: 12px; height: 12px; margin-right: 6px; border-radius: 2px; }
.legend li { list-style: none; margin: 4px 0; }
.notice { padding: 6px 10px; border-left: 4px solid #c90; background: rgba(204, 153, 0, 0.12); }
.ok { color: #2a2; font-weight: bold; }
.color-red .swatch, .swatch.color-red { background: #d33; }
.color-orange .swatch, .swatch.color-orange { background: #e80; }
.color-yellow .swatch, .swatch.color-yellow { background: #dc0; }
.color-green .swatch, .swatch.color-green { background: #3a3; }
.color-blue .swatch, .swatch.color-blue { background: #36c; }
"""


def swatch(color: str) -> tags.span:
    return tags.span(cls=f"swatch color-{color}")


def headline(report: Dict[str, Any]) -> str:
    total = int(report.get("num_problems", 0) or 0)
    if total == 0:
        return "No problems found. The files match."
    if report.get("found_max_problems"):
        return (f"Found {total} problem(s). Only the first {report.get('shown', 0)} are listed; "
                "line-count problems are always included.")
    return f"Found {total} problem(s)."


def render_legend(categories: List[Dict[str, str]]):
    with tags.ul(cls="legend"):
        for cat in categories:
            with tags.li(cls=f"color-{cat.get('color', '')}"):
                swatch(cat.get("color", ""))
                tags.strong(cat.get("type", ""))
                tags.span(" " + cat.get("description", ""))


def problem_rows(problems: List[Dict[str, Any]]) -> List[List[Any]]:
    rows = []
    for p in problems:
        with tags.span() as kind:
            swatch(p.get("color", ""))
            tags.span(p.get("type", ""))
        rows.append([kind, p.get("line", ""), p.get("column", ""), p.get("description", "")])
    return rows


def render_report(report: Dict[str, Any]) -> str:
    """Render a report dict (see reporting.assemble_report) into a standalone HTML page."""
    doc = document(title=report.get("title") or "richdiff report")

    with doc.head:
        tags.meta(charset="utf-8")
        tags.style(raw(STYLE))

    theme = str(report.get("theme", "light")).strip().lower()
    if theme not in {"light", "dark"}:
        theme = "light"
    doc.body["data-theme"] = theme

    with doc:
        tags.h1(report.get("title") or "richdiff report")
        tags.p("Generated on: " + datetime.now().strftime("%d/%m/%Y %H:%M:%S"))
        tags.p(f"Expected: {report.get('expected_filename', '')}")
        tags.p(f"Actual: {report.get('actual_filename', '')}")

        problems = report.get("problems") or []
        if not problems:
            tags.p(headline(report), cls="ok")
        else:
            if report.get("found_max_problems"):
                tags.p(headline(report), cls="notice")
            else:
                tags.p(headline(report))

            tags.h2("Problem types")
            render_legend(report.get("problem_categories") or [])

            tags.h2("Problems")
            render_table_block(
                ["Type", "Line", "Column", "Description"],
                problem_rows(problems),
                row_classes=[f"color-{p.get('color', '')}" for p in problems],
            )

    return doc.render()


def write_report(report: Dict[str, Any], path: str) -> str:
    out_dir = os.path.dirname(os.path.abspath(path))
    os.makedirs(out_dir, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(render_report(report))
    return path
