#!/usr/bin/env python3
from __future__ import annotations
import sys
import argparse
import os

from richdiff import logging as slog
from richdiff.comparison import ComparisonRun, compare_files
from richdiff.config import ConfigLoader, RichDiffConfig
from richdiff.crash import write_crash_log
from richdiff.problems import ProblemCategory, CATEGORY_DISPLAY
from richdiff.reporting.html import write_report
from richdiff.reporting.reporting import assemble_report, write_json
from richdiff.sources import DELIMITERS, resolve_delimiter

EXIT_OK = 0
EXIT_CRASH = 1
EXIT_USAGE = 2


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="richdiff",
        description="Provides a rich diff of changes between two large delimited files.",
    )
    p.add_argument("expected", metavar="EXPECTED", help="The path to the file that is the source of truth.")
    p.add_argument("actual", metavar="ACTUAL", help="The path to the file that needs to look like the source of truth.")
    p.add_argument("-e", "--expected-delimiter", metavar="DELIMITER", type=str.lower,
                   choices=sorted(DELIMITERS), help="Delimiter of the expected file (default: comma).")
    p.add_argument("-a", "--actual-delimiter", metavar="DELIMITER", type=str.lower,
                   choices=sorted(DELIMITERS), help="Delimiter of the actual file (default: comma).")
    p.add_argument("-c", "--config", metavar="FILE", help="Optional YAML config file.")
    p.add_argument("-m", "--max-problems", type=int, metavar="N",
                   help="Maximum number of problems listed in the report (default: 50).")
    p.add_argument("-o", "--output-file", metavar="FILE", help="HTML report path (default: out.html).")
    p.add_argument("-j", "--json-output", metavar="FILE", help="Also write the summary as JSON.")
    p.add_argument("--no-report", action="store_true", help="Skip the HTML report.")
    p.add_argument("--stop-at-max", action="store_true",
                   help="Stop reading once the problem limit is reached (totals become a lower bound).")
    p.add_argument("-v", "--verbose", action="count", default=0,
                   help="Increase log verbosity (-v, -vv)")
    return p


def _apply_overrides(cfg: RichDiffConfig, args: argparse.Namespace) -> RichDiffConfig:
    if args.expected_delimiter:
        cfg.expected.delimiter = resolve_delimiter(args.expected_delimiter)
    if args.actual_delimiter:
        cfg.actual.delimiter = resolve_delimiter(args.actual_delimiter)
    if args.max_problems is not None:
        if args.max_problems < 1:
            raise ValueError("--max-problems must be a positive integer")
        cfg.max_displayed_problems = args.max_problems
    if args.output_file:
        cfg.report_output = args.output_file
    if args.no_report:
        cfg.report_output = None
    if args.json_output:
        cfg.json_output = args.json_output
    if args.stop_at_max:
        cfg.stop_at_max = True
    return cfg


def _open_error_message(err: OSError, path: str) -> str | None:
    if isinstance(err, FileNotFoundError):
        return f"{path} does not exist - did you mistype the file name?"
    if isinstance(err, PermissionError):
        return f"{path} cannot be read due to its permissions."
    return None


def _check_inputs(paths) -> list:
    """Try opening every input; returns (path, error) for each that fails."""
    errors = []
    for path in paths:
        try:
            with open(path, "rb"):
                pass
        except OSError as e:
            errors.append((path, e))
    return errors


def _crash(lines, cfg: RichDiffConfig | None) -> int:
    log_path = write_crash_log(lines, cfg.crash_log_dir if cfg else None)
    slog.log_err(f"The comparison could not finish.  You can check the log at\n\n{log_path}")
    return EXIT_CRASH


def _print_summary(run: ComparisonRun, summary) -> None:
    slog.log_tally("total problems", summary.total_problems,
                   note="listing truncated" if summary.truncated else "")
    counts = run.problems.counts_by_category()
    for cat in ProblemCategory:
        if counts[cat]:
            slog.log_tally(CATEGORY_DISPLAY[cat][0].lower(), counts[cat])
    if run.stopped_early:
        slog.log_warn("Stopped at the problem limit; the total is a lower bound.")


def main(argv=None) -> int:
    args = _build_parser().parse_args(argv)
    slog.setup_logging(args.verbose)

    try:
        cfg = _apply_overrides(ConfigLoader(args.config).load(), args)
    except (OSError, ValueError) as e:
        slog.log_err(f"Invalid configuration: {e}")
        return EXIT_USAGE

    bad_inputs = _check_inputs([args.expected, args.actual])
    if bad_inputs:
        messages = [_open_error_message(e, path) for path, e in bad_inputs]
        if None in messages:
            return _crash([repr(e) for _, e in bad_inputs], cfg)
        for msg in messages:
            slog.log_err(msg)
        return EXIT_USAGE

    try:
        run = compare_files(
            args.expected,
            args.actual,
            expected=cfg.expected,
            actual=cfg.actual,
            max_problems=cfg.max_displayed_problems,
            stop_at_max=cfg.stop_at_max,
        )
    except OSError as e:
        path = e.filename or ""
        msg = _open_error_message(e, path)
        if msg is None:
            return _crash([repr(e)], cfg)
        slog.log_err(msg)
        return EXIT_USAGE

    if not run.ok:
        for f in run.failures:
            slog.log_err(f"Could not parse {f.describe()}")
        return _crash([f.describe() for f in run.failures], cfg)

    summary = run.summary(args.actual)
    _print_summary(run, summary)

    report = assemble_report(
        summary,
        expected_name=args.expected,
        theme=cfg.theme,
        title=cfg.report_title,
    )

    if cfg.json_output:
        slog.log_step("Writing summary JSON:", cfg.json_output)
        write_json(report, cfg.json_output)

    if cfg.report_output:
        slog.log_step("Writing HTML report:", cfg.report_output)
        write_report(report, cfg.report_output)
        slog.log_ok(f"HTML report written to {os.path.abspath(cfg.report_output)}")
    else:
        slog.log_info("Report generation skipped (--no-report).")

    slog.log_ok("Done.")
    return EXIT_OK


def run() -> None:
    try:
        sys.exit(main())
    except Exception as e:
        slog.log_err(f"Error: {e}")
        sys.exit(_crash([repr(e)], None))


if __name__ == "__main__":
    run()
