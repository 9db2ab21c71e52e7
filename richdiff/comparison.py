# richdiff/richdiff/comparison.py
from __future__ import annotations
from dataclasses import dataclass, field
from itertools import zip_longest
from typing import Iterable, List, Optional, Sequence

from richdiff import logging as slog
from richdiff.config import SourceConfig
from richdiff.problems import (
    DEFAULT_MAX_PROBLEMS,
    DisplaySummary,
    ExtraCell,
    FieldDiscrepancy,
    MismatchedCell,
    MissingCell,
    ProblemSet,
)
from richdiff.sources import CsvRecordSource, ReadFailure, RecordResult

_END = object()


def compare_line(line: int, expected: Sequence[str], actual: Sequence[str]) -> List[FieldDiscrepancy]:
    """
    Compare one aligned pair of rows position by position.
    Text is compared exactly. Columns are numbered from 1 and advance once per
    position, whichever side ran out.
    """
    out: List[FieldDiscrepancy] = []
    for column, (exp, act) in enumerate(zip_longest(expected, actual, fillvalue=_END), start=1):
        if exp is _END:
            out.append(ExtraCell(line=line, column=column))
        elif act is _END:
            out.append(MissingCell(line=line, column=column))
        elif exp != act:
            out.append(MismatchedCell(line=line, column=column, expected=exp, actual=act))
    return out


class ComparisonFailed(Exception):
    """Raised when a summary is requested from a run that hit unparseable records."""

    def __init__(self, failures: Sequence[ReadFailure]):
        self.failures = list(failures)
        sides = sorted({f.side for f in self.failures})
        super().__init__(f"Comparison aborted: unreadable record(s) in {', '.join(sides) or 'input'}")

    def diagnostics(self) -> str:
        return "\n".join(f.describe() for f in self.failures)


@dataclass
class ComparisonRun:
    problems: ProblemSet
    failures: List[ReadFailure] = field(default_factory=list)
    lines_compared: int = 0
    stopped_early: bool = False

    @property
    def ok(self) -> bool:
        return not self.failures

    def failed_sides(self) -> List[str]:
        return [f.side for f in self.failures]

    def summary(self, actual_file_label: str) -> DisplaySummary:
        if self.failures:
            raise ComparisonFailed(self.failures)
        return self.problems.export_display_summary(actual_file_label)


def compare_records(
    expected: Iterable[RecordResult],
    actual: Iterable[RecordResult],
    problems: ProblemSet,
    *,
    stop_at_max: bool = False,
) -> ComparisonRun:
    """
    Walk both sides in lockstep, one record from each per step.

    Steps:
      - both sides have a record -> compare cells (or record the failure(s))
      - only expected has one    -> missing line
      - only actual has one      -> extra line
    Any ReadFailure ends the run after the step it appeared in.
    With stop_at_max the walk also ends once `problems.is_full()`.
    """
    run = ComparisonRun(problems=problems)
    line = 0

    for exp, act in zip_longest(expected, actual, fillvalue=_END):
        line += 1
        exp_failed = isinstance(exp, ReadFailure)
        act_failed = isinstance(act, ReadFailure)

        if exp_failed:
            run.failures.append(exp)
        if act_failed:
            run.failures.append(act)

        if not (exp_failed or act_failed):
            if act is _END:
                problems.record_missing_line(line)
            elif exp is _END:
                problems.record_extra_line(line)
            else:
                problems.record_field_discrepancies(line, compare_line(line, exp, act))

        run.lines_compared = line

        if run.failures:
            slog.log_debug(f"Stopping at line {line}: unreadable record on {', '.join(run.failed_sides())} side")
            break

        if stop_at_max and problems.is_full():
            run.stopped_early = True
            slog.log_debug(f"Stopping at line {line}: display limit of {problems.max_problems_to_display} reached")
            break

    return run


def _source(path: str, side: str, cfg: SourceConfig) -> CsvRecordSource:
    return CsvRecordSource(
        path, side=side, delimiter=cfg.delimiter,
        encoding=cfg.encoding, skip_blank_lines=cfg.skip_blank_lines,
    )


def compare_files(
    expected_path: str,
    actual_path: str,
    *,
    expected: Optional[SourceConfig] = None,
    actual: Optional[SourceConfig] = None,
    max_problems: int = DEFAULT_MAX_PROBLEMS,
    stop_at_max: bool = False,
) -> ComparisonRun:
    """Open both files, compare them and close them again, on every exit path."""
    problems = ProblemSet(max_problems)
    expected_src = _source(expected_path, "expected", expected or SourceConfig())
    actual_src = _source(actual_path, "actual", actual or SourceConfig())

    slog.log_step("Comparing:", f"{expected_path} (expected) vs {actual_path} (actual)")
    with expected_src, actual_src:
        run = compare_records(expected_src, actual_src, problems, stop_at_max=stop_at_max)

    if run.ok:
        slog.log_ok(f"Compared {run.lines_compared} line(s), {problems.total_count()} problem(s) found.")
    else:
        slog.log_err(f"Comparison stopped at line {run.lines_compared}: {len(run.failures)} unreadable record(s).")
    return run
