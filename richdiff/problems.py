# richdiff/richdiff/problems.py
from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

DEFAULT_MAX_PROBLEMS = 50


class ProblemCategory(Enum):
    """Display buckets. Definition order is the order categories are reported in."""
    MISMATCHED_CELLS = "mismatched_cells"
    EXTRA_CELLS = "extra_cells"
    MISSING_CELLS = "missing_cells"
    EXTRA_LINES = "extra_lines"
    MISSING_LINES = "missing_lines"


# (label, color, description) per category
CATEGORY_DISPLAY: Dict[ProblemCategory, Tuple[str, str, str]] = {
    ProblemCategory.MISMATCHED_CELLS: (
        "Mismatched cells", "red",
        "The contents of one or more cells in the actual file did not match up.",
    ),
    ProblemCategory.EXTRA_CELLS: (
        "Extra cells", "orange",
        "A line (or lines) in the actual file had more cells than expected.",
    ),
    ProblemCategory.MISSING_CELLS: (
        "Missing cells", "yellow",
        "A line (or lines) in the actual file is missing cells.",
    ),
    ProblemCategory.EXTRA_LINES: (
        "Extra lines", "green",
        "The actual file had more lines in it than expected.",
    ),
    ProblemCategory.MISSING_LINES: (
        "Missing lines", "blue",
        "The actual file had fewer lines in it than expected.",
    ),
}

# singular label used for one problem of the category
PROBLEM_LABELS: Dict[ProblemCategory, str] = {
    ProblemCategory.MISMATCHED_CELLS: "Mismatched cell",
    ProblemCategory.EXTRA_CELLS: "Extra cell",
    ProblemCategory.MISSING_CELLS: "Missing cell",
    ProblemCategory.EXTRA_LINES: "Extra lines",
    ProblemCategory.MISSING_LINES: "Missing lines",
}


# --------------------------- field discrepancies ---------------------------

@dataclass(frozen=True)
class MismatchedCell:
    line: int
    column: int
    expected: str
    actual: str

    def describe(self) -> str:
        return (f"The cell at line {self.line}, column {self.column} was {self.actual!r}, "
                f"but the expected value was {self.expected!r}.")


@dataclass(frozen=True)
class ExtraCell:
    line: int
    column: int

    def describe(self) -> str:
        return f"The cell at line {self.line}, column {self.column} is not present in the expected file."


@dataclass(frozen=True)
class MissingCell:
    line: int
    column: int

    def describe(self) -> str:
        return f"A cell is missing at line {self.line}, column {self.column}."


# --------------------------- row-count discrepancies ---------------------------

@dataclass(frozen=True)
class ExtraLines:
    """Actual file ran past the end of the expected one. `line` is where the run started."""
    line: int
    count: int = 1

    def describe(self) -> str:
        return f"There were {self.count} extra line(s), starting with line {self.line}."


@dataclass(frozen=True)
class MissingLines:
    """Actual file ended early. `line` is the first expected line with no counterpart."""
    line: int
    count: int = 1

    def describe(self) -> str:
        return f"There were {self.count} line(s) missing, starting with line {self.line}."


FieldDiscrepancy = Union[MismatchedCell, ExtraCell, MissingCell]
RowCountDiscrepancy = Union[ExtraLines, MissingLines]
Problem = Union[MismatchedCell, ExtraCell, MissingCell, ExtraLines, MissingLines]

_CATEGORY_BY_TYPE = {
    MismatchedCell: ProblemCategory.MISMATCHED_CELLS,
    ExtraCell: ProblemCategory.EXTRA_CELLS,
    MissingCell: ProblemCategory.MISSING_CELLS,
    ExtraLines: ProblemCategory.EXTRA_LINES,
    MissingLines: ProblemCategory.MISSING_LINES,
}


def category_of(problem: Problem) -> ProblemCategory:
    try:
        return _CATEGORY_BY_TYPE[type(problem)]
    except KeyError:
        raise TypeError(f"Not a problem: {type(problem).__name__}") from None


def category_entry(category: ProblemCategory) -> Dict[str, str]:
    label, color, description = CATEGORY_DISPLAY[category]
    return {"category": category.value, "type": label, "color": color, "description": description}


def problem_entry(problem: Problem) -> Dict[str, Any]:
    """Flatten one problem into the dict handed to renderers."""
    cat = category_of(problem)
    entry: Dict[str, Any] = {
        "category": cat.value,
        "type": PROBLEM_LABELS[cat],
        "color": CATEGORY_DISPLAY[cat][1],
        "description": problem.describe(),
        "line": problem.line,
    }
    if isinstance(problem, (ExtraLines, MissingLines)):
        entry["count"] = problem.count
    else:
        entry["column"] = problem.column
    if isinstance(problem, MismatchedCell):
        entry["expected"] = problem.expected
        entry["actual"] = problem.actual
    return entry


# --------------------------- summary ---------------------------

@dataclass(frozen=True)
class DisplaySummary:
    """Renderer-agnostic result of one completed comparison."""
    actual_file_label: str
    total_problems: int
    truncated: bool
    categories_present: Tuple[ProblemCategory, ...]
    displayed_problems: Tuple[Problem, ...]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "actual_filename": self.actual_file_label,
            "num_problems": self.total_problems,
            "found_max_problems": self.truncated,
            "problem_categories": [category_entry(c) for c in self.categories_present],
            "problems": [problem_entry(p) for p in self.displayed_problems],
        }


class ProblemSet:
    """
    Accumulates the problems of one comparison run.

    Field discrepancies are kept in discovery order and never capped here, so
    `total_count()` is always the true total. Line-count imbalance is folded
    into at most one ExtraLines and one MissingLines entry whose counters grow.
    The display cap only applies in `export_display_summary`.
    """

    def __init__(self, max_problems_to_display: int = DEFAULT_MAX_PROBLEMS):
        if max_problems_to_display < 1:
            raise ValueError("max_problems_to_display must be a positive integer")
        self.max_problems_to_display = max_problems_to_display
        self.extra_lines: Optional[ExtraLines] = None
        self.missing_lines: Optional[MissingLines] = None
        self.field_problems: List[FieldDiscrepancy] = []

    def record_field_discrepancies(self, line: int, discrepancies: Iterable[FieldDiscrepancy]) -> None:
        for d in discrepancies:
            if d.line != line:
                raise ValueError(f"Discrepancy for line {d.line} recorded under line {line}")
            self.field_problems.append(d)

    def record_extra_line(self, line: int) -> None:
        if self.extra_lines is None:
            self.extra_lines = ExtraLines(line=line)
        else:
            self.extra_lines = replace(self.extra_lines, count=self.extra_lines.count + 1)

    def record_missing_line(self, line: int) -> None:
        if self.missing_lines is None:
            self.missing_lines = MissingLines(line=line)
        else:
            self.missing_lines = replace(self.missing_lines, count=self.missing_lines.count + 1)

    def row_count_problems(self) -> List[RowCountDiscrepancy]:
        out: List[RowCountDiscrepancy] = []
        if self.extra_lines is not None:
            out.append(self.extra_lines)
        if self.missing_lines is not None:
            out.append(self.missing_lines)
        return out

    def total_count(self) -> int:
        return len(self.field_problems) + len(self.row_count_problems())

    def __len__(self) -> int:
        return self.total_count()

    def is_full(self) -> bool:
        return self.total_count() >= self.max_problems_to_display

    def all_problems(self) -> List[Problem]:
        return [*self.field_problems, *self.row_count_problems()]

    def displayable_problems(self, cap: Optional[int] = None) -> List[Problem]:
        """
        Up to `cap` problems: field discrepancies first, in discovery order, then
        the row-count entries. Row-count entries are always kept; they displace
        the tail of the field discrepancies.
        """
        cap = self.max_problems_to_display if cap is None else cap
        row_count = self.row_count_problems()
        n_fields = max(0, min(len(self.field_problems), cap - len(row_count)))
        return [*self.field_problems[:n_fields], *row_count]

    def categories_present(self) -> Tuple[ProblemCategory, ...]:
        seen = {category_of(p) for p in self.all_problems()}
        return tuple(c for c in ProblemCategory if c in seen)

    def export_display_summary(self, actual_file_label: str, cap: Optional[int] = None) -> DisplaySummary:
        cap = self.max_problems_to_display if cap is None else cap
        if cap < 1:
            raise ValueError("cap must be a positive integer")
        total = self.total_count()
        return DisplaySummary(
            actual_file_label=actual_file_label,
            total_problems=total,
            truncated=total >= cap,
            categories_present=self.categories_present(),
            displayed_problems=tuple(self.displayable_problems(cap)),
        )

    def counts_by_category(self) -> Dict[ProblemCategory, int]:
        """Problem totals per category; row-count entries count once each."""
        out = {c: 0 for c in ProblemCategory}
        for p in self.all_problems():
            out[category_of(p)] += 1
        return out
