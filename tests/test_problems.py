# richdiff/tests/test_problems.py
from __future__ import annotations
import pytest
from richdiff.problems import (
    CATEGORY_DISPLAY,
    ExtraCell,
    ExtraLines,
    MismatchedCell,
    MissingCell,
    MissingLines,
    ProblemCategory,
    ProblemSet,
    category_of,
)


def _mismatches(problems: ProblemSet, n: int) -> None:
    for line in range(1, n + 1):
        problems.record_field_discrepancies(line, [MismatchedCell(line=line, column=1, expected="a", actual="b")])


# Each problem variant maps to exactly one category, and asking twice gives the same answer.
@pytest.mark.parametrize("problem,expected", [
    (MismatchedCell(line=1, column=2, expected="b", actual="X"), ProblemCategory.MISMATCHED_CELLS),
    (ExtraCell(line=1, column=3), ProblemCategory.EXTRA_CELLS),
    (MissingCell(line=1, column=3), ProblemCategory.MISSING_CELLS),
    (ExtraLines(line=6, count=2), ProblemCategory.EXTRA_LINES),
    (MissingLines(line=6, count=2), ProblemCategory.MISSING_LINES),
])
def test_category_of_is_stable(problem, expected):
    assert category_of(problem) == expected
    assert category_of(problem) == category_of(problem)


# Anything that is not a problem is rejected rather than given a default bucket.
def test_category_of_rejects_non_problems():
    with pytest.raises(TypeError):
        category_of("not a problem")


# Every category has a (label, color, description) display triple.
def test_every_category_has_display_metadata():
    assert set(CATEGORY_DISPLAY) == set(ProblemCategory)
    for label, color, description in CATEGORY_DISPLAY.values():
        assert label and color and description


# Repeated extra lines fold into one entry: the counter grows, the anchor stays on the first line.
def test_extra_lines_are_aggregated_with_first_anchor():
    problems = ProblemSet(50)
    for line in (6, 7, 8):
        problems.record_extra_line(line)
    assert problems.extra_lines == ExtraLines(line=6, count=3)
    assert problems.total_count() == 1


# Missing lines keep the first line of the run as anchor too.
def test_missing_lines_anchor_is_first_line_of_run():
    problems = ProblemSet(50)
    for line in (4, 5):
        problems.record_missing_line(line)
    assert problems.missing_lines == MissingLines(line=4, count=2)
    assert "starting with line 4" in problems.missing_lines.describe()


# total_count = field discrepancies + one per present row-count entry, and never goes down.
def test_total_count_and_monotonicity():
    problems = ProblemSet(50)
    seen = [problems.total_count()]
    _mismatches(problems, 3)
    seen.append(problems.total_count())
    problems.record_extra_line(4)
    seen.append(problems.total_count())
    problems.record_extra_line(5)
    seen.append(problems.total_count())
    problems.record_missing_line(9)
    seen.append(problems.total_count())

    assert seen == [0, 3, 4, 4, 5]
    assert seen == sorted(seen)
    assert len(problems) == 5


# Field discrepancies must be filed under the line they belong to.
def test_record_field_discrepancies_rejects_wrong_line():
    problems = ProblemSet(50)
    with pytest.raises(ValueError):
        problems.record_field_discrepancies(2, [ExtraCell(line=3, column=1)])


# The display cap must be a positive integer.
@pytest.mark.parametrize("cap", [0, -1])
def test_problem_set_requires_positive_cap(cap):
    with pytest.raises(ValueError):
        ProblemSet(cap)


# An empty set exports an empty, non-truncated summary.
def test_empty_summary():
    summary = ProblemSet(50).export_display_summary("actual.csv")
    assert summary.actual_file_label == "actual.csv"
    assert summary.total_problems == 0
    assert summary.truncated is False
    assert summary.categories_present == ()
    assert summary.displayed_problems == ()


# Cap 3 with 5 field problems and extra lines: 2 field problems then the extra-lines entry.
def test_row_count_problems_take_display_priority():
    problems = ProblemSet(3)
    _mismatches(problems, 5)
    problems.record_extra_line(6)

    summary = problems.export_display_summary("actual.csv")
    assert summary.total_problems == 6
    assert summary.truncated is True
    assert [type(p) for p in summary.displayed_problems] == [MismatchedCell, MismatchedCell, ExtraLines]
    assert [p.line for p in summary.displayed_problems[:2]] == [1, 2]


# Both row-count entries are shown even when the cap is smaller than their number.
def test_row_count_problems_shown_even_below_cap():
    problems = ProblemSet(1)
    _mismatches(problems, 2)
    problems.record_extra_line(3)
    problems.record_missing_line(3)

    shown = problems.displayable_problems()
    assert [type(p) for p in shown] == [ExtraLines, MissingLines]


# truncated is true exactly when the total reaches the cap.
def test_truncated_boundary():
    problems = ProblemSet(3)
    _mismatches(problems, 2)
    assert problems.export_display_summary("a").truncated is False
    _mismatches(problems, 1)
    assert problems.export_display_summary("a").truncated is True
    assert problems.is_full() is True


# An explicit cap passed to the exporter overrides the configured one.
def test_export_with_explicit_cap():
    problems = ProblemSet(50)
    _mismatches(problems, 10)
    summary = problems.export_display_summary("a", cap=4)
    assert len(summary.displayed_problems) == 4
    assert summary.truncated is True
    assert summary.total_problems == 10


# Categories come from all recorded problems (not just displayed ones), in fixed order.
def test_categories_cover_hidden_problems_in_fixed_order():
    problems = ProblemSet(1)
    problems.record_missing_line(7)
    problems.record_field_discrepancies(1, [MissingCell(line=1, column=2)])
    problems.record_field_discrepancies(2, [MismatchedCell(line=2, column=1, expected="a", actual="b")])

    summary = problems.export_display_summary("actual.csv")
    assert summary.categories_present == (
        ProblemCategory.MISMATCHED_CELLS,
        ProblemCategory.MISSING_CELLS,
        ProblemCategory.MISSING_LINES,
    )
    assert summary.displayed_problems == (MissingLines(line=7, count=1),)


# as_dict produces the renderer payload with category metadata and flattened problems.
def test_summary_as_dict_payload():
    problems = ProblemSet(50)
    problems.record_field_discrepancies(1, [MismatchedCell(line=1, column=2, expected="b", actual="X")])
    problems.record_extra_line(2)
    problems.record_extra_line(3)

    payload = problems.export_display_summary("actual.csv").as_dict()
    assert payload["actual_filename"] == "actual.csv"
    assert payload["num_problems"] == 2
    assert payload["found_max_problems"] is False
    assert [c["type"] for c in payload["problem_categories"]] == ["Mismatched cells", "Extra lines"]
    assert payload["problem_categories"][0]["color"] == "red"

    first, second = payload["problems"]
    assert first["type"] == "Mismatched cell"
    assert (first["line"], first["column"], first["expected"], first["actual"]) == (1, 2, "b", "X")
    assert second["type"] == "Extra lines"
    assert second["count"] == 2
    assert "2 extra line(s), starting with line 2" in second["description"]


# counts_by_category tallies every recorded problem, row-count entries once each.
def test_counts_by_category():
    problems = ProblemSet(50)
    problems.record_field_discrepancies(1, [ExtraCell(line=1, column=3), ExtraCell(line=1, column=4)])
    problems.record_extra_line(2)
    problems.record_extra_line(3)
    counts = problems.counts_by_category()
    assert counts[ProblemCategory.EXTRA_CELLS] == 2
    assert counts[ProblemCategory.EXTRA_LINES] == 1
    assert counts[ProblemCategory.MISMATCHED_CELLS] == 0
