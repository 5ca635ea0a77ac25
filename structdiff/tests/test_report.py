"""Diff reporter rendering and limits."""

from structdiff import DiffReporter, diff, equal, report
from structdiff.report import DIFFER, EQUAL, ReportRecord
from structdiff.path import Path, Root, SliceIndex


def _record(i: int, kind: str = DIFFER) -> ReportRecord:
    return ReportRecord(path=Path([Root(list), SliceIndex(int, i)]), kind=kind, old=str(i), new=str(i + 1))


def test_empty_reporter_renders_empty_string():
    reporter = DiffReporter()
    reporter.report(_record(0, EQUAL))
    assert str(reporter) == ""
    assert len(reporter) == 0


def test_blocks_in_traversal_order():
    reporter = DiffReporter()
    for i in range(2):
        reporter.report(_record(i))
    assert str(reporter) == "{list}[0]:\n\t-: 0\n\t+: 1\n{list}[1]:\n\t-: 1\n\t+: 2\n"


def test_line_limit_truncates():
    reporter = DiffReporter(max_lines=6)
    for i in range(5):
        reporter.report(_record(i))
    out = str(reporter)
    assert out.count("\n\t-: ") == 2
    assert out.endswith("... 3 more differences ...\n")


def test_byte_limit_truncates():
    reporter = DiffReporter(max_bytes=10)
    for i in range(3):
        reporter.report(_record(i))
    out = str(reporter)
    assert out.count("\n\t-: ") == 1
    assert out.endswith("... 2 more differences ...\n")


def test_diff_empty_iff_equal():
    pairs = [
        (1, 1), (1, 2), ([1, 2], [1, 2]), ([1], []), ({"a": None}, {"a": None}),
        ({"a": [1, {"b": 2}]}, {"a": [1, {"b": 3}]}),
    ]
    for x, y in pairs:
        assert (diff(x, y) == "") == equal(x, y)


def test_report_records_snapshot_paths():
    records = report([1, 2], [1, 3])
    assert [r.path.render() for r in records] == ["{list}[0]", "{list}[1]"]
    assert [r.kind for r in records] == [EQUAL, DIFFER]
