"""
Report records and the textual diff reporter.

The walker emits one ReportRecord per leaf it visits. DiffReporter keeps the
differences and renders them as blocks:

    {teststructs.Triple}.C:
    	-: 3
    	+: 4
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from .path import Path


EQUAL = 'equal'
DIFFER = 'differ'
IGNORED = 'ignored'

NON_EXISTENT = '<non-existent>'


@dataclass(frozen=True)
class ReportRecord:
    path: Path
    kind: str
    old: str
    new: str

    def to_dict(self) -> Dict[str, str]:
        """Export record as dict for API responses."""
        return {
            'path': self.path.render(),
            'field_path': str(self.path),
            'kind': self.kind,
            'old': self.old,
            'new': self.new
        }


def format_block(record: ReportRecord) -> str:
    return f"{record.path.render()}:\n\t-: {record.old}\n\t+: {record.new}\n"


class DiffReporter:
    """
    Collect differing records and render them as text.

    Args:
        max_lines: Stop rendering blocks once this many lines are written
        max_bytes: Stop rendering blocks once this many bytes are written
    """

    def __init__(self, max_lines: Optional[int] = None, max_bytes: Optional[int] = None):
        self.max_lines = max_lines
        self.max_bytes = max_bytes
        self.records: List[ReportRecord] = []

    def report(self, record: ReportRecord) -> None:
        if record.kind == DIFFER:
            self.records.append(record)

    def __len__(self) -> int:
        return len(self.records)

    def __str__(self) -> str:
        return self.render()

    def render(self) -> str:
        out: List[str] = []
        lines = 0
        size = 0
        for i, record in enumerate(self.records):
            if ((self.max_lines is not None and lines >= self.max_lines)
                    or (self.max_bytes is not None and size >= self.max_bytes)):
                out.append(f"... {len(self.records) - i} more differences ...\n")
                break
            block = format_block(record)
            out.append(block)
            lines += block.count("\n")
            size += len(block.encode("utf-8"))
        return "".join(out)
