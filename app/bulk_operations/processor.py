"""Applies a rule set to parsed rows and accumulates the import outcome."""

from typing import Any, Callable, Dict, List, Optional, Sequence

from app.core.config import settings

from .schemas import ImportResult, ProgressCallback, ValidationRule
from .validation import is_empty, validate_cell

# (rule, position of the rule in the schema) -> raw cell value
CellLookup = Callable[[ValidationRule, int], Any]


def is_blank_row(values: Sequence[Any]) -> bool:
    return all(is_empty(v) or (isinstance(v, str) and not v.strip()) for v in values)


def is_example_row(values: Sequence[Any], marker: Optional[str] = None) -> bool:
    """True when every filled cell is text containing the example marker (e.g. 'Contoh')."""
    marker = marker or settings.bulk_example_marker
    filled = [v for v in values if not is_empty(v)]
    return bool(filled) and all(isinstance(v, str) and marker in v for v in filled)


class RowProcessor:
    """
    Validates rows one at a time, in file order.
    A row with any failing field is reported as a single 'Baris N: ...' line and
    left out of the data; it never stops the remaining rows.
    """

    def __init__(self, rules: List[ValidationRule], on_progress: Optional[ProgressCallback] = None) -> None:
        self.rules = rules
        self.on_progress = on_progress
        self.data: List[Dict[str, Any]] = []
        self.errors: List[str] = []
        self.total_rows = 0

    def report(self, current: float, total: float, message: Optional[str] = None) -> None:
        if self.on_progress is not None:
            self.on_progress(current, total, message)

    def process(self, row_number: int, lookup: CellLookup) -> bool:
        self.total_rows += 1
        record: Dict[str, Any] = {}
        row_errors: List[str] = []
        for index, rule in enumerate(self.rules):
            result = validate_cell(lookup(rule, index), rule, row_number)
            if result.valid:
                record[rule.field] = result.value
            else:
                row_errors.append(result.error)
        if row_errors:
            self.errors.append(f"Baris {row_number}: {', '.join(row_errors)}")
            return False
        self.data.append(record)
        return True

    def result(self) -> ImportResult:
        return ImportResult.from_rows(self.data, self.errors, self.total_rows)
