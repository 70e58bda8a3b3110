"""Comma-separated text side of bulk operations."""

import csv
import io
from typing import Any, Callable, Dict, Iterable, Iterator, NamedTuple, Optional, Sequence

from .excel import field_value
from .processor import RowProcessor, is_blank_row, is_example_row
from .schemas import ColumnSpec
from .validation import cell_text, is_empty

REQUIRED_MARKER = " *"


class DelimitedRow(NamedTuple):
    line_number: int  # source line the record ends on
    offset: int  # characters of the source consumed so far
    values: Dict[Optional[str], Any]


DelimitedTextParser = Callable[[str], Iterable[DelimitedRow]]


def render_csv(records: Sequence[Any], columns: Sequence[ColumnSpec]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow([c.header for c in columns])
    for record in records:
        row = []
        for c in columns:
            value = field_value(record, c.key)
            row.append("" if value is None else cell_text(value))
        writer.writerow(row)
    return output.getvalue()


def parse_delimited_text(text: str) -> Iterator[DelimitedRow]:
    """Default RFC 4180 parser: header row first, records keyed by header."""
    consumed = 0

    def lines() -> Iterator[str]:
        nonlocal consumed
        for line in io.StringIO(text, newline=""):
            consumed += len(line)
            yield line

    reader = csv.DictReader(lines())
    for row in reader:
        yield DelimitedRow(reader.line_num, consumed, row)


def _normalize_header(header: str) -> str:
    header = header.strip()
    if header.endswith("*"):
        header = header[:-1].rstrip()
    return header.lower()


def lookup_field(values: Dict[Optional[str], Any], field: str) -> Any:
    """Find a field by name, tolerating the template's ' *' suffix and case differences."""
    for key in (field, f"{field}{REQUIRED_MARKER}"):
        value = values.get(key)
        if not is_empty(value):
            return value
    target = field.strip().lower()
    for key, value in values.items():
        if key is None or is_empty(value):
            continue
        if _normalize_header(key) == target:
            return value
    return None


def import_rows(text: str, processor: RowProcessor, parser: DelimitedTextParser = parse_delimited_text) -> None:
    size = len(text) or 1
    first = True
    for parsed in parser(text):
        processor.report(round(parsed.offset / size * 100, 2), 100, "Processing CSV data...")
        cells = [v for k, v in parsed.values.items() if k is not None]
        if first:
            first = False
            if is_example_row(cells):
                continue
        if is_blank_row(cells):
            continue
        processor.process(parsed.line_number, lambda rule, _index: lookup_field(parsed.values, rule.field))
