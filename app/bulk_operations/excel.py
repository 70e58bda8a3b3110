"""Spreadsheet (.xlsx) side of bulk operations, built on openpyxl."""

import io
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from dateutil import parser as date_parser
from openpyxl import Workbook, load_workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter, quote_sheetname
from openpyxl.workbook.defined_name import DefinedName
from openpyxl.worksheet.datavalidation import DataValidation

from app.core.config import settings
from app.core.enums import ColumnType

from .processor import RowProcessor, is_blank_row, is_example_row
from .schemas import ColumnSpec, TemplateColumnSpec
from .validation import cell_text

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill("solid", fgColor="FFE6F3FF")
EXAMPLE_FONT = Font(italic=True, color="FF666666")
DATE_FORMAT = "yyyy/mm/dd"
NUMBER_FORMAT = "#,##0.00"
MIN_COLUMN_WIDTH = 10
TEMPLATE_COLUMN_WIDTH = 15
ERRORS_SHEET_NAME = "Upload errors"

# Workbook-level name pointing at the template's example row. Excel turns it
# into #REF! when the user deletes that row.
EXAMPLE_ROW_NAME = "BulkExampleRow"
EXAMPLE_ROW_REF_RE = re.compile(r"^'?(?P<sheet>.*?)'?!\$?(?P<row>\d+):\$?\d+$")
ERROR_LINE_RE = re.compile(r"^Baris (?P<row>\d+): (?P<message>.*)$", re.DOTALL)

INSTRUCTION_LINES = (
    "INSTRUKSI PENGGUNAAN TEMPLATE",
    "",
    '1. Isi data pada sheet "{sheet}"',
    "2. Kolom yang bertanda (*) wajib diisi",
    "3. Perhatikan format data sesuai contoh",
    "4. Jangan mengubah nama kolom atau urutan kolom",
    "5. Hapus baris contoh sebelum mengupload",
    "",
    "Format Data:",
)

_CELL_TYPES = (str, int, float, Decimal, bool, date, datetime, time)


@dataclass
class SheetRows:
    """Rows of the sheet an import reads from, header first."""

    title: str
    rows: List[Tuple[Any, ...]]
    example_row: Optional[int] = None

    @property
    def data_row_count(self) -> int:
        return max(len(self.rows) - 1, 0)


def safe_sheet_name(name: Optional[str]) -> str:
    cleaned = re.sub(r"[:\\/?*\[\]]", "_", str(name or "").strip())
    return cleaned[:31] or settings.bulk_data_sheet_name


def field_value(record: Any, key: str) -> Any:
    if isinstance(record, dict):
        return record.get(key)
    return getattr(record, key, None)


def _writable(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.replace(tzinfo=None)
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    if isinstance(value, _CELL_TYPES):
        return value
    return str(value)


def _typed_value(value: Any, column_type: ColumnType) -> Tuple[Any, Optional[str]]:
    """Convert a record value for its column; returns (value, number format)."""
    if not value:
        return value, None
    if column_type == ColumnType.DATE:
        if not isinstance(value, (date, datetime)):
            try:
                value = date_parser.parse(str(value))
            except (ValueError, OverflowError):
                return value, None
        return value, DATE_FORMAT
    if column_type == ColumnType.NUMBER:
        try:
            return float(value), NUMBER_FORMAT
        except (TypeError, ValueError):
            return value, None
    return value, None


def _display_text(value: Any, number_format: Optional[str]) -> str:
    if value is None:
        return ""
    if number_format == DATE_FORMAT and isinstance(value, (date, datetime)):
        return value.strftime("%Y/%m/%d")
    if number_format == NUMBER_FORMAT and isinstance(value, (int, float)):
        return f"{value:,.2f}"
    return cell_text(value)


def _style_row(cells: Iterable[Any], font: Font, fill: Optional[PatternFill] = None) -> None:
    for cell in cells:
        cell.font = font
        if fill is not None:
            cell.fill = fill


def workbook_bytes(wb: Workbook) -> bytes:
    bio = io.BytesIO()
    wb.save(bio)
    return bio.getvalue()


def build_export_workbook(
    records: Sequence[Any],
    columns: Sequence[ColumnSpec],
    sheet_name: Optional[str] = None,
) -> Workbook:
    """One sheet: styled header row, then one row per record."""
    wb = Workbook()
    ws = wb.active
    ws.title = safe_sheet_name(sheet_name)
    ws.append([c.header for c in columns])
    _style_row(ws[1], HEADER_FONT, HEADER_FILL)

    widths = [len(c.header) for c in columns]
    for row_idx, record in enumerate(records, start=2):
        for col_idx, column in enumerate(columns, start=1):
            value, number_format = _typed_value(field_value(record, column.key), column.type)
            cell = ws.cell(row=row_idx, column=col_idx, value=_writable(value))
            if number_format:
                cell.number_format = number_format
            # empty cells count as the minimum width
            shown = len(_display_text(cell.value, number_format)) if cell.value not in (None, "") else MIN_COLUMN_WIDTH
            widths[col_idx - 1] = max(widths[col_idx - 1], shown)

    for col_idx, column in enumerate(columns, start=1):
        floor = column.width or MIN_COLUMN_WIDTH
        ws.column_dimensions[get_column_letter(col_idx)].width = max(widths[col_idx - 1], floor)
    return wb


def build_template_workbook(columns: Sequence[TemplateColumnSpec]) -> Workbook:
    """Instructions sheet plus a Data sheet holding headers and one example row."""
    data_sheet = settings.bulk_data_sheet_name
    wb = Workbook()
    ws_info = wb.active
    ws_info.title = settings.bulk_instructions_sheet_name
    for line in INSTRUCTION_LINES:
        ws_info.append([line.format(sheet=data_sheet)])
    for c in columns:
        required = " (Wajib)" if c.required else " (Opsional)"
        example = f" - Contoh: {c.example}" if c.example else ""
        ws_info.append([f"{c.header}{required}{example}"])
    ws_info["A1"].font = HEADER_FONT
    ws_info.column_dimensions["A"].width = 60

    ws_data = wb.create_sheet(data_sheet)
    ws_data.append([f"{c.header} *" if c.required else c.header for c in columns])
    ws_data.append([c.example or None for c in columns])
    _style_row(ws_data[1], HEADER_FONT, HEADER_FILL)
    _style_row(ws_data[2], EXAMPLE_FONT)

    last_row = settings.bulk_template_max_rows + 1
    for col_idx, c in enumerate(columns, start=1):
        letter = get_column_letter(col_idx)
        ws_data.column_dimensions[letter].width = c.width or TEMPLATE_COLUMN_WIDTH
        if c.choices:
            dv = DataValidation(
                type="list",
                formula1='"' + ",".join(c.choices) + '"',
                allow_blank=not c.required,
            )
            dv.error = f"Pilih nilai dari daftar {c.header}"
            ws_data.add_data_validation(dv)
            dv.add(f"{letter}2:{letter}{last_row}")

    wb.defined_names.add(
        DefinedName(EXAMPLE_ROW_NAME, hidden=True, attr_text=f"{quote_sheetname(ws_data.title)}!$2:$2")
    )
    return wb


def build_error_report(errors: Sequence[str]) -> Workbook:
    """Workbook listing every rejected row with its reason."""
    wb = Workbook()
    ws = wb.active
    ws.title = ERRORS_SHEET_NAME
    if not errors:
        ws.append(["No failed rows"])
        return wb
    ws.append(["Baris", "Keterangan"])
    _style_row(ws[1], HEADER_FONT, HEADER_FILL)
    for line in errors:
        match = ERROR_LINE_RE.match(line)
        if match:
            ws.append([int(match.group("row")), match.group("message")])
        else:
            ws.append([None, line])
    ws.column_dimensions["B"].width = 80
    return wb


def _example_row_number(wb: Workbook, sheet_title: str) -> Optional[int]:
    defined = wb.defined_names.get(EXAMPLE_ROW_NAME)
    if defined is None or not defined.attr_text:
        return None
    match = EXAMPLE_ROW_REF_RE.match(defined.attr_text)
    if match is None:
        return None
    if match.group("sheet").replace("''", "'") != sheet_title:
        return None
    return int(match.group("row"))


def read_workbook(content: bytes) -> SheetRows:
    """Load an upload and return the rows of the 'Data' sheet, or of the first sheet."""
    wb = load_workbook(filename=io.BytesIO(content), data_only=True)
    try:
        data_sheet = settings.bulk_data_sheet_name
        ws = wb[data_sheet] if data_sheet in wb.sheetnames else wb.worksheets[0]
        rows = list(ws.iter_rows(min_row=1, min_col=1, values_only=True))
        return SheetRows(title=ws.title, rows=rows, example_row=_example_row_number(wb, ws.title))
    finally:
        wb.close()


def import_rows(sheet: SheetRows, processor: RowProcessor) -> None:
    """Feed data rows to the processor, matching rules to columns by position."""
    total = sheet.data_row_count
    for row_number, values in enumerate(sheet.rows[1:], start=2):
        if row_number == sheet.example_row:
            continue
        if row_number == 2 and is_example_row(values):
            continue
        if is_blank_row(values):
            continue
        processor.report(row_number - 1, total, f"Processing row {row_number}...")
        processor.process(
            row_number,
            lambda rule, index: values[index] if index < len(values) else None,
        )
