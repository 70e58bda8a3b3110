"""Spreadsheet export, template generation and error reports."""

import io
import re
from datetime import date, datetime, timezone
from types import SimpleNamespace

from openpyxl import load_workbook

from app.bulk_operations import service
from app.bulk_operations.excel import (
    EXAMPLE_ROW_NAME,
    build_error_report,
    safe_sheet_name,
)
from app.bulk_operations.schemas import XLSX_MEDIA_TYPE, ColumnSpec, ExportOptions, TemplateColumnSpec
from app.core.enums import ColumnType

COLUMNS = [
    ColumnSpec(key="name", header="Nama"),
    ColumnSpec(key="amount", header="Jumlah", type=ColumnType.NUMBER),
    ColumnSpec(key="birthDate", header="Tanggal Lahir", type=ColumnType.DATE),
    ColumnSpec(key="notes", header="Catatan", width=40),
]


def _load(content: bytes):
    return load_workbook(io.BytesIO(content))


def test_export_writes_styled_header_and_rows() -> None:
    records = [
        {"name": "Muhammad Abdurrahman Wahid", "amount": 1500000, "birthDate": date(2010, 5, 15), "notes": None},
        {"name": "Ali", "amount": None, "birthDate": None, "notes": "pindahan"},
    ]

    artifact = service.export_to_excel(records, COLUMNS, ExportOptions(filename="siswa.xlsx", sheet_name="Siswa"))

    assert artifact.filename == "siswa.xlsx"
    assert artifact.media_type == XLSX_MEDIA_TYPE
    ws = _load(artifact.content)["Siswa"]
    assert [c.value for c in ws[1]] == ["Nama", "Jumlah", "Tanggal Lahir", "Catatan"]
    for cell in ws[1]:
        assert cell.font.bold is True
        assert cell.fill.fgColor.rgb == "FFE6F3FF"
    assert ws.max_row == 3
    assert ws["A2"].value == "Muhammad Abdurrahman Wahid"
    assert ws["B2"].value == 1500000
    assert ws["B2"].number_format == "#,##0.00"
    assert ws["C2"].value == datetime(2010, 5, 15)
    assert ws["C2"].number_format == "yyyy/mm/dd"
    assert ws["D3"].value == "pindahan"


def test_export_column_widths_fit_content() -> None:
    records = [{"name": "Muhammad Abdurrahman Wahid", "amount": 1500000, "birthDate": date(2010, 5, 15)}]

    ws = _load(service.export_to_excel(records, COLUMNS).content).active

    assert ws.column_dimensions["A"].width == len("Muhammad Abdurrahman Wahid")
    assert ws.column_dimensions["B"].width == len("1,500,000.00")
    assert ws.column_dimensions["C"].width == len("Tanggal Lahir")
    # configured width acts as the floor
    assert ws.column_dimensions["D"].width == 40


def test_empty_export_is_header_only() -> None:
    artifact = service.export_to_excel([], COLUMNS)

    ws = _load(artifact.content).active
    assert ws.max_row == 1
    assert [c.value for c in ws[1]] == ["Nama", "Jumlah", "Tanggal Lahir", "Catatan"]


def test_default_filename_carries_the_date() -> None:
    artifact = service.export_to_excel([{"name": "Ali"}], COLUMNS)

    assert re.match(r"^export-\d{4}-\d{2}-\d{2}\.xlsx$", artifact.filename)


def test_build_filename_slugs_title() -> None:
    assert service.build_filename("Data Siswa", "csv").startswith("data-siswa-")
    assert service.build_filename(None, "xlsx").startswith("export-")


def test_export_accepts_objects_and_aware_datetimes() -> None:
    records = [
        SimpleNamespace(name="Ali", amount=5, birthDate=datetime(2024, 1, 1, 7, 0, tzinfo=timezone.utc), notes=None),
    ]

    ws = _load(service.export_to_excel(records, COLUMNS).content).active

    assert ws["A2"].value == "Ali"
    assert ws["C2"].value == datetime(2024, 1, 1, 7, 0)


def test_sheet_names_are_sanitized() -> None:
    assert safe_sheet_name("Data: 2024/2025") == "Data_ 2024_2025"
    assert safe_sheet_name("x" * 40) == "x" * 31
    assert safe_sheet_name("") == "Data"
    assert safe_sheet_name(None) == "Data"

    artifact = service.export_to_excel([], COLUMNS, ExportOptions(sheet_name="Tagihan [Juli]"))
    assert _load(artifact.content).sheetnames == ["Tagihan _Juli_"]


TEMPLATE_COLUMNS = [
    TemplateColumnSpec(key="nis", header="NIS", required=True, example="20240001"),
    TemplateColumnSpec(key="fullName", header="Nama Lengkap", width=25, required=True, example="Ahmad Fadli"),
    TemplateColumnSpec(key="gender", header="Jenis Kelamin", required=True, example="L", choices=["L", "P"]),
    TemplateColumnSpec(key="email", header="Email"),
]


def test_template_has_instructions_and_data_sheets() -> None:
    artifact = service.generate_excel_template(TEMPLATE_COLUMNS, "template-data-siswa.xlsx")

    assert artifact.filename == "template-data-siswa.xlsx"
    wb = _load(artifact.content)
    assert wb.sheetnames == ["Instruksi", "Data"]

    info = wb["Instruksi"]
    assert info["A1"].value == "INSTRUKSI PENGGUNAAN TEMPLATE"
    assert info["A1"].font.bold is True
    assert info["A3"].value == '1. Isi data pada sheet "Data"'
    lines = [row[0] for row in info.iter_rows(values_only=True)]
    assert "NIS (Wajib) - Contoh: 20240001" in lines
    assert "Email (Opsional)" in lines


def test_template_data_sheet_headers_and_example_row() -> None:
    wb = _load(service.generate_excel_template(TEMPLATE_COLUMNS, "t.xlsx").content)
    ws = wb["Data"]

    assert [c.value for c in ws[1]] == ["NIS *", "Nama Lengkap *", "Jenis Kelamin *", "Email"]
    assert ws["A1"].fill.fgColor.rgb == "FFE6F3FF"
    assert ws["A2"].value == "20240001"
    assert ws["A2"].font.italic is True
    assert ws["A2"].font.color.rgb == "FF666666"
    assert ws["D2"].value is None
    assert ws.column_dimensions["A"].width == 15
    assert ws.column_dimensions["B"].width == 25


def test_template_marks_example_row_and_choices() -> None:
    wb = _load(service.generate_excel_template(TEMPLATE_COLUMNS, "t.xlsx").content)

    assert wb.defined_names[EXAMPLE_ROW_NAME].attr_text == "'Data'!$2:$2"
    validations = wb["Data"].data_validations.dataValidation
    assert len(validations) == 1
    assert validations[0].formula1 == '"L,P"'
    assert "C2" in str(validations[0].sqref)


def test_error_report_lists_rows() -> None:
    wb = build_error_report(["Baris 3: fullName wajib diisi", "Baris 7: email format email tidak valid, x"])
    ws = wb.active

    assert ws.title == "Upload errors"
    rows = list(ws.iter_rows(values_only=True))
    assert rows == [
        ("Baris", "Keterangan"),
        (3, "fullName wajib diisi"),
        (7, "email format email tidak valid, x"),
    ]


def test_error_report_without_errors() -> None:
    ws = build_error_report([]).active

    assert ws["A1"].value == "No failed rows"
