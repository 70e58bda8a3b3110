"""
Public entry points for bulk export, template generation and import.

Imports never raise on bad input: unreadable files come back as a failed
ImportResult with a single diagnostic line, invalid rows as per-row errors.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence, Union

from app.core.config import settings

from . import csv_io, excel
from .processor import RowProcessor
from .schemas import (
    CSV_MEDIA_TYPE,
    XLSX_MEDIA_TYPE,
    ColumnSpec,
    ExportArtifact,
    ExportOptions,
    ImportResult,
    ProgressCallback,
    TemplateColumnSpec,
    ValidationRule,
)

logger = logging.getLogger(__name__)

Upload = Union[bytes, Any]  # raw bytes or an object with an async read(), e.g. UploadFile


def slugify(title: Optional[str]) -> str:
    return re.sub(r"\s+", "-", (title or "").strip().lower())


def build_filename(title: Optional[str], ext: str) -> str:
    """'<slug>-<YYYY-MM-DD>.<ext>' with the slug taken from a display title."""
    slug = slugify(title) or "export"
    return f"{slug}-{datetime.now(timezone.utc).date().isoformat()}.{ext}"


def export_to_excel(
    records: Sequence[Any],
    columns: Sequence[ColumnSpec],
    options: Optional[ExportOptions] = None,
) -> ExportArtifact:
    """Render records as an .xlsx download. An empty record set yields a header-only sheet."""
    options = options or ExportOptions()
    wb = excel.build_export_workbook(records, columns, options.sheet_name)
    filename = options.filename or build_filename("export", "xlsx")
    logger.info("Exported %d rows to %s", len(records), filename)
    return ExportArtifact(filename=filename, media_type=XLSX_MEDIA_TYPE, content=excel.workbook_bytes(wb))


def export_to_csv(
    records: Sequence[Any],
    columns: Sequence[ColumnSpec],
    options: Optional[ExportOptions] = None,
) -> ExportArtifact:
    options = options or ExportOptions()
    filename = options.filename or build_filename("export", "csv")
    content = csv_io.render_csv(records, columns).encode("utf-8")
    logger.info("Exported %d rows to %s", len(records), filename)
    return ExportArtifact(filename=filename, media_type=CSV_MEDIA_TYPE, content=content)


def generate_excel_template(columns: Sequence[TemplateColumnSpec], filename: str) -> ExportArtifact:
    wb = excel.build_template_workbook(columns)
    return ExportArtifact(filename=filename, media_type=XLSX_MEDIA_TYPE, content=excel.workbook_bytes(wb))


async def _read_upload(file: Upload) -> bytes:
    if isinstance(file, (bytes, bytearray)):
        content = bytes(file)
    else:
        content = await file.read()
    if not content:
        raise ValueError("File is empty")
    if len(content) > settings.bulk_max_upload_bytes:
        raise ValueError(f"File is larger than {settings.bulk_max_upload_bytes} bytes")
    return content


def _log_result(kind: str, result: ImportResult) -> None:
    logger.info(
        "%s import finished: total=%d valid=%d errors=%d",
        kind,
        result.total_rows,
        result.valid_rows,
        result.error_rows,
    )


async def import_from_excel(
    file: Upload,
    rules: List[ValidationRule],
    on_progress: Optional[ProgressCallback] = None,
) -> ImportResult:
    """Validate the rows of an uploaded .xlsx against rules matched to columns by position."""
    processor = RowProcessor(rules, on_progress)
    try:
        content = await _read_upload(file)
        excel.import_rows(excel.read_workbook(content), processor)
    except Exception as e:
        logger.warning("Could not read Excel upload: %s", e, exc_info=True)
        return ImportResult.failure(f"Error reading Excel file: {e}")
    result = processor.result()
    _log_result("Excel", result)
    return result


async def import_from_csv(
    file: Upload,
    rules: List[ValidationRule],
    on_progress: Optional[ProgressCallback] = None,
    parser: csv_io.DelimitedTextParser = csv_io.parse_delimited_text,
) -> ImportResult:
    """Validate the rows of an uploaded .csv; rules are matched to columns by header name."""
    processor = RowProcessor(rules, on_progress)
    try:
        content = await _read_upload(file)
        csv_io.import_rows(content.decode("utf-8-sig"), processor, parser)
    except Exception as e:
        logger.warning("Could not read CSV upload: %s", e, exc_info=True)
        return ImportResult.failure(f"Error reading CSV file: {e}")
    result = processor.result()
    _log_result("CSV", result)
    return result
