from typing import List

from fastapi import UploadFile

from app.bulk_operations import service as bulk_service
from app.bulk_operations.excel import build_error_report, workbook_bytes
from app.bulk_operations.schemas import (
    XLSX_MEDIA_TYPE,
    ExportArtifact,
    ExportOptions,
    ImportResult,
)
from app.core.enums import ExportFormat
from app.core.exceptions import BulkRequestError, ResourceNotFoundError

from .resources import RESOURCES, BulkResource
from .schemas import BulkColumnsResponse, BulkExportRequest, BulkResourceInfo

CSV_CONTENT_TYPES = ("text/csv", "application/csv", "application/vnd.ms-excel")


def list_resources() -> List[BulkResourceInfo]:
    return [BulkResourceInfo(name=r.name, title=r.title) for r in RESOURCES.values()]


def get_resource(name: str) -> BulkResource:
    resource = RESOURCES.get(name)
    if resource is None:
        raise ResourceNotFoundError(name)
    return resource


def get_columns(resource: BulkResource) -> BulkColumnsResponse:
    return BulkColumnsResponse(
        resource=resource.name,
        title=resource.title,
        template_columns=resource.template_columns,
        export_columns=resource.export_columns,
        required=resource.required_fields,
        formats=resource.formats,
    )


def build_template(resource: BulkResource) -> ExportArtifact:
    filename = f"template-{bulk_service.slugify(resource.title)}.xlsx"
    return bulk_service.generate_excel_template(resource.template_columns, filename)


def detect_format(file: UploadFile) -> ExportFormat:
    """Pick the importer from the file extension, falling back to the content type."""
    name = (file.filename or "").lower()
    if name.endswith(".xlsx"):
        return ExportFormat.EXCEL
    if name.endswith(".csv"):
        return ExportFormat.CSV
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if content_type == XLSX_MEDIA_TYPE:
        return ExportFormat.EXCEL
    if content_type in CSV_CONTENT_TYPES and not name.endswith(".xls"):
        return ExportFormat.CSV
    raise BulkRequestError("File harus berformat Excel (.xlsx) atau CSV (.csv)")


async def import_upload(resource: BulkResource, file: UploadFile) -> ImportResult:
    if detect_format(file) == ExportFormat.CSV:
        return await bulk_service.import_from_csv(file, resource.rules)
    return await bulk_service.import_from_excel(file, resource.rules)


def build_error_workbook(resource: BulkResource, result: ImportResult) -> ExportArtifact:
    """Rejected rows with their reasons, as a download."""
    return ExportArtifact(
        filename=f"{resource.name}_upload_errors.xlsx",
        media_type=XLSX_MEDIA_TYPE,
        content=workbook_bytes(build_error_report(result.errors)),
    )


def export_records(resource: BulkResource, fmt: ExportFormat, payload: BulkExportRequest) -> ExportArtifact:
    if not payload.records:
        raise BulkRequestError("Tidak ada data untuk diekspor")
    ext = "xlsx" if fmt == ExportFormat.EXCEL else "csv"
    options = ExportOptions(
        filename=payload.filename or bulk_service.build_filename(resource.title, ext),
        sheet_name=payload.sheet_name or resource.title,
    )
    if fmt == ExportFormat.EXCEL:
        return bulk_service.export_to_excel(payload.records, resource.export_columns, options)
    return bulk_service.export_to_csv(payload.records, resource.export_columns, options)
