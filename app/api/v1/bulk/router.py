from typing import List

from fastapi import APIRouter, File, HTTPException, Query, UploadFile
from fastapi.responses import Response

from app.bulk_operations.schemas import ExportArtifact
from app.core.enums import ExportFormat
from app.core.exceptions import ServiceError

from . import service
from .schemas import BulkColumnsResponse, BulkExportRequest, BulkResourceInfo

router = APIRouter(prefix="/api/v1/bulk", tags=["bulk"])


def _download(artifact: ExportArtifact) -> Response:
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )


@router.get("/resources", response_model=List[BulkResourceInfo])
async def list_resources() -> List[BulkResourceInfo]:
    return service.list_resources()


@router.get("/{resource}/columns", response_model=BulkColumnsResponse)
async def get_columns(resource: str) -> BulkColumnsResponse:
    """Template columns, required fields and format hints for a resource."""
    try:
        return service.get_columns(service.get_resource(resource))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/{resource}/template")
async def download_template(resource: str) -> Response:
    """Download the Excel template: an instructions sheet and a Data sheet with an example row."""
    try:
        return _download(service.build_template(service.get_resource(resource)))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/{resource}/import")
async def import_file(
    resource: str,
    file: UploadFile = File(..., description="Excel (.xlsx) from the template, or CSV with a header row"),
    error_report: bool = Query(False, description="If true and rows failed, return an Excel file listing them"),
):
    """
    Validate an uploaded file against the resource's rules.
    Valid rows are returned in `data`; invalid rows are reported in `errors` and skipped.
    Nothing is persisted.
    """
    try:
        bulk_resource = service.get_resource(resource)
        result = await service.import_upload(bulk_resource, file)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if error_report and result.errors:
        return _download(service.build_error_workbook(bulk_resource, result))
    return result


@router.post("/{resource}/export")
async def export_records(
    resource: str,
    payload: BulkExportRequest,
    fmt: ExportFormat = Query(ExportFormat.EXCEL, alias="format"),
) -> Response:
    try:
        artifact = service.export_records(service.get_resource(resource), fmt, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return _download(artifact)
