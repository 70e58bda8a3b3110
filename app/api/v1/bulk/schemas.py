from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.bulk_operations.schemas import ColumnSpec, TemplateColumnSpec


class BulkResourceInfo(BaseModel):
    name: str
    title: str


class BulkColumnsResponse(BaseModel):
    """Template columns plus the hints a UI shows next to the upload form."""

    resource: str
    title: str
    template_columns: List[TemplateColumnSpec]
    export_columns: List[ColumnSpec]
    required: List[str]
    formats: Dict[str, str] = {}


class BulkExportRequest(BaseModel):
    records: List[Dict[str, Any]] = Field(default_factory=list)
    filename: Optional[str] = None
    sheet_name: Optional[str] = None
