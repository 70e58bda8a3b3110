"""Descriptors passed to and returned from the bulk import/export engine."""

from re import Pattern
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from app.core.enums import ColumnType, FieldType

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_MEDIA_TYPE = "text/csv; charset=utf-8"

ProgressCallback = Callable[[float, float, Optional[str]], None]
CustomValidator = Callable[[Any], Union[bool, str]]


class ColumnSpec(BaseModel):
    """Maps a record field to a labelled, typed column."""

    key: str
    header: str
    width: Optional[int] = None
    type: ColumnType = ColumnType.STRING


class TemplateColumnSpec(ColumnSpec):
    required: bool = False
    example: str = ""
    choices: Optional[List[str]] = None  # rendered as a dropdown in the Data sheet


class ValidationRule(BaseModel):
    """Contract a single field of an imported row must satisfy.

    `type=None` leaves the raw cell value untouched. `validator` returns
    True when valid, or an error message (False gives a generic one).
    """

    field: str
    required: bool = False
    type: Optional[FieldType] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[Pattern] = None
    validator: Optional[CustomValidator] = Field(None, exclude=True)


class ExportOptions(BaseModel):
    filename: Optional[str] = None
    sheet_name: Optional[str] = None


class ExportArtifact(BaseModel):
    """A rendered file ready to be sent as a download."""

    filename: str
    media_type: str
    content: bytes


class ImportResult(BaseModel):
    success: bool
    data: Optional[List[Dict[str, Any]]] = None
    errors: List[str] = []
    total_rows: int = 0
    valid_rows: int = 0
    error_rows: int = 0

    @classmethod
    def from_rows(cls, data: List[Dict[str, Any]], errors: List[str], total_rows: int) -> "ImportResult":
        """Row-level outcome: partial success counts as success."""
        valid_rows = len(data)
        return cls(
            success=valid_rows > 0 or (total_rows == 0 and not errors),
            data=data,
            errors=errors,
            total_rows=total_rows,
            valid_rows=valid_rows,
            error_rows=total_rows - valid_rows,
        )

    @classmethod
    def failure(cls, message: str) -> "ImportResult":
        """Hard failure: the file could not be opened or parsed at all."""
        return cls(success=False, errors=[message], total_rows=0, valid_rows=0, error_rows=0)
