"""Per-cell validation and coercion for imported rows."""

import logging
import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from dateutil import parser as date_parser

from app.core.config import settings
from app.core.enums import FieldType

from .schemas import ValidationRule

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_STRIP_RE = re.compile(r"[^0-9]")
YEAR_FIRST_RE = re.compile(r"^[0-9]{4}[-/.]")
PHONE_MIN_LENGTH = 10  # digits, a leading + not counted
PHONE_MAX_LENGTH = 15


@dataclass(frozen=True)
class CellResult:
    valid: bool
    value: Any = None
    error: Optional[str] = None


def is_empty(value: Any) -> bool:
    return value is None or value == ""


def cell_text(value: Any) -> str:
    """Render a raw cell as text; integral floats lose their '.0'."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.isoformat(sep=" ") if value.time() != datetime.min.time() else value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return None if math.isnan(value) else value
    text = str(value).strip()
    if "_" in text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return None if math.isnan(number) else number


def _to_date(value: Any) -> Optional[date]:
    if isinstance(value, (date, datetime)):
        return value
    text = str(value).strip()
    # 2024-07-10 and 2024/07/10 are always year-month-day
    year_first = bool(YEAR_FIRST_RE.match(text))
    try:
        return date_parser.parse(
            text,
            dayfirst=settings.bulk_date_dayfirst and not year_first,
            yearfirst=year_first,
        )
    except (ValueError, OverflowError):
        return None


def validate_cell(value: Any, rule: ValidationRule, row_number: int) -> CellResult:
    """
    Validate and coerce one raw cell against a rule.
    Never raises: every failure comes back as CellResult.error so the caller can
    collect all errors of a row.
    """
    field = rule.field
    if is_empty(value):
        if rule.required:
            return CellResult(False, error=f"{field} wajib diisi")
        return CellResult(True, value=None)

    if rule.type == FieldType.STRING:
        value = cell_text(value).strip()
        if rule.min_length and len(value) < rule.min_length:
            return CellResult(False, error=f"{field} minimal {rule.min_length} karakter")
        if rule.max_length and len(value) > rule.max_length:
            return CellResult(False, error=f"{field} maksimal {rule.max_length} karakter")

    elif rule.type == FieldType.NUMBER:
        value = _to_number(value)
        if value is None:
            return CellResult(False, error=f"{field} harus berupa angka")

    elif rule.type == FieldType.DATE:
        value = _to_date(value)
        if value is None:
            return CellResult(False, error=f"{field} format tanggal tidak valid")

    elif rule.type == FieldType.EMAIL:
        value = cell_text(value).strip().lower()
        if not EMAIL_RE.match(value):
            return CellResult(False, error=f"{field} format email tidak valid")

    elif rule.type == FieldType.PHONE:
        text = cell_text(value).strip()
        digits = PHONE_STRIP_RE.sub("", text)
        value = f"+{digits}" if text.startswith("+") else digits
        if not PHONE_MIN_LENGTH <= len(digits) <= PHONE_MAX_LENGTH:
            return CellResult(False, error=f"{field} format nomor telepon tidak valid")

    if rule.pattern is not None and not rule.pattern.search(cell_text(value)):
        return CellResult(False, error=f"{field} format tidak sesuai")

    if rule.validator is not None:
        try:
            outcome = rule.validator(value)
        except Exception:
            logger.warning("Custom validator for %s failed on row %s", field, row_number, exc_info=True)
            outcome = False
        if outcome is not True:
            message = outcome if isinstance(outcome, str) else f"{field} tidak valid"
            return CellResult(False, error=message)

    return CellResult(True, value=value)
