from enum import Enum


class ColumnType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    DATE = "date"


class FieldType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    EMAIL = "email"
    PHONE = "phone"


class ExportFormat(str, Enum):
    EXCEL = "excel"
    CSV = "csv"


class InstitutionType(str, Enum):
    TK = "TK"
    SD = "SD"
    SMP = "SMP"
    SMA = "SMA"
