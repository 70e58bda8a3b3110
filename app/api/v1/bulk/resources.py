"""
Import/export schemas of the application's data-entry flows.
Each flow is plain data: template columns, export columns and the validation
rules (ordered like the template columns, since spreadsheet imports match by position).
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List

from app.bulk_operations.rules import GENDER_VALUES, ValidationRules
from app.bulk_operations.schemas import ColumnSpec, TemplateColumnSpec, ValidationRule
from app.core.enums import ColumnType, FieldType, InstitutionType

STUDENT_STATUSES = ("ACTIVE", "GRADUATED", "TRANSFERRED", "DROPPED")
INSTITUTION_TYPES = [t.value for t in InstitutionType]


@dataclass(frozen=True)
class BulkResource:
    name: str
    title: str
    template_columns: List[TemplateColumnSpec]
    rules: List[ValidationRule]
    export_columns: List[ColumnSpec]
    formats: Dict[str, str] = field(default_factory=dict)

    @property
    def required_fields(self) -> List[str]:
        return [c.key for c in self.template_columns if c.required]


def _col(key: str, header: str, width: int, required: bool = False, example: str = "", **kw) -> TemplateColumnSpec:
    return TemplateColumnSpec(key=key, header=header, width=width, required=required, example=example, **kw)


def _export_columns(columns: List[TemplateColumnSpec]) -> List[ColumnSpec]:
    return [ColumnSpec(key=c.key, header=c.header, width=c.width, type=c.type) for c in columns]


def _one_of(values, message: str):
    return lambda value: value in values or message


# ----- Students -----
_STUDENT_COLUMNS = [
    _col("nik", "NIK", 15, example="817199009900"),
    _col("nisn", "NISN", 15, example="0012345678"),
    _col("nis", "NIS", 15, True, "20240001"),
    _col("fullName", "Nama Lengkap", 25, True, "Ahmad Fadli Rahman"),
    _col("nickname", "Nama Panggilan", 15, example="Fadli"),
    _col("birthPlace", "Tempat Lahir", 15, True, "Blitar"),
    _col("birthDate", "Tanggal Lahir", 15, True, "2010-05-15", type=ColumnType.DATE),
    _col("gender", "Jenis Kelamin", 15, True, "L", choices=list(GENDER_VALUES)),
    _col("bloodType", "Golongan Darah", 10, example="O"),
    _col("religion", "Agama", 10, example="Islam"),
    _col("nationality", "Kewarganegaraan", 15, example="Indonesia"),
    _col("address", "Alamat", 30, True, "Jl. Mawar No. 123"),
    _col("village", "Desa/Kelurahan", 15, example="Kepanjen Lor"),
    _col("district", "Kecamatan", 15, example="Kepanjen Kidul"),
    _col("city", "Kota/Kabupaten", 15, True, "Blitar"),
    _col("province", "Provinsi", 15, example="Jawa Timur"),
    _col("postalCode", "Kode Pos", 10, example="66171"),
    _col("phone", "Telepon", 15, example="081234567890"),
    _col("email", "Email", 25, example="fadli@email.com"),
    _col("fatherName", "Nama Ayah", 20, True, "Budi Rahman"),
    _col("fatherJob", "Pekerjaan Ayah", 20, example="Guru"),
    _col("fatherPhone", "Telepon Ayah", 15, example="081234567891"),
    _col("fatherEducation", "Pendidikan Ayah", 15, example="S1"),
    _col("motherName", "Nama Ibu", 20, True, "Siti Aminah"),
    _col("motherJob", "Pekerjaan Ibu", 20, example="Ibu Rumah Tangga"),
    _col("motherPhone", "Telepon Ibu", 15, example="081234567892"),
    _col("motherEducation", "Pendidikan Ibu", 15, example="SMA"),
    _col("guardianName", "Nama Wali", 20),
    _col("guardianJob", "Pekerjaan Wali", 20),
    _col("guardianPhone", "Telepon Wali", 15),
    _col("guardianRelation", "Hubungan Wali", 15),
    _col("institutionType", "Jenis Institusi", 15, True, "SD", choices=INSTITUTION_TYPES),
    _col("grade", "Kelas", 10, example="1"),
    _col("enrollmentDate", "Tanggal Masuk", 15, True, "2024-07-15", type=ColumnType.DATE),
    _col("enrollmentYear", "Tahun Ajaran", 15, True, "2024/2025"),
    _col("previousSchool", "Sekolah Asal", 25, example="TK Dharma Wanita"),
    _col("specialNeeds", "Kebutuhan Khusus", 20),
    _col("status", "Status", 15, example="ACTIVE", choices=list(STUDENT_STATUSES)),
    _col("graduationDate", "Tanggal Lulus", 15, example="2030-06-30", type=ColumnType.DATE),
]

_STUDENT_RULES = [
    ValidationRule(field="nik", type=FieldType.STRING, max_length=16, pattern=re.compile(r"^[0-9]+$")),
    ValidationRule(field="nisn", type=FieldType.STRING, max_length=10, pattern=re.compile(r"^[0-9]+$")),
    ValidationRules.nis("nis"),
    ValidationRules.required("fullName"),
    ValidationRules.required("nickname", False),
    ValidationRules.required("birthPlace"),
    ValidationRules.date("birthDate", True),
    ValidationRules.gender("gender"),
    ValidationRules.required("bloodType", False),
    ValidationRules.required("religion", False),
    ValidationRules.required("nationality", False),
    ValidationRules.required("address"),
    ValidationRules.required("village", False),
    ValidationRules.required("district", False),
    ValidationRules.required("city"),
    ValidationRules.required("province", False),
    ValidationRules.required("postalCode", False),
    ValidationRules.phone("phone"),
    ValidationRules.email("email"),
    ValidationRules.required("fatherName"),
    ValidationRules.required("fatherJob", False),
    ValidationRules.phone("fatherPhone"),
    ValidationRules.required("fatherEducation", False),
    ValidationRules.required("motherName"),
    ValidationRules.required("motherJob", False),
    ValidationRules.phone("motherPhone"),
    ValidationRules.required("motherEducation", False),
    ValidationRules.required("guardianName", False),
    ValidationRules.required("guardianJob", False),
    ValidationRules.phone("guardianPhone"),
    ValidationRules.required("guardianRelation", False),
    ValidationRules.institution_type("institutionType"),
    ValidationRules.required("grade", False),
    ValidationRules.date("enrollmentDate", True),
    ValidationRules.required("enrollmentYear"),
    ValidationRules.required("previousSchool", False),
    ValidationRules.required("specialNeeds", False),
    ValidationRule(
        field="status",
        type=FieldType.STRING,
        validator=_one_of(STUDENT_STATUSES, "Status harus ACTIVE, GRADUATED, TRANSFERRED, atau DROPPED"),
    ),
    ValidationRules.date("graduationDate"),
]

STUDENTS = BulkResource(
    name="students",
    title="Data Siswa",
    template_columns=_STUDENT_COLUMNS,
    rules=_STUDENT_RULES,
    export_columns=_export_columns(_STUDENT_COLUMNS),
    formats={
        "birthDate": "YYYY-MM-DD atau DD/MM/YYYY",
        "enrollmentDate": "YYYY-MM-DD atau DD/MM/YYYY",
        "gender": "L/P atau MALE/FEMALE atau Laki-laki/Perempuan",
        "institutionType": "TK, SD, SMP, atau SMA",
        "status": "ACTIVE, GRADUATED, TRANSFERRED, atau DROPPED",
        "email": "Format email yang valid (opsional)",
    },
)


# ----- Teachers -----
_TEACHER_COLUMNS = [
    _col("nip", "NIP", 20, example="198501012010011001"),
    _col("fullName", "Nama Lengkap", 25, True, "Ustadz Ahmad Hidayat"),
    _col("gender", "Jenis Kelamin", 15, True, "L", choices=list(GENDER_VALUES)),
    _col("phone", "Telepon", 15, True, "081234567893"),
    _col("email", "Email", 25, example="ahmad.hidayat@email.com"),
    _col("institutionType", "Jenis Institusi", 15, True, "SMP", choices=INSTITUTION_TYPES),
    _col("subject", "Mata Pelajaran", 20, example="Fiqih"),
    _col("joinDate", "Tanggal Bergabung", 15, example="2020-07-01", type=ColumnType.DATE),
]

_TEACHER_RULES = [
    ValidationRule(field="nip", type=FieldType.STRING, pattern=re.compile(r"^[0-9]{18}$")),
    ValidationRules.required("fullName"),
    ValidationRules.gender("gender"),
    ValidationRules.phone("phone", True),
    ValidationRules.email("email"),
    ValidationRules.institution_type("institutionType"),
    ValidationRules.required("subject", False),
    ValidationRules.date("joinDate"),
]

TEACHERS = BulkResource(
    name="teachers",
    title="Data Pengajar",
    template_columns=_TEACHER_COLUMNS,
    rules=_TEACHER_RULES,
    export_columns=_export_columns(_TEACHER_COLUMNS),
    formats={
        "nip": "18 digit angka (opsional)",
        "joinDate": "YYYY-MM-DD atau DD/MM/YYYY",
        "institutionType": "TK, SD, SMP, atau SMA",
    },
)


# ----- Bills (SPP) -----
_BILL_COLUMNS = [
    _col("nis", "NIS", 15, True, "20240001"),
    _col("billType", "Jenis Tagihan", 20, True, "SPP"),
    _col("period", "Periode", 12, True, "2024-07"),
    _col("amount", "Jumlah Tagihan", 15, True, "350000", type=ColumnType.NUMBER),
    _col("dueDate", "Tanggal Jatuh Tempo", 20, True, "2024-07-10", type=ColumnType.DATE),
    _col("notes", "Catatan", 30),
]

_BILL_RULES = [
    ValidationRules.nis("nis"),
    ValidationRules.required("billType"),
    ValidationRule(
        field="period",
        required=True,
        type=FieldType.STRING,
        pattern=re.compile(r"^\d{4}-(0[1-9]|1[0-2])$"),
    ),
    ValidationRule(
        field="amount",
        required=True,
        type=FieldType.NUMBER,
        validator=lambda value: value > 0 or "Jumlah Tagihan harus lebih dari 0",
    ),
    ValidationRules.date("dueDate", True),
    ValidationRules.required("notes", False),
]

_BILL_EXPORT_COLUMNS = [
    ColumnSpec(key="billNo", header="No Tagihan", width=20),
    ColumnSpec(key="studentName", header="Nama Siswa", width=25),
    ColumnSpec(key="nis", header="NIS", width=15),
    ColumnSpec(key="institutionType", header="Institusi", width=10),
    ColumnSpec(key="grade", header="Kelas", width=8),
    ColumnSpec(key="billType", header="Jenis Tagihan", width=20),
    ColumnSpec(key="period", header="Periode", width=12),
    ColumnSpec(key="amount", header="Jumlah Tagihan", width=15, type=ColumnType.NUMBER),
    ColumnSpec(key="discount", header="Total Diskon", width=15, type=ColumnType.NUMBER),
    ColumnSpec(key="fine", header="Total Denda", width=15, type=ColumnType.NUMBER),
    ColumnSpec(key="paidAmount", header="Jumlah Dibayar", width=15, type=ColumnType.NUMBER),
    ColumnSpec(key="remainingAmount", header="Sisa Tagihan", width=15, type=ColumnType.NUMBER),
    ColumnSpec(key="dueDate", header="Tanggal Jatuh Tempo", width=15, type=ColumnType.DATE),
    ColumnSpec(key="status", header="Status", width=12),
    ColumnSpec(key="notes", header="Catatan", width=30),
]

BILLS = BulkResource(
    name="bills",
    title="Tagihan SPP",
    template_columns=_BILL_COLUMNS,
    rules=_BILL_RULES,
    export_columns=_BILL_EXPORT_COLUMNS,
    formats={
        "period": "YYYY-MM",
        "amount": "Angka tanpa titik/koma ribuan",
        "dueDate": "YYYY-MM-DD atau DD/MM/YYYY",
    },
)


RESOURCES: Dict[str, BulkResource] = {r.name: r for r in (STUDENTS, TEACHERS, BILLS)}
