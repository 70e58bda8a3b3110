"""Ready-made validation rules shared by the import flows."""

import re

from app.core.enums import FieldType, InstitutionType

from .schemas import ValidationRule

GENDER_VALUES = ("MALE", "FEMALE", "L", "P", "Laki-laki", "Perempuan")
NIS_PATTERN = re.compile(r"^[0-9]+$")


class ValidationRules:
    @staticmethod
    def required(field: str, required: bool = True) -> ValidationRule:
        return ValidationRule(field=field, required=required, type=FieldType.STRING)

    @staticmethod
    def email(field: str, required: bool = False) -> ValidationRule:
        return ValidationRule(field=field, required=required, type=FieldType.EMAIL)

    @staticmethod
    def phone(field: str, required: bool = False) -> ValidationRule:
        return ValidationRule(field=field, required=required, type=FieldType.PHONE)

    @staticmethod
    def date(field: str, required: bool = False) -> ValidationRule:
        return ValidationRule(field=field, required=required, type=FieldType.DATE)

    @staticmethod
    def number(field: str, required: bool = False) -> ValidationRule:
        return ValidationRule(field=field, required=required, type=FieldType.NUMBER)

    @staticmethod
    def nis(field: str) -> ValidationRule:
        """Student number: 8-20 digits."""
        return ValidationRule(
            field=field,
            required=True,
            type=FieldType.STRING,
            min_length=8,
            max_length=20,
            pattern=NIS_PATTERN,
        )

    @staticmethod
    def gender(field: str) -> ValidationRule:
        return ValidationRule(
            field=field,
            required=True,
            type=FieldType.STRING,
            validator=lambda value: value in GENDER_VALUES or "Jenis kelamin harus L/P atau MALE/FEMALE",
        )

    @staticmethod
    def institution_type(field: str) -> ValidationRule:
        allowed = {t.value for t in InstitutionType}
        return ValidationRule(
            field=field,
            required=True,
            type=FieldType.STRING,
            validator=lambda value: value in allowed or "Jenis institusi harus TK, SD, SMP, atau SMA",
        )
