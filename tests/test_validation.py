"""Unit tests for per-cell validation and coercion."""

import re
from datetime import date, datetime

import pytest

from app.bulk_operations.rules import ValidationRules
from app.bulk_operations.schemas import ValidationRule
from app.bulk_operations.validation import validate_cell
from app.core.enums import FieldType


@pytest.mark.parametrize("empty", [None, ""])
def test_required_empty_value_is_rejected(empty) -> None:
    result = validate_cell(empty, ValidationRules.required("fullName"), 2)
    assert not result.valid
    assert result.error == "fullName wajib diisi"


@pytest.mark.parametrize("rule", [
    ValidationRules.required("nickname", False),
    ValidationRules.email("email"),
    ValidationRules.phone("phone"),
    ValidationRules.date("graduationDate"),
    ValidationRules.number("grade"),
])
def test_optional_empty_value_is_null(rule) -> None:
    result = validate_cell("", rule, 2)
    assert result.valid
    assert result.value is None


@pytest.mark.parametrize("raw, cleaned", [
    ("081234567890", "081234567890"),
    ("0812 3456 7890", "081234567890"),
    ("+62 812-3456-7890", "+6281234567890"),
    ("(021) 555-0123", "0215550123"),
    (81234567890, "81234567890"),
    ("+" + "6" * 15, "+" + "6" * 15),
    ("+62 (812) 3456+7890", "+6281234567890"),
])
def test_phone_is_stripped_to_digits(raw, cleaned) -> None:
    result = validate_cell(raw, ValidationRules.phone("phone"), 2)
    assert result.valid
    assert result.value == cleaned


@pytest.mark.parametrize("raw", ["12345", "0812-345", "1234567890123456", "+62 812 3456 7890 123", "+628123456"])
def test_phone_outside_length_bounds_is_rejected(raw) -> None:
    result = validate_cell(raw, ValidationRules.phone("phone"), 2)
    assert not result.valid
    assert result.error == "phone format nomor telepon tidak valid"


def test_email_is_lowercased_and_trimmed() -> None:
    result = validate_cell("  Foo@Bar.COM ", ValidationRules.email("email"), 2)
    assert result.valid
    assert result.value == "foo@bar.com"


@pytest.mark.parametrize("raw", ["not-an-email", "a@b", "a b@c.id", "@x.com"])
def test_invalid_email_is_rejected(raw) -> None:
    result = validate_cell(raw, ValidationRules.email("email"), 2)
    assert not result.valid
    assert result.error == "email format email tidak valid"


def test_string_is_trimmed() -> None:
    result = validate_cell("  Ahmad  ", ValidationRules.required("fullName"), 2)
    assert result.value == "Ahmad"


def test_string_length_bounds() -> None:
    rule = ValidationRule(field="nama", type=FieldType.STRING, min_length=3, max_length=5)
    assert validate_cell("ab", rule, 2).error == "nama minimal 3 karakter"
    assert validate_cell("abcdef", rule, 2).error == "nama maksimal 5 karakter"
    assert validate_cell("abcd", rule, 2).valid


def test_nis_accepts_spreadsheet_number() -> None:
    result = validate_cell(20240001.0, ValidationRules.nis("nis"), 2)
    assert result.valid
    assert result.value == "20240001"


def test_nis_rejects_letters_and_short_values() -> None:
    rule = ValidationRules.nis("nis")
    assert validate_cell("2024000A", rule, 2).error == "nis format tidak sesuai"
    assert validate_cell("2024", rule, 2).error == "nis minimal 8 karakter"


@pytest.mark.parametrize("raw, expected", [("12", 12), (" 12.5 ", 12.5), (7, 7), (3.25, 3.25), ("-4", -4)])
def test_number_coercion(raw, expected) -> None:
    result = validate_cell(raw, ValidationRules.number("amount"), 2)
    assert result.valid
    assert result.value == expected


@pytest.mark.parametrize("raw", ["abc", "12a", "nan", "1_000"])
def test_non_numeric_is_rejected(raw) -> None:
    result = validate_cell(raw, ValidationRules.number("amount"), 2)
    assert not result.valid
    assert result.error == "amount harus berupa angka"


def test_date_values_pass_through() -> None:
    rule = ValidationRules.date("birthDate", True)
    assert validate_cell(date(2010, 5, 15), rule, 2).value == date(2010, 5, 15)
    assert validate_cell(datetime(2010, 5, 15), rule, 2).value == datetime(2010, 5, 15)


@pytest.mark.parametrize("raw, expected", [
    ("2010-05-15", date(2010, 5, 15)),
    ("15/05/2010", date(2010, 5, 15)),
    ("15 May 2010", date(2010, 5, 15)),
    ("2024-07-10", date(2024, 7, 10)),
    ("2024/07/10", date(2024, 7, 10)),
    ("10/07/2024", date(2024, 7, 10)),
    ("2024-01-02 08:30", date(2024, 1, 2)),
])
def test_date_text_is_parsed(raw, expected) -> None:
    result = validate_cell(raw, ValidationRules.date("birthDate", True), 2)
    assert result.valid
    assert result.value.date() == expected


def test_unparseable_date_is_rejected() -> None:
    result = validate_cell("bukan tanggal", ValidationRules.date("birthDate", True), 2)
    assert not result.valid
    assert result.error == "birthDate format tanggal tidak valid"


def test_pattern_is_checked_after_coercion() -> None:
    rule = ValidationRule(field="phone", type=FieldType.PHONE, pattern=re.compile(r"^\+62"))
    assert validate_cell("+62 812 3456 7890", rule, 2).valid
    assert validate_cell("0812 3456 7890", rule, 2).error == "phone format tidak sesuai"


def test_pattern_accepts_string_source() -> None:
    rule = ValidationRule(field="kode", type=FieldType.STRING, pattern=r"^[A-Z]{3}$")
    assert validate_cell("ABC", rule, 2).valid
    assert not validate_cell("abc", rule, 2).valid


def test_custom_validator_message() -> None:
    rule = ValidationRules.gender("gender")
    assert validate_cell("L", rule, 2).valid
    assert validate_cell("X", rule, 2).error == "Jenis kelamin harus L/P atau MALE/FEMALE"


def test_institution_type_validator() -> None:
    rule = ValidationRules.institution_type("institutionType")
    assert validate_cell(" SMP ", rule, 2).value == "SMP"
    assert validate_cell("SMK", rule, 2).error == "Jenis institusi harus TK, SD, SMP, atau SMA"


def test_custom_validator_false_gives_generic_error() -> None:
    rule = ValidationRule(field="kelas", type=FieldType.NUMBER, validator=lambda v: v <= 12)
    assert validate_cell("7", rule, 2).valid
    assert validate_cell("13", rule, 2).error == "kelas tidak valid"


def test_custom_validator_exception_is_reported_not_raised() -> None:
    def broken(value):
        raise RuntimeError("boom")

    result = validate_cell("x", ValidationRule(field="kolom", validator=broken), 5)
    assert not result.valid
    assert result.error == "kolom tidak valid"


def test_rule_without_type_keeps_raw_value() -> None:
    result = validate_cell(42, ValidationRule(field="raw"), 2)
    assert result.valid
    assert result.value == 42
