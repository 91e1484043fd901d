"""Tests for typed INFO/FORMAT value conversion."""

from decimal import Decimal

import pytest

from vcfparser.core.conversion import (
    FieldType,
    SpecialNumber,
    convert_element,
    convert_property,
    is_list_number,
    is_valid_number,
)
from vcfparser.exceptions import VcfFormatError


@pytest.mark.parametrize(
    "field_type,value,expected",
    [
        (FieldType.STRING, "abc", "abc"),
        (FieldType.CHARACTER, "x", "x"),
        (FieldType.INTEGER, "-12", -12),
        (FieldType.FLOAT, "0.333", Decimal("0.333")),
        (FieldType.FLOAT, "5.2E-10", Decimal("5.2E-10")),
        (FieldType.FLAG, "", True),
        (FieldType.FLAG, "1", True),
        (FieldType.FLAG, "TRUE", True),
        (FieldType.FLAG, "0", False),
        (FieldType.FLAG, "False", False),
    ],
)
def test_convert_element(field_type, value, expected):
    assert convert_element(field_type, value) == expected


@pytest.mark.parametrize("field_type", list(FieldType))
def test_missing_value_is_none(field_type):
    assert convert_property(field_type, ".") is None
    assert convert_property(field_type, None) is None


@pytest.mark.parametrize(
    "field_type,value",
    [
        (FieldType.INTEGER, "1.5"),
        (FieldType.INTEGER, "abc"),
        (FieldType.INTEGER, "1_000"),
        (FieldType.INTEGER, " 1"),
        (FieldType.INTEGER, "\u0661"),
        (FieldType.FLOAT, "abc"),
        (FieldType.FLOAT, "1_0.5"),
        (FieldType.FLOAT, "1.5 "),
        (FieldType.CHARACTER, "ab"),
        (FieldType.FLAG, "yes"),
    ],
)
def test_invalid_values_raise(field_type, value):
    with pytest.raises(VcfFormatError):
        convert_element(field_type, value)


def test_list_elements_convert_independently():
    assert convert_property(FieldType.INTEGER, "5,.,10", is_list=True) == [5, None, 10]
    assert convert_property(FieldType.FLOAT, "0.5", is_list=True) == [Decimal("0.5")]


def test_scalar_does_not_split():
    with pytest.raises(VcfFormatError):
        convert_property(FieldType.INTEGER, "1,2")
    assert convert_property(FieldType.STRING, "a,b") == "a,b"


def test_field_type_from_id():
    assert FieldType.from_id("Integer") is FieldType.INTEGER
    with pytest.raises(VcfFormatError, match="Unknown Type"):
        FieldType.from_id("integer")


@pytest.mark.parametrize("number", ["0", "1", "12", ".", "A", "a", "R", "G", "g"])
def test_valid_numbers(number):
    assert is_valid_number(number)


@pytest.mark.parametrize("number", ["", "-1", "B", "1.5", "AA"])
def test_invalid_numbers(number):
    assert not is_valid_number(number)


def test_special_number_lookup():
    assert SpecialNumber.from_id("A") is SpecialNumber.ONE_PER_ALT
    assert SpecialNumber.from_id("r") is SpecialNumber.ONE_PER_ALT_OR_REF
    assert SpecialNumber.from_id(".") is SpecialNumber.UNKNOWN_OR_UNBOUNDED
    assert SpecialNumber.from_id("2") is None


def test_list_numbers():
    assert not is_list_number("0")
    assert not is_list_number("1")
    assert is_list_number("2")
    assert is_list_number("A")
    assert is_list_number(".")
