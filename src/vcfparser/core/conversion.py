"""
Typed Property Conversion: INFO and FORMAT values from strings to Python values.

A field's declared ``Type`` maps to a Python type:

- ``Integer``   -> int
- ``Float``     -> decimal.Decimal (arbitrary precision)
- ``Character`` -> str of length 1
- ``String``    -> str
- ``Flag``      -> bool

``.`` (or None) means the value is absent and converts to None, including
when it is one element of a list.
"""

import re
from decimal import Decimal
from enum import Enum
from typing import Any

from ..exceptions import VcfFormatError

__all__ = [
    "FieldType",
    "SpecialNumber",
    "convert_element",
    "convert_property",
    "is_list_number",
    "is_valid_number",
]

MISSING_VALUE = "."

_NUMBER_PATTERN = re.compile(r"[0-9]+|[.AaGgRr]")

# ASCII digits only, without underscores or padding
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
FLOAT_PATTERN = re.compile(r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:e[+-]?[0-9]+)?|inf(?:inity)?|nan)", re.IGNORECASE)


class FieldType(str, Enum):
    """The ``Type`` attribute of INFO and FORMAT metadata."""

    INTEGER = "Integer"
    FLOAT = "Float"
    CHARACTER = "Character"
    STRING = "String"
    FLAG = "Flag"

    @classmethod
    def from_id(cls, value: str) -> "FieldType":
        for field_type in cls:
            if field_type.value == value:
                return field_type
        raise VcfFormatError(f"Unknown Type '{value}'")


class SpecialNumber(str, Enum):
    """A reserved value for the ``Number`` attribute of INFO and FORMAT metadata."""

    ONE_PER_ALT = "A"
    ONE_PER_ALT_OR_REF = "R"
    ONE_PER_GENOTYPE = "G"
    UNKNOWN_OR_UNBOUNDED = "."

    @classmethod
    def from_id(cls, value: str) -> "SpecialNumber | None":
        """Return the reserved marker, or None if ``value`` is a literal count."""
        for special in cls:
            if special.value == value.upper():
                return special
        return None


def is_valid_number(number: str) -> bool:
    """Whether ``number`` is a non-negative count or a reserved marker."""
    return _NUMBER_PATTERN.fullmatch(number) is not None


def is_list_number(number: str) -> bool:
    """Whether values declared with this ``Number`` may hold several comma-separated elements."""
    return number not in ("0", "1")


def _convert_flag(value: str) -> bool:
    value = value.strip()
    if not value:
        return True
    if value == "0" or value.lower() == "false":
        return False
    if value == "1" or value.lower() == "true":
        return True
    raise VcfFormatError(f"Invalid boolean value: '{value}'")


def convert_element(field_type: FieldType, value: str | None) -> Any:
    """
    Convert a single (non-list) value.

    Raises:
        VcfFormatError: If ``value`` does not parse as ``field_type``.
    """
    if value is None or value == MISSING_VALUE:
        return None
    if field_type == FieldType.STRING:
        return value
    if field_type == FieldType.FLAG:
        return _convert_flag(value)
    if field_type == FieldType.CHARACTER:
        if len(value) != 1:
            raise VcfFormatError(f"Expected a single character; got {value}")
        return value
    if field_type == FieldType.INTEGER:
        if not INTEGER_PATTERN.fullmatch(value):
            raise VcfFormatError(f"Expected integer; got {value}")
        return int(value)
    if field_type == FieldType.FLOAT:
        if not FLOAT_PATTERN.fullmatch(value):
            raise VcfFormatError(f"Expected float; got {value}")
        return Decimal(value)
    raise VcfFormatError(f"Type {field_type} unrecognized")


def convert_property(field_type: FieldType, value: str | None, is_list: bool = False) -> Any:
    """
    Convert a raw INFO or FORMAT value to its typed form.

    Args:
        field_type: Declared or reserved type of the field.
        value: Raw text, e.g. ``"5,10"``; None or ``"."`` mean absent.
        is_list: If True, split on commas and convert each element.

    Returns:
        The converted scalar, a list of converted elements, or None.

    Example:
        >>> convert_property(FieldType.INTEGER, "5,.,10", is_list=True)
        [5, None, 10]
    """
    if value is None or value == MISSING_VALUE:
        return None
    if not is_list:
        return convert_element(field_type, value)
    return [convert_element(field_type, part) for part in value.split(",")]
