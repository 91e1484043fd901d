"""Tests for structural-variant ALT codes."""

import pytest

from vcfparser.core.structural import AltStructuralVariant, ReservedStructuralVariantCode
from vcfparser.exceptions import VcfFormatError


def test_nested_mobile_element():
    alt = AltStructuralVariant("INS:ME:LINE")
    assert alt.components == ["INS", "ME", "LINE"]
    assert alt.get_reserved_component(0) is ReservedStructuralVariantCode.INSERTION
    assert alt.get_reserved_component(1) is ReservedStructuralVariantCode.MOBILE_ELEMENT
    assert alt.get_reserved_component(2) is None
    assert alt.get_component(2) == "LINE"
    assert str(alt) == "INS:ME:LINE"


@pytest.mark.parametrize("code", ["DEL", "CNV", "INV", "DUP:TANDEM", "DEL:ME:ALU", "DEL:anything:else"])
def test_valid_codes(code):
    assert str(AltStructuralVariant(code)) == code


@pytest.mark.parametrize(
    "code,message",
    [
        ("ME:INS", "level 1, not 0"),
        ("TANDEM", "level 1, not 0"),
        ("FOO", "top-level"),
        ("del", "top-level"),
        ("DEL:TANDEM", "not a child"),
        ("DUP:ME", "not a child"),
        ("DEL:DUP", "level 0, not 1"),
        ("", "must not be empty"),
        ("DEL:", "empty component"),
        ("DEL::ALU", "empty component"),
    ],
)
def test_invalid_codes(code, message):
    with pytest.raises(VcfFormatError, match=message):
        AltStructuralVariant(code)


def test_reserved_code_levels():
    assert ReservedStructuralVariantCode.DELETION.level == 0
    assert ReservedStructuralVariantCode.TANDEM.level == 1
    assert ReservedStructuralVariantCode.TANDEM.parent_codes == (ReservedStructuralVariantCode.DUPLICATION,)
    assert ReservedStructuralVariantCode.from_id("CNV") is ReservedStructuralVariantCode.CNV
    assert ReservedStructuralVariantCode.from_id("XYZ") is None


def test_components_are_a_copy():
    alt = AltStructuralVariant("DEL:ME:ALU")
    alt.components.append("X")
    assert alt.components == ["DEL", "ME", "ALU"]


def test_equality():
    assert AltStructuralVariant("DEL") == AltStructuralVariant("DEL")
    assert AltStructuralVariant("DEL") != AltStructuralVariant("INS")
    assert len({AltStructuralVariant("CNV"), AltStructuralVariant("CNV")}) == 1
