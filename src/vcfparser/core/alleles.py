"""
Allele Grammar: validation and classification of REF/ALT tokens.

Accepted shapes, for example:

- ``.``                       no variation
- ``ATgggcN``, ``.A``, ``A.``  bases, with optional truncation marker
- ``*``                       position removed by an upstream deletion
- ``<DEL>``, ``C<ctg1>``       symbolic IDs (declared in ALT metadata)
- ``G]17:198982]``, ``]13:123456]T``, ``C[2:321682[``, ``[17:198983[A``
                              breakpoints (the four mate orientations)
"""

import re
from dataclasses import dataclass
from enum import Enum

from ..exceptions import VcfFormatError

__all__ = [
    "ALT_BASE_PATTERN",
    "REF_BASE_PATTERN",
    "PrimaryType",
    "VcfAllele",
    "is_valid_allele",
]

# Bases, symbolic IDs, or both (e.g. C<ctg1>), or the upstream-deletion marker
_SIMPLE = r"(?:(?:[AaCcGgTtNn]+|<[^<>]+>)+|\*)"

# Mate of a breakpoint: contig or <symbolic contig>, optional position
_CONTIG = r"(?:[^\s:\[\]<>,;=]+|<[^<>]+>)"
_MATE = rf"(?:{_CONTIG}(?::\d+)?)"

_BREAKPOINT = (
    r"\.?"
    r"(?:"
    rf"{_SIMPLE}?\[{_MATE}\["  # t[p[
    rf"|{_SIMPLE}?\]{_MATE}\]"  # t]p]
    rf"|\]{_MATE}\]{_SIMPLE}?"  # ]p]t
    rf"|\[{_MATE}\[{_SIMPLE}?"  # [p[t
    r")"
    r"\.?"
)

ALT_BASE_PATTERN = re.compile(rf"\.|\.?{_SIMPLE}|{_SIMPLE}\.?|{_BREAKPOINT}")
REF_BASE_PATTERN = re.compile(r"[AaCcGgTtNn]+")

_NO_DATA = "."


def is_valid_allele(token: str) -> bool:
    return ALT_BASE_PATTERN.fullmatch(token) is not None


class PrimaryType(str, Enum):
    """Shape of an allele token."""

    SINGLE_BASE = "SingleBase"
    MULTI_BASE = "MultiBase"
    SYMBOLIC = "Symbolic"
    BREAKPOINT = "Breakpoint"
    DELETED = "Deleted"
    NO_VARIATION = "NoVariation"


@dataclass(frozen=True)
class VcfAllele:
    """
    A single validated REF or ALT token.

    Two alleles are equal when their tokens are equal (case-sensitive);
    use :meth:`equals_ignore_case` to compare bases case-insensitively.
    """

    token: str

    def __post_init__(self) -> None:
        if not isinstance(self.token, str) or not is_valid_allele(self.token):
            raise VcfFormatError(f"{self.token!r} does not look like an allele")

    def __str__(self) -> str:
        return self.token

    def is_breakpoint(self) -> bool:
        return "[" in self.token or "]" in self.token

    def is_symbolic(self) -> bool:
        return "<" in self.token

    def is_deleted(self) -> bool:
        """Whether this is ``*``, a position removed by an upstream deletion."""
        return self.token == "*"

    def is_simple(self) -> bool:
        return not (self.is_breakpoint() or self.is_symbolic() or self.is_deleted())

    def is_ambiguous(self) -> bool:
        """Whether any base (outside symbolic names) is N."""
        return self.contains_base("N", "n")

    def length(self) -> int:
        """
        Number of bases in this allele, not counting truncation dots.

        Raises:
            VcfFormatError: If the allele is symbolic, a breakpoint, or ``*``.
        """
        if not self.is_simple():
            raise VcfFormatError(
                f"Length could not be determined because the allele '{self.token}' is "
                "symbolic, deleted upstream, or a breakpoint"
            )
        return len(self.token.replace(_NO_DATA, ""))

    @property
    def primary_type(self) -> PrimaryType:
        if self.is_breakpoint():
            return PrimaryType.BREAKPOINT
        if self.is_deleted():
            return PrimaryType.DELETED
        if self.is_symbolic():
            return PrimaryType.SYMBOLIC
        length = self.length()
        if length == 0:
            return PrimaryType.NO_VARIATION
        if length == 1:
            return PrimaryType.SINGLE_BASE
        return PrimaryType.MULTI_BASE

    def with_lowercase_bases(self) -> str:
        """Return the token with bases lowercased; text inside ``<...>`` is left alone."""
        if not self.is_symbolic():
            return self.token.lower()
        chars = []
        inside = False
        for char in self.token:
            if char == "<":
                inside = True
            elif char == ">":
                inside = False
            chars.append(char if inside else char.lower())
        return "".join(chars)

    def equals_ignore_case(self, other: "VcfAllele | None") -> bool:
        return other is not None and self.with_lowercase_bases() == other.with_lowercase_bases()

    def contains_base(self, *bases: str) -> bool:
        """Whether any of ``bases`` (case-sensitive) occurs outside symbolic names."""
        inside = False
        for char in self.token:
            if char == "<":
                inside = True
            elif char == ">":
                inside = False
            elif not inside and char in bases:
                return True
        return False
