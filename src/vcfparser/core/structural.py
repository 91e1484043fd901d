"""
Structural-Variant Code Grammar: colon-delimited ALT IDs.

    >>> alt = AltStructuralVariant("INS:ME:LINE")
    >>> alt.components
    ['INS', 'ME', 'LINE']
    >>> alt.get_reserved_component(1)
    <ReservedStructuralVariantCode.MOBILE_ELEMENT: 'ME'>
    >>> alt.get_reserved_component(2) is None
    True

Codes are case-sensitive. The level-0 code must be reserved; non-reserved
codes after it are free-text subtypes.
"""

from enum import Enum

from ..exceptions import VcfFormatError

__all__ = ["AltStructuralVariant", "ReservedStructuralVariantCode"]


class ReservedStructuralVariantCode(Enum):
    """A reserved structural-variant code with its level and allowed parents."""

    DELETION = "DEL"
    INSERTION = "INS"
    DUPLICATION = "DUP"
    INVERSION = "INV"
    CNV = "CNV"
    TANDEM = "TANDEM"
    MOBILE_ELEMENT = "ME"

    @property
    def id(self) -> str:
        return self.value

    @property
    def level(self) -> int:
        """Nesting level in the VCF specification; 0 is the top."""
        return 1 if self.parent_codes else 0

    @property
    def parent_codes(self) -> tuple["ReservedStructuralVariantCode", ...]:
        if self is ReservedStructuralVariantCode.TANDEM:
            return (ReservedStructuralVariantCode.DUPLICATION,)
        if self is ReservedStructuralVariantCode.MOBILE_ELEMENT:
            return (ReservedStructuralVariantCode.INSERTION, ReservedStructuralVariantCode.DELETION)
        return ()

    @classmethod
    def from_id(cls, code: str) -> "ReservedStructuralVariantCode | None":
        for reserved in cls:
            if reserved.value == code:
                return reserved
        return None


class AltStructuralVariant:
    """A validated structural-variant code such as ``DEL`` or ``INS:ME:LINE``."""

    def __init__(self, code: str) -> None:
        if not code:
            raise VcfFormatError("Structural variant code must not be empty")

        self._components: list[str] = []
        for level, component in enumerate(code.split(":")):
            if not component:
                raise VcfFormatError(f"Structural variant code {code} has an empty component")
            reserved = ReservedStructuralVariantCode.from_id(component)

            if reserved is None and level == 0:
                raise VcfFormatError(
                    f"Top-level structural variant code was {component} "
                    "but must be a top-level reserved code (e.g. DEL or CNV)"
                )

            if reserved is not None and level != reserved.level:
                raise VcfFormatError(
                    f"Structural variant code {component} is a reserved code of level "
                    f"{reserved.level}, not {level}"
                )

            if reserved is not None and level > 0:
                parent = ReservedStructuralVariantCode.from_id(self._components[level - 1])
                if parent is not None and parent not in reserved.parent_codes:
                    raise VcfFormatError(
                        f"Structural variant code {component} was not a child of reserved code {parent.id}"
                    )

            self._components.append(component)

    @property
    def components(self) -> list[str]:
        """Codes from level 0 to level n, e.g. ``['INS', 'ME', 'LINE']``."""
        return list(self._components)

    def get_component(self, level: int) -> str:
        return self._components[level]

    def get_reserved_component(self, level: int) -> ReservedStructuralVariantCode | None:
        """The reserved code at ``level``, or None if that component is free text."""
        return ReservedStructuralVariantCode.from_id(self._components[level])

    def __str__(self) -> str:
        return ":".join(self._components)

    def __repr__(self) -> str:
        return f"AltStructuralVariant({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, AltStructuralVariant) and self._components == other._components

    def __hash__(self) -> int:
        return hash(tuple(self._components))
