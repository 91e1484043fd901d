"""
Record Model: one VCF data line and its per-sample values.
"""

import logging
import re
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..core.alleles import REF_BASE_PATTERN, is_valid_allele
from ..exceptions import VcfFormatError
from .reserved import ReservedFormatProperty, ReservedInfoProperty

__all__ = ["PASS", "VcfPosition", "VcfSample", "check_sample_entry", "describe_validation_error"]

logger = logging.getLogger(__name__)

PASS = "PASS"
NO_FILTERS_APPLIED = "."

_WHITESPACE = re.compile(r"\s")
_FORMAT_KEY_PATTERN = re.compile(r"[A-Za-z0-9_.]+")


def _check_info(info: dict[str, list[str]]) -> None:
    for key, values in info.items():
        if not key or _WHITESPACE.search(key) or any(_WHITESPACE.search(value) for value in values):
            raise VcfFormatError(f'INFO column entry "{key}={",".join(values)}" contains whitespace')
        if ";" in key or "=" in key:
            raise VcfFormatError(f'INFO key "{key}" contains a semicolon or equals sign')
        for value in values:
            if ";" in value:
                raise VcfFormatError(f'INFO value "{value}" of {key} contains a semicolon')


def describe_validation_error(error: ValidationError) -> str:
    """One-line summary of a pydantic ValidationError, e.g. ``position: Input should be a valid integer``."""
    parts = []
    for detail in error.errors():
        location = ".".join(str(loc) for loc in detail["loc"])
        parts.append(f"{location}: {detail['msg']}" if location else detail["msg"])
    return "; ".join(parts)


def check_sample_entry(key: str, value: str) -> None:
    """
    Raise if a FORMAT key or sample value would break the sample column.

    Raises:
        VcfFormatError: On a newline, a tab or a colon.
    """
    if "\n" in key or "\n" in value:
        raise VcfFormatError(f"Sample property [[[{key}={value}]]] contains a newline")
    if "\t" in key or "\t" in value or ":" in key or ":" in value:
        raise VcfFormatError(f"Sample property [[[{key}={value}]]] contains a tab or colon")


class VcfPosition(BaseModel):
    """
    The eight mandatory columns of a data line plus its FORMAT keys.

    ``filters`` is empty when the record passed all filters; ``["."]`` means
    no filters were applied. ``info`` maps each key to its comma-separated
    values; a flag such as ``DB`` is stored as ``{"DB": [""]}``.

    Fields are validated on construction and on assignment. Lists and the
    INFO mapping may also be edited in place; the writer validates the whole
    record again before writing it.

    A wrongly typed field (``position="abc"``) raises pydantic's
    ``ValidationError`` from the constructor; grammar violations raise
    :class:`VcfFormatError`. :meth:`create` reports both as
    :class:`VcfFormatError`.

    ``quality`` is a Decimal, so QUAL is written back in Decimal's canonical
    form: ``1e3`` becomes ``1E+3``.
    """

    model_config = ConfigDict(validate_assignment=True)

    chromosome: str
    position: int
    ids: list[str] = Field(default_factory=list)
    ref: str
    alt: list[str] = Field(default_factory=list)
    quality: Decimal | None = None
    filters: list[str] = Field(default_factory=list)
    info: dict[str, list[str]] = Field(default_factory=dict)
    format: list[str] = Field(default_factory=list)

    @field_validator("chromosome")
    @classmethod
    def validate_chromosome(cls, v: str) -> str:
        if not v or _WHITESPACE.search(v) or ":" in v:
            raise VcfFormatError(f'CHROM column "{v}" is empty or contains whitespace or colons')
        return v

    @field_validator("ids")
    @classmethod
    def validate_ids(cls, v: list[str]) -> list[str]:
        for id in v:
            if not id or _WHITESPACE.search(id) or ";" in id:
                raise VcfFormatError(f'ID "{id}" is empty or contains whitespace or semicolons')
        return v

    @field_validator("ref")
    @classmethod
    def validate_ref(cls, v: str) -> str:
        if not REF_BASE_PATTERN.fullmatch(v):
            raise VcfFormatError(f"Invalid reference base '{v}' (must match {REF_BASE_PATTERN.pattern})")
        return v

    @field_validator("alt")
    @classmethod
    def validate_alt(cls, v: list[str]) -> list[str]:
        for base in v:
            if not is_valid_allele(base):
                raise VcfFormatError(f"Invalid alternate base '{base}'")
        return v

    @field_validator("filters")
    @classmethod
    def validate_filters(cls, v: list[str]) -> list[str]:
        for f in v:
            if not f or _WHITESPACE.search(f) or ";" in f:
                raise VcfFormatError(f'FILTER column entry "{f}" is empty or contains whitespace or semicolons')
            if f == "0":
                raise VcfFormatError("FILTER column entry should not be 0")
        if PASS in v:
            if len(v) > 1:
                raise VcfFormatError("FILTER contains PASS along with other filters")
            logger.warning("FILTER is PASS, but should have been given as an empty list; converting")
            return []
        if NO_FILTERS_APPLIED in v and len(v) > 1:
            # "." only ever stands alone
            return [f for f in v if f != NO_FILTERS_APPLIED]
        return v

    @field_validator("info")
    @classmethod
    def validate_info(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        _check_info(v)
        return v

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: list[str]) -> list[str]:
        for key in v:
            if not _FORMAT_KEY_PATTERN.fullmatch(key):
                raise VcfFormatError(f'FORMAT key "{key}" is not alphanumeric')
        return v

    @classmethod
    def create(cls, **fields: Any) -> "VcfPosition":
        """
        Build a record, reporting any invalid field as :class:`VcfFormatError`.

        Raises:
            VcfFormatError: If a field has the wrong type or breaks the VCF grammar.
        """
        try:
            return cls(**fields)
        except ValidationError as e:
            raise VcfFormatError(describe_validation_error(e)) from e

    def revalidate(self) -> "VcfPosition":
        """
        A validated copy of this record, for use after in-place edits of its lists or INFO.

        Raises:
            VcfFormatError: If the edited record breaks the VCF grammar.
        """
        return self.create(**self.model_dump())

    @property
    def alleles(self) -> list[str]:
        """``[ref] + alt``, the list genotype indices refer to."""
        return [self.ref, *self.alt]

    @property
    def locus(self) -> tuple[str, int]:
        return self.chromosome, self.position

    def get_allele(self, index: int) -> str:
        """REF for index 0, else the (index - 1)th ALT."""
        if index < 0:
            raise IndexError(f"Allele index {index} is negative")
        return self.alleles[index]

    def is_passing_all_filters(self) -> bool:
        return not self.filters or self.filters == [NO_FILTERS_APPLIED]

    # INFO

    def has_info(self, key: str | ReservedInfoProperty) -> bool:
        if isinstance(key, ReservedInfoProperty):
            key = key.id
        return key in self.info

    def get_info(self, key: str) -> list[str] | None:
        """Raw values of ``key``, or None if the key is absent."""
        return self.info.get(key)

    def get_info_converted(self, key: ReservedInfoProperty) -> Any:
        """
        Typed value of a reserved INFO key.

        Returns:
            None if absent; otherwise an int, Decimal, bool, str, or a list of
            those when the key holds several values.
        """
        values = self.info.get(key.id)
        if not values:
            return None
        return key.convert(",".join(values))

    def add_info(self, key: str, *values: str) -> None:
        """Append values for ``key``; with no values the key is stored as a flag."""
        self.info.setdefault(key, []).extend(values or [""])
        _check_info(self.info)

    @property
    def info_keys(self) -> list[str]:
        return list(self.info)


class VcfSample(dict):
    """
    FORMAT key to raw value for one sample of one record, in FORMAT order.

        >>> sample = VcfSample(["GT", "DP"], ["0|1", "12"])
        >>> sample.get_converted(ReservedFormatProperty.DEPTH)
        12
    """

    def __init__(self, keys: list[str] | None = None, values: list[str] | None = None) -> None:
        super().__init__()
        keys = keys or []
        values = values or []
        if len(keys) != len(values):
            raise VcfFormatError(
                f"Number of sample values ({len(values)}) does not match number of FORMAT keys ({len(keys)})"
            )
        for key, value in zip(keys, values):
            self[key] = value

    def __setitem__(self, key: str, value: str) -> None:
        check_sample_entry(key, value)
        super().__setitem__(key, value)

    def get_converted(self, key: ReservedFormatProperty) -> Any:
        """Typed value of a reserved FORMAT key, or None if absent."""
        return key.convert(self.get(key.id))

    def contains_reserved(self, key: ReservedFormatProperty) -> bool:
        return key.id in self
