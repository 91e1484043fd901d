"""
Genotype Grammar: diploid and haploid genotypes.

A genotype token is ``X/Y`` (unphased), ``X|Y`` (phased) or a bare ``X``
(haploid, e.g. on chrM). Each side is a literal allele (``A/TT``), an index
into ``[REF] + ALT`` (``0/1``) or ``.`` for a no-call.

Homozygous, no-call and haploid genotypes are always reported as phased:

    >>> VcfGenotype.from_string("A").phased_token
    'A|A'
"""

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..exceptions import VcfFormatError
from .alleles import VcfAllele

if TYPE_CHECKING:
    from ..models.record import VcfPosition, VcfSample

__all__ = ["VcfGenotype"]

NO_DATA = "."
PHASED_DELIMITER = "|"
UNPHASED_DELIMITER = "/"

_DELIMITER_PATTERN = re.compile(r"[|/]")
_INDEX_PATTERN = re.compile(r"\d+")
_GENOTYPE_KEY = "GT"


def _allele_from_index(position: "VcfPosition", index_text: str) -> VcfAllele | None:
    if index_text == NO_DATA:
        return None
    if not _INDEX_PATTERN.fullmatch(index_text):
        raise VcfFormatError(f"Allele index {index_text} is not a number")
    index = int(index_text)
    if index > len(position.alt):
        raise VcfFormatError(
            f"Allele index {index_text} is out of range: It should be between 0 "
            f"and {len(position.alt)}, inclusive"
        )
    return VcfAllele(position.get_allele(index))


def _allele_index(position: "VcfPosition", allele: VcfAllele) -> str:
    if position.ref == allele.token:
        return "0"
    for i, alt in enumerate(position.alt):
        if alt == allele.token:
            return str(i + 1)
    raise VcfFormatError(f"Allele {allele} does not exist at {position.chromosome}:{position.position}")


@dataclass(frozen=True)
class VcfGenotype:
    """
    An immutable pair of alleles; either may be None (no-call).

    Build instances with :meth:`parse`, :meth:`from_string` or
    :meth:`from_number_string` rather than the constructor so the phasing
    rule is applied. ``VcfGenotype(a, a, False)`` keeps ``is_phased=False``.
    """

    allele1: VcfAllele | None
    allele2: VcfAllele | None
    is_phased: bool

    @classmethod
    def parse(cls, genotype: str, position: "VcfPosition | None" = None) -> "VcfGenotype":
        """
        Parse a genotype of literal alleles or of REF/ALT indices.

        Args:
            genotype: e.g. ``"0/1"``, ``"A|G"``, ``"1"``, ``"./."``.
            position: Record whose alleles the indices refer to. Required
                when the genotype contains indices.

        Raises:
            VcfFormatError: On a malformed token or an unresolved index.
        """
        parts = _DELIMITER_PATTERN.split(genotype)
        if len(parts) > 2 or any(not part for part in parts):
            raise VcfFormatError(f"Genotype {genotype} is invalid")

        alleles = [cls._resolve(part, genotype, position) for part in parts]
        if len(alleles) == 1:
            # haploid: phasing is resolved
            return cls(alleles[0], alleles[0], True)
        allele1, allele2 = alleles
        is_phased = PHASED_DELIMITER in genotype or allele1 == allele2
        return cls(allele1, allele2, is_phased)

    @staticmethod
    def _resolve(part: str, genotype: str, position: "VcfPosition | None") -> VcfAllele | None:
        if part == NO_DATA:
            return None
        if _INDEX_PATTERN.fullmatch(part):
            if position is None:
                raise VcfFormatError(f"Genotype {genotype} uses allele indices but no record was given")
            return _allele_from_index(position, part)
        try:
            return VcfAllele(part)
        except VcfFormatError as e:
            raise VcfFormatError(f"Genotype {genotype} is invalid") from e

    @classmethod
    def from_string(cls, genotype: str) -> "VcfGenotype":
        """Parse a genotype of literal alleles, e.g. ``A/TT``."""
        return cls.parse(genotype)

    @classmethod
    def from_number_string(cls, position: "VcfPosition", genotype: str) -> "VcfGenotype":
        """Parse a genotype of indices into ``[position.ref] + position.alt``, e.g. ``0|2``."""
        for part in _DELIMITER_PATTERN.split(genotype):
            if part != NO_DATA and not _INDEX_PATTERN.fullmatch(part):
                raise VcfFormatError(f"Genotype {genotype} is invalid")
        return cls.parse(genotype, position)

    @classmethod
    def from_sample(cls, position: "VcfPosition", sample: "VcfSample") -> "VcfGenotype | None":
        """Genotype from the sample's ``GT`` value, or None if it has none."""
        genotype = sample.get(_GENOTYPE_KEY)
        if genotype is None:
            return None
        return cls.from_number_string(position, genotype)

    def make_gt(self, position: "VcfPosition") -> str:
        """
        Encode as REF/ALT indices of ``position``, e.g. ``0/1``.

        Raises:
            VcfFormatError: If an allele is neither the REF nor one of the ALTs.
        """
        first = NO_DATA if self.allele1 is None else _allele_index(position, self.allele1)
        second = NO_DATA if self.allele2 is None else _allele_index(position, self.allele2)
        return first + self.delimiter + second

    @property
    def delimiter(self) -> str:
        return PHASED_DELIMITER if self.is_phased else UNPHASED_DELIMITER

    def is_homozygous(self) -> bool:
        return self.allele1 == self.allele2

    def is_no_call(self) -> bool:
        return self.allele1 is None and self.allele2 is None

    @property
    def allele_set(self) -> set[VcfAllele]:
        return {a for a in (self.allele1, self.allele2) if a is not None}

    @property
    def phased_token(self) -> str:
        """The genotype as literal alleles, e.g. ``A|ATGC`` or ``A/C``."""
        first = NO_DATA if self.allele1 is None else self.allele1.token
        second = NO_DATA if self.allele2 is None else self.allele2.token
        return first + self.delimiter + second

    def __str__(self) -> str:
        return self.phased_token
