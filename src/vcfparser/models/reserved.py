"""
INFO and FORMAT keys reserved by the VCF specification.

Each member carries its id, description, type, whether it holds a list and
its ``Number``, so values can be converted without any header declaration:

    >>> ReservedInfoProperty.ALLELE_COUNT.id, ReservedInfoProperty.ALLELE_COUNT.is_list
    ('AC', True)
"""

from enum import Enum
from typing import Any

from ..core.conversion import FieldType, convert_property

__all__ = ["ReservedFormatProperty", "ReservedInfoProperty"]

_I = FieldType.INTEGER
_F = FieldType.FLOAT
_S = FieldType.STRING
_B = FieldType.FLAG


class _ReservedProperty(Enum):
    def __init__(self, id: str, description: str, field_type: FieldType, is_list: bool, number: str) -> None:
        self.id = id
        self.description = description
        self.field_type = field_type
        self.is_list = is_list
        self.number = number

    @classmethod
    def from_id(cls, id: str):
        for member in cls:
            if member.id == id:
                return member
        return None

    def convert(self, value: str | None) -> Any:
        """Convert a raw value according to this key's type and cardinality."""
        return convert_property(self.field_type, value, self.is_list)


class ReservedInfoProperty(_ReservedProperty):
    """An INFO key reserved by the VCF specification."""

    # standard
    ANCESTRAL_ALLELE = ("AA", "Ancestral allele", _S, False, "1")
    ALLELE_COUNT = ("AC", "Allele count in genotypes, for each ALT allele, in the same order as listed", _I, True, "A")
    ALLELE_FREQUENCY = (
        "AF",
        "Allele frequency for each ALT allele in the same order as listed: use this when estimated "
        "from primary data, not called genotypes",
        _F,
        True,
        "A",
    )
    ALLELE_NUMBER = ("AN", "Total number of alleles in called genotypes", _I, False, "1")
    BASE_QUALITY = ("BQ", "RMS base quality at this position", _F, False, "1")
    CIGAR = ("CIGAR", "Cigar string describing how to align an alternate allele to the reference allele", _S, False, "1")
    DBSNP = ("DB", "dbSNP membership", _B, False, "0")
    DEPTH = ("DP", "Combined depth across samples", _I, False, "1")
    HAPMAP2 = ("H2", "Membership in HapMap2", _B, False, "0")
    HAPMAP3 = ("H3", "Membership in HapMap3", _B, False, "0")
    MAPPING_QUALITY = ("MQ", "RMS mapping quality, e.g. MQ=52", _F, False, "1")
    MAPPING_QUALITY_ZERO_COUNT = ("MQ0", "Number of MAPQ == 0 reads covering this record", _I, False, "1")
    NUMBER_OF_SAMPLES = ("NS", "Number of samples with data", _I, False, "1")
    STRAND_BIAS = ("SB", "Strand bias at this position", _I, True, ".")
    SOMATIC_MUTATION = ("SOMATIC", "Indicates that the record is a somatic mutation", _B, False, "0")
    VALIDATED = ("VALIDATED", "Validated by follow-up experiment", _B, False, "0")
    THOUSAND_GENOMES = ("1000G", "Membership in 1000 Genomes", _B, False, "0")

    # imprecise structural variants
    IMPRECISE = ("IMPRECISE", "Imprecise structural variation", _B, False, "0")
    NOVEL = ("NOVEL", "Indicates a novel structural variation", _B, False, "0")
    END = ("END", "End position of the variant described in this record", _I, False, "1")
    STRUCTURAL_VARIANT_TYPE = ("SVTYPE", "Type of structural variant", _S, False, "1")
    STRUCTURAL_VARIANT_LENGTH = ("SVLEN", "Difference in length between REF and ALT alleles", _I, True, ".")
    CONFIDENCE_INTERVAL_FOR_POSITION = ("CIPOS", "Confidence interval around POS for imprecise variants", _I, True, "2")
    CONFIDENCE_INTERVAL_FOR_END = ("CIEND", "Confidence interval around END for imprecise variants", _I, True, "2")
    HOMOLOGY_LENGTH = ("HOMLEN", "Length of base pair identical micro-homology at event breakpoints", _I, True, ".")
    HOMOLOGY_SEQUENCE = ("HOMSEQ", "Sequence of base pair identical micro-homology at event breakpoints", _S, True, ".")
    BREAKPOINT_ID = ("BKPTID", "ID of the assembled alternate allele in the assembly file", _S, True, ".")

    # precise structural variants
    MOBILE_ELEMENT_INFO = ("MEINFO", "Mobile element info of the form NAME,START,END,POLARITY", _S, True, "4")
    MOBILE_ELEMENT_TRANSDUCTION = (
        "METRANS",
        "Mobile element transduction info of the form CHR,START,END,POLARITY",
        _S,
        True,
        "4",
    )
    DGV_ID = ("DGVID", "ID of this element in Database of Genomic Variation", _S, False, "1")
    DBVAR_ID = ("DBVARID", "ID of this element in DBVAR", _S, False, "1")
    DBRIP_ID = ("DBRIPID", "ID of this element in DBRIP", _S, False, "1")
    MATE_ID = ("MATEID", "ID of mate breakends", _S, True, ".")
    PARTNER_ID = ("PARID", "ID of partner breakend", _S, False, "1")
    EVENT_ID = ("EVENT", "ID of event associated to breakend", _S, False, "1")
    CONFIDENCE_INTERVAL_FOR_INSERTED_MATERIAL = (
        "CILEN",
        "Confidence interval around the inserted material between breakends",
        _I,
        True,
        "2",
    )
    READ_DEPTH_OF_ADJACENCY = ("DPADJ", "Read Depth of adjacency", _I, True, ".")
    COPY_NUMBER_OF_SEGMENT = ("CN", "Copy number of segment containing breakend", _I, False, "1")
    COPY_NUMBER_OF_ADJACENCY = ("CNADJ", "Copy number of adjacency", _I, True, ".")
    CONFIDENCE_INTERVAL_FOR_SEGMENT_COPY_NUMBER = (
        "CICN",
        "Confidence interval around copy number for the segment",
        _I,
        True,
        "2",
    )
    CONFIDENCE_INTERVAL_FOR_ADJACENCY_COPY_NUMBER = (
        "CICNADJ",
        "Confidence interval around copy number for the adjacency",
        _I,
        True,
        "2",
    )


class ReservedFormatProperty(_ReservedProperty):
    """A FORMAT key reserved by the VCF specification."""

    GENOTYPE = ("GT", "Genotype, encoded as allele values separated by either / or |", _S, False, "1")
    DEPTH = ("DP", "Read depth at this position for this sample", _I, False, "1")
    FILTER = ("FT", "Sample genotype filter indicating if this genotype was called", _S, False, "1")
    GENOTYPE_LIKELIHOODS = (
        "GL",
        "Genotype likelihoods comprised of comma separated floating point log10-scaled likelihoods "
        "for all possible genotypes given the set of alleles defined in the REF and ALT fields",
        _F,
        True,
        "G",
    )
    GENOTYPE_LIKELIHOODS_OF_HETEROGENEOUS_PLOIDY = (
        "GLE",
        "Genotype likelihoods of heterogeneous ploidy, used in presence of uncertain copy number",
        _S,
        True,
        ".",
    )
    PHRED_SCALED_GENOTYPE_LIKELIHOODS = (
        "PL",
        "The phred-scaled genotype likelihoods rounded to the closest integer",
        _I,
        True,
        "G",
    )
    GENOTYPE_POSTERIOR_PROBABILITIES_PHRED_SCALED = (
        "GP",
        "The phred-scaled genotype posterior probabilities; intended to store imputed genotype probabilities",
        _F,
        True,
        "G",
    )
    GENOTYPE_QUALITY_CONDITIONAL = ("GQ", "Conditional genotype quality, encoded as a phred quality", _I, False, "1")
    HAPLOTYPE_QUALITIES = ("HQ", "Haplotype qualities, two comma separated phred qualities", _I, True, "2")
    PHASE_SET = ("PS", "Phase set", _I, False, "1")
    PHASING_QUALITY = (
        "PQ",
        "Phasing quality, the phred-scaled probability that alleles are ordered incorrectly in a heterozygote",
        _I,
        False,
        "1",
    )
    EXPECTED_ALLELE_COUNTS = (
        "EC",
        "List of expected alternate allele counts for each alternate allele in the same order as listed in the ALT field",
        _I,
        True,
        "A",
    )
    MAPPING_QUALITY = ("MQ", "RMS mapping quality, similar to the version in the INFO field", _I, False, "1")
