"""
Core grammars for vcfparser.

Provides the property-list, typed-value, allele, genotype and
structural-variant grammars shared by the models, parser and writer.
"""

from .alleles import PrimaryType, VcfAllele, is_valid_allele
from .conversion import FieldType, SpecialNumber, convert_property
from .genotype import VcfGenotype
from .structural import AltStructuralVariant, ReservedStructuralVariantCode

__all__ = [
    "AltStructuralVariant",
    "FieldType",
    "PrimaryType",
    "ReservedStructuralVariantCode",
    "SpecialNumber",
    "VcfAllele",
    "VcfGenotype",
    "convert_property",
    "is_valid_allele",
]
