"""
vcfparser - A parser, model and writer for the Variant Call Format.

This package reads VCF text into typed metadata and records, validates it
against the VCF grammar, and writes it back out.

Example usage:
    $ vcfparser validate calls.vcf
    $ vcfparser rewrite calls.vcf cleaned.vcf --strict
"""

__version__ = "1.0.0"

from .config import ParserConfig, WriterConfig
from .core.alleles import PrimaryType, VcfAllele
from .core.conversion import FieldType, SpecialNumber
from .core.genotype import VcfGenotype
from .core.structural import AltStructuralVariant, ReservedStructuralVariantCode
from .exceptions import ConsistencyWarning, RecordSinkError, VcfError, VcfFormatError, VcfStateError
from .index import DuplicateHandler, InMemoryIndex
from .io.parser import VcfParser
from .io.writer import VcfWriter
from .models.metadata import MetadataEntry, MetadataKind, VcfMetadata, VcfMetadataBuilder
from .models.record import VcfPosition, VcfSample
from .models.reserved import ReservedFormatProperty, ReservedInfoProperty
from .pipeline import TransformingSink, VcfTransformation, transform_file

__all__ = [
    "__version__",
    "AltStructuralVariant",
    "ConsistencyWarning",
    "DuplicateHandler",
    "FieldType",
    "InMemoryIndex",
    "MetadataEntry",
    "MetadataKind",
    "ParserConfig",
    "PrimaryType",
    "RecordSinkError",
    "ReservedFormatProperty",
    "ReservedInfoProperty",
    "ReservedStructuralVariantCode",
    "SpecialNumber",
    "TransformingSink",
    "VcfAllele",
    "VcfError",
    "VcfFormatError",
    "VcfGenotype",
    "VcfMetadata",
    "VcfMetadataBuilder",
    "VcfParser",
    "VcfPosition",
    "VcfSample",
    "VcfStateError",
    "VcfTransformation",
    "VcfWriter",
    "WriterConfig",
    "transform_file",
]
