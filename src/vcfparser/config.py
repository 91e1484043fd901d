"""Configuration models for parsing and writing VCF files."""

from pydantic import BaseModel


class ParserConfig(BaseModel):
    """
    Options for :class:`vcfparser.io.parser.VcfParser`.
    """

    # Skip data lines without an ID shaped like rs123, and drop other IDs
    rsids_only: bool = False
    # Only checked by VcfParser.from_file; streams are never name-checked
    require_vcf_suffix: bool = True


class WriterConfig(BaseModel):
    """
    Options for :class:`vcfparser.io.writer.VcfWriter`.
    """

    # Unknown FILTER/INFO/FORMAT keys raise VcfFormatError instead of warning
    strict_consistency: bool = False
    # Re-convert INFO and FORMAT values with their declared Type before writing
    validate_values: bool = True
