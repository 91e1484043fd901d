"""
Data models for vcfparser.

Provides the metadata registry, records, samples and reserved keys.
"""

from .metadata import MetadataEntry, MetadataKind, VcfMetadata, VcfMetadataBuilder
from .record import VcfPosition, VcfSample
from .reserved import ReservedFormatProperty, ReservedInfoProperty

__all__ = [
    "MetadataEntry",
    "MetadataKind",
    "ReservedFormatProperty",
    "ReservedInfoProperty",
    "VcfMetadata",
    "VcfMetadataBuilder",
    "VcfPosition",
    "VcfSample",
]
