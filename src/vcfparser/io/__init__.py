"""
I/O module for vcfparser.

Provides the streaming parser and the writer for VCF text.
"""

from .parser import ParserState, RecordSink, VcfParser
from .writer import VcfWriter

__all__ = [
    "ParserState",
    "RecordSink",
    "VcfParser",
    "VcfWriter",
]
