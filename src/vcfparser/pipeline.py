"""
Streaming read-transform-write over VCF files.

A :class:`TransformingSink` receives records from a :class:`VcfParser` and
fans each one out to any number of (transformation, writer) branches.
Every branch owns a private copy of the metadata and of each record, so
edits made by one transformation are never seen by another or by the parser.
"""

import copy
import logging
from pathlib import Path

from .config import ParserConfig, WriterConfig
from .exceptions import VcfStateError
from .io.parser import VcfParser
from .io.writer import VcfWriter
from .models.metadata import VcfMetadata
from .models.record import VcfPosition, VcfSample

__all__ = ["TransformingSink", "VcfTransformation", "transform_file"]

logger = logging.getLogger(__name__)


class VcfTransformation:
    """
    Edits metadata and records on their way to a writer.

    The default implementation passes everything through unchanged.
    """

    def transform_metadata(self, metadata: VcfMetadata) -> None:
        """Edit the branch's metadata in place before its header is written."""

    def transform_record(self, metadata: VcfMetadata, position: VcfPosition, samples: list[VcfSample]) -> bool:
        """
        Edit a record in place.

        Returns:
            True to write the record, False to drop it.
        """
        return True


class _Branch:
    def __init__(self, transformation: VcfTransformation, writer: VcfWriter) -> None:
        self.transformation = transformation
        self.writer = writer
        self.metadata: VcfMetadata | None = None
        self.dropped = 0


class TransformingSink:
    """Record sink that transforms each record once per branch and writes the results."""

    def __init__(self) -> None:
        self._branches: list[_Branch] = []
        self._started = False

    def add(self, transformation: VcfTransformation, writer: VcfWriter) -> "TransformingSink":
        if self._started:
            raise VcfStateError("Cannot add a transformation after records have been written")
        self._branches.append(_Branch(transformation, writer))
        return self

    def start(self, metadata: VcfMetadata) -> None:
        """
        Transform each branch's copy of the metadata and write its header.

        Called automatically for the first record; call it directly to
        write headers for a file that has no data lines.
        """
        if self._started:
            return
        if not self._branches:
            raise VcfStateError("Must add at least one transformation")
        for branch in self._branches:
            branch.metadata = copy.deepcopy(metadata)
            branch.transformation.transform_metadata(branch.metadata)
            branch.writer.write_header(branch.metadata)
        self._started = True

    def accept(self, metadata: VcfMetadata, position: VcfPosition, samples: list[VcfSample]) -> None:
        self.start(metadata)
        for branch in self._branches:
            branch_position = position.model_copy(deep=True)
            branch_samples = copy.deepcopy(samples)
            if branch.transformation.transform_record(branch.metadata, branch_position, branch_samples):
                branch.writer.write_record(branch.metadata, branch_position, branch_samples)
            else:
                branch.dropped += 1

    def close(self) -> None:
        for branch in self._branches:
            if branch.dropped:
                logger.debug("%s dropped %d records", type(branch.transformation).__name__, branch.dropped)
            branch.writer.close()


def transform_file(
    input_path: str | Path,
    output_path: str | Path,
    transformation: VcfTransformation | None = None,
    *,
    parser_config: ParserConfig | None = None,
    writer_config: WriterConfig | None = None,
) -> int:
    """
    Parse ``input_path``, apply ``transformation`` and write ``output_path``.

    Args:
        input_path: VCF file to read.
        output_path: VCF file to write; the header is written even if the
            input has no data lines.
        transformation: Defaults to a pass-through rewrite.
        parser_config: Options for the parser.
        writer_config: Options for the writer.

    Returns:
        Number of records written.
    """
    transformation = transformation or VcfTransformation()
    writer = VcfWriter.from_file(output_path, config=writer_config)
    sink = TransformingSink().add(transformation, writer)
    try:
        with VcfParser.from_file(input_path, sink, config=parser_config) as parser:
            sink.start(parser.parse_metadata())
            parser.parse()
    finally:
        sink.close()
    logger.info("Wrote %d records to %s", writer.records_written, output_path)
    return writer.records_written
