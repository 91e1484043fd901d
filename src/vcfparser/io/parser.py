"""
Line Parser: streams a VCF file into metadata and records.

The parser moves through the states

    AWAITING_HEADER -> AWAITING_COLUMN_LINE -> READING_DATA -> FINISHED

``##`` lines build a :class:`VcfMetadata`, the ``#CHROM`` line fixes the
column layout, and every following line becomes one :class:`VcfPosition`
plus its samples, which are returned and handed to an optional record sink.

Example:
    with VcfParser.from_file("calls.vcf") as parser:
        for position, samples in parser:
            ...
"""

import logging
import re
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Protocol, TextIO, Union

from pydantic import ValidationError

from ..config import ParserConfig
from ..core.conversion import FLOAT_PATTERN, INTEGER_PATTERN
from ..core.properties import extract_properties, remove_wrapper
from ..exceptions import (
    SECTION_COLUMNS,
    SECTION_DATA,
    SECTION_METADATA,
    RecordSinkError,
    VcfFormatError,
    VcfStateError,
)
from ..models.metadata import (
    DEFAULT_COLUMNS,
    FIRST_SAMPLE_COLUMN,
    FORMAT_COLUMN,
    MetadataEntry,
    MetadataKind,
    VcfMetadata,
    VcfMetadataBuilder,
)
from ..models.record import PASS, VcfPosition, VcfSample, describe_validation_error

__all__ = ["ParserState", "RecordSink", "VcfParser"]

logger = logging.getLogger(__name__)

RSID_PATTERN = re.compile(r"rs\d+")
MISSING = "."

_ID_SEPARATOR = re.compile(r"[;,]")


class RecordSink(Protocol):
    """Receives each parsed data line, in file order."""

    def accept(self, metadata: VcfMetadata, position: VcfPosition, samples: list[VcfSample]) -> None: ...


SinkLike = Union[RecordSink, Callable[[VcfMetadata, VcfPosition, list[VcfSample]], None]]


class ParserState(str, Enum):
    AWAITING_HEADER = "awaiting_header"
    AWAITING_COLUMN_LINE = "awaiting_column_line"
    READING_DATA = "reading_data"
    FINISHED = "finished"


class VcfParser:
    """
    Streaming VCF reader.

    Args:
        source: Readable text stream positioned at the start of the file.
        sink: Optional record sink, an object with ``accept(metadata,
            position, samples)`` or a plain callable with that signature.
        config: Parser options; ``rsids_only`` overrides ``config.rsids_only``.
        close_source: Close ``source`` when parsing finishes or fails.
    """

    def __init__(
        self,
        source: TextIO,
        sink: SinkLike | None = None,
        *,
        config: ParserConfig | None = None,
        rsids_only: bool | None = None,
        close_source: bool = False,
    ) -> None:
        if source is None:
            raise VcfStateError("Must specify either a file or a stream to parse")
        self.config = config or ParserConfig()
        if rsids_only is not None:
            self.config = self.config.model_copy(update={"rsids_only": rsids_only})
        self._source = source
        self._close_source = close_source
        self._sink = self._resolve_sink(sink)
        self._metadata: VcfMetadata | None = None
        self._state = ParserState.AWAITING_HEADER
        self._line_number = 0
        self.records_parsed = 0
        self.lines_skipped = 0

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        sink: SinkLike | None = None,
        *,
        config: ParserConfig | None = None,
        rsids_only: bool | None = None,
    ) -> "VcfParser":
        """
        Open ``path`` for parsing; the parser owns and closes the handle.

        Raises:
            VcfFormatError: If the file name does not end with ``.vcf`` and
                ``config.require_vcf_suffix`` is set.
        """
        config = config or ParserConfig()
        if config.require_vcf_suffix and not str(path).endswith(".vcf"):
            raise VcfFormatError(f"Not a VCF file (doesn't end with .vcf extension): {path}")
        handle = open(path, encoding="utf-8")
        logger.debug("Opened %s", path)
        return cls(handle, sink, config=config, rsids_only=rsids_only, close_source=True)

    @staticmethod
    def _resolve_sink(sink: SinkLike | None) -> Callable | None:
        if sink is None:
            return None
        accept = getattr(sink, "accept", None)
        if callable(accept):
            return accept
        if callable(sink):
            return sink
        raise VcfStateError(f"Record sink {sink!r} is neither callable nor has an accept() method")

    @property
    def metadata(self) -> VcfMetadata | None:
        """The parsed metadata, or None before :meth:`parse_metadata`."""
        return self._metadata

    @property
    def state(self) -> ParserState:
        return self._state

    @property
    def line_number(self) -> int:
        """1-based number of the last line read."""
        return self._line_number

    # Lifecycle

    def close(self) -> None:
        if self._close_source and not self._source.closed:
            self._source.close()

    def __enter__(self) -> "VcfParser":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __iter__(self) -> Iterator[tuple[VcfPosition, list[VcfSample]]]:
        while True:
            record = self.parse_next()
            if record is None:
                return
            yield record

    @contextmanager
    def _section(self, section: str):
        """Tag errors raised while reading the current line with its number and section."""
        try:
            yield
        except VcfFormatError as e:
            if e.section is None:
                e.add_context(self._line_number, section)
            raise
        except ValidationError as e:
            raise VcfFormatError(
                describe_validation_error(e), line_number=self._line_number, section=section
            ) from e

    def _read_line(self) -> str | None:
        line = self._source.readline()
        if not line:
            return None
        self._line_number += 1
        return line.rstrip("\r\n")

    # Header

    def parse_metadata(self) -> VcfMetadata:
        """
        Read every ``##`` line and the ``#CHROM`` line.

        Raises:
            VcfStateError: If the metadata has already been parsed.
            VcfFormatError: On a malformed header.
        """
        if self._state is not ParserState.AWAITING_HEADER:
            raise VcfStateError("Metadata has already been parsed")
        try:
            self._metadata = self._read_header()
        except BaseException:
            self._state = ParserState.FINISHED
            self.close()
            raise
        self._state = ParserState.READING_DATA

        md = self._metadata
        logger.info(
            "Parsed metadata: %s with %d INFO, %d FILTER, %d FORMAT, %d contig entries and %d samples",
            md.file_format,
            len(md.info),
            len(md.filters),
            len(md.formats),
            len(md.contigs),
            md.num_samples,
        )
        return md

    def _read_header(self) -> VcfMetadata:
        builder = VcfMetadataBuilder()
        while True:
            line = self._read_line()
            if line is None:
                raise VcfFormatError(
                    "Missing #CHROM column header line",
                    line_number=self._line_number + 1,
                    section=SECTION_COLUMNS,
                )
            if line.startswith("##"):
                with self._section(SECTION_METADATA):
                    self._parse_metadata_line(builder, line)
                self._state = ParserState.AWAITING_COLUMN_LINE
            elif line.startswith("#"):
                with self._section(SECTION_COLUMNS):
                    builder.set_columns(self._parse_column_line(line))
                    return builder.build()
            else:
                raise VcfFormatError(
                    "Expected a ## metadata line or the #CHROM column line",
                    line_number=self._line_number,
                    section=SECTION_METADATA,
                )

    def _parse_metadata_line(self, builder: VcfMetadataBuilder, line: str) -> None:
        name, sep, value = line[2:].partition("=")
        if not sep:
            raise VcfFormatError(f"Metadata line is not of the form ##key=value: {line}")
        name = name.strip()
        value = value.strip()
        logger.debug("%s : %s", name, value)

        if name.lower() == "fileformat":
            builder.set_file_format(value)
            return
        kind = MetadataKind.from_name(name)
        if kind is None:
            builder.add_raw_property(name, value)
            return
        properties = extract_properties(remove_wrapper(value))
        builder.add(MetadataEntry(kind=kind, properties=properties))

    @staticmethod
    def _parse_column_line(line: str) -> list[str]:
        columns = [c.strip() for c in line[1:].split("\t")]
        if len(columns) < len(DEFAULT_COLUMNS):
            raise VcfFormatError(
                f"Column line has {len(columns)} columns but needs at least {len(DEFAULT_COLUMNS)}"
            )
        if len(columns) > len(DEFAULT_COLUMNS) and columns[FIRST_SAMPLE_COLUMN - 1] != FORMAT_COLUMN:
            raise VcfFormatError(
                f"Column {FIRST_SAMPLE_COLUMN} must be {FORMAT_COLUMN} when samples are present; "
                f"was {columns[FIRST_SAMPLE_COLUMN - 1]}"
            )
        return columns

    # Data

    def parse_next(self) -> tuple[VcfPosition, list[VcfSample]] | None:
        """
        Parse the next data line and hand it to the sink.

        Returns:
            The record and its samples, or None once the input is exhausted.

        Raises:
            VcfStateError: If called again after returning None.
            VcfFormatError: On a malformed line, tagged with its line number.
            RecordSinkError: If the sink fails.
        """
        if self._state is ParserState.FINISHED:
            raise VcfStateError("Parser is exhausted; no more lines to parse")
        if self._metadata is None:
            self.parse_metadata()

        try:
            while True:
                line = self._read_line()
                if line is None:
                    self._state = ParserState.FINISHED
                    self.close()
                    logger.debug(
                        "Finished after %d records (%d lines skipped)", self.records_parsed, self.lines_skipped
                    )
                    return None
                with self._section(SECTION_DATA):
                    record = self._parse_data_line(line)
                if record is None:
                    self.lines_skipped += 1
                    continue
                self._dispatch(*record)
                self.records_parsed += 1
                return record
        except BaseException:
            self._state = ParserState.FINISHED
            self.close()
            raise

    def parse(self) -> int:
        """
        Parse every remaining data line, handing each to the sink.

        Returns:
            Number of records parsed.
        """
        for _ in self:
            pass
        return self.records_parsed

    def _dispatch(self, position: VcfPosition, samples: list[VcfSample]) -> None:
        if self._sink is None:
            return
        try:
            self._sink(self._metadata, position, samples)
        except Exception as e:
            raise RecordSinkError(f"Record sink failed: {e}", line_number=self._line_number) from e

    def _parse_data_line(self, line: str) -> tuple[VcfPosition, list[VcfSample]] | None:
        if not line.strip():
            raise VcfFormatError("Empty line in the data section")

        columns = self._metadata.columns
        fields = [f.strip() for f in line.split("\t")]
        if len(fields) != len(columns):
            raise VcfFormatError(f"Expected {len(columns)} columns but found {len(fields)}")

        chromosome = fields[0]

        if not INTEGER_PATTERN.fullmatch(fields[1]):
            raise VcfFormatError(f"Position {fields[1]} is not numerical")
        position = int(fields[1])

        ids: list[str] = []
        if fields[2] != MISSING:
            ids = [i.strip() for i in _ID_SEPARATOR.split(fields[2])]
        if self.config.rsids_only:
            ids = [i for i in ids if RSID_PATTERN.fullmatch(i)]
            if not ids:
                logger.debug("Skipping line %d: no rsid in ID column '%s'", self._line_number, fields[2])
                return None

        ref = fields[3]

        alt: list[str] = []
        if fields[4] != MISSING:
            alt = [a.strip() for a in fields[4].split(",")]

        quality = self._parse_quality(fields[5])

        filters: list[str] = []
        if fields[6] != PASS:
            filters = [f.strip() for f in fields[6].split(";")]

        info = self._parse_info(fields[7])

        format: list[str] = []
        samples: list[VcfSample] = []
        if len(fields) > len(DEFAULT_COLUMNS):
            format = [f.strip() for f in fields[8].split(":")]
            samples = [VcfSample(format, [v.strip() for v in f.split(":")]) for f in fields[FIRST_SAMPLE_COLUMN:]]

        record = VcfPosition(
            chromosome=chromosome,
            position=position,
            ids=ids,
            ref=ref,
            alt=alt,
            quality=quality,
            filters=filters,
            info=info,
            format=format,
        )
        return record, samples

    @staticmethod
    def _parse_quality(text: str) -> Decimal | None:
        if text in ("", MISSING):
            return None
        if not FLOAT_PATTERN.fullmatch(text):
            raise VcfFormatError(f"Quality {text} is not a number")
        quality = Decimal(text)
        if not quality.is_finite():
            raise VcfFormatError(f"Quality {text} is not a number")
        return quality

    @staticmethod
    def _parse_info(text: str) -> dict[str, list[str]]:
        info: dict[str, list[str]] = {}
        if text in ("", MISSING):
            return info
        for prop in text.split(";"):
            if not prop:
                raise VcfFormatError(f"Empty entry in INFO column '{text}'")
            key, sep, value = prop.partition("=")
            values = info.setdefault(key.strip(), [])
            if sep:
                values.extend(v.strip() for v in value.split(","))
            else:
                # flag
                values.append("")
        return info
