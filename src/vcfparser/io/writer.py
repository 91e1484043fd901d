"""
Writer: serializes metadata and records back to VCF text.

Before a record is emitted it is checked against the metadata:

- FILTER, INFO and FORMAT keys must be declared (ConsistencyWarning, or
  VcfFormatError with ``strict_consistency``)
- INFO and FORMAT values must convert with their declared Type
- every sample must carry exactly the record's FORMAT keys
- no emitted line may contain a newline
"""

import logging
import warnings
from pathlib import Path
from typing import TextIO

from ..config import WriterConfig
from ..core.conversion import convert_property
from ..exceptions import ConsistencyWarning, VcfFormatError, VcfStateError
from ..models.metadata import DEFAULT_COLUMNS, FORMAT_COLUMN, MetadataEntry, MetadataKind, VcfMetadata
from ..models.record import NO_FILTERS_APPLIED, PASS, VcfPosition, VcfSample, check_sample_entry

__all__ = ["HEADER_ORDER", "VcfWriter"]

logger = logging.getLogger(__name__)

# Structured metadata is written kind by kind in this order
HEADER_ORDER = (
    MetadataKind.INFO,
    MetadataKind.FILTER,
    MetadataKind.FORMAT,
    MetadataKind.ALT,
    MetadataKind.CONTIG,
    MetadataKind.SAMPLE,
    MetadataKind.PEDIGREE,
)

MISSING = "."


class VcfWriter:
    """
    Writes one VCF document to a text stream.

    Call :meth:`write_header` once, then :meth:`write_record` per record.

    Args:
        stream: Writable text stream.
        config: Writer options; ``strict`` overrides ``config.strict_consistency``.
        close_stream: Close ``stream`` in :meth:`close`.
    """

    def __init__(
        self,
        stream: TextIO,
        *,
        config: WriterConfig | None = None,
        strict: bool | None = None,
        close_stream: bool = False,
    ) -> None:
        self.config = config or WriterConfig()
        if strict is not None:
            self.config = self.config.model_copy(update={"strict_consistency": strict})
        self._stream = stream
        self._close_stream = close_stream
        self._header_written = False
        self.records_written = 0

    @classmethod
    def from_file(cls, path: str | Path, *, config: WriterConfig | None = None, strict: bool | None = None) -> "VcfWriter":
        """Open ``path`` for writing; the writer owns and closes the handle."""
        handle = open(path, "w", encoding="utf-8", newline="\n")
        logger.debug("Writing to %s", path)
        return cls(handle, config=config, strict=strict, close_stream=True)

    def close(self) -> None:
        if self._close_stream:
            self._stream.close()
        else:
            self._stream.flush()

    def __enter__(self) -> "VcfWriter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _emit(self, line: str) -> None:
        if "\n" in line or "\r" in line:
            raise VcfFormatError(f"Line [[[{line}]]] contains a newline")
        self._stream.write(line + "\n")

    # Header

    def write_header(self, metadata: VcfMetadata) -> None:
        """
        Write the ``##`` lines and the ``#CHROM`` line.

        Raises:
            VcfStateError: If the header was already written.
        """
        if self._header_written:
            raise VcfStateError("Header has already been written")
        self._emit(f"##fileformat={metadata.file_format}")
        for kind in HEADER_ORDER:
            for entry in metadata.of_kind(kind).values():
                self._emit(entry.as_vcf_string())
        for name, value in metadata.raw_properties:
            self._emit(f"##{name}={value}")

        columns = list(DEFAULT_COLUMNS)
        if metadata.num_samples > 0:
            columns.append(FORMAT_COLUMN)
            columns.extend(metadata.sample_names)
        self._emit("#" + "\t".join(columns))
        self._header_written = True
        logger.debug("Wrote header with %d entries", len(metadata.entries()) + len(metadata.raw_properties))

    # Records

    def write_record(
        self,
        metadata: VcfMetadata,
        position: VcfPosition,
        samples: list[VcfSample] | None = None,
    ) -> None:
        """
        Check one record against ``metadata`` and write it as a data line.

        Raises:
            VcfStateError: If the header has not been written.
            VcfFormatError: If the record cannot be written as valid VCF.
        """
        if not self._header_written:
            raise VcfStateError("The header must be written before any record")
        samples = samples or []
        where = f"{position.chromosome}:{position.position}"
        # lists and INFO may have been edited in place since construction
        try:
            position = position.revalidate()
        except VcfFormatError as e:
            raise VcfFormatError(f"Record at {where}: {e.base_message}") from e

        self._check_filters(metadata, position, where)
        self._check_info(metadata, position, where)
        self._check_samples(metadata, position, samples, where)

        fields = [
            position.chromosome,
            str(position.position),
            ";".join(position.ids) or MISSING,
            position.ref,
            ",".join(position.alt) or MISSING,
            MISSING if position.quality is None else str(position.quality),
            ";".join(position.filters) or PASS,
            self._format_info(position.info),
        ]
        if metadata.num_samples > 0:
            fields.append(":".join(position.format) or MISSING)
            for sample in samples:
                fields.append(":".join(sample[key] for key in position.format) or MISSING)

        self._emit("\t".join(fields))
        self.records_written += 1

    @staticmethod
    def _format_info(info: dict[str, list[str]]) -> str:
        entries = []
        for key, values in info.items():
            if any(values):
                entries.append(f"{key}={','.join(values)}")
            else:
                entries.append(key)
        return ";".join(entries) or MISSING

    # Consistency

    def _inconsistent(self, message: str) -> None:
        if self.config.strict_consistency:
            raise VcfFormatError(message)
        warnings.warn(message, ConsistencyWarning, stacklevel=4)

    def _check_value(self, entry: MetadataEntry, values: list[str], label: str) -> None:
        if not self.config.validate_values:
            return
        try:
            convert_property(entry.type, ",".join(values), entry.is_list)
        except VcfFormatError as e:
            raise VcfFormatError(f"{label} has an invalid value: {e.base_message}") from e

    def _check_filters(self, metadata: VcfMetadata, position: VcfPosition, where: str) -> None:
        declared = metadata.filters
        for f in position.filters:
            if f != NO_FILTERS_APPLIED and f not in declared:
                self._inconsistent(f"FILTER {f} at {where} is not described in the metadata")

    def _check_info(self, metadata: VcfMetadata, position: VcfPosition, where: str) -> None:
        declared = metadata.info
        for key, values in position.info.items():
            entry = declared.get(key)
            if entry is None:
                self._inconsistent(f"INFO {key} at {where} is not described in the metadata")
                continue
            self._check_value(entry, values, f"INFO {key} at {where}")

    def _check_samples(
        self,
        metadata: VcfMetadata,
        position: VcfPosition,
        samples: list[VcfSample],
        where: str,
    ) -> None:
        if len(samples) != metadata.num_samples:
            raise VcfFormatError(
                f"Record at {where} has {len(samples)} samples but the metadata declares {metadata.num_samples}"
            )

        declared = metadata.formats
        for key in position.format:
            if key not in declared:
                self._inconsistent(f"FORMAT {key} at {where} is not described in the metadata")

        for index, sample in enumerate(samples):
            name = metadata.sample_name(index)
            for key in sample:
                if key not in position.format:
                    raise VcfFormatError(f"Sample {name} at {where} has property {key} missing from FORMAT")
            for key in position.format:
                if key not in sample:
                    raise VcfFormatError(f"Sample {name} at {where} is missing FORMAT property {key}")
                check_sample_entry(key, sample[key])
                entry = declared.get(key)
                if entry is not None:
                    self._check_value(entry, [sample[key]], f"FORMAT {key} of sample {name} at {where}")
