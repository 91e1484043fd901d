"""
Metadata Model: the ``##`` header of a VCF file.

A single :class:`MetadataEntry` holds the ordered properties of one
structured line (``##INFO=<...>``, ``##contig=<...>``, ...) plus its
:class:`MetadataKind`; the kind decides which properties are required.
:class:`VcfMetadata` registers entries in file order, keyed by
``(kind, id)``, alongside raw ``##key=value`` properties and the ``#CHROM``
column names.
"""

import logging
import re
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from ..core.conversion import FieldType, SpecialNumber, is_list_number, is_valid_number
from ..core.properties import quote, unquote
from ..core.structural import AltStructuralVariant
from ..exceptions import VcfFormatError

__all__ = [
    "DEFAULT_COLUMNS",
    "FILE_FORMAT_PATTERN",
    "MetadataEntry",
    "MetadataKind",
    "VcfMetadata",
    "VcfMetadataBuilder",
]

logger = logging.getLogger(__name__)

FILE_FORMAT_PATTERN = re.compile(r"VCFv\d+\.\d+")

DEFAULT_COLUMNS = ("CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO")
FORMAT_COLUMN = "FORMAT"
FIRST_SAMPLE_COLUMN = 9

ASSEMBLY = "assembly"
PEDIGREE_DB = "pedigreeDB"

ID = "ID"
DESCRIPTION = "Description"
NUMBER = "Number"
TYPE = "Type"
SOURCE = "Source"
VERSION = "Version"


class MetadataKind(str, Enum):
    """Kind of a structured ``##NAME=<...>`` metadata line."""

    INFO = "INFO"
    FILTER = "FILTER"
    FORMAT = "FORMAT"
    ALT = "ALT"
    CONTIG = "contig"
    SAMPLE = "SAMPLE"
    PEDIGREE = "PEDIGREE"

    @classmethod
    def from_name(cls, name: str) -> "MetadataKind | None":
        """Case-insensitive lookup of a metadata line name; None for raw properties."""
        for kind in cls:
            if kind.value.lower() == name.lower():
                return kind
        return None

    @property
    def requires_id(self) -> bool:
        return self is not MetadataKind.PEDIGREE

    @property
    def requires_description(self) -> bool:
        return self in (
            MetadataKind.ALT,
            MetadataKind.FILTER,
            MetadataKind.SAMPLE,
            MetadataKind.INFO,
            MetadataKind.FORMAT,
        )

    @property
    def is_typed(self) -> bool:
        """Whether entries of this kind declare ``Number`` and ``Type``."""
        return self in (MetadataKind.INFO, MetadataKind.FORMAT)


class MetadataEntry(BaseModel):
    """
    One structured metadata line.

    ``properties`` keeps raw values exactly as written: free text such as a
    Description stays wrapped in quotes. Use the factory classmethods
    (:meth:`info`, :meth:`filter`, ...) to build entries programmatically
    with the quoting done for you.
    """

    kind: MetadataKind
    properties: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_required(self) -> "MetadataEntry":
        for key, value in self.properties.items():
            if "\n" in key or "\n" in value:
                raise VcfFormatError(f"{self.kind.value} property [[[{key}={value}]]] contains a newline")

        if self.kind.requires_id and ID not in self.properties:
            raise VcfFormatError(f'Required metadata property "{ID}" is missing')
        if self.kind.requires_description and DESCRIPTION not in self.properties:
            raise VcfFormatError(f'Required metadata property "{DESCRIPTION}" is missing')

        if self.kind.is_typed:
            for required in (NUMBER, TYPE):
                if required not in self.properties:
                    raise VcfFormatError(f'Required metadata property "{required}" is missing')
            number = self.properties[NUMBER]
            if not is_valid_number(number):
                raise VcfFormatError(f"[Number] Not a number: '{number}'")
            field_type = FieldType.from_id(self.properties[TYPE])
            if self.kind is MetadataKind.FORMAT and field_type is FieldType.FLAG:
                raise VcfFormatError(f"FORMAT {self.properties[ID]} cannot have Type=Flag")
        return self

    # Factories

    @classmethod
    def info(
        cls,
        id: str,
        description: str,
        number: str,
        type: FieldType,
        source: str | None = None,
        version: str | None = None,
    ) -> "MetadataEntry":
        properties = {ID: id, NUMBER: number, TYPE: FieldType(type).value, DESCRIPTION: quote(description)}
        if source is not None:
            properties[SOURCE] = quote(source)
        if version is not None:
            properties[VERSION] = quote(version)
        return cls(kind=MetadataKind.INFO, properties=properties)

    @classmethod
    def format(cls, id: str, description: str, number: str, type: FieldType) -> "MetadataEntry":
        properties = {ID: id, NUMBER: number, TYPE: FieldType(type).value, DESCRIPTION: quote(description)}
        return cls(kind=MetadataKind.FORMAT, properties=properties)

    @classmethod
    def filter(cls, id: str, description: str) -> "MetadataEntry":
        return cls(kind=MetadataKind.FILTER, properties={ID: id, DESCRIPTION: quote(description)})

    @classmethod
    def alt(cls, id: str, description: str) -> "MetadataEntry":
        return cls(kind=MetadataKind.ALT, properties={ID: id, DESCRIPTION: quote(description)})

    @classmethod
    def sample(cls, id: str, description: str, **extra: str) -> "MetadataEntry":
        properties = {ID: id, DESCRIPTION: quote(description)}
        properties.update(extra)
        return cls(kind=MetadataKind.SAMPLE, properties=properties)

    @classmethod
    def contig(cls, id: str, length: int | None = None, **extra: str) -> "MetadataEntry":
        properties = {ID: id}
        if length is not None:
            properties["length"] = str(length)
        properties.update(extra)
        return cls(kind=MetadataKind.CONTIG, properties=properties)

    @classmethod
    def pedigree(cls, **genomes: str) -> "MetadataEntry":
        """e.g. ``MetadataEntry.pedigree(Name_0="G0-ID", Name_1="G1-ID")``"""
        return cls(kind=MetadataKind.PEDIGREE, properties=dict(genomes))

    # Accessors

    def get(self, name: str) -> str | None:
        """Raw property value, quotes included."""
        return self.properties.get(name)

    @property
    def id(self) -> str:
        """The ``ID`` property; a PEDIGREE line without one is identified by its content."""
        if ID in self.properties:
            return self.properties[ID]
        return ",".join(f"{k}={v}" for k, v in self.properties.items())

    @property
    def description(self) -> str | None:
        value = self.properties.get(DESCRIPTION)
        return None if value is None else unquote(value)

    @property
    def number(self) -> str | None:
        return self.properties.get(NUMBER)

    @property
    def reserved_number(self) -> SpecialNumber | None:
        number = self.number
        return None if number is None else SpecialNumber.from_id(number)

    @property
    def is_list(self) -> bool:
        number = self.number
        return number is not None and is_list_number(number)

    @property
    def type(self) -> FieldType | None:
        value = self.properties.get(TYPE)
        return None if value is None else FieldType.from_id(value)

    @property
    def source(self) -> str | None:
        value = self.properties.get(SOURCE)
        return None if value is None else unquote(value)

    @property
    def version(self) -> str | None:
        value = self.properties.get(VERSION)
        return None if value is None else unquote(value)

    @property
    def length(self) -> int | None:
        """Contig length, if declared."""
        value = self.properties.get("length")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            raise VcfFormatError(f"Contig length '{value}' is not a number") from None

    @property
    def url(self) -> str | None:
        return self.properties.get("URL")

    def structural_variant(self) -> AltStructuralVariant:
        """The ALT ID parsed as a structural-variant code such as ``DEL:ME:ALU``."""
        return AltStructuralVariant(self.id)

    # Mutation before registration

    def set_property(self, name: str, value: str) -> None:
        if name == ID and ID in self.properties:
            raise VcfFormatError(f"The ID of {self.kind.value} {self.id} cannot be changed")
        if "\n" in name or "\n" in value:
            raise VcfFormatError(f"{self.kind.value} property [[[{name}={value}]]] contains a newline")
        self.properties[name] = value

    def remove_property(self, name: str) -> None:
        if name == ID or (name == DESCRIPTION and self.kind.requires_description):
            raise VcfFormatError(f"Required property {name} cannot be removed")
        if self.kind.is_typed and name in (NUMBER, TYPE):
            raise VcfFormatError(f"Required property {name} cannot be removed")
        self.properties.pop(name, None)

    def as_vcf_string(self) -> str:
        """The full header line, e.g. ``##FILTER=<ID=q10,Description="Quality below 10">``."""
        body = ",".join(f"{k}={v}" for k, v in self.properties.items())
        return f"##{self.kind.value}=<{body}>"


class VcfMetadata:
    """
    All header information of a VCF file.

    Entries keep their registration order; two entries of the same kind may
    not share an ID.
    """

    def __init__(
        self,
        file_format: str,
        entries: list[MetadataEntry] | None = None,
        raw_properties: list[tuple[str, str]] | None = None,
        columns: list[str] | None = None,
    ) -> None:
        self._file_format = ""
        self.file_format = file_format
        self._entries: dict[tuple[MetadataKind, str], MetadataEntry] = {}
        for entry in entries or []:
            self.add(entry)
        self.raw_properties: list[tuple[str, str]] = list(raw_properties or [])
        self.columns: list[str] = list(columns) if columns else list(DEFAULT_COLUMNS)

    @property
    def file_format(self) -> str:
        return self._file_format

    @file_format.setter
    def file_format(self, value: str) -> None:
        if not FILE_FORMAT_PATTERN.fullmatch(value):
            raise VcfFormatError(f"VCF format must look like ex: VCFv4.2; was {value}")
        self._file_format = value

    # Registry

    def add(self, entry: MetadataEntry) -> None:
        """
        Register an entry after those already present.

        Raises:
            VcfFormatError: If an entry of the same kind has the same ID.
        """
        key = (entry.kind, entry.id)
        if key in self._entries:
            raise VcfFormatError(f"Duplicate ID {entry.id} for {entry.kind.value}")
        self._entries[key] = entry

    def remove(self, kind: MetadataKind, id: str) -> MetadataEntry | None:
        return self._entries.pop((kind, id), None)

    def get(self, kind: MetadataKind, id: str) -> MetadataEntry | None:
        return self._entries.get((kind, id))

    def of_kind(self, kind: MetadataKind) -> dict[str, MetadataEntry]:
        """Entries of one kind by ID, in registration order."""
        return {id: entry for (k, id), entry in self._entries.items() if k is kind}

    def entries(self) -> list[MetadataEntry]:
        """Every structured entry in registration order."""
        return list(self._entries.values())

    @property
    def info(self) -> dict[str, MetadataEntry]:
        return self.of_kind(MetadataKind.INFO)

    @property
    def filters(self) -> dict[str, MetadataEntry]:
        return self.of_kind(MetadataKind.FILTER)

    @property
    def formats(self) -> dict[str, MetadataEntry]:
        return self.of_kind(MetadataKind.FORMAT)

    @property
    def alts(self) -> dict[str, MetadataEntry]:
        return self.of_kind(MetadataKind.ALT)

    @property
    def contigs(self) -> dict[str, MetadataEntry]:
        return self.of_kind(MetadataKind.CONTIG)

    @property
    def samples(self) -> dict[str, MetadataEntry]:
        return self.of_kind(MetadataKind.SAMPLE)

    @property
    def pedigrees(self) -> list[MetadataEntry]:
        return list(self.of_kind(MetadataKind.PEDIGREE).values())

    def get_alt(self, id: str) -> MetadataEntry | None:
        """ALT entry for ``id``; a symbolic allele such as ``<CN0>`` is unwrapped first."""
        if id.startswith("<") and id.endswith(">"):
            id = id[1:-1]
        return self.get(MetadataKind.ALT, id)

    # Raw properties

    def get_raw_values(self, name: str) -> list[str]:
        return [value for key, value in self.raw_properties if key == name]

    def add_raw_property(self, name: str, value: str) -> None:
        if "\n" in name or "\n" in value:
            raise VcfFormatError(f"Property [[[{name}={value}]]] contains a newline")
        self.raw_properties.append((name, value))

    def remove_raw_property(self, name: str, value: str) -> None:
        self.raw_properties = [p for p in self.raw_properties if p != (name, value)]

    @property
    def assemblies(self) -> list[str]:
        return self.get_raw_values(ASSEMBLY)

    def add_assembly(self, url: str) -> None:
        self.add_raw_property(ASSEMBLY, url)

    @property
    def pedigree_databases(self) -> list[str]:
        return self.get_raw_values(PEDIGREE_DB)

    def add_pedigree_database(self, url: str) -> None:
        if not (url.startswith("<") and url.endswith(">")):
            raise VcfFormatError(f"pedigreeDB string {url} should be enclosed in angle brackets")
        self.add_raw_property(PEDIGREE_DB, url)

    # Columns and samples

    def column_index(self, column: str) -> int:
        """Index of ``column`` in the ``#CHROM`` line, or -1."""
        try:
            return self.columns.index(column)
        except ValueError:
            return -1

    @property
    def num_samples(self) -> int:
        return max(len(self.columns) - FIRST_SAMPLE_COLUMN, 0)

    @property
    def sample_names(self) -> list[str]:
        return self.columns[FIRST_SAMPLE_COLUMN:]

    def sample_index(self, name: str) -> int:
        """0-based sample index of ``name``, or -1."""
        index = self.column_index(name)
        return index - FIRST_SAMPLE_COLUMN if index >= FIRST_SAMPLE_COLUMN else -1

    def sample_name(self, index: int) -> str:
        if not 0 <= index < self.num_samples:
            raise IndexError(f"Sample index {index} out of range for {self.num_samples} samples")
        return self.columns[FIRST_SAMPLE_COLUMN + index]

    def __repr__(self) -> str:
        return (
            f"VcfMetadata(file_format={self.file_format!r}, entries={len(self._entries)}, "
            f"raw_properties={len(self.raw_properties)}, samples={self.num_samples})"
        )


class VcfMetadataBuilder:
    """Accumulates header lines as they are read; :meth:`build` checks completeness."""

    def __init__(self) -> None:
        self._file_format: str | None = None
        self._entries: list[MetadataEntry] = []
        self._keys: set[tuple[MetadataKind, str]] = set()
        self._raw_properties: list[tuple[str, str]] = []
        self._columns: list[str] = []

    def set_file_format(self, file_format: str) -> "VcfMetadataBuilder":
        if not FILE_FORMAT_PATTERN.fullmatch(file_format):
            raise VcfFormatError(f"Not a VCF file: fileformat is {file_format}")
        self._file_format = file_format
        return self

    def add(self, entry: MetadataEntry) -> "VcfMetadataBuilder":
        key = (entry.kind, entry.id)
        if key in self._keys:
            raise VcfFormatError(f"Duplicate ID {entry.id} for {entry.kind.value}")
        self._keys.add(key)
        self._entries.append(entry)
        return self

    def add_raw_property(self, name: str, value: str) -> "VcfMetadataBuilder":
        self._raw_properties.append((name, value))
        return self

    def set_columns(self, columns: list[str]) -> "VcfMetadataBuilder":
        self._columns = list(columns)
        return self

    def build(self) -> VcfMetadata:
        if self._file_format is None:
            raise VcfFormatError("Missing required ##fileformat line")
        metadata = VcfMetadata(self._file_format, self._entries, self._raw_properties, self._columns)
        logger.debug("Built %r", metadata)
        return metadata
