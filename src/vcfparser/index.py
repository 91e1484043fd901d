"""
In-memory random-access index over a parsed VCF file.

:class:`InMemoryIndex` is a record sink: hand it to a :class:`VcfParser`
and, once parsing finishes, look records up by ID or by locus.

Example:
    index = InMemoryIndex(duplicate_locus_handler=DuplicateHandler.KEEP_FIRST)
    VcfParser.from_file("calls.vcf", index).parse()
    index.get_genotype_for_id("rs123", "NA12878")
"""

import logging
from dataclasses import dataclass
from enum import Enum

from .core.genotype import VcfGenotype
from .exceptions import VcfFormatError, VcfStateError
from .models.metadata import VcfMetadata
from .models.record import VcfPosition, VcfSample

__all__ = ["DuplicateHandler", "InMemoryIndex", "Locus"]

logger = logging.getLogger(__name__)


class DuplicateHandler(str, Enum):
    """What to do when a second record has an ID or locus already indexed."""

    FAIL = "fail"
    KEEP_FIRST = "keep_first"
    KEEP_LAST = "keep_last"


@dataclass(frozen=True)
class Locus:
    chromosome: str
    position: int

    def __str__(self) -> str:
        return f"{self.chromosome}:{self.position}"


class InMemoryIndex:
    """
    Record sink that keeps every record in memory, keyed by ID and by locus.

    Args:
        duplicate_id_handler: Policy for a repeated ID.
        duplicate_locus_handler: Policy for a repeated (chromosome, position).
    """

    def __init__(
        self,
        duplicate_id_handler: DuplicateHandler = DuplicateHandler.FAIL,
        duplicate_locus_handler: DuplicateHandler = DuplicateHandler.FAIL,
    ) -> None:
        self.duplicate_id_handler = duplicate_id_handler
        self.duplicate_locus_handler = duplicate_locus_handler
        self._metadata: VcfMetadata | None = None
        self._by_id: dict[str, tuple[VcfPosition, list[VcfSample]]] = {}
        self._by_locus: dict[Locus, tuple[VcfPosition, list[VcfSample]]] = {}

    def accept(self, metadata: VcfMetadata, position: VcfPosition, samples: list[VcfSample]) -> None:
        self._metadata = metadata
        record = (position, samples)

        locus = Locus(position.chromosome, position.position)
        if self._should_store(self._by_locus, locus, self.duplicate_locus_handler, "position"):
            self._by_locus[locus] = record

        for id in position.ids:
            if self._should_store(self._by_id, id, self.duplicate_id_handler, "ID"):
                self._by_id[id] = record

    @staticmethod
    def _should_store(index: dict, key, handler: DuplicateHandler, label: str) -> bool:
        if key not in index:
            return True
        if handler is DuplicateHandler.FAIL:
            raise VcfFormatError(f"Duplicate VCF record for {label} {key}")
        logger.debug("Duplicate %s %s: %s", label, key, handler.value)
        return handler is DuplicateHandler.KEEP_LAST

    @property
    def metadata(self) -> VcfMetadata | None:
        """Metadata of the indexed file, or None if no record has been seen."""
        return self._metadata

    @property
    def positions(self) -> list[VcfPosition]:
        """Indexed records in file order, one per locus."""
        return [position for position, _ in self._by_locus.values()]

    def __len__(self) -> int:
        return len(self._by_locus)

    # Records

    def get_position_for_id(self, id: str) -> VcfPosition | None:
        record = self._by_id.get(id)
        return None if record is None else record[0]

    def get_samples_for_id(self, id: str) -> list[VcfSample] | None:
        record = self._by_id.get(id)
        return None if record is None else record[1]

    def get_position_at_locus(self, chromosome: str, position: int) -> VcfPosition | None:
        record = self._by_locus.get(Locus(chromosome, position))
        return None if record is None else record[0]

    def get_samples_at_locus(self, chromosome: str, position: int) -> list[VcfSample] | None:
        record = self._by_locus.get(Locus(chromosome, position))
        return None if record is None else record[1]

    # Samples and genotypes

    def _sample_index(self, sample: str | int) -> int:
        if isinstance(sample, int):
            return sample
        if self._metadata is None:
            raise VcfStateError("No records have been indexed")
        index = self._metadata.sample_index(sample)
        if index < 0:
            raise KeyError(f"Unknown sample {sample}")
        return index

    def get_sample_for_id(self, id: str, sample: str | int) -> VcfSample | None:
        """Sample data by sample name or 0-based index for the record with ``id``."""
        samples = self.get_samples_for_id(id)
        return None if samples is None else samples[self._sample_index(sample)]

    def get_sample_at_locus(self, chromosome: str, position: int, sample: str | int) -> VcfSample | None:
        samples = self.get_samples_at_locus(chromosome, position)
        return None if samples is None else samples[self._sample_index(sample)]

    def get_genotype_for_id(self, id: str, sample: str | int) -> VcfGenotype | None:
        """
        Genotype of one sample for the record with ``id``.

        Returns:
            None if the ID is unknown or the sample has no ``GT`` value.
        """
        record = self._by_id.get(id)
        if record is None:
            return None
        position, samples = record
        return VcfGenotype.from_sample(position, samples[self._sample_index(sample)])

    def get_genotype_at_locus(self, chromosome: str, position: int, sample: str | int) -> VcfGenotype | None:
        record = self._by_locus.get(Locus(chromosome, position))
        if record is None:
            return None
        vcf_position, samples = record
        return VcfGenotype.from_sample(vcf_position, samples[self._sample_index(sample)])
