"""
Exceptions and warnings raised by vcfparser.

VcfFormatError carries the 1-based line number and the file section being
parsed once the parser attaches them, so a message reads like:

    [Line #12] Error parsing data: Position abc is not numerical
"""

__all__ = [
    "ConsistencyWarning",
    "RecordSinkError",
    "VcfError",
    "VcfFormatError",
    "VcfStateError",
]

SECTION_METADATA = "metadata"
SECTION_COLUMNS = "column (# header)"
SECTION_DATA = "data"


class VcfError(Exception):
    """Base exception for vcfparser failures."""


class VcfFormatError(VcfError):
    """Raised when text violates the VCF grammar."""

    def __init__(
        self,
        message: str | None = None,
        *,
        line_number: int | None = None,
        section: str | None = None,
    ) -> None:
        self.base_message = message.strip() if message else None
        self.line_number = line_number
        self.section = section
        super().__init__(self.base_message)

    def add_context(self, line_number: int, section: str) -> "VcfFormatError":
        self.line_number = line_number
        self.section = section
        return self

    @property
    def message(self) -> str:
        if self.section is None:
            return self.base_message or ""
        text = f"[Line #{self.line_number}] Error parsing {self.section}"
        if self.base_message:
            text += f": {self.base_message}"
        return text

    def __str__(self) -> str:
        return self.message


class VcfStateError(VcfError):
    """Raised when the API is used out of order (e.g. parsing after exhaustion)."""


class RecordSinkError(VcfError):
    """Raised when a record sink fails while handling a parsed data line."""

    def __init__(self, message: str, *, line_number: int) -> None:
        super().__init__(f"[Line #{line_number}] {message}")
        self.line_number = line_number


class ConsistencyWarning(UserWarning):
    """A record refers to a FILTER, INFO or FORMAT key the metadata does not declare."""
