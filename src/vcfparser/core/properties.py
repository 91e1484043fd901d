"""
Property Grammar: structured metadata property lists.

Handles the inside of metadata lines such as:

    ##INFO=<ID=DP,Number=1,Type=Integer,Description="Total depth, all reads">

Commas inside a double-quoted span are not separators. Backslash escapes
(``\\"`` and ``\\\\``) are protected while splitting and restored verbatim
afterwards, so the text of a Description survives a round-trip untouched.
"""

from ..exceptions import VcfFormatError

__all__ = [
    "extract_properties",
    "join_with_commas_respecting_quotes",
    "quote",
    "remove_wrapper",
    "split_key_value",
    "split_property_list",
    "unquote",
]

# Private-use code points never appear in VCF text
_ESCAPED_BACKSLASH = "\ue000"
_ESCAPED_QUOTE = "\ue001"


def _protect_escapes(text: str) -> str:
    return text.replace("\\\\", _ESCAPED_BACKSLASH).replace('\\"', _ESCAPED_QUOTE)


def _restore_escapes(text: str) -> str:
    return text.replace(_ESCAPED_QUOTE, '\\"').replace(_ESCAPED_BACKSLASH, "\\\\")


def _split_outside_quotes(text: str, separator: str, maxsplit: int = -1) -> list[str]:
    parts: list[str] = []
    current: list[str] = []
    in_quotes = False
    for char in text:
        if char == '"':
            in_quotes = not in_quotes
        if char == separator and not in_quotes and (maxsplit < 0 or len(parts) < maxsplit):
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    if in_quotes:
        raise VcfFormatError(f"Unmatched double quote in '{_restore_escapes(text)}'")
    parts.append("".join(current))
    return parts


def split_property_list(text: str) -> list[str]:
    """
    Split a comma-delimited property list, ignoring commas inside quotes.

    Args:
        text: e.g. ``ID=AA,Number=1,Description="a, b"``

    Returns:
        The individual ``key=value`` strings, escapes preserved.

    Raises:
        VcfFormatError: If a double quote is left unmatched.
    """
    return [_restore_escapes(p) for p in _split_outside_quotes(_protect_escapes(text), ",")]


def join_with_commas_respecting_quotes(properties: list[str]) -> str:
    """Inverse of :func:`split_property_list`."""
    return ",".join(properties)


def split_key_value(prop: str) -> tuple[str, str]:
    """
    Split ``key=value`` on the first ``=`` that is not inside quotes.

    Raises:
        VcfFormatError: If there is no such ``=``.
    """
    parts = _split_outside_quotes(_protect_escapes(prop), "=", maxsplit=1)
    if len(parts) != 2:
        raise VcfFormatError(f'Property "{prop}" is not of the form key=value')
    return _restore_escapes(parts[0]), _restore_escapes(parts[1])


def extract_properties(text: str) -> dict[str, str]:
    """
    Parse the inside of ``<...>`` into an ordered mapping of raw values.

    Values keep their quotes; use :func:`unquote` for free-text values.
    """
    properties: dict[str, str] = {}
    for prop in split_property_list(text):
        try:
            key, value = split_key_value(prop)
        except VcfFormatError as e:
            raise VcfFormatError(f'Error parsing property "{prop}": {e.base_message}') from e
        if key in properties:
            raise VcfFormatError(f"Property {key} is given more than once")
        properties[key] = value
    return properties


def quote(text: str) -> str:
    """Add double quotation marks around a string."""
    return f'"{text}"'


def unquote(text: str) -> str:
    """Remove surrounding double quotation marks if present."""
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        return text[1:-1]
    return text


def remove_wrapper(text: str) -> str:
    """Strip the angle brackets around a structured metadata value."""
    if not (text.startswith("<") and text.endswith(">")):
        raise VcfFormatError(f"Expected a value wrapped in angle brackets; got {text}")
    return text[1:-1]
