"""Exception types raised by the codec."""

from __future__ import annotations


class ShannonCodecError(Exception):
    """Base class for every error raised by the codec."""


class ArtifactIOError(ShannonCodecError):
    """Raised when a source, sink or artifact cannot be read or written."""


class FormatError(ShannonCodecError, ValueError):
    """Raised when a table or encoded artifact is malformed or truncated."""


class UnknownSymbolError(ShannonCodecError, LookupError):
    """Raised when a byte to encode has no code in the table."""

    def __init__(self, symbol: int) -> None:
        super().__init__(f"byte 0x{symbol:02x} not found in code table")
        self.symbol = symbol


class TableMismatchError(ShannonCodecError):
    """Raised when a code table cannot serve the encoded artifact it was given."""


class MismatchedIdError(TableMismatchError):
    """Raised when the table's linking id differs from the container header's."""

    def __init__(self, header_id: int, table_id: int) -> None:
        super().__init__(
            f"encoded artifact id ({header_id}) does not match table id ({table_id})"
        )
        self.header_id = header_id
        self.table_id = table_id


class CorruptPayloadError(ShannonCodecError, ValueError):
    """Raised when the payload cannot produce the declared number of bytes."""


__all__ = [
    "ArtifactIOError",
    "CorruptPayloadError",
    "FormatError",
    "MismatchedIdError",
    "ShannonCodecError",
    "TableMismatchError",
    "UnknownSymbolError",
]
