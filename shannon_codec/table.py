"""Binary serialization of code tables.

Layout: ``entry_count | linking_id`` (see :mod:`shannon_codec.formats`) then,
for each symbol in ascending order, ``u8 symbol | u16 code_length`` followed
by the code itself with one ASCII ``'0'``/``'1'`` byte per bit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Mapping

from .errors import FormatError
from .formats import ENTRY_HEADER_SIZE, ENTRY_STRUCT, FormatLayout, get_layout

logger = logging.getLogger(__name__)

_BIT_BYTES = frozenset(b"01")
_MAX_ENTRIES = 0xFFFF
_MAX_CODE_LENGTH = 0xFFFF


@dataclass(frozen=True)
class CodeTable:
    """Code table artifact: symbol to code mapping bound to a linking id."""

    codes: Mapping[int, str]
    linking_id: int

    def __len__(self) -> int:
        return len(self.codes)

    @property
    def max_code_length(self) -> int:
        return max((len(code) for code in self.codes.values()), default=0)

    def encode(self, layout: FormatLayout | None = None) -> bytes:
        layout = layout or get_layout()
        if len(self.codes) > _MAX_ENTRIES:
            raise FormatError(f"table has {len(self.codes)} entries, limit is {_MAX_ENTRIES}")
        if not 0 <= self.linking_id <= layout.max_id:
            raise FormatError(
                f"linking id {self.linking_id} does not fit format {layout.version}"
            )

        out = bytearray(layout.table_header.pack(len(self.codes), self.linking_id))
        for symbol in sorted(self.codes):
            code = self.codes[symbol]
            if not code or len(code) > _MAX_CODE_LENGTH:
                raise FormatError(f"invalid code length {len(code)} for symbol 0x{symbol:02x}")
            out += ENTRY_STRUCT.pack(symbol, len(code))
            out += code.encode("ascii")
        return bytes(out)

    @classmethod
    def parse(cls, data: bytes, layout: FormatLayout | None = None) -> "CodeTable":
        layout = layout or get_layout()
        header = layout.table_header
        if len(data) < header.size:
            raise FormatError("table artifact too small to contain its header")
        entry_count, linking_id = header.unpack_from(data, 0)

        codes: Dict[int, str] = {}
        offset = header.size
        for index in range(entry_count):
            if offset + ENTRY_HEADER_SIZE > len(data):
                raise FormatError(
                    f"table artifact truncated at entry {index} of {entry_count}"
                )
            symbol, length = ENTRY_STRUCT.unpack_from(data, offset)
            offset += ENTRY_HEADER_SIZE
            bits = data[offset : offset + length]
            if len(bits) != length:
                raise FormatError(
                    f"table artifact truncated inside code for symbol 0x{symbol:02x}"
                )
            if length == 0:
                raise FormatError(f"empty code for symbol 0x{symbol:02x}")
            if not _BIT_BYTES.issuperset(bits):
                raise FormatError(f"code for symbol 0x{symbol:02x} contains non-bit bytes")
            if symbol in codes:
                raise FormatError(f"duplicate entry for symbol 0x{symbol:02x}")
            codes[symbol] = bits.decode("ascii")
            offset += length

        if offset != len(data):
            raise FormatError(
                f"table artifact has {len(data) - offset} trailing bytes after {entry_count} entries"
            )
        logger.debug("Parsed table with %d entries, id %d", entry_count, linking_id)
        return cls(codes=codes, linking_id=linking_id)


def write_table(codes: Mapping[int, str], linking_id: int, layout: FormatLayout | None = None) -> bytes:
    return CodeTable(dict(codes), linking_id).encode(layout)


def read_table(data: bytes, layout: FormatLayout | None = None):
    """Return ``(codes, linking_id)`` parsed from a table artifact."""
    table = CodeTable.parse(data, layout)
    return dict(table.codes), table.linking_id


__all__ = ["CodeTable", "read_table", "write_table"]
