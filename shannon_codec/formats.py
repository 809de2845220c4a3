"""Artifact layouts for the code table and the encoded container.

All integers are little-endian. Format 1 reproduces the original on-disk
shape with 8-bit table counts and ids in the container. Format 2 widens the
container's table count to 16 bits and the linking id to 64 bits in both
artifacts. Table entries are the same in both formats.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Dict

ENTRY_STRUCT = struct.Struct("<BH")
ENTRY_HEADER_SIZE = ENTRY_STRUCT.size

LEGACY_FORMAT = 1
WIDE_FORMAT = 2
DEFAULT_FORMAT = WIDE_FORMAT


@dataclass(frozen=True)
class FormatLayout:
    """Struct layouts used by one format version."""

    version: int
    table_header: struct.Struct
    container_header: struct.Struct
    id_bits: int
    table_entries_bits: int

    @property
    def max_id(self) -> int:
        return (1 << self.id_bits) - 1

    @property
    def table_entries_mask(self) -> int:
        return (1 << self.table_entries_bits) - 1


_LAYOUTS: Dict[int, FormatLayout] = {
    LEGACY_FORMAT: FormatLayout(
        version=LEGACY_FORMAT,
        table_header=struct.Struct("<HB"),
        container_header=struct.Struct("<QBB"),
        id_bits=8,
        table_entries_bits=8,
    ),
    WIDE_FORMAT: FormatLayout(
        version=WIDE_FORMAT,
        table_header=struct.Struct("<HQ"),
        container_header=struct.Struct("<QHQ"),
        id_bits=64,
        table_entries_bits=16,
    ),
}


def get_layout(version: int = DEFAULT_FORMAT) -> FormatLayout:
    try:
        return _LAYOUTS[version]
    except KeyError as exc:
        raise ValueError(f"Unknown format version: {version}") from exc


def available_formats() -> Dict[int, FormatLayout]:
    return dict(_LAYOUTS)


__all__ = [
    "DEFAULT_FORMAT",
    "ENTRY_HEADER_SIZE",
    "ENTRY_STRUCT",
    "FormatLayout",
    "LEGACY_FORMAT",
    "WIDE_FORMAT",
    "available_formats",
    "get_layout",
]
