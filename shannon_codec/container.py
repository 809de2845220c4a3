"""Encoded artifact header: ``original_size | table_entries | linking_id``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

from .errors import FormatError, MismatchedIdError, TableMismatchError
from .formats import LEGACY_FORMAT, FormatLayout, get_layout
from .table import CodeTable

logger = logging.getLogger(__name__)

_MAX_ORIGINAL_SIZE = (1 << 64) - 1


@dataclass(frozen=True)
class ContainerHeader:
    """Preamble of an encoded artifact."""

    original_size: int
    table_entries: int
    linking_id: int

    @classmethod
    def for_table(cls, original_size: int, table: CodeTable, layout: FormatLayout) -> "ContainerHeader":
        # Format 1 stores the entry count in one byte, so 256 entries are written as 0.
        return cls(
            original_size=original_size,
            table_entries=len(table) & layout.table_entries_mask,
            linking_id=table.linking_id,
        )

    def encode(self, layout: FormatLayout | None = None) -> bytes:
        layout = layout or get_layout()
        if not 0 <= self.original_size <= _MAX_ORIGINAL_SIZE:
            raise FormatError(f"original size {self.original_size} does not fit 64 bits")
        if not 0 <= self.linking_id <= layout.max_id:
            raise FormatError(
                f"linking id {self.linking_id} does not fit format {layout.version}"
            )
        return layout.container_header.pack(
            self.original_size,
            self.table_entries & layout.table_entries_mask,
            self.linking_id,
        )

    @classmethod
    def parse(cls, data: bytes, layout: FormatLayout | None = None) -> Tuple["ContainerHeader", bytes]:
        """Split *data* into its header and the packed payload that follows it."""
        layout = layout or get_layout()
        header = layout.container_header
        if len(data) < header.size:
            raise FormatError("encoded artifact too small to contain its header")
        original_size, table_entries, linking_id = header.unpack_from(data, 0)
        return cls(original_size, table_entries, linking_id), data[header.size :]

    def check_table(self, table: CodeTable, layout: FormatLayout | None = None) -> None:
        """Verify that *table* is the one this artifact was encoded with."""
        layout = layout or get_layout()
        if table.linking_id != self.linking_id:
            raise MismatchedIdError(self.linking_id, table.linking_id)

        stored = len(table) & layout.table_entries_mask
        if stored != self.table_entries:
            message = (
                f"header declares {self.table_entries} table entries, "
                f"loaded table has {len(table)}"
            )
            if layout.version == LEGACY_FORMAT:
                logger.warning("%s", message)
            else:
                raise TableMismatchError(message)

        if not table.codes and self.original_size > 0:
            raise TableMismatchError(
                f"code table is empty but {self.original_size} bytes are expected"
            )


__all__ = ["ContainerHeader"]
