# filename: shannon_service.py

import logging
import secrets
from typing import NamedTuple

from .bitstream import BitPacker, BitUnpacker, build_reverse_table
from .config import get_codec_config
from .container import ContainerHeader
from .errors import ArtifactIOError
from .frequency import count_frequencies
from .shannon_core import ShannonLogic
from .table import CodeTable

logger = logging.getLogger(__name__)


class EncodeResult(NamedTuple):
    table: bytes
    encoded: bytes


def random_id_source(bits=64):
    """Return an id source drawing uniformly random *bits*-wide linking ids."""

    def draw():
        return secrets.randbits(bits)

    return draw


class ShannonService:
    def __init__(self, config=None, id_source=None):
        self.logic = ShannonLogic()
        self.config = config or get_codec_config()
        self.id_source = id_source

    @property
    def layout(self):
        return self.config.layout

    def next_id(self, id_source=None):
        source = id_source or self.id_source or random_id_source(self.layout.id_bits)
        linking_id = source()
        if not 0 <= linking_id <= self.layout.max_id:
            raise ValueError(
                f"id source returned {linking_id}, format {self.layout.version} "
                f"accepts 0..{self.layout.max_id}"
            )
        return linking_id

    def build_table(self, freqs, id_source=None):
        codes = self.logic.build_codes(freqs)
        return CodeTable(codes=codes, linking_id=self.next_id(id_source))

    def encode_stream(self, table, original_size, chunks, write):
        """Write the container header and packed payload for *chunks* to *write*.

        *chunks* must yield exactly *original_size* bytes in total, all of
        them covered by *table*. Returns the number of bytes written.
        """
        header = ContainerHeader.for_table(original_size, table, self.layout)
        head = header.encode(self.layout)
        write(head)
        written = len(head)

        packer = BitPacker(table.codes)
        for chunk in chunks:
            packed = packer.feed(chunk)
            if packed:
                write(packed)
                written += len(packed)
        tail = packer.finish()
        if tail:
            write(tail)
            written += len(tail)

        if packer.symbols != original_size:
            raise ArtifactIOError(
                f"source yielded {packer.symbols} bytes, header declares {original_size}"
            )
        logger.debug("Packed %d bytes into %d (%d pad bits)", original_size, written, packer.pad_bits)
        return written

    def decode_stream(self, header, table, chunks, write):
        """Decode packed payload *chunks* into *write*; returns the byte count."""
        header.check_table(table, self.layout)
        if header.original_size == 0:
            return 0

        unpacker = BitUnpacker(build_reverse_table(table.codes), header.original_size)
        for chunk in chunks:
            decoded = unpacker.feed(chunk)
            if decoded:
                write(decoded)
            if unpacker.done:
                break
        unpacker.finish()
        return unpacker.emitted

    def read_header(self, encoded):
        return ContainerHeader.parse(encoded, self.layout)

    def encode(self, data, id_source=None):
        data = bytes(data)
        table = self.build_table(count_frequencies(data), id_source)

        out = bytearray()
        self.encode_stream(table, len(data), [data], out.extend)
        logger.info("Encoded %d bytes into %d with %d codes", len(data), len(out), len(table))
        return EncodeResult(table=table.encode(self.layout), encoded=bytes(out))

    def decode(self, encoded, table_bytes):
        header, payload = self.read_header(encoded)
        table = CodeTable.parse(table_bytes, self.layout)

        out = bytearray()
        self.decode_stream(header, table, [payload], out.extend)
        logger.info("Decoded %d bytes", len(out))
        return bytes(out)


def encode(source, *, id_source=None, config=None):
    return ShannonService(config).encode(source, id_source)


def decode(encoded, table, *, config=None):
    return ShannonService(config).decode(encoded, table)
