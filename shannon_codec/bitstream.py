"""Bit packing state machines for the encode and decode paths."""

from __future__ import annotations

from typing import Dict, Iterable, Mapping

from .errors import CorruptPayloadError, FormatError, TableMismatchError, UnknownSymbolError

# Bit strings for every byte value, most-significant bit first.
_BYTE_BITS = tuple(format(value, "08b") for value in range(256))


def build_reverse_table(codes: Mapping[int, str]) -> Dict[str, int]:
    reverse: Dict[str, int] = {}
    for symbol, code in codes.items():
        if not code:
            raise FormatError(f"empty code in table for symbol 0x{symbol:02x}")
        if code in reverse:
            raise FormatError(
                f"code {code} assigned to both 0x{reverse[code]:02x} and 0x{symbol:02x}"
            )
        reverse[code] = symbol
    return reverse


class BitPacker:
    """Turns bytes into packed code bits, first bit in the most-significant position."""

    def __init__(self, codes: Mapping[int, str]) -> None:
        self.codes = codes
        self.pending = ""
        self.pad_bits = 0
        self.symbols = 0

    def feed(self, data: Iterable[int]) -> bytes:
        out = bytearray()
        pending = self.pending
        codes = self.codes
        for symbol in data:
            try:
                pending += codes[symbol]
            except KeyError:
                self.pending = pending
                raise UnknownSymbolError(symbol) from None
            self.symbols += 1
            if len(pending) >= 8:
                full = len(pending) - len(pending) % 8
                for i in range(0, full, 8):
                    out.append(int(pending[i : i + 8], 2))
                pending = pending[full:]
        self.pending = pending
        return bytes(out)

    def finish(self) -> bytes:
        if not self.pending:
            return b""
        self.pad_bits = 8 - len(self.pending)
        last = int(self.pending.ljust(8, "0"), 2)
        self.pending = ""
        return bytes([last])


class BitUnpacker:
    """Turns packed code bits back into bytes until *expected* bytes are out."""

    def __init__(self, reverse: Mapping[str, int], expected: int) -> None:
        if not reverse and expected > 0:
            raise TableMismatchError(
                f"code table is empty but {expected} bytes are expected"
            )
        self.reverse = reverse
        self.expected = expected
        self.emitted = 0
        self.pending = ""
        self.max_code_length = max((len(code) for code in reverse), default=0)

    @property
    def done(self) -> bool:
        return self.emitted >= self.expected

    def feed(self, chunk: Iterable[int]) -> bytes:
        out = bytearray()
        reverse = self.reverse
        pending = self.pending
        emitted = self.emitted
        expected = self.expected
        limit = self.max_code_length

        # Bits left after the last expected symbol are padding and never read.
        for value in chunk:
            if emitted >= expected:
                break
            for bit in _BYTE_BITS[value]:
                pending += bit
                symbol = reverse.get(pending)
                if symbol is not None:
                    out.append(symbol)
                    pending = ""
                    emitted += 1
                    if emitted >= expected:
                        break
                elif len(pending) >= limit:
                    raise CorruptPayloadError(
                        f"bit sequence {pending} after {emitted} bytes matches no code"
                    )

        self.pending = pending
        self.emitted = emitted
        return bytes(out)

    def finish(self) -> None:
        if self.emitted != self.expected:
            raise CorruptPayloadError(
                f"decoded {self.emitted} bytes, header declares {self.expected}"
            )


__all__ = ["BitPacker", "BitUnpacker", "build_reverse_table"]
