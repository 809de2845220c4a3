"""Byte frequency analysis."""

from __future__ import annotations

from collections import Counter
from os import PathLike
from typing import BinaryIO, List, Tuple, Union

from .errors import ArtifactIOError

DEFAULT_CHUNK_SIZE = 65536

ByteSource = Union[bytes, bytearray, memoryview, BinaryIO]


def count_frequencies(source: ByteSource, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Counter:
    """Return a histogram of every byte value present in *source*.

    *source* is either a bytes-like object or a readable binary stream. Streams
    are consumed in chunks of *chunk_size* bytes and are not closed.
    """

    if isinstance(source, (bytes, bytearray, memoryview)):
        return Counter(bytes(source))

    freqs: Counter = Counter()
    while True:
        try:
            chunk = source.read(chunk_size)
        except OSError as exc:
            raise ArtifactIOError(f"failed to read source: {exc}") from exc
        if not chunk:
            break
        freqs.update(chunk)
    return freqs


def read_frequencies(path: Union[str, PathLike], chunk_size: int = DEFAULT_CHUNK_SIZE) -> Counter:
    try:
        with open(path, "rb") as handle:
            return count_frequencies(handle, chunk_size)
    except OSError as exc:
        raise ArtifactIOError(f"failed to open source {path}: {exc}") from exc


def sorted_frequencies(freqs) -> List[Tuple[int, int]]:
    # Descending count, ties broken by ascending symbol.
    return sorted(freqs.items(), key=lambda item: (-item[1], item[0]))


__all__ = ["DEFAULT_CHUNK_SIZE", "count_frequencies", "read_frequencies", "sorted_frequencies"]
