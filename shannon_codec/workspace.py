"""Working directory convention for encoding files to and from disk.

A workspace root holds four directories::

    raw/         files to encode
    dictionary/  table artifacts, dict_<id>_<stem>.bin
    encoded/     encoded artifacts, encoded_<id>_<name>
    decoded/     decoded output, decoded_<name>

Artifacts are written to ``*.part`` files first and renamed into place once
complete, so an interrupted run never leaves a finished-looking artifact.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional, Union

from .config import CodecConfig, get_codec_config
from .errors import ArtifactIOError, FormatError
from .frequency import read_frequencies
from .shannon_service import ShannonService, random_id_source
from .table import CodeTable

logger = logging.getLogger(__name__)

RAW_DIR = "raw"
TABLE_DIR = "dictionary"
ENCODED_DIR = "encoded"
DECODED_DIR = "decoded"

TABLE_PREFIX = "dict_"
TABLE_SUFFIX = ".bin"
ENCODED_PREFIX = "encoded_"
DECODED_PREFIX = "decoded_"
PART_SUFFIX = ".part"

_ENCODED_NAME = re.compile(r"^encoded_(\d+)_(.+)$")

PathLike = Union[str, "os.PathLike[str]"]


@dataclass(frozen=True)
class EncodedFiles:
    source: Path
    table_path: Path
    encoded_path: Path
    linking_id: int
    original_size: int
    table_size: int
    encoded_size: int


@dataclass(frozen=True)
class DecodedFile:
    encoded_path: Path
    table_path: Path
    decoded_path: Path
    size: int


def iter_chunks(handle: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    while True:
        chunk = handle.read(chunk_size)
        if not chunk:
            return
        yield chunk


def original_name(encoded_name: str) -> str:
    """Strip the ``encoded_<id>_`` prefix from an encoded artifact's file name."""
    match = _ENCODED_NAME.match(encoded_name)
    if match is None:
        raise FormatError(
            f"'{encoded_name}' does not follow the encoded_<id>_<name> convention"
        )
    return match.group(2)


def _part_path(path: Path) -> Path:
    return path.with_name(path.name + PART_SUFFIX)


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


class WorkspaceIdSource:
    """Draws linking ids that no existing table artifact for *stem* uses."""

    def __init__(self, workspace: "Workspace", stem: str, bits: int, attempts: int = 64, draw=None) -> None:
        self.workspace = workspace
        self.stem = stem
        self.attempts = attempts
        self.draw = draw or random_id_source(bits)

    def __call__(self) -> int:
        for _ in range(self.attempts):
            candidate = self.draw()
            if not self.workspace.table_path(candidate, self.stem).exists():
                return candidate
            logger.debug("Linking id %d already used for %s, drawing again", candidate, self.stem)
        raise ArtifactIOError(
            f"no unused linking id for '{self.stem}' after {self.attempts} attempts"
        )


class Workspace:
    def __init__(self, root: Optional[PathLike] = None, config: Optional[CodecConfig] = None) -> None:
        self.config = config or get_codec_config()
        self.root = Path(root if root is not None else self.config.work_dir)
        self.service = ShannonService(self.config)

    @property
    def raw_dir(self) -> Path:
        return self.root / RAW_DIR

    @property
    def table_dir(self) -> Path:
        return self.root / TABLE_DIR

    @property
    def encoded_dir(self) -> Path:
        return self.root / ENCODED_DIR

    @property
    def decoded_dir(self) -> Path:
        return self.root / DECODED_DIR

    def ensure(self) -> None:
        for directory in (self.raw_dir, self.table_dir, self.encoded_dir, self.decoded_dir):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise ArtifactIOError(f"cannot create {directory}: {exc}") from exc

    def table_path(self, linking_id: int, stem: str) -> Path:
        return self.table_dir / f"{TABLE_PREFIX}{linking_id}_{stem}{TABLE_SUFFIX}"

    def encoded_path(self, linking_id: int, name: str) -> Path:
        return self.encoded_dir / f"{ENCODED_PREFIX}{linking_id}_{name}"

    def decoded_path(self, name: str) -> Path:
        return self.decoded_dir / f"{DECODED_PREFIX}{name}"

    def _list(self, directory: Path, prefix: str = "") -> List[Path]:
        if not directory.is_dir():
            return []
        return sorted(
            entry
            for entry in directory.iterdir()
            if entry.is_file()
            and entry.name.startswith(prefix)
            and not entry.name.endswith(PART_SUFFIX)
        )

    def list_raw(self) -> List[Path]:
        return self._list(self.raw_dir)

    def list_encoded(self) -> List[Path]:
        return self._list(self.encoded_dir, ENCODED_PREFIX)

    def resolve(self, name: PathLike, directory: Path) -> Path:
        """Return *name* as given if it exists, else the same name under *directory*."""
        path = Path(name)
        if path.exists() or path.parent != Path("."):
            return path
        return directory / path

    def encode_file(self, source: PathLike) -> EncodedFiles:
        """Encode *source* into a table artifact and an encoded artifact."""
        source = Path(source)
        layout = self.config.layout
        chunk_size = self.config.chunk_size
        self.ensure()

        freqs = read_frequencies(source, chunk_size)
        original_size = sum(freqs.values())
        id_source = WorkspaceIdSource(self, source.stem, layout.id_bits)
        table = self.service.build_table(freqs, id_source)

        table_path = self.table_path(table.linking_id, source.stem)
        encoded_path = self.encoded_path(table.linking_id, source.name)
        table_part = _part_path(table_path)
        encoded_part = _part_path(encoded_path)
        table_bytes = table.encode(layout)

        committed: List[Path] = []
        try:
            with open(table_part, "wb") as handle:
                handle.write(table_bytes)
            with open(source, "rb") as src, open(encoded_part, "wb") as dst:
                encoded_size = self.service.encode_stream(
                    table, original_size, iter_chunks(src, chunk_size), dst.write
                )
            os.replace(table_part, table_path)
            committed.append(table_path)
            os.replace(encoded_part, encoded_path)
            committed.append(encoded_path)
        except OSError as exc:
            for path in committed:
                _discard(path)
            raise ArtifactIOError(f"failed to encode {source}: {exc}") from exc
        except BaseException:
            for path in committed:
                _discard(path)
            raise
        finally:
            _discard(table_part)
            _discard(encoded_part)

        logger.info("Encoded %s into %s", source, encoded_path)
        logger.info("Table saved to %s", table_path)
        return EncodedFiles(
            source=source,
            table_path=table_path,
            encoded_path=encoded_path,
            linking_id=table.linking_id,
            original_size=original_size,
            table_size=len(table_bytes),
            encoded_size=encoded_size,
        )

    def read_header(self, encoded: PathLike):
        size = self.config.layout.container_header.size
        try:
            with open(encoded, "rb") as handle:
                head = handle.read(size)
        except OSError as exc:
            raise ArtifactIOError(f"cannot read {encoded}: {exc}") from exc
        header, _ = self.service.read_header(head)
        return header

    def load_table(self, linking_id: int, stem: str) -> CodeTable:
        table_path = self.table_path(linking_id, stem)
        try:
            data = table_path.read_bytes()
        except FileNotFoundError as exc:
            raise ArtifactIOError(f"table artifact does not exist: {table_path}") from exc
        except OSError as exc:
            raise ArtifactIOError(f"cannot read {table_path}: {exc}") from exc
        return CodeTable.parse(data, self.config.layout)

    def decode_file(self, encoded: PathLike) -> DecodedFile:
        """Decode *encoded* with its table artifact into the decoded directory."""
        encoded = Path(encoded)
        layout = self.config.layout
        name = original_name(encoded.name)
        self.ensure()

        header = self.read_header(encoded)
        table_path = self.table_path(header.linking_id, Path(name).stem)
        table = self.load_table(header.linking_id, Path(name).stem)

        decoded_path = self.decoded_path(name)
        decoded_part = _part_path(decoded_path)
        try:
            with open(encoded, "rb") as src, open(decoded_part, "wb") as dst:
                src.seek(layout.container_header.size)
                size = self.service.decode_stream(
                    header, table, iter_chunks(src, self.config.chunk_size), dst.write
                )
            os.replace(decoded_part, decoded_path)
        except OSError as exc:
            raise ArtifactIOError(f"failed to decode {encoded}: {exc}") from exc
        finally:
            _discard(decoded_part)

        logger.info("Decoded %s into %s (%d bytes)", encoded, decoded_path, size)
        return DecodedFile(
            encoded_path=encoded,
            table_path=table_path,
            decoded_path=decoded_path,
            size=size,
        )


__all__ = [
    "DecodedFile",
    "EncodedFiles",
    "Workspace",
    "WorkspaceIdSource",
    "original_name",
]
