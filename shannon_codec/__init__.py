"""Static Shannon entropy coder with a detachable code table."""

from __future__ import annotations

from .config import CodecConfig, get_codec_config
from .container import ContainerHeader
from .errors import (
    ArtifactIOError,
    CorruptPayloadError,
    FormatError,
    MismatchedIdError,
    ShannonCodecError,
    TableMismatchError,
    UnknownSymbolError,
)
from .frequency import count_frequencies
from .shannon_core import ShannonLogic, is_prefix_free
from .shannon_service import EncodeResult, ShannonService, decode, encode, random_id_source
from .table import CodeTable
from .workspace import Workspace

__all__ = [
    "ArtifactIOError",
    "CodeTable",
    "CodecConfig",
    "ContainerHeader",
    "CorruptPayloadError",
    "EncodeResult",
    "FormatError",
    "MismatchedIdError",
    "ShannonCodecError",
    "ShannonLogic",
    "ShannonService",
    "TableMismatchError",
    "UnknownSymbolError",
    "Workspace",
    "count_frequencies",
    "decode",
    "encode",
    "get_codec_config",
    "is_prefix_free",
    "random_id_source",
]
