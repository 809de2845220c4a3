"""Codec configuration profiles."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Dict, Mapping, Optional

from .formats import DEFAULT_FORMAT, LEGACY_FORMAT, FormatLayout, get_layout
from .frequency import DEFAULT_CHUNK_SIZE

PROFILE_ENV = "SHANNON_CODEC_PROFILE"
WORK_DIR_ENV = "SHANNON_CODEC_WORK_DIR"
CHUNK_SIZE_ENV = "SHANNON_CODEC_CHUNK_SIZE"


@dataclass(frozen=True)
class CodecConfig:
    """Options shared by the encode and decode sides of one artifact pair."""

    name: str
    format_version: int = DEFAULT_FORMAT
    chunk_size: int = DEFAULT_CHUNK_SIZE
    work_dir: str = "work"
    description: str = ""

    @property
    def layout(self) -> FormatLayout:
        return get_layout(self.format_version)

    def with_work_dir(self, work_dir: str) -> "CodecConfig":
        return replace(self, work_dir=work_dir)


_PROFILES: Dict[str, CodecConfig] = {
    "default": CodecConfig(
        name="default",
        format_version=DEFAULT_FORMAT,
        description="Widened header: 16-bit table count and 64-bit linking id.",
    ),
    "legacy": CodecConfig(
        name="legacy",
        format_version=LEGACY_FORMAT,
        description="Original layout: 8-bit table count and 8-bit linking id.",
    ),
}


def get_codec_config(profile: Optional[str] = None) -> CodecConfig:
    if profile is None:
        return _PROFILES["default"]
    try:
        return _PROFILES[profile]
    except KeyError as exc:
        raise ValueError(f"Unknown codec profile: {profile}") from exc


def available_profiles() -> Dict[str, str]:
    return {name: config.description for name, config in _PROFILES.items()}


def config_from_env(
    environ: Optional[Mapping[str, str]] = None, profile: Optional[str] = None
) -> CodecConfig:
    """Resolve a profile and its overrides from ``SHANNON_CODEC_*`` variables.

    An explicit *profile* replaces ``SHANNON_CODEC_PROFILE``; the work dir and
    chunk size overrides still apply on top of it.
    """
    environ = os.environ if environ is None else environ
    config = get_codec_config(profile or environ.get(PROFILE_ENV) or None)
    work_dir = environ.get(WORK_DIR_ENV)
    if work_dir:
        config = replace(config, work_dir=work_dir)
    chunk_size = environ.get(CHUNK_SIZE_ENV)
    if chunk_size:
        try:
            size = int(chunk_size)
        except ValueError as exc:
            raise ValueError(f"{CHUNK_SIZE_ENV} must be an integer, got {chunk_size!r}") from exc
        if size <= 0:
            raise ValueError(f"{CHUNK_SIZE_ENV} must be positive, got {size}")
        config = replace(config, chunk_size=size)
    return config


__all__ = [
    "CodecConfig",
    "available_profiles",
    "config_from_env",
    "get_codec_config",
]
