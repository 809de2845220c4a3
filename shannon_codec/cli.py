"""Command line interface for the Shannon codec."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .config import available_profiles, config_from_env
from .errors import ShannonCodecError
from .workspace import Workspace, original_name

logger = logging.getLogger("shannon_codec")

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shannon-codec",
        description="Compress files with a static Shannon code and a detachable code table.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument(
        "--work-dir",
        default=None,
        help="Workspace root holding raw/, dictionary/, encoded/ and decoded/.",
    )
    parser.add_argument(
        "--format",
        dest="profile",
        choices=sorted(available_profiles()),
        default=None,
        help="Artifact layout profile (default: 'default', or $SHANNON_CODEC_PROFILE).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    encode = sub.add_parser("encode", help="Encode files from the raw directory.")
    encode.add_argument("files", nargs="+", help="File paths or names under raw/.")

    decode = sub.add_parser("decode", help="Decode files from the encoded directory.")
    decode.add_argument("files", nargs="+", help="File paths or names under encoded/.")

    listing = sub.add_parser("list", help="List files available for encoding or decoding.")
    listing.add_argument("kind", choices=["raw", "encoded"])

    inspect = sub.add_parser("inspect", help="Show the header of an encoded file.")
    inspect.add_argument("file")
    return parser


def _workspace(args: argparse.Namespace) -> Workspace:
    config = config_from_env(profile=args.profile)
    if args.work_dir is not None:
        config = config.with_work_dir(args.work_dir)
    return Workspace(config=config)


def _cmd_encode(workspace: Workspace, files: Sequence[str]) -> int:
    for name in files:
        result = workspace.encode_file(workspace.resolve(name, workspace.raw_dir))
        ratio = result.encoded_size / result.original_size if result.original_size else 0.0
        print(
            f"{result.source.name}: {result.original_size} -> {result.encoded_size} bytes "
            f"(+{result.table_size} table, ratio {ratio:.3f}), id {result.linking_id}"
        )
    return 0


def _cmd_decode(workspace: Workspace, files: Sequence[str]) -> int:
    for name in files:
        result = workspace.decode_file(workspace.resolve(name, workspace.encoded_dir))
        print(f"{result.encoded_path.name}: {result.size} bytes -> {result.decoded_path}")
    return 0


def _cmd_list(workspace: Workspace, kind: str) -> int:
    if kind == "raw":
        directory, entries = workspace.raw_dir, workspace.list_raw()
    else:
        directory, entries = workspace.encoded_dir, workspace.list_encoded()
    print(f"Files available in '{directory}':")
    for index, entry in enumerate(entries, start=1):
        print(f"{index}. {entry.name}")
    if not entries:
        print("(none)")
    return 0


def _cmd_inspect(workspace: Workspace, name: str) -> int:
    path = workspace.resolve(name, workspace.encoded_dir)
    header = workspace.read_header(path)
    print(f"format:          {workspace.config.format_version}")
    print(f"original size:   {header.original_size}")
    print(f"table entries:   {header.table_entries}")
    print(f"linking id:      {header.linking_id}")
    try:
        table = workspace.load_table(header.linking_id, Path(original_name(path.name)).stem)
    except ShannonCodecError as exc:
        print(f"table:           unavailable ({exc})")
        return 0
    lengths: List[int] = [len(code) for code in table.codes.values()]
    print(f"table codes:     {len(lengths)}")
    if lengths:
        print(f"code lengths:    {min(lengths)}..{max(lengths)}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        workspace = _workspace(args)
        if args.command == "encode":
            return _cmd_encode(workspace, args.files)
        if args.command == "decode":
            return _cmd_decode(workspace, args.files)
        if args.command == "list":
            return _cmd_list(workspace, args.kind)
        return _cmd_inspect(workspace, args.file)
    except (ShannonCodecError, ValueError) as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
