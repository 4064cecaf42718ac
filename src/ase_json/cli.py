"""Command-line interface: convert an ASE file to a JSON tree beside it."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console

from .ase_parser import DecodeOptions, parse_ase
from .errors import ASEError, FileWriteError, MissingArgumentError
from .log_config import configure_logging
from .preview import write_preview
from .storage import json_path_for, write_tree_json

console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)

USAGE = "USAGE: ase2json file.ase"


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ase2json",
        description="Convert an Adobe Swatch Exchange (.ase) file to JSON",
    )
    p.add_argument("file", nargs="?", help="Path to the .ase file")
    p.add_argument(
        "-o",
        "--output",
        help="JSON output path (default: input path with a .json extension)",
    )
    p.add_argument(
        "--flat-groups",
        action="store_true",
        help="Keep only the most recent group open instead of nesting groups",
    )
    p.add_argument(
        "--strict-lengths",
        action="store_true",
        help="Fail when a block does not span exactly its declared length",
    )
    p.add_argument("--decode-gray", action="store_true", help="Decode Gray colors instead of failing")
    p.add_argument("--preview", help="Also write a PNG swatch sheet to this path")
    p.add_argument("--log-level", default=None, help="Logging level (default: WARNING)")
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    configure_logging(level=args.log_level)

    try:
        if not args.file:
            raise MissingArgumentError("no ASE file given")
        return _convert(args)
    except MissingArgumentError as exc:
        _error(f"ERROR: {exc}")
        _error(USAGE)
        return 2
    except ASEError as exc:
        logger.debug("conversion failed", exc_info=True)
        _error(f"ERROR: {exc}")
        return 1


def run() -> None:
    sys.exit(main())


def _convert(args: argparse.Namespace) -> int:
    source = Path(args.file)
    options = DecodeOptions(
        nested_groups=not args.flat_groups,
        strict_lengths=args.strict_lengths,
        decode_gray=args.decode_gray,
    )
    tree = parse_ase(source, options=options)

    header = tree.header
    _out(f"Signature: {header.signature.decode('ascii', errors='replace')}")
    _out(f"Version: {header.version}")
    _out(f"Number of Blocks: {header.block_count}")

    out_path = Path(args.output) if args.output else json_path_for(source)
    if out_path.resolve() == source.resolve():
        raise FileWriteError(f"{out_path}: refusing to overwrite the input file")
    write_tree_json(tree, out_path)
    _out(f"Successfully written to {out_path}")

    if args.preview:
        preview_path = write_preview(tree, args.preview)
        _out(f"Preview written to {preview_path}")
    return 0


def _out(message: str) -> None:
    console.print(message, markup=False, highlight=False, soft_wrap=True)


def _error(message: str) -> None:
    err_console.print(message, markup=False, highlight=False, soft_wrap=True)
