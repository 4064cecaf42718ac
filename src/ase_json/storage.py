from __future__ import annotations

import json
import logging
from pathlib import Path

from .errors import FileReadError, FileWriteError
from .swatch_tree import SwatchTree

logger = logging.getLogger(__name__)

JSON_INDENT = 4


def read_source(path: str | Path) -> bytes:
    file_path = Path(path)
    try:
        data = file_path.read_bytes()
    except OSError as exc:
        raise FileReadError(f"{file_path}: {exc.strerror or exc}") from exc
    logger.debug("%s: read %d bytes", file_path, len(data))
    return data


def json_path_for(path: str | Path) -> Path:
    """Same directory and base name; only an ``.ase`` extension is replaced."""
    source = Path(path)
    name = source.name
    if source.suffix.lower() == ".ase":
        name = source.stem
    return source.with_name(name + ".json")


def dump_tree(tree: SwatchTree) -> str:
    return json.dumps(tree.to_dict(), indent=JSON_INDENT, ensure_ascii=False, allow_nan=False)


def write_tree_json(tree: SwatchTree, path: str | Path) -> Path:
    out_path = Path(path)
    text = dump_tree(tree)
    try:
        out_path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise FileWriteError(f"{out_path}: {exc.strerror or exc}") from exc
    logger.info("%s: wrote %d colors", out_path, tree.color_count())
    return out_path
