from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .ase_colors import decode_color
from .byte_reader import ByteReader, read_ase_string
from .errors import (
    BufferUnderrunError,
    InvalidSignatureError,
    MalformedBlockError,
    OddLengthBufferError,
    UnknownBlockTypeError,
)
from .storage import read_source
from .swatch_tree import ColorEntry, Header, SwatchTree

logger = logging.getLogger(__name__)

SIGNATURE = b"ASEF"

BLOCK_GROUP_START = 0xC001
BLOCK_GROUP_END = 0xC002
BLOCK_COLOR_ENTRY = 0x0001

BLOCK_LABELS = {
    BLOCK_GROUP_START: "group start",
    BLOCK_GROUP_END: "group end",
    BLOCK_COLOR_ENTRY: "color entry",
}


@dataclass(frozen=True, slots=True)
class DecodeOptions:
    """Decoder switches.

    nested_groups: track open groups on a stack. When False a single group
        name is kept: a group start replaces it and a group end clears it.
    strict_lengths: fail when a block's payload does not span exactly its
        declared length.
    decode_gray: read Gray colors (one float) instead of rejecting them.
    """

    nested_groups: bool = True
    strict_lengths: bool = False
    decode_gray: bool = False


class WalkState(Enum):
    AWAITING_BLOCK = "awaiting_block"
    DONE = "done"


def parse_ase(path: str | Path, options: DecodeOptions | None = None) -> SwatchTree:
    file_path = Path(path)
    data = read_source(file_path)
    return parse_ase_bytes(data, source=str(file_path), options=options)


def parse_ase_bytes(
    data: bytes, source: str = "<memory>", options: DecodeOptions | None = None
) -> SwatchTree:
    reader = ByteReader(data, source=source)
    header = read_header(reader)
    logger.info(
        "%s: ASE %s with %d declared blocks", source, header.version, header.block_count
    )

    walker = BlockWalker(reader, SwatchTree(header=header), options or DecodeOptions())
    tree = walker.walk()

    if walker.blocks_walked != header.block_count:
        logger.warning(
            "%s: header declares %d blocks but %d were read",
            source,
            header.block_count,
            walker.blocks_walked,
        )
    return tree


def read_header(reader: ByteReader) -> Header:
    try:
        signature = reader.read_bytes(4, "signature")
    except BufferUnderrunError as exc:
        raise InvalidSignatureError(f"{reader.source}: file too short for an ASE signature") from exc
    if signature != SIGNATURE:
        raise InvalidSignatureError(
            f"{reader.source}: invalid signature {signature!r}, expected {SIGNATURE!r}"
        )

    try:
        major = reader.read_u16("version major")
        minor = reader.read_u16("version minor")
        block_count = reader.read_u32("block count")
    except BufferUnderrunError as exc:
        raise MalformedBlockError(f"{reader.source}: truncated header: {exc}") from exc

    return Header(
        signature=signature,
        version_major=major,
        version_minor=minor,
        block_count=block_count,
    )


class BlockWalker:
    def __init__(self, reader: ByteReader, tree: SwatchTree, options: DecodeOptions) -> None:
        self.reader = reader
        self.tree = tree
        self.options = options
        self.state = WalkState.AWAITING_BLOCK
        self.group_stack: list[str] = []
        self.blocks_walked = 0

    @property
    def group_path(self) -> tuple[str, ...]:
        return tuple(self.group_stack)

    def walk(self) -> SwatchTree:
        while self.state is WalkState.AWAITING_BLOCK:
            if self.reader.at_end():
                self.state = WalkState.DONE
                break
            self.step()
        return self.tree

    def step(self) -> None:
        reader = self.reader
        index = self.blocks_walked
        try:
            block_type = reader.read_u16(f"block {index} type")
            block_length = reader.read_u32(f"block {index} length")
            payload_start = reader.pos

            if block_type == BLOCK_GROUP_START:
                self._start_group(read_ase_string(reader, f"block {index} group name"))
            elif block_type == BLOCK_GROUP_END:
                self._end_group()
            elif block_type == BLOCK_COLOR_ENTRY:
                self._read_color(index)
            else:
                raise UnknownBlockTypeError(
                    f"{reader.source}: unknown block type 0x{block_type:04X} "
                    f"in block {index} at offset {payload_start - 6}"
                )
        except (BufferUnderrunError, OddLengthBufferError) as exc:
            raise MalformedBlockError(f"{reader.source}: malformed block {index}: {exc}") from exc

        consumed = reader.pos - payload_start
        if self.options.strict_lengths and consumed != block_length:
            raise MalformedBlockError(
                f"{reader.source}: block {index} declares {block_length} bytes "
                f"but its payload spans {consumed}"
            )

        logger.debug(
            "%s: block %d (%s) length=%d group=%s",
            reader.source,
            index,
            BLOCK_LABELS[block_type],
            block_length,
            "/".join(self.group_stack) or "<root>",
        )
        self.blocks_walked += 1

    def _start_group(self, group_name: str) -> None:
        if self.options.nested_groups:
            self.group_stack.append(group_name)
        else:
            self.group_stack[:] = [group_name]

    def _end_group(self) -> None:
        if not self.group_stack:
            return
        if self.options.nested_groups:
            self.group_stack.pop()
        else:
            self.group_stack.clear()

    def _read_color(self, index: int) -> None:
        reader = self.reader
        color_name = read_ase_string(reader, f"block {index} color name")
        model_raw = reader.read_bytes(4, f"block {index} color model")
        model, values, rgb = decode_color(reader, model_raw, decode_gray=self.options.decode_gray)
        # The color type follows the value payload on disk.
        color_type = reader.read_u16(f"block {index} color type")

        entry = ColorEntry(
            name=color_name,
            model=model,
            color_type=color_type,
            values=values,
            rgb=rgb,
        )
        self.tree.insert(self.group_path, entry)
