from __future__ import annotations

import struct

from .errors import BufferUnderrunError, OddLengthBufferError


class ByteReader:
    def __init__(self, data: bytes, source: str = "<memory>") -> None:
        self.data = bytes(data)
        self.pos = 0
        self.source = source

    def remaining(self) -> int:
        return len(self.data) - self.pos

    def at_end(self) -> bool:
        return self.pos == len(self.data)

    def _ensure(self, size: int, context: str) -> None:
        if self.remaining() < size:
            raise BufferUnderrunError(
                f"{self.source}: unexpected EOF while reading {context} at offset {self.pos} "
                f"(need {size} bytes, {self.remaining()} left)"
            )

    def read_bytes(self, size: int, context: str) -> bytes:
        self._ensure(size, context)
        chunk = self.data[self.pos : self.pos + size]
        self.pos += size
        return chunk

    def read_u16(self, context: str) -> int:
        return int.from_bytes(self.read_bytes(2, context), "big")

    def read_u32(self, context: str) -> int:
        return int.from_bytes(self.read_bytes(4, context), "big")

    def read_f32(self, context: str) -> float:
        return struct.unpack(">f", self.read_bytes(4, context))[0]


def swap_utf16_bytes(raw: bytes) -> bytes:
    """Swap every byte pair, turning UTF-16BE code units into UTF-16LE ones."""
    if len(raw) % 2:
        raise OddLengthBufferError(f"UTF-16 buffer length must be even, got {len(raw)}")
    swapped = bytearray(len(raw))
    swapped[0::2] = raw[1::2]
    swapped[1::2] = raw[0::2]
    return bytes(swapped)


def decode_utf16be_units(raw: bytes) -> str:
    return swap_utf16_bytes(raw).decode("utf-16-le", errors="replace")


def read_ase_string(reader: ByteReader, context: str = "string") -> str:
    """Read a u16 code-unit count followed by that many UTF-16BE units.

    The count includes the null terminator, which is dropped from the result.
    A count of zero reads nothing and yields an empty string.
    """
    length_units = reader.read_u16(f"{context} length")
    if length_units == 0:
        return ""

    raw = reader.read_bytes(length_units * 2, context)
    value = decode_utf16be_units(raw)
    return value[:-1]
