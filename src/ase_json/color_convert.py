from __future__ import annotations

import math
from typing import Iterable


def round_half_up(value: float) -> int | None:
    # NaN and infinities have no byte value; they come out as None (JSON null).
    if not math.isfinite(value):
        return None
    return int(math.floor(value + 0.5))


def finite_or_none(value: float) -> float | None:
    return value if math.isfinite(value) else None


def clamp8(value: float) -> int:
    return max(0, min(255, int(math.floor(value + 0.5))))


def rgb_to_hex(rgb: Iterable[int]) -> str:
    r, g, b = rgb
    return f"#{clamp8(r):02X}{clamp8(g):02X}{clamp8(b):02X}"


def unit_to_byte(value: float) -> int | None:
    return round_half_up(value * 255.0)


def rgb_floats_to_bytes(r: float, g: float, b: float) -> tuple[int | None, int | None, int | None]:
    return unit_to_byte(r), unit_to_byte(g), unit_to_byte(b)


def cmyk_to_rgb(c: float, m: float, y: float, k: float) -> tuple[int | None, int | None, int | None]:
    # Out-of-range components are passed through unclamped.
    r = ((1.0 - c) * (1.0 - k)) * 255.0
    g = ((1.0 - m) * (1.0 - k)) * 255.0
    b = ((1.0 - y) * (1.0 - k)) * 255.0
    return round_half_up(r), round_half_up(g), round_half_up(b)
