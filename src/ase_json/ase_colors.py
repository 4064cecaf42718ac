from __future__ import annotations

from .byte_reader import ByteReader
from .color_convert import cmyk_to_rgb, rgb_floats_to_bytes
from .errors import UnsupportedColorModelError

MODEL_CMYK = "CMYK"
MODEL_RGB = "RGB"
MODEL_LAB = "LAB"
MODEL_GRAY = "Gray"

_CANONICAL_MODELS = {
    "CMYK": MODEL_CMYK,
    "RGB": MODEL_RGB,
    "LAB": MODEL_LAB,
    "GRAY": MODEL_GRAY,
}

RGBBytes = tuple[int | None, int | None, int | None]
DecodedColor = tuple[str, list[float], RGBBytes | None]


def normalize_model_tag(model_raw: bytes) -> str:
    return model_raw.decode("ascii", errors="replace").strip(" \x00")


def decode_color(
    reader: ByteReader, model_raw: bytes, decode_gray: bool = False
) -> DecodedColor:
    """Consume the value payload for ``model_raw`` and return (model, values, rgb).

    The color-type field that follows the payload is left for the caller.
    """
    model_tag = normalize_model_tag(model_raw)
    model = _CANONICAL_MODELS.get(model_tag.upper())

    if model == MODEL_CMYK:
        c = reader.read_f32("CMYK c")
        m = reader.read_f32("CMYK m")
        y = reader.read_f32("CMYK y")
        k = reader.read_f32("CMYK k")
        return model, [c, m, y, k], cmyk_to_rgb(c, m, y, k)

    if model == MODEL_RGB:
        r = reader.read_f32("RGB r")
        g = reader.read_f32("RGB g")
        b = reader.read_f32("RGB b")
        return model, [], rgb_floats_to_bytes(r, g, b)

    if model == MODEL_LAB:
        l_value = reader.read_f32("Lab l")
        a_value = reader.read_f32("Lab a")
        b_value = reader.read_f32("Lab b")
        return model, [l_value, a_value, b_value], None

    if model == MODEL_GRAY and decode_gray:
        return model, [reader.read_f32("Gray")], None

    raise UnsupportedColorModelError(
        f"{reader.source}: unsupported color model {model_tag!r} at offset {reader.pos - 4}"
    )
