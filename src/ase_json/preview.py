from __future__ import annotations

import base64
import math
from io import BytesIO
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from .color_convert import rgb_to_hex
from .errors import FileWriteError, PreviewLimitError
from .swatch_tree import ColorEntry, SwatchTree

TILE_SIZE = 96
LABEL_HEIGHT = 30
PADDING = 6
BACKGROUND = (255, 255, 255)
TEXT_COLOR = (32, 32, 32)
NO_PREVIEW_FILL = (228, 228, 228)
MAX_PREVIEW_TILES = 512
MAX_COLUMNS = 64


def render_preview(tree: SwatchTree, columns: int = 8) -> Image.Image:
    """Lay out one tile per color in tree order.

    Colors without a display RGB (LAB, Gray, non-finite channels) get a neutral
    tile carrying the model name instead of a converted color. Trees over
    MAX_PREVIEW_TILES colors raise PreviewLimitError.
    """
    entries = list(tree.iter_colors())
    if len(entries) > MAX_PREVIEW_TILES:
        raise PreviewLimitError(
            f"preview is limited to {MAX_PREVIEW_TILES} colors, the file has {len(entries)}"
        )
    columns = max(1, min(MAX_COLUMNS, columns))
    used_columns = max(1, min(columns, len(entries)))
    rows = max(1, math.ceil(len(entries) / columns))
    cell_w = TILE_SIZE + PADDING
    cell_h = TILE_SIZE + LABEL_HEIGHT + PADDING

    image = Image.new("RGB", (used_columns * cell_w + PADDING, rows * cell_h + PADDING), BACKGROUND)
    draw = ImageDraw.Draw(image)
    font = ImageFont.load_default()

    for index, (group_path, entry) in enumerate(entries):
        x = PADDING + (index % columns) * cell_w
        y = PADDING + (index // columns) * cell_h
        _draw_tile(draw, font, x, y, entry)

        caption = _fit_text(draw, font, entry.name, TILE_SIZE)
        draw.text((x, y + TILE_SIZE + 2), caption, fill=TEXT_COLOR, font=font)
        if group_path:
            group_caption = _fit_text(draw, font, "/".join(group_path), TILE_SIZE)
            draw.text((x, y + TILE_SIZE + 15), group_caption, fill=TEXT_COLOR, font=font)

    return image


def preview_png_bytes(tree: SwatchTree, columns: int = 8) -> bytes:
    buffer = BytesIO()
    render_preview(tree, columns=columns).save(buffer, format="PNG")
    return buffer.getvalue()


def preview_data_url(tree: SwatchTree, columns: int = 8) -> str:
    encoded = base64.b64encode(preview_png_bytes(tree, columns=columns)).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def _draw_tile(draw: ImageDraw.ImageDraw, font, x: int, y: int, entry: ColorEntry) -> None:
    box = (x, y, x + TILE_SIZE - 1, y + TILE_SIZE - 1)
    if not entry.has_display_rgb:
        draw.rectangle(box, fill=NO_PREVIEW_FILL, outline=TEXT_COLOR)
        draw.text((x + 6, y + 6), _printable(font, entry.model), fill=TEXT_COLOR, font=font)
        return

    fill = rgb_to_hex(entry.rgb)
    draw.rectangle(box, fill=fill, outline=TEXT_COLOR)


def _fit_text(draw: ImageDraw.ImageDraw, font, text: str, max_width: int) -> str:
    text = _printable(font, text)
    if draw.textlength(text, font=font) <= max_width:
        return text
    trimmed = text
    while trimmed and draw.textlength(trimmed + "...", font=font) > max_width:
        trimmed = trimmed[:-1]
    return trimmed + "..."


def _printable(font, text: str) -> str:
    # Bitmap fonts only cover latin-1.
    if isinstance(font, ImageFont.FreeTypeFont):
        return text
    return text.encode("latin-1", errors="replace").decode("latin-1")


def write_preview(tree: SwatchTree, path: str | Path, columns: int = 8) -> Path:
    out_path = Path(path)
    try:
        out_path.write_bytes(preview_png_bytes(tree, columns=columns))
    except OSError as exc:
        raise FileWriteError(f"{out_path}: {exc.strerror or exc}") from exc
    return out_path
