"""Raster surfaces used to capture and synthesize signature images."""

import base64
import io
import math
from dataclasses import dataclass, replace

from PIL import Image, ImageDraw, ImageFont

TRANSPARENT = (0, 0, 0, 0)

# Pillow anchors for (alignment, baseline) pairs
_ANCHORS = {
    ("left", "top"): "la",
    ("left", "middle"): "lm",
    ("left", "bottom"): "ld",
    ("center", "top"): "ma",
    ("center", "middle"): "mm",
    ("right", "top"): "ra",
}


def to_data_url(data: bytes, mime: str = "image/png") -> str:
    """Encode raw image bytes as a data: URL."""
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def from_data_url(url: str) -> tuple[str, bytes]:
    """Decode a data: URL into (mime, bytes)."""
    if not url.startswith("data:") or ";base64," not in url:
        raise ValueError("Not a base64 data URL")
    header, payload = url[5:].split(";base64,", 1)
    return header or "application/octet-stream", base64.b64decode(payload)


def image_size(data: bytes) -> tuple[int, int]:
    """Return (width, height) of encoded image bytes."""
    with Image.open(io.BytesIO(data)) as img:
        return img.size


def _png_bytes(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def load_font(size: int, font_path: str | None = None) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Load the signature font; Pillow's bundled font unless a path is given."""
    if font_path:
        return ImageFont.truetype(font_path, size)
    return ImageFont.load_default(size=size)


class StrokeCanvas:
    """Fixed-size surface accumulating freehand strokes."""

    def __init__(
        self,
        width: int,
        height: int,
        stroke_width: int = 3,
        color: tuple[int, int, int, int] = (0, 0, 0, 255),
    ):
        self.width = width
        self.height = height
        self.stroke_width = max(1, stroke_width)
        self.color = color
        self._strokes: list[list[tuple[float, float]]] = []
        self._current: list[tuple[float, float]] | None = None

    @property
    def strokes(self) -> list[list[tuple[float, float]]]:
        return [list(s) for s in self._strokes]

    def _clip(self, x: float, y: float) -> tuple[float, float]:
        return min(max(x, 0.0), self.width), min(max(y, 0.0), self.height)

    def begin_stroke(self, x: float, y: float) -> None:
        self._current = [self._clip(x, y)]

    def add_point(self, x: float, y: float) -> None:
        if self._current is None:
            self.begin_stroke(x, y)
            return
        self._current.append(self._clip(x, y))

    def end_stroke(self) -> None:
        if self._current:
            self._strokes.append(self._current)
        self._current = None

    def is_empty(self) -> bool:
        return not self._strokes

    def clear(self) -> None:
        self._strokes.clear()
        self._current = None

    def to_png(self) -> bytes:
        """Rasterize all committed strokes onto a transparent PNG."""
        img = Image.new("RGBA", (self.width, self.height), TRANSPARENT)
        draw = ImageDraw.Draw(img)
        r = self.stroke_width / 2
        for stroke in self._strokes:
            if len(stroke) > 1:
                draw.line(stroke, fill=self.color, width=self.stroke_width, joint="curve")
            # round caps, and dots for single-point strokes
            for x, y in (stroke[0], stroke[-1]):
                draw.ellipse((x - r, y - r, x + r, y + r), fill=self.color)
        return _png_bytes(img)


@dataclass(frozen=True)
class PaintState:
    fill: tuple[int, int, int, int] = (0, 0, 0, 255)
    align: str = "left"
    baseline: str = "top"


SIGNATURE_PAINT = PaintState()


class TextRasterizer:
    """Offscreen surface that renders a typed name as a tightly cropped image.

    The surface is sized to the text's bounding box plus a fixed padding on
    every side. A new size means a new surface, which starts from a blank
    paint state, so the signature paint state is re-applied after each resize.
    """

    def __init__(self, font_size: int, padding: int, font_path: str | None = None):
        self.font_size = font_size
        self.padding = padding
        self.font = load_font(font_size, font_path)
        self._surface: Image.Image | None = None
        self.paint: PaintState | None = None

    @property
    def size(self) -> tuple[int, int]:
        return self._surface.size if self._surface is not None else (0, 0)

    def measure(self, text: str) -> tuple[int, int, int, int]:
        """Return the text's bounding box (left, top, right, bottom)."""
        left, top, right, bottom = self.font.getbbox(text, anchor=self._anchor(SIGNATURE_PAINT))
        return int(math.floor(left)), int(math.floor(top)), int(math.ceil(right)), int(math.ceil(bottom))

    def target_size(self, text: str) -> tuple[int, int]:
        left, top, right, bottom = self.measure(text)
        return (right - left) + 2 * self.padding, (bottom - top) + 2 * self.padding

    def render(self, text: str) -> bytes:
        """Render text to PNG bytes; identical text yields identical bytes."""
        if not text:
            raise ValueError("Cannot render empty text")
        left, top, _, _ = self.measure(text)
        self._prepare(*self.target_size(text))
        draw = ImageDraw.Draw(self._surface)
        draw.text(
            (self.padding - left, self.padding - top),
            text,
            font=self.font,
            fill=self.paint.fill,
            anchor=self._anchor(self.paint),
        )
        return _png_bytes(self._surface)

    def _prepare(self, width: int, height: int) -> None:
        if self._surface is not None and self._surface.size == (width, height):
            self._surface.paste(TRANSPARENT, (0, 0, width, height))
        else:
            self._surface = Image.new("RGBA", (width, height), TRANSPARENT)
        self.paint = replace(SIGNATURE_PAINT)

    @staticmethod
    def _anchor(paint: PaintState) -> str:
        return _ANCHORS.get((paint.align, paint.baseline), "la")
