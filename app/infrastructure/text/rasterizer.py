# app/infrastructure/text/rasterizer.py
"""
Off-screen rendering of the custom text box.

The box is laid out like the editor's markup: a white card at least 200x80,
a primary heading above a secondary heading, both centered in a column with
10px margins. ``measure`` reports the natural size of that card and
``render`` draws it at exactly that size, so the measured aspect ratio is the
one the compositor later scales to fit.
"""
import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

LINE_SAMPLE = "Hg"


@dataclass(frozen=True)
class TextBoxStyle:
    primary_font_path: Optional[str] = None
    secondary_font_path: Optional[str] = None
    primary_size: int = 24
    secondary_size: int = 19
    margin: int = 10
    min_width: int = 200
    min_height: int = 80
    background: Tuple[int, int, int, int] = (255, 255, 255, 255)
    color: Tuple[int, int, int, int] = (0, 0, 0, 255)


def load_font(font_path: Optional[str], size: int):
    """Load a TrueType font, falling back to Pillow's bundled default."""
    if font_path and os.path.exists(font_path):
        return ImageFont.truetype(font_path, size)
    if font_path:
        logger.warning(f"Font not found at '{font_path}', using default font.")
    return ImageFont.load_default(size=size)


def _text_width(font, text: str) -> int:
    if not text:
        return 0
    left, _, right, _ = font.getbbox(text)
    return right - left


def _line_height(font) -> int:
    _, top, _, bottom = font.getbbox(LINE_SAMPLE)
    return bottom - top


class TextBlockRenderer:
    def __init__(self, style: TextBoxStyle = TextBoxStyle()):
        self.style = style
        self.primary_font = load_font(style.primary_font_path, style.primary_size)
        self.secondary_font = load_font(style.secondary_font_path, style.secondary_size)

    def _content_height(self) -> int:
        m = self.style.margin
        # primary: margin all around; secondary: no top margin
        return m + _line_height(self.primary_font) + m + _line_height(self.secondary_font) + m

    def measure(self, primary_text: str, secondary_text: str) -> Tuple[int, int]:
        m = self.style.margin
        content_w = max(_text_width(self.primary_font, primary_text),
                        _text_width(self.secondary_font, secondary_text)) + 2 * m
        return (max(self.style.min_width, content_w),
                max(self.style.min_height, self._content_height()))

    def render(self, primary_text: str, secondary_text: str) -> Image.Image:
        width, height = self.measure(primary_text, secondary_text)
        canvas = Image.new("RGBA", (width, height), self.style.background)
        draw = ImageDraw.Draw(canvas)

        m = self.style.margin
        y = (height - self._content_height()) // 2 + m
        for text, font in ((primary_text, self.primary_font), (secondary_text, self.secondary_font)):
            if text:
                left, top, _, _ = font.getbbox(text)
                x = (width - _text_width(font, text)) // 2 - left
                draw.text((x, y - top), text, font=font, fill=self.style.color)
            y += _line_height(font) + m
        return canvas
