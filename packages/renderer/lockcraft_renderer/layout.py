"""Shrink-to-fit text layout and text layer rasterization."""

from __future__ import annotations

import logging
import unicodedata
from dataclasses import dataclass

from PIL import Image, ImageDraw, ImageFont

from .fonts import FontResolver
from .models import Alignment, DeviceProfile, Rect, TextLayer, TextStyle

MINIMUM_FONT_SIZE = 12
MAXIMUM_FONT_SIZE = 120
FONT_SIZE_STEP = 1

# Never start a wrapped line with closing punctuation.
_NO_BREAK_BEFORE = frozenset("，。、！？；：）」』》〉】,.!?;:)")

_LOG = logging.getLogger("lockcraft.renderer.layout")

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont


@dataclass(frozen=True)
class LayoutOptions:
    minimum_font_size: int = MINIMUM_FONT_SIZE
    maximum_font_size: int = MAXIMUM_FONT_SIZE
    font_size_step: int = FONT_SIZE_STEP

    def __post_init__(self) -> None:
        if self.minimum_font_size < 1:
            raise ValueError("minimum_font_size must be >= 1")
        if self.maximum_font_size < self.minimum_font_size:
            raise ValueError("maximum_font_size must be >= minimum_font_size")
        if self.font_size_step < 1:
            raise ValueError("font_size_step must be >= 1")


@dataclass(frozen=True)
class TextBlock:
    lines: tuple[str, ...]
    line_widths: tuple[float, ...]
    paragraph_ends: tuple[bool, ...]
    line_height: float
    line_spacing: float

    @property
    def width(self) -> float:
        return max(self.line_widths, default=0.0)

    @property
    def height(self) -> float:
        count = len(self.lines)
        if count == 0:
            return 0.0
        return max(0.0, count * self.line_height + (count - 1) * self.line_spacing)


@dataclass(frozen=True)
class FitResult:
    font_size: int
    font: Font
    block: TextBlock
    overflow: bool


def _is_wide(ch: str) -> bool:
    return unicodedata.east_asian_width(ch) in ("W", "F")


def _line_width(font: Font, text: str, letter_spacing: float) -> float:
    if not text:
        return 0.0
    if letter_spacing:
        advance = sum(font.getlength(ch) for ch in text)
        return max(0.0, float(advance + letter_spacing * (len(text) - 1)))
    return float(font.getlength(text))


def _line_height(font: Font) -> float:
    if hasattr(font, "getmetrics"):
        ascent, descent = font.getmetrics()
        return float(ascent + descent)
    left, top, right, bottom = font.getbbox("Ag")
    return float(bottom)


def _last_break(current: str, next_char: str) -> int | None:
    """Largest index ``i`` such that a line may end right before ``current[i]``."""
    for i in range(len(current), 0, -1):
        prev = current[i - 1]
        following = current[i] if i < len(current) else next_char
        if following in _NO_BREAK_BEFORE:
            continue
        if prev == " " or _is_wide(prev) or _is_wide(following):
            return i
    return None


def _wrap_paragraph(paragraph: str, font: Font, max_width: float, letter_spacing: float) -> list[str]:
    if not paragraph:
        return [""]

    lines: list[str] = []
    current = ""
    for ch in paragraph:
        candidate = current + ch
        if not current or _line_width(font, candidate, letter_spacing) <= max_width:
            current = candidate
            continue

        if ch == " ":
            lines.append(current.rstrip(" "))
            current = ""
            continue

        index = _last_break(current, ch)
        if index is None or index == len(current):
            lines.append(current.rstrip(" "))
            current = ch
            continue

        remainder = current[index:]
        lines.append(current[:index].rstrip(" "))
        current = remainder + ch
        if _line_width(font, current, letter_spacing) > max_width:
            lines.append(remainder)
            current = ch

    lines.append(current)
    return lines


def measure_text(
    text: str,
    font: Font,
    max_width: float,
    line_spacing: float = 0.0,
    letter_spacing: float = 0.0,
) -> TextBlock:
    """Wrap ``text`` to ``max_width`` and measure the resulting block.

    Height is not constrained here; callers compare it against their target.
    """
    lines: list[str] = []
    ends: list[bool] = []
    for paragraph in text.replace("\r\n", "\n").split("\n"):
        wrapped = _wrap_paragraph(paragraph, font, max_width, letter_spacing)
        lines.extend(wrapped)
        ends.extend([False] * (len(wrapped) - 1) + [True])

    return TextBlock(
        lines=tuple(lines),
        line_widths=tuple(_line_width(font, line, letter_spacing) for line in lines),
        paragraph_ends=tuple(ends),
        line_height=_line_height(font),
        line_spacing=float(line_spacing),
    )


def fits(block: TextBlock, area: Rect) -> bool:
    return block.width <= area.width and block.height <= area.height


def starting_size(style: TextStyle, options: LayoutOptions, start_size: float | None = None) -> int:
    size = int(round(start_size if start_size is not None else style.point_size))
    return max(options.minimum_font_size, min(options.maximum_font_size, size))


def fit_text(
    text: str,
    style: TextStyle,
    area: Rect,
    resolver: FontResolver,
    options: LayoutOptions | None = None,
    start_size: float | None = None,
) -> FitResult:
    """Linear descent from the starting size; the first size that fits wins."""
    options = options or LayoutOptions()
    size = starting_size(style, options, start_size)

    while True:
        font = resolver.resolve(style.font_family, size)
        block = measure_text(text, font, area.width, style.line_spacing, style.letter_spacing)
        if fits(block, area):
            return FitResult(font_size=size, font=font, block=block, overflow=False)
        if size <= options.minimum_font_size:
            break
        size = max(options.minimum_font_size, size - options.font_size_step)

    _LOG.warning(
        "text does not fit at minimum size %d",
        size,
        extra={
            "event": "text_overflow",
            "context": {
                "font_size": size,
                "block_width": block.width,
                "block_height": block.height,
                "area_width": area.width,
                "area_height": area.height,
            },
        },
    )
    return FitResult(font_size=size, font=font, block=block, overflow=True)


def _anchor_x(alignment: Alignment, area: Rect, width: float) -> float:
    if alignment == Alignment.CENTER:
        return area.min_x + (area.width - width) / 2
    if alignment == Alignment.RIGHT:
        return area.max_x - width
    return area.min_x


def _draw_run(draw: ImageDraw.ImageDraw, x: float, y: float, text: str, font: Font, letter_spacing: float) -> None:
    if not letter_spacing:
        draw.text((x, y), text, font=font, fill=255)
        return
    for ch in text:
        draw.text((x, y), ch, font=font, fill=255)
        x += font.getlength(ch) + letter_spacing


def _draw_justified(
    draw: ImageDraw.ImageDraw,
    x: float,
    y: float,
    line: str,
    target_width: float,
    natural_width: float,
    font: Font,
    letter_spacing: float,
) -> None:
    words = line.split(" ")
    gaps = len(words) - 1
    extra = (target_width - natural_width) / gaps
    index = 0
    for i, word in enumerate(words):
        offset = _line_width(font, line[:index], letter_spacing) + (letter_spacing if index else 0.0)
        if word:
            _draw_run(draw, x + offset + i * extra, y, word, font, letter_spacing)
        index += len(word) + 1


def render_text_layer(fit: FitResult, style: TextStyle, device: DeviceProfile) -> TextLayer:
    block = fit.block
    area = device.safe_area()
    block_x = _anchor_x(style.alignment, area, block.width)
    block_y = area.min_y + (area.height - block.height) / 2

    mask = Image.new("L", device.canvas_size, 0)
    draw = ImageDraw.Draw(mask)
    y = block_y
    for line, width, paragraph_end in zip(block.lines, block.line_widths, block.paragraph_ends):
        if line:
            if style.alignment == Alignment.JUSTIFIED and not paragraph_end and " " in line.strip(" "):
                _draw_justified(draw, block_x, y, line, block.width, width, fit.font, style.letter_spacing)
            else:
                _draw_run(draw, _anchor_x(style.alignment, Rect(block_x, y, block.width, 0), width), y, line, fit.font, style.letter_spacing)
        y += block.line_height + block.line_spacing

    r, g, b, a = style.color
    layer = Image.new("RGBA", device.canvas_size, (r, g, b, 0))
    layer.putalpha(mask if a == 255 else mask.point(lambda p: p * a // 255))

    return TextLayer(
        image=layer,
        font_size=fit.font_size,
        bounds=Rect(block_x, block_y, block.width, block.height),
        lines=block.lines,
        overflow=fit.overflow,
    )


def fit_and_render_text(
    text: str,
    style: TextStyle,
    device: DeviceProfile,
    resolver: FontResolver | None = None,
    options: LayoutOptions | None = None,
    start_size: float | None = None,
) -> TextLayer:
    resolver = resolver or FontResolver()
    fit = fit_text(text, style, device.safe_area(), resolver, options, start_size)
    _LOG.debug(
        "text fitted at %d",
        fit.font_size,
        extra={"event": "text_fit", "context": {"device": device.name, "lines": len(fit.block.lines)}},
    )
    return render_text_layer(fit, style, device)
