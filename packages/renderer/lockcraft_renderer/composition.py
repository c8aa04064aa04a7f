"""Background painting and final wallpaper composition.

Gradient angle convention: 0 degrees points right (+x) and angles grow
counter-clockwise as seen on screen, so 90 degrees points up. The gradient line
runs through the canvas center with a half-length of half the canvas diagonal,
which keeps both stops at or beyond the corners for every angle.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
from PIL import Image, ImageFilter

from .errors import InvalidBackground
from .models import (
    WHITE,
    BackgroundSpec,
    Bitmap,
    DeviceProfile,
    Frosted,
    Gradient,
    Linear,
    Radial,
    Rect,
    SolidColor,
    TextLayer,
    Transform,
)

BLUR_RADIUS_PER_INTENSITY = 20.0

_LOG = logging.getLogger("lockcraft.renderer.composition")


@dataclass(frozen=True)
class CompositionOptions:
    blur_radius_per_intensity: float = BLUR_RADIUS_PER_INTENSITY
    gaussian_blur: bool = True


@dataclass(frozen=True)
class Placement:
    x: int
    y: int
    width: int
    height: int
    scale: float

    def rect(self) -> Rect:
        return Rect(float(self.x), float(self.y), float(self.width), float(self.height))


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def _blank(size: tuple[int, int]) -> Image.Image:
    return Image.new("RGBA", size, WHITE)


def _lerp_field(t: np.ndarray, start: tuple[int, ...], end: tuple[int, ...]) -> Image.Image:
    t = np.clip(t, 0.0, 1.0)[..., None]
    a = np.asarray(start, dtype=np.float32)
    b = np.asarray(end, dtype=np.float32)
    rgba = np.rint(a * (1.0 - t) + b * t).astype(np.uint8)
    return Image.fromarray(np.ascontiguousarray(rgba))


def _pixel_grid(size: tuple[int, int]) -> tuple[np.ndarray, np.ndarray]:
    width, height = size
    x = np.arange(width, dtype=np.float32)[None, :] + 0.5 - width / 2.0
    y = np.arange(height, dtype=np.float32)[:, None] + 0.5 - height / 2.0
    return x, y


def linear_gradient(size: tuple[int, int], start: tuple[int, ...], end: tuple[int, ...], angle_degrees: float) -> Image.Image:
    width, height = size
    diagonal = math.hypot(width, height)
    theta = math.radians(angle_degrees)
    dx, dy = math.cos(theta), -math.sin(theta)
    x, y = _pixel_grid(size)
    t = 0.5 + (x * dx + y * dy) / diagonal
    return _lerp_field(np.broadcast_to(t, (height, width)), start, end)


def radial_gradient(size: tuple[int, int], start: tuple[int, ...], end: tuple[int, ...]) -> Image.Image:
    width, height = size
    radius = math.hypot(width, height) / 2.0
    x, y = _pixel_grid(size)
    t = np.sqrt(x * x + y * y) / radius
    return _lerp_field(t, start, end)


def _box_radius_for(sigma: float) -> float:
    # Three box passes of this radius approximate a Gaussian of std-dev sigma.
    return (math.sqrt(4.0 * sigma * sigma + 1.0) - 1.0) / 2.0


def soften(image: Image.Image, radius: float, gaussian: bool = True) -> Image.Image:
    if radius <= 0:
        return image
    if gaussian:
        try:
            return image.filter(ImageFilter.GaussianBlur(radius))
        except (ValueError, NotImplementedError) as exc:
            _LOG.warning("gaussian blur unavailable: %s", exc, extra={"event": "blur_fallback"})
    else:
        _LOG.debug("using box blur approximation", extra={"event": "blur_fallback"})
    box = _box_radius_for(radius)
    for _ in range(3):
        image = image.filter(ImageFilter.BoxBlur(box))
    return image


def cover_placement(bitmap_size: tuple[int, int], canvas_size: tuple[int, int], transform: Transform) -> Placement:
    """Rectangle the bitmap occupies on the canvas after cover-fit and transform."""
    bw, bh = bitmap_size
    cw, ch = canvas_size
    if bw <= 0 or bh <= 0:
        raise InvalidBackground(f"Bitmap has zero area: {bw}x{bh}", width=bw, height=bh)
    base = max(cw / bw, ch / bh)
    scale = base * transform.scale
    width = int(round(bw * scale))
    height = int(round(bh * scale))
    dx, dy = transform.offset
    x = int(round((cw - width) / 2.0 + dx))
    y = int(round((ch - height) / 2.0 + dy))
    return Placement(x=x, y=y, width=width, height=height, scale=scale)


def _paint_bitmap(canvas: Image.Image, bitmap: Bitmap) -> None:
    source = bitmap.pixels
    placement = cover_placement(source.size, canvas.size, bitmap.transform)
    if placement.width <= 0 or placement.height <= 0:
        return

    cw, ch = canvas.size
    left = max(0, placement.x)
    top = max(0, placement.y)
    right = min(cw, placement.x + placement.width)
    bottom = min(ch, placement.y + placement.height)
    if right <= left or bottom <= top:
        return

    # Resample only the source region that lands on the canvas. Rounded
    # placement sizes can overshoot the source by a fraction of a pixel.
    bw, bh = source.size
    box = (
        min(bw, (left - placement.x) / placement.scale),
        min(bh, (top - placement.y) / placement.scale),
        min(bw, (right - placement.x) / placement.scale),
        min(bh, (bottom - placement.y) / placement.scale),
    )
    if source.mode != "RGBA":
        source = source.convert("RGBA")
    visible = source.resize((right - left, bottom - top), Image.Resampling.LANCZOS, box=box)
    canvas.alpha_composite(visible, dest=(left, top))


def _paint_frosted(canvas: Image.Image, frosted: Frosted, options: CompositionOptions) -> Image.Image:
    r, g, b, a = frosted.base_color
    alpha = int(round(a * _clamp01(frosted.opacity)))
    canvas = Image.alpha_composite(canvas, Image.new("RGBA", canvas.size, (r, g, b, alpha)))
    radius = _clamp01(frosted.blur_intensity) * options.blur_radius_per_intensity
    blurred = soften(canvas, radius, gaussian=options.gaussian_blur)
    return Image.alpha_composite(canvas, blurred)


def paint_background(background: BackgroundSpec, size: tuple[int, int], options: CompositionOptions | None = None) -> Image.Image:
    options = options or CompositionOptions()
    canvas = _blank(size)

    if background is None:
        return canvas
    if isinstance(background, SolidColor):
        return Image.alpha_composite(canvas, Image.new("RGBA", size, background.color))
    if isinstance(background, Gradient):
        if isinstance(background.kind, Radial):
            layer = radial_gradient(size, background.start, background.end)
        else:
            kind = background.kind if isinstance(background.kind, Linear) else Linear()
            layer = linear_gradient(size, background.start, background.end, kind.angle_degrees)
        return Image.alpha_composite(canvas, layer)
    if isinstance(background, Frosted):
        return _paint_frosted(canvas, background, options)
    if isinstance(background, Bitmap):
        _paint_bitmap(canvas, background)
        return canvas
    raise TypeError(f"Unsupported background: {type(background).__name__}")


def compose(
    background: BackgroundSpec,
    text_layer: TextLayer | Image.Image,
    device: DeviceProfile,
    options: CompositionOptions | None = None,
) -> Image.Image:
    layer = text_layer.image if isinstance(text_layer, TextLayer) else text_layer
    if layer.size != device.canvas_size:
        raise ValueError(f"Text layer is {layer.size[0]}x{layer.size[1]}, expected {device.canvas_width}x{device.canvas_height}")
    if layer.mode != "RGBA":
        layer = layer.convert("RGBA")

    canvas = paint_background(background, device.canvas_size, options)
    return Image.alpha_composite(canvas, layer)
