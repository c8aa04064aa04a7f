"""Typed renderer models: devices, text styles, text layers and background specs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from PIL import Image, ImageColor

RGBA = tuple[int, int, int, int]

WHITE: RGBA = (255, 255, 255, 255)
BLACK: RGBA = (0, 0, 0, 255)


def parse_color(value: str | tuple[int, ...]) -> RGBA:
    """Parse ``#RRGGBB``, ``#RRGGBBAA``, CSS names or an RGB(A) tuple into RGBA."""
    if isinstance(value, tuple):
        if len(value) == 3:
            return (int(value[0]), int(value[1]), int(value[2]), 255)
        if len(value) == 4:
            return (int(value[0]), int(value[1]), int(value[2]), int(value[3]))
        raise ValueError(f"Color tuple must have 3 or 4 channels: {value!r}")
    try:
        return ImageColor.getcolor(str(value).strip(), "RGBA")  # type: ignore[return-value]
    except ValueError as exc:
        raise ValueError(f"Unknown color: {value!r}") from exc


class Alignment(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFIED = "justified"


@dataclass(frozen=True)
class EdgeInsets:
    top: float = 0.0
    left: float = 0.0
    bottom: float = 0.0
    right: float = 0.0


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def min_x(self) -> float:
        return self.x

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def min_y(self) -> float:
        return self.y

    @property
    def max_y(self) -> float:
        return self.y + self.height

    def contains(self, other: Rect) -> bool:
        return (
            other.min_x >= self.min_x
            and other.min_y >= self.min_y
            and other.max_x <= self.max_x
            and other.max_y <= self.max_y
        )


@dataclass(frozen=True)
class DeviceProfile:
    name: str
    canvas_width: int
    canvas_height: int
    safe_insets: EdgeInsets = field(default_factory=EdgeInsets)

    def __post_init__(self) -> None:
        if self.canvas_width <= 0 or self.canvas_height <= 0:
            raise ValueError(f"{self.name}: canvas must be positive, got {self.canvas_width}x{self.canvas_height}")
        insets = self.safe_insets
        if min(insets.top, insets.left, insets.bottom, insets.right) < 0:
            raise ValueError(f"{self.name}: safe insets must be non-negative")
        if insets.left + insets.right >= self.canvas_width:
            raise ValueError(f"{self.name}: horizontal insets exceed canvas width {self.canvas_width}")
        if insets.top + insets.bottom >= self.canvas_height:
            raise ValueError(f"{self.name}: vertical insets exceed canvas height {self.canvas_height}")

    @property
    def canvas_size(self) -> tuple[int, int]:
        return (self.canvas_width, self.canvas_height)

    def canvas_rect(self) -> Rect:
        return Rect(0.0, 0.0, float(self.canvas_width), float(self.canvas_height))

    def safe_area(self) -> Rect:
        insets = self.safe_insets
        return Rect(
            x=float(insets.left),
            y=float(insets.top),
            width=float(self.canvas_width - insets.left - insets.right),
            height=float(self.canvas_height - insets.top - insets.bottom),
        )


@dataclass(frozen=True)
class TextStyle:
    font_family: str = "System Font"
    point_size: float = 120.0
    color: RGBA = BLACK
    alignment: Alignment = Alignment.CENTER
    line_spacing: float = 0.0
    letter_spacing: float = 0.0


@dataclass(frozen=True, eq=False)
class TextLayer:
    """Canvas-sized transparent raster holding only the rendered glyphs."""

    image: Image.Image
    font_size: int
    bounds: Rect
    lines: tuple[str, ...]
    overflow: bool = False

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size


@dataclass(frozen=True)
class Transform:
    scale: float = 1.0
    offset: tuple[float, float] = (0.0, 0.0)

    def __post_init__(self) -> None:
        if self.scale < 0:
            raise ValueError(f"Transform scale must be >= 0, got {self.scale}")

    @classmethod
    def identity(cls) -> Transform:
        return cls()


@dataclass(frozen=True)
class SolidColor:
    color: RGBA = WHITE


@dataclass(frozen=True)
class Linear:
    angle_degrees: float = 0.0


@dataclass(frozen=True)
class Radial:
    pass


@dataclass(frozen=True)
class Gradient:
    start: RGBA
    end: RGBA
    kind: Linear | Radial = field(default_factory=Linear)


@dataclass(frozen=True)
class Frosted:
    base_color: RGBA = WHITE
    blur_intensity: float = 0.5
    opacity: float = 0.8


@dataclass(frozen=True, eq=False)
class Bitmap:
    pixels: Image.Image
    transform: Transform = field(default_factory=Transform)


BackgroundSpec = Union[SolidColor, Gradient, Frosted, Bitmap, None]
