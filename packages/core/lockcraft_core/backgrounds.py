"""Background image library and config-to-background mapping."""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from lockcraft_renderer import (
    BackgroundSpec,
    Bitmap,
    Frosted,
    Gradient,
    InvalidBackground,
    Linear,
    Radial,
    SolidColor,
    Transform,
    parse_color,
)

from .config import BackgroundConfig
from .image_cache import ImageCache


IMAGE_SUFFIXES = (".jpg", ".jpeg", ".png")

_LOG = logging.getLogger("lockcraft.core.backgrounds")


class BackgroundLibrary:
    def __init__(self, directory: Path | str, cache: ImageCache | None = None) -> None:
        self.directory = Path(directory).expanduser()
        self.cache = cache

    def list(self) -> list[str]:
        if not self.directory.is_dir():
            return []
        return sorted(p.name for p in self.directory.iterdir() if p.is_file() and p.suffix.lower() in IMAGE_SUFFIXES)

    def load(self, name: str) -> Image.Image:
        if self.cache is not None:
            cached = self.cache.get(name)
            if cached is not None:
                return cached

        path = self.directory / name
        if not path.is_file():
            raise InvalidBackground(f"Background not found: {path}", source=str(path))
        try:
            with Image.open(path) as raw:
                image = raw.convert("RGBA")
        except (UnidentifiedImageError, OSError) as exc:
            _LOG.warning("background decode failed: %s", path, extra={"event": "background_decode_failed"})
            raise InvalidBackground(f"Cannot decode background {path}: {exc}", source=str(path)) from exc

        width, height = image.size
        if width <= 0 or height <= 0:
            raise InvalidBackground(f"Background has zero area: {path}", width=width, height=height, source=str(path))

        if self.cache is not None:
            self.cache.put(name, image)
        _LOG.debug("background loaded", extra={"event": "background_loaded", "context": {"name": name, "size": [width, height]}})
        return image


def background_from_config(cfg: BackgroundConfig, library: BackgroundLibrary | None = None) -> BackgroundSpec:
    if cfg.kind == "solid":
        return SolidColor(parse_color(cfg.color))
    if cfg.kind == "gradient":
        kind = Radial() if cfg.gradient_style == "radial" else Linear(float(cfg.gradient_angle))
        return Gradient(parse_color(cfg.gradient_start), parse_color(cfg.gradient_end), kind)
    if cfg.kind == "frosted":
        return Frosted(parse_color(cfg.frosted_color), float(cfg.frosted_intensity), float(cfg.frosted_opacity))
    if cfg.kind == "image":
        if not cfg.image_name:
            raise InvalidBackground("Image background selected but no image_name configured")
        if library is None:
            if not cfg.image_dir:
                raise InvalidBackground("Image background selected but no image_dir configured")
            library = BackgroundLibrary(cfg.image_dir)
        pixels = library.load(cfg.image_name)
        transform = Transform(scale=float(cfg.scale), offset=(float(cfg.offset_x), float(cfg.offset_y)))
        return Bitmap(pixels, transform)
    return None
