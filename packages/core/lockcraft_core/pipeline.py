"""Render pipeline tying config, layout and composition together, plus edit debouncing."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from PIL import Image

from lockcraft_renderer import (
    Alignment,
    BackgroundSpec,
    CompositionOptions,
    DeviceCatalog,
    DeviceProfile,
    FontResolver,
    LayoutOptions,
    TextLayer,
    TextStyle,
    compose,
    default_catalog,
    device_from_dict,
    fit_and_render_text,
    parse_color,
)

from .backgrounds import BackgroundLibrary, background_from_config
from .config import AppConfig, CompositionConfig, LayoutConfig, RenderConfig
from .image_cache import LRUImageCache
from .logging_setup import get_logger
from .text_input import prepare_text


_UNSET: Any = object()


@dataclass(frozen=True, eq=False)
class RenderResult:
    image: Image.Image
    text_layer: TextLayer
    device: DeviceProfile
    text: str
    elapsed_ms: float


def style_from_config(cfg: RenderConfig) -> TextStyle:
    return TextStyle(
        font_family=cfg.font_family,
        point_size=float(cfg.font_size),
        color=parse_color(cfg.text_color),
        alignment=Alignment(cfg.alignment),
        line_spacing=float(cfg.line_spacing),
        letter_spacing=float(cfg.letter_spacing),
    )


def layout_options_from_config(cfg: LayoutConfig) -> LayoutOptions:
    return LayoutOptions(
        minimum_font_size=int(cfg.minimum_font_size),
        maximum_font_size=int(cfg.maximum_font_size),
        font_size_step=int(cfg.font_size_step),
    )


def composition_options_from_config(cfg: CompositionConfig) -> CompositionOptions:
    return CompositionOptions(
        blur_radius_per_intensity=float(cfg.blur_radius_per_intensity),
        gaussian_blur=bool(cfg.gaussian_blur),
    )


def catalog_from_config(cfg: AppConfig) -> DeviceCatalog:
    catalog = default_catalog()
    if not cfg.devices:
        return catalog
    return catalog.with_profiles(device_from_dict(raw) for raw in cfg.devices)


class WallpaperPipeline:
    """Prepares text, fits it to a device and composes it over a background.

    One pipeline owns one output target, so renders on the same instance run one
    at a time.
    """

    def __init__(
        self,
        cfg: AppConfig | None = None,
        resolver: FontResolver | None = None,
        catalog: DeviceCatalog | None = None,
        library: BackgroundLibrary | None = None,
    ) -> None:
        self.cfg = cfg or AppConfig()
        self.resolver = resolver or FontResolver(self.cfg.fonts.directories)
        self.catalog = catalog or catalog_from_config(self.cfg)
        if library is None and self.cfg.background.image_dir:
            cache = LRUImageCache(self.cfg.cache.max_items, self.cfg.cache.max_mb * 1024 * 1024)
            library = BackgroundLibrary(Path(self.cfg.background.image_dir), cache=cache)
        self.library = library
        self.layout_options = layout_options_from_config(self.cfg.layout)
        self.composition_options = composition_options_from_config(self.cfg.composition)
        self._lock = threading.Lock()
        self._log = get_logger("core.pipeline")

    def default_background(self) -> BackgroundSpec:
        return background_from_config(self.cfg.background, self.library)

    def render(
        self,
        text: str | None,
        background: BackgroundSpec = _UNSET,
        device_name: str | None = None,
        style: TextStyle | None = None,
    ) -> RenderResult:
        prepared = prepare_text(text, self.cfg.render.max_text_length)
        device = self.catalog.get(device_name or self.cfg.render.device)
        style = style or style_from_config(self.cfg.render)
        if background is _UNSET:
            background = self.default_background()

        with self._lock:
            start = time.perf_counter()
            layer = fit_and_render_text(prepared, style, device, self.resolver, self.layout_options)
            image = compose(background, layer, device, self.composition_options)
            elapsed_ms = (time.perf_counter() - start) * 1000.0

        self._log.info(
            "render done",
            extra={
                "event": "render_done",
                "context": {
                    "device": device.name,
                    "font_size": layer.font_size,
                    "lines": len(layer.lines),
                    "overflow": layer.overflow,
                    "background": type(background).__name__,
                    "elapsed_ms": round(elapsed_ms, 2),
                },
            },
        )
        return RenderResult(image=image, text_layer=layer, device=device, text=prepared, elapsed_ms=elapsed_ms)


class RenderDebouncer:
    """Coalesces bursts of edits so only the last submission in a quiet window runs."""

    def __init__(self, delay_s: float, callback: Callable[..., Any]) -> None:
        self.delay_s = max(0.0, float(delay_s))
        self.callback = callback
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._pending: tuple[tuple[Any, ...], dict[str, Any]] | None = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def submit(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = (args, kwargs)
            self._timer = threading.Timer(self.delay_s, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> Any:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            pending, self._pending = self._pending, None
        if pending is None:
            return None
        args, kwargs = pending
        return self.callback(*args, **kwargs)

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending = None

    def _fire(self) -> None:
        with self._lock:
            pending, self._pending = self._pending, None
            self._timer = None
        if pending is not None:
            args, kwargs = pending
            self.callback(*args, **kwargs)
