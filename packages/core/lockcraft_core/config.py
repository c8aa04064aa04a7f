"""Persistent app settings schema and load/save helpers."""

from __future__ import annotations

import json
import os
import platform
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any


CONFIG_VERSION = 1

ALIGNMENTS = ("left", "center", "right", "justified")
BACKGROUND_KINDS = ("none", "solid", "gradient", "frosted", "image")
GRADIENT_STYLES = ("linear", "radial")
OUTPUT_FORMATS = ("PNG", "JPEG")


@dataclass
class RenderConfig:
    device: str = "iPhone 12 Pro Max"
    font_family: str = "System Font"
    font_size: float = 120.0
    text_color: str = "#000000"
    alignment: str = "center"
    line_spacing: float = 0.0
    letter_spacing: float = 0.0
    max_text_length: int = 200


@dataclass
class LayoutConfig:
    minimum_font_size: int = 12
    maximum_font_size: int = 120
    font_size_step: int = 1


@dataclass
class BackgroundConfig:
    kind: str = "none"
    color: str = "#FFFFFF"
    gradient_start: str = "#0000FF"
    gradient_end: str = "#800080"
    gradient_style: str = "linear"
    gradient_angle: float = 0.0
    frosted_color: str = "#FFFFFF"
    frosted_intensity: float = 0.5
    frosted_opacity: float = 0.8
    image_dir: str | None = None
    image_name: str | None = None
    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0


@dataclass
class CompositionConfig:
    blur_radius_per_intensity: float = 20.0
    gaussian_blur: bool = True


@dataclass
class FontsConfig:
    directories: list[str] = field(default_factory=list)


@dataclass
class CacheConfig:
    max_items: int = 20
    max_mb: int = 100


@dataclass
class OutputConfig:
    directory: str | None = None
    format: str = "PNG"


@dataclass
class DiagnosticsConfig:
    keep_log_files: int = 7
    max_bundle_mb: int = 20


@dataclass
class PerformanceConfig:
    render_ms_max: float = 1500.0
    rss_mb_max: float = 600.0
    debounce_ms: int = 250


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    render: RenderConfig = field(default_factory=RenderConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    background: BackgroundConfig = field(default_factory=BackgroundConfig)
    composition: CompositionConfig = field(default_factory=CompositionConfig)
    fonts: FontsConfig = field(default_factory=FontsConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    devices: list[dict[str, Any]] = field(default_factory=list)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)


DEFAULT_CONFIG = AppConfig()


def config_root() -> Path:
    override = os.environ.get("LOCKCRAFT_HOME")
    if override:
        return Path(override).expanduser()
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "LockCraft"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "LockCraft"
    return Path.home() / ".config" / "lockcraft"


def config_path() -> Path:
    return config_root() / "config.json"


def default_output_dir() -> Path:
    return config_root() / "wallpapers"


def _merge(dataclass_type, raw: dict[str, Any]):
    defaults = dataclass_type()  # type: ignore[misc]
    for k, v in (raw or {}).items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _clamp(value: Any, low: float, high: float, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return max(low, min(high, number))


def _normalize_render(cfg: AppConfig) -> None:
    if cfg.render.alignment not in ALIGNMENTS:
        cfg.render.alignment = "center"
    cfg.render.font_size = _clamp(cfg.render.font_size, 1.0, 1000.0, 120.0)
    cfg.render.max_text_length = int(_clamp(cfg.render.max_text_length, 1, 10_000, 200))
    cfg.render.line_spacing = _clamp(cfg.render.line_spacing, -100.0, 500.0, 0.0)
    cfg.render.letter_spacing = _clamp(cfg.render.letter_spacing, -50.0, 200.0, 0.0)


def _normalize_layout(cfg: AppConfig) -> None:
    cfg.layout.minimum_font_size = int(_clamp(cfg.layout.minimum_font_size, 1, 500, 12))
    cfg.layout.maximum_font_size = int(
        _clamp(cfg.layout.maximum_font_size, cfg.layout.minimum_font_size, 1000, 120)
    )
    cfg.layout.font_size_step = int(_clamp(cfg.layout.font_size_step, 1, 50, 1))


def _normalize_background(cfg: AppConfig) -> None:
    bg = cfg.background
    if bg.kind not in BACKGROUND_KINDS:
        bg.kind = "none"
    if bg.gradient_style not in GRADIENT_STYLES:
        bg.gradient_style = "linear"
    bg.frosted_intensity = _clamp(bg.frosted_intensity, 0.0, 1.0, 0.5)
    bg.frosted_opacity = _clamp(bg.frosted_opacity, 0.0, 1.0, 0.8)
    bg.scale = _clamp(bg.scale, 0.0, 20.0, 1.0)
    bg.gradient_angle = _clamp(bg.gradient_angle, -3600.0, 3600.0, 0.0) % 360.0


def _normalize_output(cfg: AppConfig) -> None:
    fmt = str(cfg.output.format).upper()
    cfg.output.format = fmt if fmt in OUTPUT_FORMATS else "PNG"


def _normalize_limits(cfg: AppConfig) -> None:
    cfg.cache.max_items = int(_clamp(cfg.cache.max_items, 1, 1000, 20))
    cfg.cache.max_mb = int(_clamp(cfg.cache.max_mb, 1, 4096, 100))
    cfg.composition.blur_radius_per_intensity = _clamp(cfg.composition.blur_radius_per_intensity, 0.0, 200.0, 20.0)
    cfg.performance.render_ms_max = _clamp(cfg.performance.render_ms_max, 50.0, 60_000.0, 1500.0)
    cfg.performance.rss_mb_max = _clamp(cfg.performance.rss_mb_max, 64.0, 16_384.0, 600.0)
    cfg.performance.debounce_ms = int(_clamp(cfg.performance.debounce_ms, 0, 5000, 250))


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        return AppConfig()
    if not isinstance(data, dict):
        return AppConfig()

    devices = data.get("devices", [])
    cfg = AppConfig(
        config_version=int(data.get("config_version", CONFIG_VERSION)),
        render=_merge(RenderConfig, data.get("render", {})),
        layout=_merge(LayoutConfig, data.get("layout", {})),
        background=_merge(BackgroundConfig, data.get("background", {})),
        composition=_merge(CompositionConfig, data.get("composition", {})),
        fonts=_merge(FontsConfig, data.get("fonts", {})),
        cache=_merge(CacheConfig, data.get("cache", {})),
        output=_merge(OutputConfig, data.get("output", {})),
        devices=[d for d in devices if isinstance(d, dict)] if isinstance(devices, list) else [],
        diagnostics=_merge(DiagnosticsConfig, data.get("diagnostics", {})),
        performance=_merge(PerformanceConfig, data.get("performance", {})),
    )

    _normalize_render(cfg)
    _normalize_layout(cfg)
    _normalize_background(cfg)
    _normalize_output(cfg)
    _normalize_limits(cfg)
    return cfg


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
