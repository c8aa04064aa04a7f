"""Core app services for settings, text input, rendering, export, and diagnostics."""

from .backgrounds import BackgroundLibrary, background_from_config
from .config import AppConfig, load_config, save_config
from .diagnostics import DiagnosticsExporter, build_doctor_payload
from .export import ExportError, encode_image, preview_data_url, save_wallpaper
from .image_cache import ImageCache, LRUImageCache
from .performance import BudgetStatus, RenderBudget, RenderTargets
from .pipeline import (
    RenderDebouncer,
    RenderResult,
    WallpaperPipeline,
    catalog_from_config,
    composition_options_from_config,
    layout_options_from_config,
    style_from_config,
)
from .text_input import DEFAULT_SAMPLE_TEXT, SplitMode, TextTooLong, normalize_line_breaks, prepare_text, split_paragraphs

__all__ = [
    "DEFAULT_SAMPLE_TEXT",
    "AppConfig",
    "BackgroundLibrary",
    "BudgetStatus",
    "DiagnosticsExporter",
    "ExportError",
    "ImageCache",
    "LRUImageCache",
    "RenderBudget",
    "RenderDebouncer",
    "RenderResult",
    "RenderTargets",
    "SplitMode",
    "TextTooLong",
    "WallpaperPipeline",
    "background_from_config",
    "build_doctor_payload",
    "catalog_from_config",
    "composition_options_from_config",
    "encode_image",
    "layout_options_from_config",
    "load_config",
    "normalize_line_breaks",
    "prepare_text",
    "preview_data_url",
    "save_config",
    "save_wallpaper",
    "split_paragraphs",
    "style_from_config",
]
