"""Font resolution with per-instance registration and system fallbacks."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Iterable

from PIL import ImageFont

SYSTEM_FONT = "System Font"
FONT_SUFFIXES = (".ttf", ".otf", ".ttc")

_LOG = logging.getLogger("lockcraft.renderer.fonts")


def _fallback_candidates() -> list[str]:
    if sys.platform == "win32":
        return [
            "C:/Windows/Fonts/msyh.ttc",
            "C:/Windows/Fonts/malgun.ttf",
            "C:/Windows/Fonts/segoeui.ttf",
            "C:/Windows/Fonts/arial.ttf",
        ]
    if sys.platform == "darwin":
        return [
            "/System/Library/Fonts/PingFang.ttc",
            "/System/Library/Fonts/Hiragino Sans GB.ttc",
            "/System/Library/Fonts/Helvetica.ttc",
            "/Library/Fonts/Arial Unicode.ttf",
        ]
    return [
        "/usr/share/fonts/opentype/noto/NotoSansCJK-Regular.ttc",
        "/usr/share/fonts/truetype/noto/NotoSansCJK-Regular.ttc",
        "/usr/share/fonts/noto-cjk/NotoSansCJK-Regular.ttc",
        "/usr/share/fonts/truetype/wqy/wqy-microhei.ttc",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    ]


def find_fallback_font() -> str | None:
    for path in _fallback_candidates():
        if os.path.exists(path):
            return path
    return None


class FontResolver:
    """Maps family names to Pillow fonts, falling back to a system default.

    Families are registered by file stem, so ``LXGWWenKai-Regular.ttf`` is
    resolved as ``LXGWWenKai-Regular``.
    """

    def __init__(self, font_dirs: Iterable[Path | str] = (), fallback_path: str | None = None) -> None:
        self._registered: dict[str, Path] = {}
        self._cache: dict[tuple[str, int], ImageFont.FreeTypeFont | ImageFont.ImageFont] = {}
        self._fallback_path = fallback_path if fallback_path is not None else find_fallback_font()
        for directory in font_dirs:
            self.register_directory(Path(directory))

    def register_directory(self, directory: Path) -> int:
        directory = Path(directory).expanduser()
        if not directory.is_dir():
            _LOG.warning("font directory missing: %s", directory, extra={"event": "font_dir_missing"})
            return 0
        count = 0
        for path in sorted(directory.iterdir()):
            if path.suffix.lower() in FONT_SUFFIXES:
                self.register_file(path)
                count += 1
        return count

    def register_file(self, path: Path) -> str:
        family = path.stem
        self._registered[family] = path
        return family

    def available(self) -> list[str]:
        return [SYSTEM_FONT] + sorted(self._registered.keys())

    def resolve(self, family: str | None, size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        size = max(1, int(size))
        family = family or SYSTEM_FONT

        if family != SYSTEM_FONT:
            registered = self._registered.get(family)
            if registered is not None:
                font = self._load(str(registered), size)
                if font is not None:
                    return font
            font = self._load(family, size)
            if font is not None:
                return font
            _LOG.debug("falling back to system font for %s", family, extra={"event": "font_fallback"})

        if self._fallback_path:
            font = self._load(self._fallback_path, size)
            if font is not None:
                return font
        return self._load_default(size)

    def _load(self, path: str, size: int) -> ImageFont.FreeTypeFont | None:
        key = (path, size)
        cached = self._cache.get(key)
        if cached is not None:
            return cached  # type: ignore[return-value]
        try:
            font = ImageFont.truetype(path, size)
        except OSError:
            return None
        self._cache[key] = font
        return font

    def _load_default(self, size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        key = ("<default>", size)
        if key not in self._cache:
            self._cache[key] = ImageFont.load_default(size)
        return self._cache[key]
