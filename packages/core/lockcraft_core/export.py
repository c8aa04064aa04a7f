"""Wallpaper encoding and persistence."""

from __future__ import annotations

import base64
import logging
from datetime import datetime
from io import BytesIO
from pathlib import Path

from PIL import Image


_EXTENSIONS = {"PNG": ".png", "JPEG": ".jpg"}

_LOG = logging.getLogger("lockcraft.core.export")


class ExportError(RuntimeError):
    pass


def _normalize_format(fmt: str) -> str:
    fmt = fmt.upper()
    if fmt == "JPG":
        fmt = "JPEG"
    if fmt not in _EXTENSIONS:
        raise ExportError(f"Unsupported format: {fmt}")
    return fmt


def encode_image(image: Image.Image, fmt: str = "PNG") -> bytes:
    fmt = _normalize_format(fmt)
    if fmt == "JPEG" and image.mode != "RGB":
        image = image.convert("RGB")
    buf = BytesIO()
    try:
        image.save(buf, format=fmt)
    except (OSError, ValueError) as exc:
        raise ExportError(f"Failed to encode {fmt}: {exc}") from exc
    return buf.getvalue()


def preview_data_url(image: Image.Image, max_side: int | None = 640) -> str:
    if max_side and max(image.size) > max_side:
        image = image.copy()
        image.thumbnail((max_side, max_side), Image.Resampling.LANCZOS)
    b64 = base64.b64encode(encode_image(image, "PNG")).decode("ascii")
    return f"data:image/png;base64,{b64}"


def save_wallpaper(image: Image.Image, output_dir: Path | str, stem: str | None = None, fmt: str = "PNG") -> Path:
    fmt = _normalize_format(fmt)
    data = encode_image(image, fmt)
    stem = stem or f"wallpaper-{datetime.now().strftime('%Y%m%d-%H%M%S-%f')}"
    path = Path(output_dir).expanduser() / f"{stem}{_EXTENSIONS[fmt]}"
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as exc:
        raise ExportError(f"Failed to write {path}: {exc}") from exc
    _LOG.info("wallpaper saved", extra={"event": "wallpaper_saved", "context": {"path": str(path), "bytes": len(data)}})
    return path
