"""Doctor report and offline support bundles."""

from __future__ import annotations

import json
import platform
import re
import tempfile
import zipfile
from dataclasses import asdict
from datetime import datetime, timezone
from importlib import metadata
from pathlib import Path
from typing import Any

from PIL import features

from lockcraft_renderer import DeviceCatalog, FontResolver
from lockcraft_renderer.fonts import find_fallback_font

from .config import AppConfig, config_path
from .logging_setup import log_dir


REDACTED = "***REDACTED***"
_SENSITIVE_KEY = re.compile(r"(token|secret|password|api_?key|auth)", re.IGNORECASE)
# Local paths can carry user names; only their final component is kept.
_PATH_KEYS = frozenset({"directory", "image_dir", "directories"})


def _dist_version(name: str) -> str | None:
    try:
        return metadata.version(name)
    except metadata.PackageNotFoundError:
        return None


def _basename(value: Any) -> Any:
    if isinstance(value, str) and value:
        return Path(value).name
    if isinstance(value, list):
        return [_basename(v) for v in value]
    return value


def redact(value: Any) -> Any:
    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for key, item in value.items():
            if _SENSITIVE_KEY.search(key):
                out[key] = REDACTED
            elif key in _PATH_KEYS:
                out[key] = _basename(item)
            else:
                out[key] = redact(item)
        return out
    if isinstance(value, list):
        return [redact(v) for v in value]
    return value


def library_versions() -> dict[str, Any]:
    return {
        "pillow": _dist_version("Pillow"),
        "numpy": _dist_version("numpy"),
        "psutil": _dist_version("psutil"),
        "freetype": features.version("freetype2"),
        "raqm": features.check("raqm"),
    }


def build_doctor_payload(cfg: AppConfig, resolver: FontResolver, catalog: DeviceCatalog) -> dict[str, Any]:
    default_name = catalog.default.name
    return {
        "ts_utc": datetime.now(timezone.utc).isoformat(),
        "platform": platform.platform(),
        "python": platform.python_version(),
        "libraries": library_versions(),
        "config_path": str(config_path()),
        "config": redact(asdict(cfg)),
        "devices": [
            {
                "name": profile.name,
                "canvas": [profile.canvas_width, profile.canvas_height],
                "safe_area": asdict(profile.safe_area()),
                "default": profile.name == default_name,
            }
            for profile in catalog.profiles()
        ],
        "fonts": {
            "available": resolver.available(),
            "fallback": find_fallback_font(),
        },
    }


def _dump(data: Any) -> str:
    return json.dumps(redact(data), indent=2, sort_keys=True, ensure_ascii=False, default=str)


class DiagnosticsExporter:
    """Writes a zip with the doctor report, redacted config, recent renders and logs.

    Logs are added newest first until ``cfg.diagnostics.max_bundle_mb`` is spent.
    """

    def __init__(self, app_name: str = "LockCraft") -> None:
        self.app_name = app_name

    def bundle(
        self,
        cfg: AppConfig,
        doctor_payload: dict[str, Any],
        recent_renders: list[dict[str, Any]] | None = None,
        output_dir: Path | None = None,
    ) -> Path:
        target = output_dir or Path(tempfile.gettempdir())
        target.mkdir(parents=True, exist_ok=True)
        created = datetime.now(timezone.utc)
        zip_path = target / f"lockcraft-diagnostics-{created.strftime('%Y%m%d-%H%M%S')}.zip"

        logs = log_dir()
        budget = max(1, cfg.diagnostics.max_bundle_mb) * 1024 * 1024
        candidates = sorted(logs.glob("*.log*"), key=lambda p: p.stat().st_mtime, reverse=True)
        included: list[str] = []
        skipped: list[str] = []

        with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            spent = 0
            for path in candidates:
                size = path.stat().st_size
                if spent + size > budget:
                    skipped.append(path.name)
                    continue
                zf.write(path, arcname=f"logs/{path.name}")
                included.append(path.name)
                spent += size

            zf.writestr("doctor.json", _dump(doctor_payload))
            zf.writestr("config.redacted.json", _dump(asdict(cfg)))
            zf.writestr("recent_renders.json", _dump(recent_renders or []))
            zf.writestr(
                "manifest.json",
                _dump(
                    {
                        "app": self.app_name,
                        "created_utc": created.isoformat(),
                        "host": platform.platform(),
                        "python": platform.python_version(),
                        "log_dir": str(logs),
                        "logs_included": included,
                        "logs_skipped": skipped,
                    }
                ),
            )

        return zip_path
