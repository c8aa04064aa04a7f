"""CLI entrypoints for LockCraft wallpaper rendering, catalogs, and diagnostics."""

from __future__ import annotations

import argparse
import json
import sys
import time
from dataclasses import asdict
from pathlib import Path

from lockcraft_core import (
    DiagnosticsExporter,
    ExportError,
    RenderBudget,
    RenderTargets,
    TextTooLong,
    WallpaperPipeline,
    build_doctor_payload,
    catalog_from_config,
    load_config,
    save_wallpaper,
    split_paragraphs,
)
from lockcraft_core.backgrounds import BackgroundLibrary
from lockcraft_core.config import AppConfig, default_output_dir
from lockcraft_core.logging_setup import configure_logging, get_logger, install_crash_hooks, recent_events
from lockcraft_renderer import (
    Bitmap,
    Frosted,
    Gradient,
    Linear,
    Radial,
    RenderError,
    SolidColor,
    Transform,
    parse_color,
)
from lockcraft_renderer.fonts import FontResolver


_LOG = get_logger("app.cli")


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str, ensure_ascii=False))


def _error(kind: str, message: str, **details: object) -> int:
    _LOG.warning("command failed: %s", message, extra={"event": "command_failed", "context": {"kind": kind, **details}})
    _print_json({"success": False, "error": kind, "message": message, **details})
    return 2


def _load(args: argparse.Namespace) -> AppConfig:
    path = getattr(args, "config", None)
    return load_config(Path(path).expanduser() if path else None)


def _apply_render_overrides(cfg: AppConfig, args: argparse.Namespace) -> None:
    if args.device:
        cfg.render.device = args.device
    if args.font:
        cfg.render.font_family = args.font
    if args.size is not None:
        cfg.render.font_size = args.size
    if args.color:
        cfg.render.text_color = args.color
    if args.align:
        cfg.render.alignment = args.align
    if args.font_dir:
        cfg.fonts.directories = list(cfg.fonts.directories) + list(args.font_dir)


def _background_overrides(args: argparse.Namespace) -> dict[str, object]:
    """Background picked on the command line; empty when the config decides."""
    if args.solid:
        return {"background": SolidColor(parse_color(args.solid))}
    if args.gradient:
        start, end = (parse_color(c) for c in args.gradient)
        kind = Radial() if args.radial else Linear(args.angle)
        return {"background": Gradient(start, end, kind)}
    if args.frosted:
        return {"background": Frosted(parse_color(args.frosted), args.intensity, args.opacity)}
    if args.image:
        path = Path(args.image).expanduser()
        pixels = BackgroundLibrary(path.parent).load(path.name)
        return {"background": Bitmap(pixels, Transform(scale=args.scale, offset=(args.offset_x, args.offset_y)))}
    if args.plain:
        return {"background": None}
    return {}


def cmd_render(args: argparse.Namespace) -> int:
    cfg = _load(args)
    _apply_render_overrides(cfg, args)
    try:
        pipeline = WallpaperPipeline(cfg)
        result = pipeline.render(args.text, **_background_overrides(args))
        out_dir = Path(args.out_dir).expanduser() if args.out_dir else Path(cfg.output.directory or default_output_dir())
        path = save_wallpaper(result.image, out_dir, stem=args.stem, fmt=args.format or cfg.output.format)
    except TextTooLong as exc:
        return _error("text_too_long", str(exc), length=exc.length, limit=exc.limit)
    except RenderError as exc:
        return _error("render_error", str(exc))
    except ExportError as exc:
        return _error("export_error", str(exc))
    except (KeyError, ValueError) as exc:
        return _error("invalid_argument", str(exc.args[0] if exc.args else exc))

    layer = result.text_layer
    _print_json(
        {
            "success": True,
            "path": str(path),
            "device": result.device.name,
            "canvas": list(result.image.size),
            "font_size": layer.font_size,
            "lines": list(layer.lines),
            "overflow": layer.overflow,
            "bounds": asdict(layer.bounds),
            "elapsed_ms": round(result.elapsed_ms, 2),
        }
    )
    return 0


def cmd_devices(args: argparse.Namespace) -> int:
    cfg = _load(args)
    catalog = catalog_from_config(cfg)
    _print_json(
        [
            {
                "name": d.name,
                "canvas_width": d.canvas_width,
                "canvas_height": d.canvas_height,
                "safe_insets": asdict(d.safe_insets),
                "safe_area": asdict(d.safe_area()),
                "default": d.name == catalog.default.name,
            }
            for d in catalog.profiles()
        ]
    )
    return 0


def cmd_fonts(args: argparse.Namespace) -> int:
    cfg = _load(args)
    resolver = FontResolver(list(cfg.fonts.directories) + list(args.font_dir or []))
    _print_json(resolver.available())
    return 0


def cmd_split(args: argparse.Namespace) -> int:
    if args.file:
        try:
            text = Path(args.file).expanduser().read_text(encoding="utf-8")
        except OSError as exc:
            return _error("read_error", str(exc), path=args.file)
    elif args.text is not None:
        text = args.text
    else:
        text = sys.stdin.read()
    paragraphs = split_paragraphs(text, delimiter=args.delimiter)
    _print_json({"count": len(paragraphs), "paragraphs": paragraphs})
    return 0


def cmd_doctor(args: argparse.Namespace) -> int:
    cfg = _load(args)
    payload = build_doctor_payload(cfg, FontResolver(cfg.fonts.directories), catalog_from_config(cfg))

    if args.export:
        exporter = DiagnosticsExporter()
        out_dir = Path(args.out_dir).expanduser().resolve() if args.out_dir else None
        bundle = exporter.bundle(cfg=cfg, doctor_payload=payload, recent_renders=recent_events(), output_dir=out_dir)
        payload["diagnostics_bundle"] = str(bundle)

    _print_json(payload)
    return 0


def cmd_benchmark(args: argparse.Namespace) -> int:
    cfg = _load(args)
    if args.device:
        cfg.render.device = args.device
    budget = RenderBudget(
        RenderTargets(
            render_ms_max=cfg.performance.render_ms_max,
            rss_mb_max=cfg.performance.rss_mb_max,
            debounce_ms=cfg.performance.debounce_ms,
        )
    )
    try:
        pipeline = WallpaperPipeline(cfg)
        samples = []
        debounce = cfg.performance.debounce_ms
        start = time.perf_counter()
        for _ in range(max(1, args.iterations)):
            result = pipeline.render(args.text)
            status = budget.sample(result.elapsed_ms, debounce)
            debounce = status.recommended_debounce_ms
            samples.append(asdict(status))
    except (RenderError, TextTooLong, KeyError) as exc:
        return _error("render_error", str(exc.args[0] if exc.args else exc))
    elapsed = max(time.perf_counter() - start, 1e-9)

    render_max = max(s["render_ms"] for s in samples)
    rss_max = max(s["rss_mb"] for s in samples)
    pass_render = render_max <= cfg.performance.render_ms_max
    pass_mem = rss_max <= cfg.performance.rss_mb_max

    _print_json(
        {
            "iterations": len(samples),
            "device": result.device.name,
            "renders_per_s": len(samples) / elapsed,
            "render_ms_mean": sum(s["render_ms"] for s in samples) / len(samples),
            "recommended_debounce_ms": debounce,
            "budget": {
                "targets": {
                    "render_ms_max": cfg.performance.render_ms_max,
                    "rss_mb_max": cfg.performance.rss_mb_max,
                },
                "max_observed": {
                    "render_ms": render_max,
                    "rss_mb": rss_max,
                    "cpu_percent": max(s["cpu_percent"] for s in samples),
                },
                "pass": bool(pass_render and pass_mem),
                "checks": {
                    "render": pass_render,
                    "memory": pass_mem,
                },
            },
        }
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lockcraft", description="LockCraft lock-screen wallpaper tools")
    parser.add_argument("--config", default=None, help="Optional config file path")
    sub = parser.add_subparsers(dest="command", required=True)

    render_cmd = sub.add_parser("render", help="Render text onto a wallpaper and save it")
    render_cmd.add_argument("text", nargs="?", default=None, help="Text to render; '\\' and '//' start a new line")
    render_cmd.add_argument("--device", default=None)
    render_cmd.add_argument("--font", default=None, help="Font family name")
    render_cmd.add_argument("--font-dir", action="append", default=None, help="Extra directory of font files")
    render_cmd.add_argument("--size", type=float, default=None, help="Starting point size")
    render_cmd.add_argument("--color", default=None, help="Text color, e.g. '#FFFFFF'")
    render_cmd.add_argument("--align", choices=["left", "center", "right", "justified"], default=None)
    bg = render_cmd.add_mutually_exclusive_group()
    bg.add_argument("--plain", action="store_true", help="White background")
    bg.add_argument("--solid", default=None, metavar="COLOR")
    bg.add_argument("--gradient", nargs=2, default=None, metavar=("START", "END"))
    bg.add_argument("--frosted", default=None, metavar="COLOR")
    bg.add_argument("--image", default=None, metavar="PATH")
    render_cmd.add_argument("--radial", action="store_true", help="Radial instead of linear gradient")
    render_cmd.add_argument("--angle", type=float, default=0.0, help="Linear gradient angle in degrees")
    render_cmd.add_argument("--intensity", type=float, default=0.5, help="Frosted blur intensity 0..1")
    render_cmd.add_argument("--opacity", type=float, default=0.8, help="Frosted tint opacity 0..1")
    render_cmd.add_argument("--scale", type=float, default=1.0, help="Image zoom on top of cover fit")
    render_cmd.add_argument("--offset-x", type=float, default=0.0)
    render_cmd.add_argument("--offset-y", type=float, default=0.0)
    render_cmd.add_argument("--out-dir", default=None)
    render_cmd.add_argument("--stem", default=None, help="Output file name without extension")
    render_cmd.add_argument("--format", choices=["PNG", "JPEG"], default=None)
    render_cmd.set_defaults(func=cmd_render)

    devices_cmd = sub.add_parser("devices", help="List device profiles")
    devices_cmd.set_defaults(func=cmd_devices)

    fonts_cmd = sub.add_parser("fonts", help="List available font families")
    fonts_cmd.add_argument("--font-dir", action="append", default=None)
    fonts_cmd.set_defaults(func=cmd_fonts)

    split_cmd = sub.add_parser("split", help="Split text into paragraphs")
    source = split_cmd.add_mutually_exclusive_group()
    source.add_argument("--file", default=None)
    source.add_argument("--text", default=None)
    split_cmd.add_argument("--delimiter", default=None, help="Custom delimiter instead of blank lines")
    split_cmd.set_defaults(func=cmd_split)

    doctor_cmd = sub.add_parser("doctor", help="Print diagnostics, devices, and fonts")
    doctor_cmd.add_argument("--export", action="store_true", help="Export offline diagnostics bundle")
    doctor_cmd.add_argument("--out-dir", default=None, help="Optional output directory for diagnostics bundle")
    doctor_cmd.set_defaults(func=cmd_doctor)

    bench_cmd = sub.add_parser("benchmark", help="Time repeated renders against the budget")
    bench_cmd.add_argument("--iterations", type=int, default=5)
    bench_cmd.add_argument("--device", default=None)
    bench_cmd.add_argument("--text", default=None)
    bench_cmd.set_defaults(func=cmd_benchmark)

    return parser


def main(argv: list[str] | None = None) -> int:
    configure_logging(console=False)
    install_crash_hooks()
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
