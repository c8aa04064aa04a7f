from __future__ import annotations

import sys

try:
    from .cli import main as _cli_main
except ImportError:
    from lockcraft_app.cli import main as _cli_main

COMMANDS = frozenset({"render", "devices", "fonts", "split", "doctor", "benchmark"})


def _piped_text() -> str | None:
    stream = sys.stdin
    if stream is None or stream.isatty():
        return None
    return stream.read().strip() or None


def main(argv: list[str] | None = None) -> int:
    """``python -m lockcraft_app [TEXT]``: a bare phrase (or piped stdin) renders a wallpaper."""
    if argv is None:
        args = sys.argv[1:]
        if not args:
            text = _piped_text()
            args = [text] if text else []
    else:
        args = list(argv)

    if not args:
        return int(_cli_main(["render"]))
    if args[0] not in COMMANDS and not args[0].startswith("-"):
        return int(_cli_main(["render", *args]))
    return int(_cli_main(args))


if __name__ == "__main__":
    raise SystemExit(main())
