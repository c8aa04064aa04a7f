"""Wallpaper text preparation and paragraph splitting."""

from __future__ import annotations

from enum import Enum


DEFAULT_SAMPLE_TEXT = "test test \\ 在黑洞边缘坍塌，//我喝多了火焰，又发誓与神为敌。"
MAX_TEXT_LENGTH = 200

# Order matters: the escaped pair must collapse before single backslashes.
_LINE_BREAK_MARKERS = ("\\\\", "\\", "//")


class TextTooLong(ValueError):
    def __init__(self, length: int, limit: int) -> None:
        super().__init__(f"Text must be {limit} characters or less (got {length})")
        self.length = length
        self.limit = limit


class SplitMode(str, Enum):
    EMPTY_LINE = "empty_line"
    CUSTOM = "custom"


def normalize_line_breaks(raw: str) -> str:
    text = raw
    for marker in _LINE_BREAK_MARKERS:
        text = text.replace(marker, "\n")
    return text


def prepare_text(raw: str | None, max_length: int = MAX_TEXT_LENGTH) -> str:
    """Substitute the sample text for empty input, expand break markers, enforce the limit."""
    text = raw if raw else DEFAULT_SAMPLE_TEXT
    text = normalize_line_breaks(text)
    if len(text) > max_length:
        raise TextTooLong(len(text), max_length)
    return text


def split_paragraphs(text: str, delimiter: str | None = None, mode: SplitMode | str | None = None) -> list[str]:
    mode = SplitMode(mode) if mode is not None else (SplitMode.CUSTOM if delimiter else SplitMode.EMPTY_LINE)
    if mode == SplitMode.CUSTOM:
        if not delimiter:
            return [text]
        parts = text.split(delimiter)
    else:
        parts = text.replace("\r\n", "\n").split("\n\n")
    return [part.strip() for part in parts if part.strip()]
