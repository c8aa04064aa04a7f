"""Renderer error taxonomy."""

from __future__ import annotations


class RenderError(Exception):
    pass


class InvalidBackground(RenderError):
    """Background data that cannot be painted (zero-area or undecodable bitmap)."""

    def __init__(self, message: str, width: int | None = None, height: int | None = None, source: str | None = None) -> None:
        super().__init__(message)
        self.width = width
        self.height = height
        self.source = source
