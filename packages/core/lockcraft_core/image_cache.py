"""Bounded in-memory cache for decoded background images."""

from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Protocol

from PIL import Image


class ImageCache(Protocol):
    def get(self, key: str) -> Image.Image | None: ...

    def put(self, key: str, image: Image.Image) -> None: ...

    def evict(self, key: str) -> None: ...

    def clear(self) -> None: ...


@dataclass(frozen=True)
class CacheStats:
    items: int
    bytes_used: int
    max_items: int
    max_bytes: int
    hits: int
    misses: int
    evictions: int


def estimate_bytes(image: Image.Image) -> int:
    width, height = image.size
    return width * height * len(image.getbands())


class LRUImageCache:
    """Least-recently-used eviction over an item count and an estimated byte budget."""

    def __init__(self, max_items: int = 20, max_bytes: int = 100 * 1024 * 1024) -> None:
        if max_items < 1:
            raise ValueError("max_items must be >= 1")
        if max_bytes < 1:
            raise ValueError("max_bytes must be >= 1")
        self.max_items = max_items
        self.max_bytes = max_bytes
        self._items: OrderedDict[str, tuple[Image.Image, int]] = OrderedDict()
        self._bytes = 0
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._items

    def get(self, key: str) -> Image.Image | None:
        with self._lock:
            entry = self._items.get(key)
            if entry is None:
                self._misses += 1
                return None
            self._items.move_to_end(key)
            self._hits += 1
            return entry[0]

    def put(self, key: str, image: Image.Image) -> None:
        size = estimate_bytes(image)
        with self._lock:
            self._drop(key)
            if size > self.max_bytes:
                return
            self._items[key] = (image, size)
            self._bytes += size
            while len(self._items) > self.max_items or self._bytes > self.max_bytes:
                oldest = next(iter(self._items))
                self._drop(oldest)
                self._evictions += 1

    def evict(self, key: str) -> None:
        with self._lock:
            self._drop(key)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()
            self._bytes = 0

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                items=len(self._items),
                bytes_used=self._bytes,
                max_items=self.max_items,
                max_bytes=self.max_bytes,
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
            )

    def _drop(self, key: str) -> None:
        entry = self._items.pop(key, None)
        if entry is not None:
            self._bytes -= entry[1]
