import sys
import threading
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from PIL import Image

from lockcraft_core.image_cache import LRUImageCache, estimate_bytes


def _img(w=10, h=10, mode="RGBA"):
    return Image.new(mode, (w, h))


class ImageCacheTests(unittest.TestCase):
    def test_byte_estimate(self):
        self.assertEqual(estimate_bytes(_img(10, 10)), 400)
        self.assertEqual(estimate_bytes(_img(10, 10, "RGB")), 300)

    def test_get_put_and_recency(self):
        cache = LRUImageCache(max_items=2, max_bytes=10_000)
        a, b, c = _img(), _img(), _img()
        cache.put("a", a)
        cache.put("b", b)
        self.assertIs(cache.get("a"), a)
        cache.put("c", c)
        self.assertIn("a", cache)
        self.assertNotIn("b", cache)
        self.assertIn("c", cache)
        self.assertEqual(cache.stats().evictions, 1)

    def test_byte_budget_evicts_oldest(self):
        cache = LRUImageCache(max_items=10, max_bytes=1000)
        cache.put("a", _img())
        cache.put("b", _img())
        cache.put("c", _img())
        self.assertEqual(len(cache), 2)
        self.assertNotIn("a", cache)
        self.assertLessEqual(cache.stats().bytes_used, 1000)

    def test_oversized_image_not_cached(self):
        cache = LRUImageCache(max_items=10, max_bytes=100)
        cache.put("big", _img())
        self.assertIsNone(cache.get("big"))
        self.assertEqual(cache.stats().items, 0)

    def test_replace_and_evict(self):
        cache = LRUImageCache(max_items=3, max_bytes=10_000)
        cache.put("a", _img())
        cache.put("a", _img(5, 5))
        self.assertEqual(cache.stats().bytes_used, 100)
        cache.evict("a")
        cache.evict("missing")
        self.assertEqual(cache.stats().bytes_used, 0)
        cache.put("b", _img())
        cache.clear()
        self.assertEqual(len(cache), 0)

    def test_hit_and_miss_counters(self):
        cache = LRUImageCache()
        cache.put("a", _img())
        cache.get("a")
        cache.get("nope")
        stats = cache.stats()
        self.assertEqual((stats.hits, stats.misses), (1, 1))

    def test_concurrent_puts_respect_limits(self):
        cache = LRUImageCache(max_items=5, max_bytes=10_000)

        def worker(prefix):
            for i in range(50):
                cache.put(f"{prefix}-{i}", _img())
                cache.get(f"{prefix}-{i - 1}")

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        stats = cache.stats()
        self.assertLessEqual(stats.items, 5)
        self.assertEqual(stats.bytes_used, stats.items * 400)

    def test_invalid_limits(self):
        with self.assertRaises(ValueError):
            LRUImageCache(max_items=0)
        with self.assertRaises(ValueError):
            LRUImageCache(max_bytes=0)


if __name__ == "__main__":
    unittest.main()
