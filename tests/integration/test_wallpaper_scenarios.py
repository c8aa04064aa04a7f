import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from PIL import Image

from lockcraft_core import AppConfig, BackgroundLibrary, LRUImageCache, WallpaperPipeline, save_wallpaper
from lockcraft_core.text_input import DEFAULT_SAMPLE_TEXT
from lockcraft_renderer import Bitmap, Frosted, FontResolver, Gradient, Radial, Transform


class WallpaperScenarioTests(unittest.TestCase):
    def setUp(self):
        self.pipeline = WallpaperPipeline(AppConfig(), resolver=FontResolver(fallback_path=""))

    def test_sample_text_over_every_background(self):
        photo = Image.new("RGB", (600, 400), (90, 40, 10))
        backgrounds = [
            None,
            Gradient((0, 0, 255, 255), (128, 0, 128, 255)),
            Gradient((255, 255, 255, 255), (0, 0, 0, 255), Radial()),
            Frosted((255, 255, 255, 255), 0.5, 0.8),
            Bitmap(photo, Transform(scale=1.25, offset=(30.0, -40.0))),
        ]
        for background in backgrounds:
            result = self.pipeline.render("", background=background)
            self.assertEqual(result.text, DEFAULT_SAMPLE_TEXT.replace("\\", "\n").replace("//", "\n"))
            self.assertEqual(result.image.size, (1284, 2778))
            self.assertEqual(result.image.getchannel("A").getextrema(), (255, 255))
            self.assertGreaterEqual(result.text_layer.font_size, 12)
            self.assertLessEqual(result.text_layer.font_size, 120)

    def test_library_backed_render_and_save(self):
        with tempfile.TemporaryDirectory() as tmp:
            images = Path(tmp) / "backgrounds"
            images.mkdir()
            Image.new("RGB", (300, 300), (0, 90, 0)).save(images / "forest.png")

            cfg = AppConfig()
            cfg.background.kind = "image"
            cfg.background.image_dir = str(images)
            cfg.background.image_name = "forest.png"
            cache = LRUImageCache(max_items=2, max_bytes=10 * 1024 * 1024)
            pipeline = WallpaperPipeline(
                cfg,
                resolver=FontResolver(fallback_path=""),
                library=BackgroundLibrary(images, cache=cache),
            )

            first = pipeline.render("Hello//World")
            second = pipeline.render("Hello//World")
            self.assertEqual(first.image.tobytes(), second.image.tobytes())
            self.assertEqual(cache.stats().hits, 1)
            self.assertEqual(first.image.getpixel((5, 5)), (0, 90, 0, 255))

            path = save_wallpaper(first.image, Path(tmp) / "out")
            with Image.open(path) as saved:
                self.assertEqual(saved.size, (1284, 2778))


if __name__ == "__main__":
    unittest.main()
