import base64
import io
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from PIL import Image

from lockcraft_core.export import ExportError, encode_image, preview_data_url, save_wallpaper


class ExportTests(unittest.TestCase):
    def setUp(self):
        self.image = Image.new("RGBA", (64, 128), (10, 200, 30, 255))

    def test_encode_png_and_jpeg(self):
        png = encode_image(self.image)
        self.assertTrue(png.startswith(b"\x89PNG"))
        jpeg = encode_image(self.image, "jpg")
        self.assertTrue(jpeg.startswith(b"\xff\xd8"))
        with self.assertRaises(ExportError):
            encode_image(self.image, "TIFF")

    def test_preview_data_url_is_downscaled_png(self):
        big = Image.new("RGBA", (1284, 2778), (255, 255, 255, 255))
        url = preview_data_url(big, max_side=200)
        self.assertTrue(url.startswith("data:image/png;base64,"))
        decoded = Image.open(io.BytesIO(base64.b64decode(url.split(",", 1)[1])))
        self.assertLessEqual(max(decoded.size), 200)
        self.assertEqual(big.size, (1284, 2778))

    def test_save_wallpaper_creates_dirs(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertLogs("lockcraft.core.export", level="INFO") as logs:
                path = save_wallpaper(self.image, Path(tmp) / "nested" / "out", stem="wall")
            self.assertEqual(path.name, "wall.png")
            self.assertTrue(path.exists())
            with Image.open(path) as reopened:
                self.assertEqual(reopened.size, (64, 128))
            self.assertEqual(logs.records[0].event, "wallpaper_saved")

    def test_save_wallpaper_timestamps_names(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = save_wallpaper(self.image, tmp, fmt="JPEG")
            self.assertTrue(path.name.startswith("wallpaper-"))
            self.assertEqual(path.suffix, ".jpg")

    def test_save_wallpaper_write_failure(self):
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "file"
            blocker.write_text("x", encoding="utf-8")
            with self.assertRaises(ExportError):
                save_wallpaper(self.image, blocker / "sub")


if __name__ == "__main__":
    unittest.main()
