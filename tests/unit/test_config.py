import json
import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from lockcraft_core.config import AppConfig, config_path, default_output_dir, load_config, save_config


class ConfigTests(unittest.TestCase):
    def test_load_default_when_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "missing.json"
            cfg = load_config(path)
            self.assertIsInstance(cfg, AppConfig)
            self.assertEqual(cfg.render.device, "iPhone 12 Pro Max")
            self.assertEqual(cfg.render.max_text_length, 200)
            self.assertEqual(cfg.layout.minimum_font_size, 12)
            self.assertEqual(cfg.background.kind, "none")

    def test_save_and_reload(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            cfg = load_config(path)
            cfg.render.font_family = "LXGWWenKai-Regular"
            cfg.background.kind = "gradient"
            cfg.background.gradient_angle = 45.0
            cfg.devices = [{"name": "Pixel 8", "canvas_width": 1080, "canvas_height": 2400}]
            save_config(cfg, path)
            reloaded = load_config(path)
            self.assertEqual(reloaded.render.font_family, "LXGWWenKai-Regular")
            self.assertEqual(reloaded.background.kind, "gradient")
            self.assertEqual(reloaded.background.gradient_angle, 45.0)
            self.assertEqual(reloaded.devices[0]["name"], "Pixel 8")

    def test_corrupt_file_falls_back_to_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("{not json", encoding="utf-8")
            self.assertEqual(load_config(path), AppConfig())
            path.write_text("[1, 2]", encoding="utf-8")
            self.assertEqual(load_config(path), AppConfig())

    def test_partial_file_is_normalized(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            raw = {
                "render": {"alignment": "diagonal", "max_text_length": "lots"},
                "layout": {"minimum_font_size": 40, "maximum_font_size": 20, "font_size_step": 0},
                "background": {"kind": "hologram", "frosted_intensity": 3, "gradient_angle": -90},
                "output": {"format": "jpg"},
                "devices": ["bad", {"name": "ok", "canvas_width": 1, "canvas_height": 1}],
                "unknown_section": {"x": 1},
            }
            path.write_text(json.dumps(raw), encoding="utf-8")
            cfg = load_config(path)
            self.assertEqual(cfg.render.alignment, "center")
            self.assertEqual(cfg.render.max_text_length, 200)
            self.assertEqual(cfg.layout.minimum_font_size, 40)
            self.assertEqual(cfg.layout.maximum_font_size, 40)
            self.assertEqual(cfg.layout.font_size_step, 1)
            self.assertEqual(cfg.background.kind, "none")
            self.assertEqual(cfg.background.frosted_intensity, 1.0)
            self.assertEqual(cfg.background.gradient_angle, 270.0)
            self.assertEqual(cfg.output.format, "PNG")
            self.assertEqual(len(cfg.devices), 1)
            self.assertEqual(cfg.render.font_size, 120.0)

    def test_config_root_override(self):
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch.dict(os.environ, {"LOCKCRAFT_HOME": tmp}):
                self.assertEqual(config_path(), Path(tmp) / "config.json")
                self.assertEqual(default_output_dir(), Path(tmp) / "wallpapers")
                written = save_config(AppConfig())
                self.assertTrue(written.exists())


if __name__ == "__main__":
    unittest.main()
