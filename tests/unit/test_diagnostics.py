import json
import os
import sys
import tempfile
import unittest
import zipfile
from pathlib import Path
from unittest import mock

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from lockcraft_core.config import load_config
from lockcraft_core.diagnostics import DiagnosticsExporter, build_doctor_payload, redact
from lockcraft_renderer import FontResolver, default_catalog


class DiagnosticsTests(unittest.TestCase):
    def test_redact_nested_secrets(self):
        value = {"render": {"font": "x"}, "api_token": "abc", "items": [{"password": "p"}]}
        self.assertEqual(
            redact(value),
            {"render": {"font": "x"}, "api_token": "***REDACTED***", "items": [{"password": "***REDACTED***"}]},
        )

    def test_redact_keeps_only_path_tails(self):
        value = {"output": {"directory": "/home/alice/walls"}, "fonts": {"directories": ["/home/alice/fonts", "C:/x/y"]}}
        self.assertEqual(redact(value), {"output": {"directory": "walls"}, "fonts": {"directories": ["fonts", "y"]}})

    def test_doctor_payload_shape(self):
        cfg = load_config(Path("/tmp/nonexistent-lockcraft-config.json"))
        payload = build_doctor_payload(cfg, FontResolver(fallback_path=""), default_catalog())
        self.assertIn("pillow", payload["libraries"])
        self.assertIn("numpy", payload["libraries"])
        self.assertEqual(payload["fonts"]["available"][0], "System Font")
        names = [d["name"] for d in payload["devices"]]
        self.assertIn("iPhone 12 Pro Max", names)
        self.assertEqual(sum(1 for d in payload["devices"] if d["default"]), 1)
        json.dumps(payload, default=str)

    def test_bundle_exports_zip(self):
        cfg = load_config(Path("/tmp/nonexistent-lockcraft-config.json"))
        doctor = build_doctor_payload(cfg, FontResolver(fallback_path=""), default_catalog())
        exporter = DiagnosticsExporter()

        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch.dict(os.environ, {"LOCKCRAFT_HOME": tmp}):
                logs = Path(tmp) / "logs"
                logs.mkdir()
                (logs / "lockcraft.log").write_text('{"msg": "hello"}\n', encoding="utf-8")
                bundle = exporter.bundle(cfg=cfg, doctor_payload=doctor, output_dir=Path(tmp) / "out")
            self.assertTrue(bundle.exists())

            with zipfile.ZipFile(bundle, "r") as zf:
                names = set(zf.namelist())
                self.assertIn("manifest.json", names)
                self.assertIn("doctor.json", names)
                self.assertIn("config.redacted.json", names)
                self.assertIn("recent_renders.json", names)
                self.assertIn("logs/lockcraft.log", names)
                manifest = json.loads(zf.read("manifest.json"))
                self.assertEqual(manifest["app"], "LockCraft")


if __name__ == "__main__":
    unittest.main()
