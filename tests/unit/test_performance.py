import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from lockcraft_core.performance import RenderBudget, RenderTargets


class PerformanceTests(unittest.TestCase):
    def test_budget_sample_shape(self):
        budget = RenderBudget(RenderTargets(render_ms_max=1000.0, rss_mb_max=65536.0, debounce_ms=250))
        status = budget.sample(render_ms=500.0)
        self.assertFalse(status.overloaded)
        self.assertIsNone(status.warning)
        self.assertEqual(status.recommended_debounce_ms, 250)
        self.assertGreaterEqual(status.rss_mb, 0.0)

    def test_slow_render_widens_debounce(self):
        budget = RenderBudget(RenderTargets(render_ms_max=100.0, rss_mb_max=65536.0, debounce_ms=250))
        status = budget.sample(render_ms=900.0)
        self.assertTrue(status.overloaded)
        self.assertEqual(status.warning, "render_over_budget")
        self.assertEqual(status.recommended_debounce_ms, 900)

    def test_fast_render_tightens_debounce(self):
        budget = RenderBudget(RenderTargets(render_ms_max=1000.0, rss_mb_max=65536.0, debounce_ms=250))
        status = budget.sample(render_ms=10.0, debounce_ms=400)
        self.assertEqual(status.recommended_debounce_ms, 350)
        floor = budget.sample(render_ms=10.0, debounce_ms=130)
        self.assertEqual(floor.recommended_debounce_ms, 125)


if __name__ == "__main__":
    unittest.main()
