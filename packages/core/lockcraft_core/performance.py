"""Render budgeting and debounce tuning hints."""

from __future__ import annotations

from dataclasses import dataclass

try:
    import psutil
except Exception:  # pragma: no cover
    psutil = None


@dataclass(frozen=True)
class RenderTargets:
    render_ms_max: float = 1500.0
    rss_mb_max: float = 600.0
    debounce_ms: int = 250


@dataclass(frozen=True)
class BudgetStatus:
    render_ms: float
    cpu_percent: float
    rss_mb: float
    overloaded: bool
    warning: str | None
    recommended_debounce_ms: int


class RenderBudget:
    def __init__(self, targets: RenderTargets | None = None) -> None:
        self.targets = targets or RenderTargets()
        self._process = psutil.Process() if psutil is not None else None
        if self._process is not None:
            # Prime non-blocking CPU measurement.
            self._process.cpu_percent(interval=None)

    def sample(self, render_ms: float, debounce_ms: int | None = None) -> BudgetStatus:
        debounce = self.targets.debounce_ms if debounce_ms is None else int(debounce_ms)
        if self._process is None:
            cpu = 0.0
            rss_mb = 0.0
        else:
            cpu = float(self._process.cpu_percent(interval=None))
            rss_mb = float(self._process.memory_info().rss) / (1024 * 1024)

        warning = None
        rec_debounce = debounce
        slow = render_ms > self.targets.render_ms_max
        heavy = rss_mb > self.targets.rss_mb_max

        if heavy:
            warning = "memory_over_budget"
            rec_debounce = min(5000, int(debounce * 1.5) + 50)
        elif slow:
            warning = "render_over_budget"
            # Leave at least one render's worth of quiet time between edits.
            rec_debounce = min(5000, max(debounce + 50, int(render_ms)))
        elif render_ms < self.targets.render_ms_max / 4:
            rec_debounce = max(self.targets.debounce_ms // 2, debounce - 50)

        return BudgetStatus(
            render_ms=float(render_ms),
            cpu_percent=cpu,
            rss_mb=rss_mb,
            overloaded=bool(slow or heavy),
            warning=warning,
            recommended_debounce_ms=rec_debounce,
        )
