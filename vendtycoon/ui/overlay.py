"""
Performance overlay (toggled with F3).

Shows frame rate statistics over a ring buffer of recent frame times and
the memory/CPU use of the process.
"""

import time
from typing import Dict, Optional

import numpy as np
import psutil
import pygame

from .theme import FontCache, UITheme
from .widgets import draw_panel, draw_text


class PerformanceOverlay:
    """FPS and process metrics in the top-right corner."""

    def __init__(self, history_length: int = 120, metrics_interval: float = 0.5,
                 visible: bool = False):
        self.visible = visible
        self.metrics_interval = metrics_interval

        self._frame_times = np.zeros(history_length, dtype=np.float64)
        self._count = 0
        self._index = 0

        self._process = psutil.Process()
        self._last_metrics_update = 0.0
        self.memory_mb = 0.0
        self.cpu_percent = 0.0

    def toggle(self) -> bool:
        self.visible = not self.visible
        return self.visible

    def record_frame(self, dt: float) -> None:
        """Store one frame duration (seconds)."""
        if dt <= 0:
            return
        self._frame_times[self._index] = dt
        self._index = (self._index + 1) % len(self._frame_times)
        self._count = min(self._count + 1, len(self._frame_times))

        now = time.monotonic()
        if self.visible and now - self._last_metrics_update >= self.metrics_interval:
            self._update_process_metrics()
            self._last_metrics_update = now

    def _update_process_metrics(self) -> None:
        try:
            self.memory_mb = self._process.memory_info().rss / 1024 / 1024
            self.cpu_percent = self._process.cpu_percent()
        except psutil.Error:
            # keep the last values
            pass

    def stats(self) -> Optional[Dict[str, float]]:
        """
        Frame statistics over the recorded window.

        Returns:
            Dict with fps, p95_frame_ms and max_frame_ms, or None before any frame
        """
        if self._count == 0:
            return None
        window = self._frame_times[:self._count]
        return {
            "fps": float(1.0 / window.mean()),
            "p95_frame_ms": float(np.percentile(window, 95) * 1000.0),
            "max_frame_ms": float(window.max() * 1000.0),
        }

    def render(self, surface: pygame.Surface, fonts: FontCache, theme: UITheme) -> None:
        if not self.visible:
            return

        stats = self.stats()
        lines = ["collecting..."] if stats is None else [
            f"FPS {stats['fps']:.0f}",
            f"p95 {stats['p95_frame_ms']:.1f} ms",
            f"max {stats['max_frame_ms']:.1f} ms",
        ]
        lines += [f"RSS {self.memory_mb:.0f} MB", f"CPU {self.cpu_percent:.0f}%"]

        font = fonts.get(theme.small_size)
        line_height = font.get_linesize()
        width = max(font.size(line)[0] for line in lines) + theme.padding
        rect = pygame.Rect(0, 0, width, line_height * len(lines) + theme.padding)
        rect.topright = (surface.get_width() - 4, 4)

        draw_panel(surface, rect, theme.overlay)
        for i, line in enumerate(lines):
            draw_text(surface, font, line, theme.text,
                      topleft=(rect.left + theme.padding // 2,
                               rect.top + theme.padding // 2 + i * line_height))
