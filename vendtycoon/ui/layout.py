"""
Responsive layout arithmetic.

Every size in the UI is a fraction of the window's smaller dimension,
clamped to a readable range. These helpers are pure so they can be tested
without a display.
"""

from dataclasses import dataclass
from typing import List, Tuple


Rect = Tuple[int, int, int, int]


def clamp(value: float, lo: float, hi: float) -> float:
    """Limit ``value`` to the closed range [lo, hi]."""
    if lo > hi:
        raise ValueError(f"Empty range: {lo} > {hi}")
    return max(lo, min(value, hi))


@dataclass(frozen=True)
class ScreenMetrics:
    """Window dimensions and proportional sizing helpers."""
    width: int
    height: int

    @property
    def smaller_dimension(self) -> int:
        return min(self.width, self.height)

    @property
    def is_portrait(self) -> bool:
        return self.height >= self.width

    def relative_size(self, fraction: float) -> float:
        return self.smaller_dimension * fraction

    def relative_size_clamped(self, fraction: float, lo: float, hi: float) -> float:
        return clamp(self.relative_size(fraction), lo, hi)


@dataclass(frozen=True)
class StatusCardMetrics:
    """Dimensions of a status card (icon, label and value)."""
    card_width: float
    card_height: float
    icon_size: float
    label_font_size: int
    value_font_size: int
    padding: float


def _card_metrics_for_width(card_width: float) -> StatusCardMetrics:
    return StatusCardMetrics(
        card_width=card_width,
        card_height=clamp(card_width * 0.714, 85, 128),
        icon_size=clamp(card_width * 0.23, 24, 40),
        label_font_size=round(clamp(card_width * 0.086, 10, 14)),
        value_font_size=round(clamp(card_width * 0.129, 14, 24)),
        padding=clamp(card_width * 0.086, 10, 14),
    )


def dashboard_card_metrics(screen_width: float) -> StatusCardMetrics:
    """Status card sizes on the dashboard, driven by window width only."""
    return _card_metrics_for_width(clamp(screen_width * 0.35, 120, 180))


@dataclass(frozen=True)
class StatusBarMetrics:
    height: float
    card: StatusCardMetrics


def status_bar_metrics(metrics: ScreenMetrics) -> StatusBarMetrics:
    """The compact status bar above the tab content."""
    s = metrics.smaller_dimension
    bar_height = metrics.relative_size(0.16)
    card_width = metrics.relative_size_clamped(0.75, s * 0.25, s * 0.312)
    base = _card_metrics_for_width(card_width)
    # Cards must fit inside the bar whatever the card width says
    card = StatusCardMetrics(
        card_width=card_width,
        card_height=min(base.card_height, bar_height * 0.8),
        icon_size=min(base.icon_size, bar_height * 0.35),
        label_font_size=base.label_font_size,
        value_font_size=base.value_font_size,
        padding=base.padding,
    )
    return StatusBarMetrics(height=bar_height, card=card)


@dataclass(frozen=True)
class TabBarMetrics:
    height: float
    icon_size: float
    font_size: int


def tab_bar_metrics(metrics: ScreenMetrics) -> TabBarMetrics:
    s = metrics.smaller_dimension
    return TabBarMetrics(
        height=clamp(s * 0.14, 48, 72),
        icon_size=clamp(s * 0.078, 20, 32),
        font_size=round(clamp(s * 0.035, 10, 16)),
    )


@dataclass(frozen=True)
class MenuLayout:
    title_width: float
    primary_button_width: float
    primary_button_height: float
    secondary_button_width: float
    secondary_button_height: float
    gap: float


def menu_layout(metrics: ScreenMetrics) -> MenuLayout:
    """Title and button sizes of the main menu."""
    s = metrics.smaller_dimension
    primary_width = s * 0.7
    secondary_width = s * 0.45
    return MenuLayout(
        title_width=s * (0.85 if metrics.is_portrait else 0.6),
        primary_button_width=primary_width,
        primary_button_height=primary_width * 0.25,
        secondary_button_width=secondary_width,
        secondary_button_height=secondary_width * 0.25,
        gap=s * 0.04,
    )


def distribute_horizontally(count: int, container: Rect, item_width: float,
                            item_height: float) -> List[Rect]:
    """
    Lay out ``count`` equal items across ``container`` with equal spacing,
    vertically centered. Items shrink when they would not fit.
    """
    if count <= 0:
        return []

    x, y, width, height = container
    item_width = min(item_width, width / count)
    item_height = min(item_height, height)
    gap = (width - item_width * count) / (count + 1)
    top = y + (height - item_height) / 2

    return [
        (round(x + gap + i * (item_width + gap)), round(top),
         round(item_width), round(item_height))
        for i in range(count)
    ]


def stack_vertically(widths: List[float], heights: List[float], center_x: float,
                     top: float, gap: float) -> List[Rect]:
    """Center a column of items horizontally, starting at ``top``."""
    if len(widths) != len(heights):
        raise ValueError("widths and heights must have the same length")

    rects = []
    y = top
    for width, height in zip(widths, heights):
        rects.append((round(center_x - width / 2), round(y), round(width), round(height)))
        y += height + gap
    return rects
