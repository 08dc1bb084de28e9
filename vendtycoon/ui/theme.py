"""
Colors and the UI theme.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple

import pygame


@dataclass
class Color:
    """RGBA color representation."""
    r: int
    g: int
    b: int
    a: int = 255

    def __post_init__(self):
        self.r = max(0, min(255, int(self.r)))
        self.g = max(0, min(255, int(self.g)))
        self.b = max(0, min(255, int(self.b)))
        self.a = max(0, min(255, int(self.a)))

    def to_tuple(self) -> Tuple[int, int, int]:
        """Convert to RGB tuple."""
        return (self.r, self.g, self.b)

    def to_tuple_rgba(self) -> Tuple[int, int, int, int]:
        """Convert to RGBA tuple."""
        return (self.r, self.g, self.b, self.a)

    def with_alpha(self, alpha: int) -> 'Color':
        """Create new color with different alpha."""
        return Color(self.r, self.g, self.b, alpha)

    def lighten(self, amount: int = 30) -> 'Color':
        """Brighter variant used for hover states."""
        return Color(self.r + amount, self.g + amount, self.b + amount, self.a)

    @classmethod
    def from_hex(cls, hex_color: str) -> 'Color':
        """Create color from "#RRGGBB" or "#RRGGBBAA"."""
        hex_color = hex_color.lstrip('#')
        if len(hex_color) not in (6, 8):
            raise ValueError(f"Invalid hex color: {hex_color}")
        channels = [int(hex_color[i:i + 2], 16) for i in range(0, len(hex_color), 2)]
        return cls(*channels)


def _color(hex_color: str):
    return field(default_factory=lambda: Color.from_hex(hex_color))


@dataclass
class UITheme:
    """UI theme configuration."""
    # Colors
    background: Color = _color("#1E1E28")
    surface: Color = _color("#2D2D37")
    surface_alt: Color = _color("#383846")
    primary: Color = _color("#4080FF")
    secondary: Color = _color("#808080")
    text: Color = _color("#FFFFFF")
    text_secondary: Color = _color("#B4B4B4")
    accent: Color = _color("#FFC107")
    success: Color = _color("#4CAF50")
    warning: Color = _color("#FF9800")
    error: Color = _color("#F44336")
    info: Color = _color("#2196F3")
    cash: Color = _color("#66BB6A")
    reputation: Color = _color("#FFCA28")
    time: Color = _color("#42A5F5")
    overlay: Color = field(default_factory=lambda: Color(0, 0, 0, 160))

    # Menu fallback button colors
    start_button: Color = _color("#E53935")
    load_button: Color = _color("#FDD835")
    options_button: Color = _color("#546E7A")
    credits_button: Color = _color("#546E7A")

    # Fonts
    title_size: int = 40
    body_size: int = 20
    small_size: int = 16

    # Layout
    padding: int = 12
    border_radius: int = 8


class FontCache:
    """pygame default-font objects keyed by point size."""

    def __init__(self):
        self._fonts: Dict[Tuple[int, bool], pygame.font.Font] = {}

    def get(self, size: int, bold: bool = False) -> pygame.font.Font:
        size = max(6, int(size))
        key = (size, bold)
        if key not in self._fonts:
            font = pygame.font.Font(None, size)
            font.set_bold(bold)
            self._fonts[key] = font
        return self._fonts[key]

    def clear(self) -> None:
        self._fonts.clear()
