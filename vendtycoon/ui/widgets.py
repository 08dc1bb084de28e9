"""
Drawing primitives shared by the screens.

Includes buttons that render an image when one is available and a colored
box otherwise, vector fallback icons, and the status card.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import pygame

from .assets import AssetCache
from .theme import Color, FontCache, UITheme


def draw_text(surface: pygame.Surface, font: pygame.font.Font, text: str,
              color: Color, **anchor) -> pygame.Rect:
    """
    Render ``text`` and blit it positioned by a pygame.Rect anchor keyword
    such as ``center=(x, y)`` or ``topleft=(x, y)``.

    Returns:
        The rectangle the text occupies
    """
    rendered = font.render(text, True, color.to_tuple())
    rect = rendered.get_rect(**anchor)
    surface.blit(rendered, rect)
    return rect


def fit_text(font: pygame.font.Font, text: str, max_width: int) -> str:
    """Truncate ``text`` with an ellipsis so it fits ``max_width`` pixels."""
    if font.size(text)[0] <= max_width:
        return text
    while text and font.size(text + "...")[0] > max_width:
        text = text[:-1]
    return text + "..."


def draw_panel(surface: pygame.Surface, rect: pygame.Rect, color: Color,
               radius: int = 0, border: Optional[Color] = None) -> None:
    """Filled rounded rectangle, alpha-blended when the color is translucent."""
    if color.a < 255:
        layer = pygame.Surface(rect.size, pygame.SRCALPHA)
        pygame.draw.rect(layer, color.to_tuple_rgba(), layer.get_rect(), border_radius=radius)
        surface.blit(layer, rect.topleft)
    else:
        pygame.draw.rect(surface, color.to_tuple(), rect, border_radius=radius)
    if border is not None:
        pygame.draw.rect(surface, border.to_tuple(), rect, 2, border_radius=radius)


def draw_fallback_icon(surface: pygame.Surface, icon: str, rect: pygame.Rect,
                       color: Color) -> None:
    """Simple vector stand-ins for missing icon images."""
    rgb = color.to_tuple()
    cx, cy = rect.center
    r = max(2, min(rect.width, rect.height) // 2)
    line = max(1, r // 6)

    if icon == "dashboard":
        half = r - line
        for dx in (-1, 1):
            for dy in (-1, 1):
                cell = pygame.Rect(0, 0, half - line, half - line)
                cell.center = (cx + dx * half // 2, cy + dy * half // 2)
                pygame.draw.rect(surface, rgb, cell)
    elif icon == "log":
        for i in range(-1, 2):
            y = cy + i * r // 2
            pygame.draw.line(surface, rgb, (cx - r + line, y), (cx + r - line, y), line)
    elif icon == "cash":
        pygame.draw.circle(surface, rgb, (cx, cy), r, line)
        pygame.draw.line(surface, rgb, (cx, cy - r // 2), (cx, cy + r // 2), line)
    elif icon == "star":
        points = []
        for i in range(10):
            radius = r if i % 2 == 0 else r * 0.45
            angle = math.pi / 5 * i - math.pi / 2
            points.append((cx + radius * math.cos(angle), cy + radius * math.sin(angle)))
        pygame.draw.polygon(surface, rgb, points)
    elif icon == "clock":
        pygame.draw.circle(surface, rgb, (cx, cy), r, line)
        pygame.draw.line(surface, rgb, (cx, cy), (cx, cy - r * 2 // 3), line)
        pygame.draw.line(surface, rgb, (cx, cy), (cx + r // 2, cy), line)
    elif icon == "pause":
        bar = max(2, r // 3)
        pygame.draw.rect(surface, rgb, (cx - r // 2 - bar // 2, cy - r // 2, bar, r))
        pygame.draw.rect(surface, rgb, (cx + r // 2 - bar // 2, cy - r // 2, bar, r))
    elif icon == "play":
        pygame.draw.polygon(surface, rgb, [(cx - r // 2, cy - r // 2),
                                           (cx - r // 2, cy + r // 2),
                                           (cx + r // 2, cy)])
    elif icon == "save":
        body = pygame.Rect(0, 0, r * 3 // 2, r * 3 // 2)
        body.center = (cx, cy)
        pygame.draw.rect(surface, rgb, body, line)
        pygame.draw.rect(surface, rgb, (body.x + line * 2, body.y, body.width // 2, body.height // 3))
    elif icon == "exit":
        pygame.draw.line(surface, rgb, (cx - r // 2, cy - r // 2), (cx + r // 2, cy + r // 2), line + 1)
        pygame.draw.line(surface, rgb, (cx - r // 2, cy + r // 2), (cx + r // 2, cy - r // 2), line + 1)
    elif icon == "warning":
        pygame.draw.polygon(surface, rgb, [(cx, cy - r), (cx - r, cy + r), (cx + r, cy + r)], line)
        pygame.draw.line(surface, rgb, (cx, cy - r // 3), (cx, cy + r // 3), line)
    elif icon == "inventory":
        box = pygame.Rect(0, 0, r * 2 - line, r * 3 // 2)
        box.center = (cx, cy + r // 4)
        pygame.draw.rect(surface, rgb, box, line)
        pygame.draw.line(surface, rgb, box.topleft, (cx, box.top - r // 2), line)
        pygame.draw.line(surface, rgb, box.topright, (cx, box.top - r // 2), line)
    else:
        pygame.draw.rect(surface, rgb, rect, line)


def draw_image_or_icon(surface: pygame.Surface, assets: AssetCache, image: Optional[str],
                       icon: str, rect: pygame.Rect, color: Color) -> bool:
    """
    Blit ``image`` scaled into ``rect``, or draw the ``icon`` fallback.

    Returns:
        True if the image was drawn
    """
    if image:
        surface_image = assets.get(image, rect.size)
        if surface_image is not None:
            surface.blit(surface_image, rect)
            return True
    draw_fallback_icon(surface, icon, rect, color)
    return False


@dataclass
class Button:
    """Clickable area rendered from an image or a colored fallback box."""
    text: str
    action: str
    rect: pygame.Rect
    color: Color
    enabled: bool = True
    hover: bool = False
    image: Optional[str] = None
    icon: Optional[str] = None

    def contains(self, pos: Tuple[int, int]) -> bool:
        return self.rect.collidepoint(pos)

    def update_hover(self, pos: Tuple[int, int]) -> None:
        self.hover = self.enabled and self.contains(pos)

    def render(self, surface: pygame.Surface, fonts: FontCache, theme: UITheme,
               assets: AssetCache, font_size: Optional[int] = None) -> None:
        image = assets.get(self.image, self.rect.size) if self.image else None

        if image is not None:
            if not self.enabled:
                image = image.copy()
                image.set_alpha(128)
            surface.blit(image, self.rect)
            if self.hover:
                pygame.draw.rect(surface, theme.text.to_tuple(), self.rect, 2,
                                 border_radius=theme.border_radius)
            return

        color = self.color.lighten() if self.hover else self.color
        if not self.enabled:
            color = color.with_alpha(128)
        draw_panel(surface, self.rect, color, theme.border_radius)

        text_color = theme.text if self.enabled else theme.text_secondary
        size = font_size or max(12, self.rect.height // 3)
        if self.icon:
            icon_size = min(self.rect.height, self.rect.width) // 2
            icon_rect = pygame.Rect(0, 0, icon_size, icon_size)
            if self.text:
                icon_rect.midleft = (self.rect.left + theme.padding, self.rect.centery)
            else:
                icon_rect.center = self.rect.center
            draw_fallback_icon(surface, self.icon, icon_rect, text_color)
        if self.text:
            font = fonts.get(size, bold=True)
            label = fit_text(font, self.text, self.rect.width - theme.padding)
            draw_text(surface, font, label, text_color, center=self.rect.center)


def draw_status_card(surface: pygame.Surface, rect: pygame.Rect, fonts: FontCache,
                     theme: UITheme, assets: AssetCache, label: str, value: str,
                     value_color: Color, image: Optional[str], icon: str,
                     icon_size: float, label_font_size: int, value_font_size: int,
                     padding: float) -> None:
    """Icon on the left, small label above a large value on the right."""
    draw_panel(surface, rect, theme.surface_alt, theme.border_radius)

    size = int(icon_size)
    icon_rect = pygame.Rect(0, 0, size, size)
    icon_rect.midleft = (rect.left + int(padding), rect.centery)
    draw_image_or_icon(surface, assets, image, icon, icon_rect, value_color)

    text_left = icon_rect.right + int(padding) // 2
    text_width = max(1, rect.right - text_left - int(padding) // 2)

    label_font = fonts.get(label_font_size)
    value_font = fonts.get(value_font_size, bold=True)
    draw_text(surface, label_font, fit_text(label_font, label, text_width),
              theme.text_secondary, bottomleft=(text_left, rect.centery))
    draw_text(surface, value_font, fit_text(value_font, value, text_width),
              value_color, topleft=(text_left, rect.centery + 2))
