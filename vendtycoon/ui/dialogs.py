"""
Modal confirmation dialog.
"""

from typing import Callable, List, Optional

import pygame

from .assets import AssetCache
from .theme import FontCache, UITheme
from .widgets import Button, draw_panel, draw_text


def wrap_text(font: pygame.font.Font, text: str, max_width: int) -> List[str]:
    """Greedy word wrap to ``max_width`` pixels."""
    lines: List[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}".strip()
        if current and font.size(candidate)[0] > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


class ConfirmDialog:
    """
    Title, message and a cancel/confirm button pair.

    While open it consumes every input event. Esc cancels and Enter
    confirms; either choice closes the dialog before running its callback.
    """

    def __init__(self,
                 title: str,
                 message: str,
                 on_confirm: Callable[[], None],
                 on_cancel: Optional[Callable[[], None]] = None,
                 confirm_label: str = "OK",
                 cancel_label: str = "Cancel"):
        self.title = title
        self.message = message
        self.on_confirm = on_confirm
        self.on_cancel = on_cancel
        self.confirm_label = confirm_label
        self.cancel_label = cancel_label

        self.is_open = True
        self.buttons: List[Button] = []
        self._layout_size = None

    def confirm(self) -> None:
        if not self.is_open:
            return
        self.is_open = False
        self.on_confirm()

    def cancel(self) -> None:
        if not self.is_open:
            return
        self.is_open = False
        if self.on_cancel:
            self.on_cancel()

    def handle_event(self, event: pygame.event.Event) -> bool:
        """Returns True while the dialog is open (all input is modal)."""
        if not self.is_open:
            return False

        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                self.cancel()
            elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                self.confirm()
        elif event.type == pygame.MOUSEMOTION:
            for button in self.buttons:
                button.update_hover(event.pos)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            for button in self.buttons:
                if button.contains(event.pos):
                    if button.action == "confirm":
                        self.confirm()
                    else:
                        self.cancel()
                    break
        return True

    def _layout(self, size, theme: UITheme) -> pygame.Rect:
        width, height = size
        box = pygame.Rect(0, 0, min(width - theme.padding * 4, 420), min(height // 2, 240))
        box.center = (width // 2, height // 2)

        if self._layout_size != size:
            button_width = (box.width - theme.padding * 3) // 2
            button_height = 44
            top = box.bottom - theme.padding - button_height
            self.buttons = [
                Button(self.cancel_label, "cancel",
                       pygame.Rect(box.left + theme.padding, top, button_width, button_height),
                       theme.secondary),
                Button(self.confirm_label, "confirm",
                       pygame.Rect(box.right - theme.padding - button_width, top,
                                   button_width, button_height),
                       theme.error),
            ]
            self._layout_size = size
        return box

    def render(self, surface: pygame.Surface, fonts: FontCache, theme: UITheme,
               assets: AssetCache) -> None:
        if not self.is_open:
            return

        size = surface.get_size()
        draw_panel(surface, surface.get_rect(), theme.overlay)
        box = self._layout(size, theme)
        draw_panel(surface, box, theme.surface, theme.border_radius, border=theme.secondary)

        title_font = fonts.get(theme.body_size + 6, bold=True)
        draw_text(surface, title_font, self.title, theme.text,
                  topleft=(box.left + theme.padding, box.top + theme.padding))

        body_font = fonts.get(theme.small_size + 2)
        y = box.top + theme.padding * 2 + title_font.get_linesize()
        for line in wrap_text(body_font, self.message, box.width - theme.padding * 2):
            draw_text(surface, body_font, line, theme.text_secondary,
                      topleft=(box.left + theme.padding, y))
            y += body_font.get_linesize()

        for button in self.buttons:
            button.render(surface, fonts, theme, assets, font_size=theme.body_size)
