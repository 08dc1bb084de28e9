"""
Event log panel, newest entry first.
"""

import pygame

from .base import Panel
from ..widgets import draw_text, fit_text
from ...session import LogLevel


class EventLogPanel(Panel):

    def _line_height(self) -> int:
        return self.screen.fonts.get(self.screen.theme.small_size + 2).get_linesize() + 6

    def update(self, dt: float) -> None:
        self.content_height = len(self.session.log_history) * self._line_height()
        self._clamp_scroll()

    def render(self, surface: pygame.Surface) -> None:
        theme, fonts = self.screen.theme, self.screen.fonts
        entries = list(reversed(self.session.log_history))

        if not entries:
            draw_text(surface, fonts.get(theme.body_size), "No events yet",
                      theme.text_secondary, center=self.rect.center)
            return

        level_colors = {
            LogLevel.INFO: theme.text,
            LogLevel.SUCCESS: theme.success,
            LogLevel.WARNING: theme.warning,
            LogLevel.ERROR: theme.error,
        }
        font = fonts.get(theme.small_size + 2)
        prefix_font = fonts.get(theme.small_size)
        line_height = self._line_height()
        prefix_width = prefix_font.size("Day 000, 00:00")[0] + theme.padding

        previous_clip = surface.get_clip()
        surface.set_clip(self.rect)
        for index, entry in enumerate(entries):
            top = self.rect.top + theme.padding + index * line_height - self.scroll_offset
            if top + line_height < self.rect.top:
                continue
            if top > self.rect.bottom:
                break
            left = self.rect.left + theme.padding
            draw_text(surface, prefix_font, entry.prefix, theme.text_secondary,
                      topleft=(left, top + 2))
            message_width = self.rect.width - prefix_width - theme.padding * 2
            draw_text(surface, font, fit_text(font, entry.message, message_width),
                      level_colors[entry.level], topleft=(left + prefix_width, top))
        surface.set_clip(previous_clip)
