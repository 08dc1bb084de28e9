"""
HQ dashboard panel: status cards, empty-machine alert and machine list.
"""

from typing import List

import pygame

from .base import Panel
from ..formatting import alert_message, machine_summary
from ..layout import dashboard_card_metrics, distribute_horizontally
from ..widgets import draw_fallback_icon, draw_panel, draw_status_card, draw_text, fit_text
from ...session import MachineStatus


ROW_HEIGHT = 56


class DashboardPanel(Panel):
    """Reads the session on every frame; holds no game state of its own."""

    def __init__(self, screen):
        super().__init__(screen)
        self.metrics = dashboard_card_metrics(0)
        self.card_rects: List[pygame.Rect] = []
        self.banner_rect = pygame.Rect(0, 0, 0, 0)
        self.list_rect = pygame.Rect(0, 0, 0, 0)

    def layout(self, rect: pygame.Rect) -> None:
        self.rect = pygame.Rect(rect)
        self.metrics = dashboard_card_metrics(rect.width)
        padding = int(self.metrics.padding)

        cards_area = (rect.left, rect.top + padding, rect.width, int(self.metrics.card_height))
        self.card_rects = [pygame.Rect(r) for r in distribute_horizontally(
            3, cards_area, self.metrics.card_width, self.metrics.card_height)]

        banner_top = rect.top + padding * 2 + int(self.metrics.card_height)
        self.banner_rect = pygame.Rect(rect.left, banner_top, rect.width, 44)
        self._layout_list()

    def _layout_list(self) -> None:
        top = self.banner_rect.bottom if self.session.alert_count > 0 else self.banner_rect.top
        self.list_rect = pygame.Rect(self.rect.left, top, self.rect.width, self.rect.bottom - top)
        self.content_height = len(self.session.machines) * ROW_HEIGHT
        max_offset = max(0, self.content_height - self.list_rect.height)
        self.scroll_offset = max(0, min(self.scroll_offset, max_offset))

    def update(self, dt: float) -> None:
        # Alerts and machines change as the game ticks
        self._layout_list()

    def render(self, surface: pygame.Surface) -> None:
        screen = self.screen
        theme, fonts, assets = screen.theme, screen.fonts, screen.assets
        session = self.session
        m = self.metrics

        time = session.controller.game_time
        cards = [
            ("Time", time.clock_label, theme.time, "clock_icon.png", "clock"),
            ("Machines", str(len(session.machines)), theme.primary, "machine_icon.png", "inventory"),
            ("Alerts", str(session.alert_count),
             theme.error if session.alert_count else theme.success, "alert_icon.png", "warning"),
        ]
        for rect, (label, value, color, image, icon) in zip(self.card_rects, cards):
            draw_status_card(surface, rect, fonts, theme, assets, label, value, color,
                             image, icon, m.icon_size, m.label_font_size,
                             m.value_font_size, m.padding)

        if session.alert_count > 0:
            self._render_alert_banner(surface, session.alert_count)

        if session.machines:
            self._render_machine_list(surface)
        else:
            self._render_empty_state(surface)

    def _render_alert_banner(self, surface: pygame.Surface, alert_count: int) -> None:
        theme, fonts = self.screen.theme, self.screen.fonts
        draw_panel(surface, self.banner_rect, theme.error)
        font = fonts.get(theme.body_size, bold=True)
        text = alert_message(alert_count)
        text_width = font.size(text)[0]
        icon_rect = pygame.Rect(0, 0, 22, 22)
        icon_rect.midright = (self.banner_rect.centerx - text_width // 2 - 8, self.banner_rect.centery)
        draw_fallback_icon(surface, "warning", icon_rect, theme.text)
        draw_text(surface, font, text, theme.text, center=self.banner_rect.center)

    def _render_machine_list(self, surface: pygame.Surface) -> None:
        theme, fonts = self.screen.theme, self.screen.fonts
        name_font = fonts.get(theme.body_size, bold=True)
        detail_font = fonts.get(theme.small_size)
        status_colors = {
            MachineStatus.OK: theme.success,
            MachineStatus.LOW_STOCK: theme.warning,
            MachineStatus.EMPTY: theme.error,
            MachineStatus.BROKEN: theme.secondary,
        }

        previous_clip = surface.get_clip()
        surface.set_clip(self.list_rect)
        for index, machine in enumerate(self.session.machines):
            top = self.list_rect.top + index * ROW_HEIGHT - self.scroll_offset
            if top + ROW_HEIGHT < self.list_rect.top or top > self.list_rect.bottom:
                continue
            row = pygame.Rect(self.list_rect.left + theme.padding, top + 4,
                              self.list_rect.width - theme.padding * 2, ROW_HEIGHT - 8)
            draw_panel(surface, row, theme.surface, theme.border_radius)
            pygame.draw.circle(surface, status_colors[machine.status].to_tuple(),
                               (row.left + 18, row.centery), 7)
            text_left = row.left + 36
            text_width = row.right - text_left - theme.padding
            draw_text(surface, name_font, fit_text(name_font, machine.name, text_width),
                      theme.text, bottomleft=(text_left, row.centery))
            draw_text(surface, detail_font, fit_text(detail_font, machine_summary(machine), text_width),
                      theme.text_secondary, topleft=(text_left, row.centery + 2))
        surface.set_clip(previous_clip)

    def _render_empty_state(self, surface: pygame.Surface) -> None:
        theme, fonts = self.screen.theme, self.screen.fonts
        center_x, center_y = self.list_rect.center

        icon_rect = pygame.Rect(0, 0, 64, 64)
        icon_rect.center = (center_x, center_y - 40)
        draw_fallback_icon(surface, "inventory", icon_rect, theme.secondary)

        draw_text(surface, fonts.get(theme.body_size + 2), "No machines yet",
                  theme.text_secondary, midtop=(center_x, icon_rect.bottom + 16))
        draw_text(surface, fonts.get(theme.small_size), "Placed machines will appear here",
                  theme.secondary, midtop=(center_x, icon_rect.bottom + 44))
