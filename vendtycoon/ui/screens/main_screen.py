"""
Main session screen: status bar, tab content, tab bar and the
pause/save/exit actions.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

import pygame

from .base import Panel, Screen
from .dashboard import DashboardPanel
from .event_log import EventLogPanel
from ..dialogs import ConfirmDialog
from ..formatting import format_cash, format_day
from ..layout import ScreenMetrics, distribute_horizontally, status_bar_metrics, tab_bar_metrics
from ..widgets import Button, draw_image_or_icon, draw_panel, draw_status_card, draw_text


EXIT_TITLE = "Exit to Menu"
EXIT_MESSAGE = ("Are you sure you want to exit to the main menu? "
                "Your progress will be saved.")


@dataclass(frozen=True)
class TabSpec:
    label: str
    icon: str
    image: str


TABS = (
    TabSpec("HQ", "dashboard", "hq_icon.png"),
    TabSpec("LOG", "log", "log_icon.png"),
)


class MainScreen(Screen):
    """
    Navigation shell around the running game.

    The exit flow stops the clock synchronously when the player confirms,
    then saves, then navigates to the menu.
    """

    name = "main"

    def __init__(self, app):
        super().__init__(app)
        self.panels: List[Panel] = [DashboardPanel(self), EventLogPanel(self)]
        self.active_tab = 0

        self.action_buttons: List[Button] = []
        self.tab_rects: List[pygame.Rect] = []
        self.card_rects: List[pygame.Rect] = []
        self.header_rect = pygame.Rect(0, 0, 0, 0)
        self.status_rect = pygame.Rect(0, 0, 0, 0)
        self.content_rect = pygame.Rect(0, 0, 0, 0)
        self.tab_bar_rect = pygame.Rect(0, 0, 0, 0)

        self.dialog: Optional[ConfirmDialog] = None
        self.saving = False
        self.exiting = False

    @property
    def active_panel(self) -> Panel:
        return self.panels[self.active_tab]

    def layout(self, size: Tuple[int, int]) -> None:
        super().layout(size)
        width, height = size
        metrics = ScreenMetrics(width, height)
        self.status_metrics = status_bar_metrics(metrics)
        self.tab_metrics = tab_bar_metrics(metrics)

        header_height = int(self.tab_metrics.height * 0.8)
        self.header_rect = pygame.Rect(0, 0, width, header_height)
        self.status_rect = pygame.Rect(0, header_height, width, int(self.status_metrics.height))
        self.tab_bar_rect = pygame.Rect(0, height - int(self.tab_metrics.height),
                                        width, int(self.tab_metrics.height))
        self.content_rect = pygame.Rect(0, self.status_rect.bottom, width,
                                        self.tab_bar_rect.top - self.status_rect.bottom)

        card = self.status_metrics.card
        self.card_rects = [pygame.Rect(r) for r in distribute_horizontally(
            3, tuple(self.status_rect), card.card_width, card.card_height)]

        tab_width = width / len(TABS)
        self.tab_rects = [
            pygame.Rect(round(i * tab_width), self.tab_bar_rect.top,
                        round(tab_width), self.tab_bar_rect.height)
            for i in range(len(TABS))
        ]

        button_size = header_height - 8
        right = width - self.theme.padding
        theme = self.theme
        actions = [("exit", "exit", theme.error), ("save", "save", theme.primary),
                   ("toggle", "pause", theme.secondary)]
        self.action_buttons = []
        for action, icon, color in actions:
            rect = pygame.Rect(right - button_size, 4, button_size, button_size)
            self.action_buttons.append(Button("", action, rect, color, icon=icon))
            right = rect.left - 6
        self._sync_toggle_button()

        for panel in self.panels:
            panel.layout(self.content_rect)

    def _sync_toggle_button(self) -> None:
        for button in self.action_buttons:
            if button.action == "toggle":
                button.icon = "pause" if self.session.is_running else "play"
            elif button.action == "save":
                button.enabled = not self.saving and not self.exiting

    def get_button(self, action: str) -> Optional[Button]:
        for button in self.action_buttons:
            if button.action == action:
                return button
        return None

    def select_tab(self, index: int) -> None:
        self.active_tab = index % len(self.panels)

    def handle_event(self, event: pygame.event.Event) -> bool:
        if self.dialog is not None and self.dialog.is_open:
            return self.dialog.handle_event(event)

        if event.type == pygame.MOUSEMOTION:
            self.mouse_pos = event.pos
            for button in self.action_buttons:
                button.update_hover(event.pos)
            return False

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            for button in self.action_buttons:
                if button.enabled and button.contains(event.pos):
                    self.execute_action(button.action)
                    return True
            for index, rect in enumerate(self.tab_rects):
                if rect.collidepoint(event.pos):
                    self.select_tab(index)
                    return True

        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_SPACE:
                self.execute_action("toggle")
                return True
            if event.key == pygame.K_s and event.mod & pygame.KMOD_CTRL:
                self.execute_action("save")
                return True
            if event.key == pygame.K_ESCAPE:
                self.execute_action("exit")
                return True
            if event.key == pygame.K_TAB:
                self.select_tab(self.active_tab + 1)
                return True

        return self.active_panel.handle_event(event)

    def execute_action(self, action: str) -> None:
        if self.exiting:
            return

        if action == "toggle":
            running = self.session.toggle()
            self.logger.info("Simulation toggled", extra={"running": running})
            self._sync_toggle_button()
        elif action == "save":
            if not self.saving:
                self.saving = True
                self._sync_toggle_button()
                self.run_async(self._save_game(), "save")
        elif action == "exit":
            self.request_exit()

    async def _save_game(self) -> None:
        try:
            saved = await self.session.save()
        finally:
            self.saving = False

        if self.is_stale("save"):
            return

        self._sync_toggle_button()
        if saved:
            self.notifications.success("Game saved successfully!")
        else:
            self.notifications.error("Failed to save game")

    def request_exit(self) -> None:
        """Open the exit confirmation dialog."""
        if self.dialog is not None and self.dialog.is_open:
            return
        self.dialog = ConfirmDialog(EXIT_TITLE, EXIT_MESSAGE,
                                    on_confirm=self._confirm_exit,
                                    confirm_label="Exit", cancel_label="Cancel")

    def _confirm_exit(self) -> None:
        self.exiting = True
        # Stop now rather than when the task first runs: the same frame's
        # update would otherwise still tick the clock.
        self.session.stop()
        self._sync_toggle_button()
        self.run_async(self._exit_to_menu(), "exit")

    async def _exit_to_menu(self) -> None:
        saved = await self.session.exit_to_menu()
        if self.is_stale("exit"):
            return
        if not saved:
            self.notifications.error("Failed to save game")
        self.app.show_menu()

    def update(self, dt: float) -> None:
        self._sync_toggle_button()
        self.active_panel.update(dt)

    def render(self, surface: pygame.Surface) -> None:
        theme = self.theme
        surface.fill(theme.background.to_tuple())

        self._render_header(surface)
        self._render_status_bar(surface)
        self.active_panel.render(surface)
        self._render_tab_bar(surface)

        if self.dialog is not None and self.dialog.is_open:
            self.dialog.render(surface, self.fonts, theme, self.assets)

    def _render_header(self, surface: pygame.Surface) -> None:
        theme = self.theme
        draw_panel(surface, self.header_rect, theme.surface)
        title = TABS[self.active_tab].label
        if not self.session.is_running:
            title += "  (paused)"
        draw_text(surface, self.fonts.get(theme.body_size + 4, bold=True), title, theme.text,
                  midleft=(theme.padding, self.header_rect.centery))
        for button in self.action_buttons:
            button.render(surface, self.fonts, theme, self.assets)

    def _render_status_bar(self, surface: pygame.Surface) -> None:
        theme = self.theme
        card = self.status_metrics.card
        draw_panel(surface, self.status_rect, theme.surface)

        session = self.session
        cards = [
            ("Cash", format_cash(session.cash), theme.cash, "cash_icon.png", "cash"),
            ("Reputation", str(session.reputation), theme.reputation, "star_icon.png", "star"),
            ("Time", format_day(session.day_count), theme.time, "clock_icon.png", "clock"),
        ]
        for rect, (label, value, color, image, icon) in zip(self.card_rects, cards):
            draw_status_card(surface, rect, self.fonts, theme, self.assets, label, value,
                             color, image, icon, card.icon_size, card.label_font_size,
                             card.value_font_size, card.padding)

    def _render_tab_bar(self, surface: pygame.Surface) -> None:
        theme = self.theme
        draw_panel(surface, self.tab_bar_rect, theme.surface)
        font = self.fonts.get(self.tab_metrics.font_size + 4)
        icon_size = int(self.tab_metrics.icon_size)

        for index, (tab, rect) in enumerate(zip(TABS, self.tab_rects)):
            color = theme.accent if index == self.active_tab else theme.text_secondary
            icon_rect = pygame.Rect(0, 0, icon_size, icon_size)
            icon_rect.midtop = (rect.centerx, rect.top + 6)
            draw_image_or_icon(surface, self.assets, tab.image, tab.icon, icon_rect, color)
            draw_text(surface, font, tab.label, color, midbottom=(rect.centerx, rect.bottom - 4))
