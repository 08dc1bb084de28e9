"""
Main menu: new game, load game, options and credits.
"""

from typing import List, Optional, Tuple

import pygame

from .base import Screen
from ..layout import ScreenMetrics, menu_layout, stack_vertically
from ..widgets import Button, draw_text
from ...session import LoadStatus


class MenuScreen(Screen):
    """
    Title screen.

    "Load Game" stays disabled until the asynchronous saved-game lookup
    reports that a save exists.
    """

    name = "menu"

    def __init__(self, app):
        super().__init__(app)
        self.buttons: List[Button] = []
        self.title_rect = pygame.Rect(0, 0, 0, 0)
        self.has_saved_game = False
        self.loading = False

    def on_enter(self) -> None:
        super().on_enter()
        self.run_async(self._refresh_saved_game(), "has_saved_game")

    async def _refresh_saved_game(self) -> None:
        exists = await self.session.has_saved_game()
        if self.is_stale("has_saved_game"):
            return
        self.has_saved_game = exists
        self._update_button_states()

    def layout(self, size: Tuple[int, int]) -> None:
        super().layout(size)
        width, height = size
        metrics = ScreenMetrics(width, height)
        menu = menu_layout(metrics)

        title_height = menu.title_width * 0.4
        self.title_rect = pygame.Rect(0, 0, int(menu.title_width), int(title_height))
        self.title_rect.midtop = (width // 2, int(height * 0.08))

        rects = stack_vertically(
            widths=[menu.primary_button_width] * 2 + [menu.secondary_button_width] * 2,
            heights=[menu.primary_button_height] * 2 + [menu.secondary_button_height] * 2,
            center_x=width / 2,
            top=self.title_rect.bottom + menu.gap * 2,
            gap=menu.gap,
        )

        theme = self.theme
        self.buttons = [
            Button("START GAME", "start", pygame.Rect(rects[0]), theme.start_button,
                   image="start_button.png"),
            Button("LOAD GAME", "load", pygame.Rect(rects[1]), theme.load_button,
                   image="load_button.png"),
            Button("OPTIONS", "options", pygame.Rect(rects[2]), theme.options_button),
            Button("CREDITS", "credits", pygame.Rect(rects[3]), theme.credits_button),
        ]
        self._update_button_states()

    def _update_button_states(self) -> None:
        for button in self.buttons:
            if button.action == "start":
                button.enabled = not self.loading
            elif button.action == "load":
                button.enabled = self.has_saved_game and not self.loading
            button.update_hover(self.mouse_pos)

    def get_button(self, action: str) -> Optional[Button]:
        for button in self.buttons:
            if button.action == action:
                return button
        return None

    def handle_event(self, event: pygame.event.Event) -> bool:
        if event.type == pygame.MOUSEMOTION:
            self.mouse_pos = event.pos
            for button in self.buttons:
                button.update_hover(event.pos)
            return False

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            for button in self.buttons:
                if button.enabled and button.contains(event.pos):
                    self.execute_action(button.action)
                    return True
            return False

        if event.type == pygame.KEYDOWN:
            if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                self.execute_action("start")
                return True
            if event.key == pygame.K_l:
                load = self.get_button("load")
                if load is not None and load.enabled:
                    self.execute_action("load")
                return True
            if event.key == pygame.K_ESCAPE:
                self.app.quit()
                return True

        return False

    def execute_action(self, action: str) -> None:
        self.logger.debug("Menu action", extra={"action": action})

        if action == "start":
            if not self.loading:
                self.start_new_game()
        elif action == "load":
            if not self.loading:
                self.loading = True
                self._update_button_states()
                self.run_async(self._load_game(), "load")
        elif action == "options":
            self.notifications.info("Options coming soon!")
        elif action == "credits":
            self.notifications.info("Credits coming soon!")

    def start_new_game(self) -> None:
        self.session.new_game()
        self.app.show_session()

    async def _load_game(self) -> None:
        try:
            result = await self.session.fetch_saved_game()
        finally:
            self.loading = False

        if self.is_stale("load"):
            return

        if result.status == LoadStatus.NO_SAVED_GAME:
            self.has_saved_game = False
            self._update_button_states()
            self.notifications.error("No saved game found")
            return

        if result.status == LoadStatus.FAILED:
            self._update_button_states()
            self.notifications.error("Failed to load game")
            return

        self.session.load_snapshot(result.snapshot)
        self.session.start()
        self.app.show_session()
        self.notifications.success("Game loaded successfully!")

    def render(self, surface: pygame.Surface) -> None:
        theme = self.theme
        surface.fill(theme.background.to_tuple())

        title = self.assets.get("title.png", self.title_rect.size)
        if title is not None:
            surface.blit(title, self.title_rect)
        else:
            title_font = self.fonts.get(max(theme.title_size, self.title_rect.height // 3), bold=True)
            draw_text(surface, title_font, "VENDING TYCOON", theme.accent,
                      center=self.title_rect.center)
            draw_text(surface, self.fonts.get(theme.body_size), "Build your vending empire",
                      theme.text_secondary,
                      midtop=(self.title_rect.centerx, self.title_rect.centery + title_font.get_linesize() // 2 + 4))

        for button in self.buttons:
            button.render(surface, self.fonts, theme, self.assets)

        draw_text(surface, self.fonts.get(theme.small_size),
                  f"Version {self.app.settings.app_version}", theme.text_secondary,
                  bottomright=(surface.get_width() - theme.padding,
                               surface.get_height() - theme.padding))
