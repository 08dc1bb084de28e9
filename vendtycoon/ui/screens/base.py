"""
Screen and panel base classes.

A screen is mounted while it is the application's current screen. Work
that completes after an await must check ``is_stale`` before touching the
screen, because the player may have navigated away in the meantime.
"""

from typing import TYPE_CHECKING, Awaitable, Tuple

import pygame

from ...core.logging import get_logger

if TYPE_CHECKING:
    from ..app import VendingTycoonApp


class Screen:
    """Base class for full-window screens."""

    name = "screen"

    def __init__(self, app: 'VendingTycoonApp'):
        self.app = app
        self.mounted = False
        self.size: Tuple[int, int] = app.size
        self.mouse_pos: Tuple[int, int] = (0, 0)
        self.logger = get_logger(f"ui.screens.{self.name}")

    @property
    def session(self):
        return self.app.session

    @property
    def theme(self):
        return self.app.theme

    @property
    def fonts(self):
        return self.app.fonts

    @property
    def assets(self):
        return self.app.assets

    @property
    def notifications(self):
        return self.app.notifications

    def on_enter(self) -> None:
        """Called when the screen becomes current."""
        self.mounted = True
        self.layout(self.app.size)

    def on_exit(self) -> None:
        """Called when the screen is replaced or the application closes."""
        self.mounted = False

    def on_resize(self, size: Tuple[int, int]) -> None:
        self.layout(size)

    def layout(self, size: Tuple[int, int]) -> None:
        self.size = size

    def handle_event(self, event: pygame.event.Event) -> bool:
        """Returns True if the event was consumed."""
        return False

    def update(self, dt: float) -> None:
        pass

    def render(self, surface: pygame.Surface) -> None:
        pass

    def run_async(self, coro: Awaitable, name: str):
        """Schedule ``coro`` on the application's event loop."""
        return self.app.spawn(coro, f"{self.name}.{name}")

    def is_stale(self, operation: str) -> bool:
        """True when the screen was unmounted while ``operation`` was pending."""
        if self.mounted:
            return False
        self.logger.debug("Screen unmounted, dropping result", extra={"operation": operation})
        return True


class Panel:
    """A region of a screen, such as the content of one tab."""

    def __init__(self, screen: Screen):
        self.screen = screen
        self.rect = pygame.Rect(0, 0, 0, 0)
        self.scroll_offset = 0
        self.content_height = 0

    @property
    def session(self):
        return self.screen.session

    def layout(self, rect: pygame.Rect) -> None:
        self.rect = pygame.Rect(rect)
        self._clamp_scroll()

    def scroll(self, amount: int) -> None:
        self.scroll_offset += amount
        self._clamp_scroll()

    def _clamp_scroll(self) -> None:
        max_offset = max(0, self.content_height - self.rect.height)
        self.scroll_offset = max(0, min(self.scroll_offset, max_offset))

    def handle_event(self, event: pygame.event.Event) -> bool:
        if event.type == pygame.MOUSEWHEEL:
            self.scroll(-event.y * 30)
            return True
        return False

    def update(self, dt: float) -> None:
        pass

    def render(self, surface: pygame.Surface) -> None:
        pass
