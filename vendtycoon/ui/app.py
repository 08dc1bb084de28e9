"""
Application shell.

Owns the pygame window, the current screen and the shared UI services
(theme, fonts, assets, notifications). The frame loop runs inside an
asyncio event loop so that screens can await session I/O without
blocking rendering.
"""

import asyncio
from typing import Awaitable, Optional, Set, Tuple

import pygame

from .assets import AssetCache
from .notifications import NotificationCenter
from .overlay import PerformanceOverlay
from .screens import MainScreen, MenuScreen, Screen
from .theme import FontCache, UITheme
from ..config import Settings, get_settings
from ..core.exceptions import handle_error
from ..core.logging import get_logger
from ..session import GameSession


class VendingTycoonApp:
    """
    Main application window.

    Screens navigate through ``show_menu`` and ``show_session``; they never
    import each other.
    """

    def __init__(self, session: GameSession, settings: Optional[Settings] = None,
                 assets: Optional[AssetCache] = None):
        """
        Args:
            session: The game session the screens operate on
            settings: Application settings, the global settings if not provided
            assets: Image cache, built from ``settings.assets_dir`` if not provided
        """
        self.settings = settings or get_settings()
        self.session = session
        self.logger = get_logger("ui.app")

        self.theme = UITheme()
        self.fonts = FontCache()
        self.assets = assets or AssetCache(self.settings.assets_dir)
        self.notifications = NotificationCenter(self.settings.notification_seconds)
        self.overlay = PerformanceOverlay(visible=self.settings.show_performance_overlay)

        self.size: Tuple[int, int] = self.settings.window_size
        self.surface: Optional[pygame.Surface] = None
        self.screen: Optional[Screen] = None
        self.running = False
        self._tasks: Set[asyncio.Task] = set()

    def open_window(self) -> pygame.Surface:
        """Initialize pygame and create the display surface."""
        pygame.init()

        flags = 0
        if self.settings.fullscreen:
            flags |= pygame.FULLSCREEN
        elif self.settings.resizable:
            flags |= pygame.RESIZABLE

        self.surface = pygame.display.set_mode(self.size, flags)
        self.size = self.surface.get_size()
        pygame.display.set_caption(self.settings.app_name)

        display = self.settings.get_display_info()
        display.update(width=self.size[0], height=self.size[1])
        self.logger.info("Window opened", extra=display)
        return self.surface

    # Navigation
    def navigate(self, screen: Screen) -> None:
        """Replace the current screen."""
        old_screen = self.screen
        if old_screen is not None:
            old_screen.on_exit()

        self.screen = screen
        screen.on_enter()

        self.logger.info("Screen changed", extra={
            "old_screen": old_screen.name if old_screen else None,
            "new_screen": screen.name,
        })

    def show_menu(self) -> None:
        self.navigate(MenuScreen(self))

    def show_session(self) -> None:
        self.navigate(MainScreen(self))

    # Async work
    def spawn(self, coro: Awaitable, name: str) -> asyncio.Task:
        """
        Run ``coro`` on the event loop, keeping a reference until it finishes.

        Failures are routed to the global error handler.
        """
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.logger.error("Background task failed", extra={"task": task.get_name()})
            handle_error(error, {"task": task.get_name()})

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    def quit(self) -> None:
        self.running = False

    # Frame steps
    def process_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return

        if event.type == pygame.VIDEORESIZE:
            self.size = (event.w, event.h)
            if self.screen is not None:
                self.screen.on_resize(self.size)
            return

        if event.type == pygame.KEYDOWN and event.key == pygame.K_F3:
            self.overlay.toggle()
            return

        if self.notifications.handle_event(event):
            return

        if self.screen is not None:
            self.screen.handle_event(event)

    def update(self, dt: float) -> None:
        self.session.update(dt)
        if self.screen is not None:
            self.screen.update(dt)
        self.notifications.update(dt)
        self.overlay.record_frame(dt)

    def render(self, surface: pygame.Surface) -> None:
        if self.screen is not None:
            self.screen.render(surface)

        bottom_margin = 0
        if isinstance(self.screen, MainScreen):
            bottom_margin = self.screen.tab_bar_rect.height
        self.notifications.render(surface, self.fonts, self.theme, bottom_margin)
        self.overlay.render(surface, self.fonts, self.theme)

    async def run_async(self) -> None:
        """Frame loop. Yields to the event loop once per frame."""
        surface = self.surface if self.surface is not None else self.open_window()
        clock = pygame.time.Clock()

        self.running = True
        if self.screen is None:
            self.show_menu()

        try:
            while self.running:
                dt = clock.tick(self.settings.target_fps) / 1000.0

                for event in pygame.event.get():
                    self.process_event(event)
                # The display surface is replaced on resize
                current = pygame.display.get_surface()
                if current is not None:
                    surface = self.surface = current

                self.update(dt)
                self.render(surface)
                pygame.display.flip()

                await asyncio.sleep(0)
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        """Stop the clock, let pending saves finish and close the window."""
        self.logger.info("Application shutting down", extra={"pending_tasks": len(self._tasks)})
        self.session.stop()

        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

        if self.screen is not None:
            self.screen.on_exit()
            self.screen = None

        self.fonts.clear()
        self.assets.clear()
        pygame.quit()

    def run(self) -> int:
        """
        Run the application until the window is closed.

        Returns:
            Exit code (0 for success)
        """
        asyncio.run(self.run_async())
        return 0
