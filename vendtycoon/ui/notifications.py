"""
Transient notifications (snackbars).

Notifications belong to the application rather than to a screen, so a
message raised just before navigating away is still shown on the next
screen.
"""

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Optional

import pygame

from .theme import Color, FontCache, UITheme
from .widgets import draw_panel, draw_text, fit_text
from ..core.logging import get_logger


class NotificationKind(Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass
class Notification:
    message: str
    kind: NotificationKind = NotificationKind.INFO
    duration: float = 2.0
    elapsed: float = 0.0

    @property
    def remaining(self) -> float:
        return max(0.0, self.duration - self.elapsed)

    @property
    def expired(self) -> bool:
        return self.elapsed >= self.duration


class NotificationCenter:
    """Shows one notification at a time, the rest wait in FIFO order."""

    def __init__(self, default_duration: float = 2.0, max_queued: int = 5):
        self.default_duration = default_duration
        self.logger = get_logger("ui.notifications")

        self.current: Optional[Notification] = None
        self._queue: Deque[Notification] = deque(maxlen=max_queued)
        self._rect: Optional[pygame.Rect] = None

    def notify(self, message: str, kind: NotificationKind = NotificationKind.INFO,
               duration: Optional[float] = None) -> Notification:
        notification = Notification(message, kind, duration or self.default_duration)
        self.logger.debug("Notification queued", extra={
            "notification": message,
            "kind": kind.value,
        })
        if self.current is None:
            self.current = notification
        else:
            self._queue.append(notification)
        return notification

    def success(self, message: str) -> Notification:
        return self.notify(message, NotificationKind.SUCCESS)

    def error(self, message: str) -> Notification:
        return self.notify(message, NotificationKind.ERROR)

    def info(self, message: str) -> Notification:
        return self.notify(message, NotificationKind.INFO)

    @property
    def pending(self) -> int:
        """Notifications shown or waiting to be shown."""
        return len(self._queue) + (1 if self.current else 0)

    def dismiss(self) -> None:
        """Hide the current notification and show the next one."""
        self.current = self._queue.popleft() if self._queue else None

    def clear(self) -> None:
        self.current = None
        self._queue.clear()

    def update(self, dt: float) -> None:
        if self.current is None:
            return
        self.current.elapsed += dt
        if self.current.expired:
            self.dismiss()

    def handle_event(self, event: pygame.event.Event) -> bool:
        """Dismiss on click. Returns True if the event was consumed."""
        if (event.type == pygame.MOUSEBUTTONDOWN and event.button == 1
                and self.current is not None and self._rect is not None
                and self._rect.collidepoint(event.pos)):
            self.dismiss()
            return True
        return False

    def render(self, surface: pygame.Surface, fonts: FontCache, theme: UITheme,
               bottom_margin: int = 0) -> None:
        if self.current is None:
            self._rect = None
            return

        width, height = surface.get_size()
        font = fonts.get(theme.body_size)
        text = fit_text(font, self.current.message, width - theme.padding * 4)
        text_width, text_height = font.size(text)

        rect = pygame.Rect(0, 0, min(width - theme.padding * 2, text_width + theme.padding * 2),
                           text_height + theme.padding * 2)
        rect.midbottom = (width // 2, height - bottom_margin - theme.padding)

        # Fade out over the last quarter second
        alpha = int(235 * min(1.0, self.current.remaining / 0.25))
        draw_panel(surface, rect, self._color(theme).with_alpha(alpha), theme.border_radius)
        draw_text(surface, font, text, theme.text, center=rect.center)
        self._rect = rect

    def _color(self, theme: UITheme) -> Color:
        return {
            NotificationKind.SUCCESS: theme.success,
            NotificationKind.ERROR: theme.error,
            NotificationKind.INFO: theme.info,
        }[self.current.kind]
