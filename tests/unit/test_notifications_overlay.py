"""
Unit tests for notifications, the confirm dialog and the performance overlay.
"""

import unittest
from unittest.mock import Mock

import psutil
import pygame

from vendtycoon.ui.dialogs import ConfirmDialog
from vendtycoon.ui.notifications import NotificationCenter, NotificationKind
from vendtycoon.ui.overlay import PerformanceOverlay
from vendtycoon.ui.theme import Color, UITheme


class TestNotificationCenter(unittest.TestCase):
    """Test queueing and expiry of notifications."""

    def setUp(self):
        self.center = NotificationCenter(default_duration=2.0, max_queued=2)

    def test_first_notification_is_shown(self):
        self.center.success("Game saved successfully!")

        self.assertEqual(self.center.current.message, "Game saved successfully!")
        self.assertEqual(self.center.current.kind, NotificationKind.SUCCESS)
        self.assertEqual(self.center.pending, 1)

    def test_expiry_advances_queue(self):
        self.center.error("Failed to save game")
        self.center.info("Options coming soon!")

        self.center.update(1.0)
        self.assertEqual(self.center.current.message, "Failed to save game")
        self.assertAlmostEqual(self.center.current.remaining, 1.0)

        self.center.update(1.0)
        self.assertEqual(self.center.current.message, "Options coming soon!")

        self.center.update(2.5)
        self.assertIsNone(self.center.current)
        self.assertEqual(self.center.pending, 0)

    def test_queue_is_bounded(self):
        for i in range(5):
            self.center.info(f"message {i}")

        self.assertEqual(self.center.pending, 3)
        self.center.dismiss()
        self.assertEqual(self.center.current.message, "message 3")

    def test_click_dismisses(self):
        self.center.info("hello")
        self.center._rect = pygame.Rect(10, 10, 100, 30)

        miss = pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(0, 0))
        hit = pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(20, 20))

        self.assertFalse(self.center.handle_event(miss))
        self.assertTrue(self.center.handle_event(hit))
        self.assertIsNone(self.center.current)

    def test_clear(self):
        self.center.info("a")
        self.center.info("b")
        self.center.clear()

        self.assertEqual(self.center.pending, 0)


class TestConfirmDialog(unittest.TestCase):
    """Test the modal confirmation dialog."""

    def setUp(self):
        self.on_confirm = Mock()
        self.on_cancel = Mock()
        self.dialog = ConfirmDialog("Exit to Menu", "Sure?", self.on_confirm, self.on_cancel,
                                    confirm_label="Exit")

    def key(self, key):
        return pygame.event.Event(pygame.KEYDOWN, key=key, mod=0, unicode="")

    def test_escape_cancels(self):
        self.assertTrue(self.dialog.handle_event(self.key(pygame.K_ESCAPE)))

        self.assertFalse(self.dialog.is_open)
        self.on_cancel.assert_called_once()
        self.on_confirm.assert_not_called()

    def test_enter_confirms_once(self):
        self.dialog.handle_event(self.key(pygame.K_RETURN))
        self.dialog.confirm()

        self.assertFalse(self.dialog.is_open)
        self.on_confirm.assert_called_once()

    def test_consumes_other_input_while_open(self):
        self.assertTrue(self.dialog.handle_event(self.key(pygame.K_SPACE)))
        self.assertTrue(self.dialog.is_open)

    def test_closed_dialog_ignores_input(self):
        self.dialog.cancel()
        self.assertFalse(self.dialog.handle_event(self.key(pygame.K_RETURN)))
        self.on_confirm.assert_not_called()


class TestPerformanceOverlay(unittest.TestCase):
    """Test frame statistics and process metrics."""

    def test_no_stats_before_first_frame(self):
        self.assertIsNone(PerformanceOverlay().stats())

    def test_stats(self):
        overlay = PerformanceOverlay(history_length=4)
        for dt in (0.02, 0.02, 0.02, 0.02):
            overlay.record_frame(dt)

        stats = overlay.stats()
        self.assertAlmostEqual(stats["fps"], 50.0)
        self.assertAlmostEqual(stats["max_frame_ms"], 20.0)

    def test_ring_buffer_keeps_recent_frames(self):
        overlay = PerformanceOverlay(history_length=2)
        for dt in (1.0, 0.01, 0.01):
            overlay.record_frame(dt)

        self.assertAlmostEqual(overlay.stats()["max_frame_ms"], 10.0)

    def test_process_metrics_only_while_visible(self):
        overlay = PerformanceOverlay(metrics_interval=0.0)
        overlay._process = Mock()
        overlay._process.memory_info.return_value = Mock(rss=64 * 1024 * 1024)
        overlay._process.cpu_percent.return_value = 12.5

        overlay.record_frame(0.016)
        overlay._process.memory_info.assert_not_called()

        self.assertTrue(overlay.toggle())
        overlay.record_frame(0.016)
        self.assertAlmostEqual(overlay.memory_mb, 64.0)
        self.assertAlmostEqual(overlay.cpu_percent, 12.5)

    def test_process_errors_keep_last_values(self):
        overlay = PerformanceOverlay(metrics_interval=0.0, visible=True)
        overlay._process = Mock()
        overlay._process.memory_info.side_effect = psutil.NoSuchProcess(1)

        overlay.record_frame(0.016)
        self.assertEqual(overlay.memory_mb, 0.0)


class TestTheme(unittest.TestCase):

    def test_color_helpers(self):
        color = Color.from_hex("#FF8000")

        self.assertEqual(color.to_tuple(), (255, 128, 0))
        self.assertEqual(color.with_alpha(100).to_tuple_rgba(), (255, 128, 0, 100))
        self.assertEqual(color.lighten(10).to_tuple(), (255, 138, 10))

    def test_themes_do_not_share_colors(self):
        first, second = UITheme(), UITheme()
        self.assertIsNot(first.primary, second.primary)
        self.assertEqual(first.primary, second.primary)


if __name__ == '__main__':
    unittest.main()
