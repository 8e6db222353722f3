# -*- coding: utf-8 -*-

import logging
import sys
from typing import Callable, Optional

from plyer import notification
from plyer.utils import platform

logger = logging.getLogger(__name__)

APP_TITLE = "pomosync"
TIMEOUT_SEC = 5

# platforms plyer ships a notification backend for
NOTIFY_PLATFORMS = ("linux", "win", "macosx", "android")


def _plyer_notify(title: str, body: str) -> None:
    notification.notify(
        title=title, message=body, app_name=APP_TITLE, timeout=TIMEOUT_SEC
    )


def _terminal_bell() -> None:
    sys.stdout.write("\a")
    sys.stdout.flush()


class NotificationService:
    """
    Desktop notifications + completion sound.
    Delivery goes through plyer; permission handling is left to the desktop.
    A failed notification never breaks the timer.
    """

    def __init__(
        self,
        sender: Optional[Callable[[str, str], None]] = None,
        bell: Optional[Callable[[], None]] = None,
    ):
        self._sender = sender
        self._bell = bell or _terminal_bell

    def set_bell(self, bell: Callable[[], None]) -> None:
        self._bell = bell

    def is_supported(self) -> bool:
        if self._sender is not None:
            return True
        return str(platform) in NOTIFY_PLATFORMS

    def show_notification(self, title: str, body: str = "") -> bool:
        if not self.is_supported():
            logger.debug("No notification sender; skipping %r", title)
            return False
        try:
            (self._sender or _plyer_notify)(title, body)
        except Exception:
            logger.exception("Failed to show notification")
            return False
        return True

    def notify_session_complete(self, session_label: str) -> bool:
        return self.show_notification(
            "Pomodoro Session Complete!",
            f"{session_label} session has finished.",
        )

    def notify_break_complete(self) -> bool:
        return self.show_notification(
            "Break Time Over!",
            "Time to get back to work.",
        )

    def play_sound(self, muted: bool = False) -> None:
        if muted:
            return
        try:
            self._bell()
        except Exception:
            logger.exception("Failed to play notification sound")
