"""
Notification channel and the toast renderer that displays it.

Components receive a ``NotificationChannel`` from the application container
and call ``notify``. A single ``ToastRenderer`` is mounted at the root and
keeps the stack of banners currently on screen.
"""
import enum
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0  # seconds


class Severity(str, enum.Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Notification:
    title: str
    description: Optional[str] = None
    severity: Severity = Severity.INFO
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "type": self.severity.value,
        }


NotificationListener = Callable[[Notification], None]


class NotificationChannel:
    """Fire-and-forget publish/subscribe for user-facing messages."""

    def __init__(self):
        self._listeners: list[NotificationListener] = []

    def subscribe(self, listener: NotificationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(
        self,
        title: str,
        description: Optional[str] = None,
        severity: Severity = Severity.INFO,
    ) -> Notification:
        notification = Notification(title=title, description=description, severity=severity)
        for listener in list(self._listeners):
            listener(notification)
        return notification

    def success(self, title: str, description: Optional[str] = None) -> Notification:
        return self.notify(title, description, Severity.SUCCESS)

    def error(self, title: str, description: Optional[str] = None) -> Notification:
        return self.notify(title, description, Severity.ERROR)

    def info(self, title: str, description: Optional[str] = None) -> Notification:
        return self.notify(title, description, Severity.INFO)


class ToastRenderer:
    """
    Stacked, auto-dismissing banners.

    Each toast stays visible for ``timeout`` seconds unless the user dismisses
    it first. Ordering is insertion order.
    """

    def __init__(
        self,
        channel: NotificationChannel,
        timeout: float = DEFAULT_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._channel = channel
        self._timeout = timeout
        self._clock = clock
        self._toasts: list[tuple[Notification, float]] = []
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def mounted(self) -> bool:
        return self._unsubscribe is not None

    def mount(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._channel.subscribe(self._show)

    def unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._toasts.clear()

    def _show(self, notification: Notification) -> None:
        if notification.severity is Severity.ERROR:
            logger.info("Error shown: %s - %s", notification.title, notification.description)
        self._prune()
        self._toasts.append((notification, self._clock() + self._timeout))

    def _prune(self) -> None:
        now = self._clock()
        self._toasts = [(n, expires) for n, expires in self._toasts if expires > now]

    def active(self) -> list[Notification]:
        self._prune()
        return [n for n, _ in self._toasts]

    def __len__(self) -> int:
        return len(self._toasts)

    def dismiss(self, notification_id: str) -> bool:
        before = len(self._toasts)
        self._toasts = [(n, e) for n, e in self._toasts if n.id != notification_id]
        return len(self._toasts) != before
