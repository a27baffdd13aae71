from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import List, Optional, Protocol


class Notifier(Protocol):
    """Fire-and-forget sink for user-visible failure messages."""

    def notify(self, message: str, level: str = "error") -> None: ...


@dataclass
class Toast:
    """A user-facing notice, independent of how the UI renders it."""

    text: str
    level: str = "info"  # info | warning | error
    timestamp: float = field(default_factory=lambda: time.time())


class ToastNotifier:
    """Thread-safe queue of user notices.

    The UI layer drains the queue and displays messages; tests inspect
    last_message or the drained list.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._queue: List[Toast] = []
        self._last: Optional[Toast] = None

    def notify(self, message: str, level: str = "error") -> None:
        toast = Toast(text=message, level=level)
        with self._lock:
            self._queue.append(toast)
            self._last = toast

    def drain(self) -> List[Toast]:
        with self._lock:
            items = list(self._queue)
            self._queue.clear()
            return items

    @property
    def has_pending(self) -> bool:
        with self._lock:
            return bool(self._queue)

    @property
    def last_message(self) -> Optional[Toast]:
        with self._lock:
            return self._last
