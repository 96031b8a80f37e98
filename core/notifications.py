"""
Toast notifications

Ephemeral user notifications queued by flows on success or failure. The
queue is owned by the application root (see core.app_context) and is never
persisted.
"""

import logging
import time
from enum import Enum
from typing import Callable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

DEFAULT_TOAST_DURATION = 5.0


class ToastType(str, Enum):
    """Toast severity"""
    SUCCESS = "success"
    DANGER = "danger"
    INFO = "info"
    WARNING = "warning"


class ToastMessage(BaseModel):
    """A queued toast; id is a millisecond timestamp"""
    model_config = ConfigDict(frozen=True)

    id: int
    message: str
    type: ToastType = ToastType.INFO
    duration: Optional[float] = Field(None, gt=0, description="Auto-dismiss after N seconds")
    created_at: float

    def expires_at(self) -> float:
        return self.created_at + (self.duration or DEFAULT_TOAST_DURATION)


class ToastQueue:
    """Ordered toast queue exposing enqueue/dismiss"""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._toasts: List[ToastMessage] = []
        self._last_id = 0

    def _next_id(self, now: float) -> int:
        # Two toasts in the same millisecond still get distinct, increasing ids
        toast_id = max(int(now * 1000), self._last_id + 1)
        self._last_id = toast_id
        return toast_id

    def enqueue(
        self,
        message: str,
        type: ToastType = ToastType.INFO,
        duration: Optional[float] = None,
    ) -> ToastMessage:
        now = self._clock()
        toast = ToastMessage(
            id=self._next_id(now),
            message=message,
            type=type,
            duration=duration,
            created_at=now,
        )
        self._toasts.append(toast)
        logger.debug(f"Toast {toast.id} queued ({toast.type.value}): {message}")
        return toast

    def dismiss(self, toast_id: int) -> bool:
        before = len(self._toasts)
        self._toasts = [t for t in self._toasts if t.id != toast_id]
        return len(self._toasts) != before

    def active(self, now: Optional[float] = None) -> List[ToastMessage]:
        """Drop expired toasts and return the remaining ones in queue order"""
        now = self._clock() if now is None else now
        self._toasts = [t for t in self._toasts if t.expires_at() > now]
        return list(self._toasts)

    def clear(self) -> None:
        self._toasts = []

    def __len__(self) -> int:
        return len(self._toasts)


__all__ = ["DEFAULT_TOAST_DURATION", "ToastType", "ToastMessage", "ToastQueue"]
