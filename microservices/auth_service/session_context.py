"""
Session context

Explicit holder of the current auth state, built once at application start
and passed down. Subscribers receive immutable SessionSnapshot values.
"""

import logging
from typing import Callable, List, Optional

from .models import AuthChangeEvent, AuthUser, Session, SessionSnapshot

logger = logging.getLogger(__name__)

SessionListener = Callable[[SessionSnapshot], None]


class SessionContext:
    """Current session plus change notifications"""

    def __init__(self):
        self._snapshot = SessionSnapshot()
        self._listeners: List[SessionListener] = []

    @property
    def snapshot(self) -> SessionSnapshot:
        return self._snapshot

    @property
    def session(self) -> Optional[Session]:
        return self._snapshot.session

    @property
    def user(self) -> Optional[AuthUser]:
        return self._snapshot.user

    @property
    def loading(self) -> bool:
        return self._snapshot.loading

    def access_token(self) -> Optional[str]:
        """Session accessor handed to service clients"""
        session = self._snapshot.session
        return session.access_token if session else None

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register listener; it is called with the current snapshot right away"""
        self._listeners.append(listener)
        listener(self._snapshot)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: AuthChangeEvent, session: Optional[Session]) -> SessionSnapshot:
        """Replace the current state and notify subscribers in registration order"""
        self._snapshot = SessionSnapshot(event=event, session=session, loading=False)
        logger.debug(f"Auth state changed: {event.value}")
        for listener in list(self._listeners):
            try:
                listener(self._snapshot)
            except Exception as e:
                logger.error(f"Session listener failed on {event.value}: {e}")
        return self._snapshot


__all__ = ["SessionContext", "SessionListener"]
