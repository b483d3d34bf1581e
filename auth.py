import logging
import threading
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class User:
    email: str
    name: Optional[str] = None

    def to_dict(self):
        return {"email": self.email, "name": self.name}


class IdentityProvider:
    """Current signed-in user plus change notifications.

    Handlers receive the new ``User`` (or ``None`` on sign-out) once per
    actual transition. Subscribing delivers the current state right away.
    """

    def __init__(self, user=None):
        self._user = user
        self._handlers = []
        self._lock = threading.Lock()

    @property
    def user(self):
        return self._user

    def subscribe(self, handler):
        with self._lock:
            self._handlers.append(handler)
            current = self._user
        handler(current)

        def unsubscribe():
            with self._lock:
                if handler in self._handlers:
                    self._handlers.remove(handler)

        return unsubscribe

    def update(self, user):
        with self._lock:
            if user == self._user:
                return False
            self._user = user
            handlers = list(self._handlers)

        logger.info("Auth state changed: %s", user.email if user else "signed out")
        for handler in handlers:
            handler(user)
        return True


def user_from_headers(headers, header_name="X-Forwarded-Email", dev_email=""):
    """Read the user a fronting auth proxy put on the request."""
    email = (headers.get(header_name) or "").strip()
    if not email:
        email = (dev_email or "").strip()
    if not email:
        return None
    name = (headers.get("X-Forwarded-User") or "").strip() or None
    return User(email=email.lower(), name=name)
