import logging
import threading
import time

from auth import IdentityProvider
from controller import GenerationController
from email_form import FormState

logger = logging.getLogger(__name__)


class Workspace:
    """Form, controller and identity for one browser session."""

    def __init__(self, controller, form=None, identity=None):
        self.controller = controller
        self.form = form or FormState()
        self.identity = identity or IdentityProvider()
        self._owner = None
        self._unsubscribe = self.identity.subscribe(self._on_auth_change)

    def _on_auth_change(self, user):
        # a different user, or nobody, must not see the previous draft
        if self._owner is not None and user != self._owner:
            logger.info("Clearing workspace of %s", self._owner.email)
            self.reset()
        self._owner = user

    @property
    def user(self):
        return self.identity.user

    def generate(self, fields=None, model=None):
        if fields:
            self.form.update(fields)
        return self.controller.generate(self.form.request, model=model)

    def regenerate(self, model=None):
        return self.controller.regenerate(model=model)

    def reset(self):
        self.form.reset()
        self.controller.reset()

    def state(self):
        return {
            "user": self.user.to_dict() if self.user else None,
            "form": self.form.request.to_dict(),
            "valid": self.form.is_valid(),
            "generation": self.controller.snapshot(),
            "notices": [n.to_dict() for n in self.controller.drain_notices()],
        }

    def dispose(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.reset()


class WorkspaceRegistry:
    """Workspaces by session id; entries idle longer than ``ttl`` seconds are disposed."""

    def __init__(self, factory, ttl=None, clock=time.monotonic):
        self._factory = factory
        self._ttl = ttl
        self._clock = clock
        self._workspaces = {}
        self._last_seen = {}
        self._lock = threading.Lock()

    def get_or_create(self, key):
        now = self._clock()
        with self._lock:
            expired = self._pop_expired(now, keep=key)
            workspace = self._workspaces.get(key)
            if workspace is None:
                workspace = self._workspaces[key] = self._factory()
            self._last_seen[key] = now
        for workspace_key, stale in expired:
            logger.info("Disposing idle workspace %s", workspace_key)
            stale.dispose()
        return workspace

    def _pop_expired(self, now, keep=None):
        if self._ttl is None:
            return []
        keys = [k for k, seen in self._last_seen.items()
                if k != keep and now - seen >= self._ttl]
        expired = []
        for k in keys:
            self._last_seen.pop(k, None)
            expired.append((k, self._workspaces.pop(k)))
        return expired

    def dispose(self, key):
        with self._lock:
            workspace = self._workspaces.pop(key, None)
            self._last_seen.pop(key, None)
        if workspace is not None:
            workspace.dispose()
        return workspace is not None

    def __len__(self):
        return len(self._workspaces)
