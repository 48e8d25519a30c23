from __future__ import annotations

# ============================================================================
# SESSION STORAGE & GUARD
# ============================================================================
import json
import logging
from typing import Any, MutableMapping

from .models import ROLE_ADMIN, Session, User

ROUTE_PUBLIC = "public"
ROUTE_CITIZEN = "citizen"
ROUTE_ADMIN = "admin"

TOKEN_KEY = "token"
USER_KEY = "user"

logger = logging.getLogger(__name__)


class SessionStore:
    """Token and user kept under fixed keys of the browser session storage.

    In the app `storage` is `st.session_state`; tests pass a plain dict.

    Why:
    - `st.session_state` dies with the websocket, so a page reload would log
      the user out. The pages mirror `persisted()` into the browser's
      localStorage under the same keys and feed it back through `restore()`.
    """

    def __init__(self, storage: MutableMapping[str, Any]):
        self.storage = storage

    def save(self, session: Session) -> None:
        self.storage[TOKEN_KEY] = session.token
        self.storage[USER_KEY] = session.user.to_dict()
        logger.info("Session stored for %s (%s)", session.user.email, session.user.role)

    def load(self) -> Session | None:
        token = self.storage.get(TOKEN_KEY)
        if not token:
            return None
        user = self.storage.get(USER_KEY) or {}
        return Session(token=str(token), user=User.from_api(user))

    def clear(self) -> None:
        self.storage.pop(TOKEN_KEY, None)
        self.storage.pop(USER_KEY, None)

    def persisted(self) -> dict[str, str] | None:
        """String form for localStorage, or None when nobody is signed in."""
        session = self.load()
        if session is None:
            return None
        return {TOKEN_KEY: session.token, USER_KEY: json.dumps(session.user.to_dict())}

    def restore(self, persisted: Any) -> Session | None:
        """Refill the store from the values `persisted()` produced earlier.

        Anything unreadable is ignored and leaves the store signed out.
        """
        if not isinstance(persisted, dict) or not persisted.get(TOKEN_KEY):
            return None
        try:
            user = json.loads(persisted.get(USER_KEY) or "")
        except (TypeError, ValueError):
            logger.warning("Ignoring unreadable stored user")
            return None
        if not isinstance(user, dict):
            logger.warning("Ignoring unreadable stored user")
            return None

        self.save(Session(token=str(persisted[TOKEN_KEY]), user=User.from_api(user)))
        return self.load()


def require_role(store: SessionStore, role: str) -> Session | None:
    """Return the stored session only if it belongs to `role`.

    Token expiry is not checked here; an expired token surfaces as a failed
    API call.
    """
    session = store.load()
    if session is None or session.user.role != role:
        return None
    return session


def route_for_role(role: str) -> str:
    return ROUTE_ADMIN if role == ROLE_ADMIN else ROUTE_CITIZEN
