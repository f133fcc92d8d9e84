from __future__ import annotations

import threading

from tracker.constants import ACCESS_TOKEN_KEY, PROFILE_KEY, REFRESH_TOKEN_KEY, USER_KEY

SESSION_KEYS = (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY, PROFILE_KEY)


class TokenStore:
    """The token pair and cached user records of one browser session.

    One Streamlit process serves every visitor, so each browser session owns
    its own instance (kept under ``st.session_state``); nothing is shared
    through the filesystem.
    """

    def __init__(self, initial: dict | None = None):
        self._values = {key: value for key, value in (initial or {}).items() if key in SESSION_KEYS}
        self._lock = threading.Lock()

    def load(self) -> dict:
        with self._lock:
            return {key: value for key, value in self._values.items() if value is not None}

    def save(self, values: dict) -> None:
        with self._lock:
            self._values.update({key: value for key, value in values.items() if key in SESSION_KEYS})

    def clear(self) -> None:
        with self._lock:
            self._values = {}
