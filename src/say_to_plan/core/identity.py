# src/say_to_plan/core/identity.py

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)

IdentityListener = Callable[[str | None], None]


class IdentitySession:
    """
    Holds the currently signed-in user id (None when signed out).

    The real identity provider lives outside the core; whatever signs the user in
    calls sign_in()/sign_out() and listeners (the task store) follow along.
    """

    def __init__(self, user_id: str | None = None) -> None:
        self._lock = threading.Lock()
        self._user_id = (user_id or "").strip() or None
        self._listeners: list[IdentityListener] = []

    @property
    def user_id(self) -> str | None:
        return self._user_id

    @property
    def signed_in(self) -> bool:
        return self._user_id is not None

    def on_change(self, listener: IdentityListener) -> None:
        """Register a listener and immediately replay the current identity to it."""
        with self._lock:
            self._listeners.append(listener)
            current = self._user_id
        listener(current)

    def sign_in(self, user_id: str) -> None:
        user_id = (user_id or "").strip()
        if not user_id:
            raise ValueError("user_id is required")
        self._set(user_id)

    def sign_out(self) -> None:
        self._set(None)

    def _set(self, user_id: str | None) -> None:
        with self._lock:
            if user_id == self._user_id:
                return
            self._user_id = user_id
            listeners = list(self._listeners)

        logger.info("Identity changed: %s", user_id or "<signed out>")
        for listener in listeners:
            try:
                listener(user_id)
            except Exception:
                logger.exception("Identity listener failed")
