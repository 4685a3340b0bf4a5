"""
Session token lifecycle for session-based configuration sources.

STATES:
    UNINITIALIZED -> ACTIVE -> (expired) UNINITIALIZED -> ACTIVE -> ...

THREAD SAFETY:
    Every state transition happens under one lock, so concurrent callers
    never create duplicate sessions or see a half-updated token. Reading the
    token of an active session is lock-free.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import TYPE_CHECKING

from openfeature_appconfig.logger import logger

if TYPE_CHECKING:
    from openfeature_appconfig.sources.base import ConfigurationSource


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"


class SessionManager:
    """
    Owns the configuration session token of one provider.

    USAGE:
        sessions = SessionManager(source)
        token = sessions.ensure_valid_session()
        try:
            result = source.fetch_configuration(token)
        except SessionExpiredError:
            token = sessions.refresh(token)
            result = source.fetch_configuration(token)
    """

    def __init__(self, source: ConfigurationSource) -> None:
        self._source = source
        self._token: str | None = None
        self._lock = threading.Lock()

    @property
    def state(self) -> SessionState:
        return SessionState.ACTIVE if self._token is not None else SessionState.UNINITIALIZED

    def ensure_valid_session(self) -> str:
        """
        Return the current token, starting a session if there is none.

        Raises:
            ConfigurationSourceError: If the source cannot start a session
                (not found, throttled). Not retried.
        """
        token = self._token
        if token is not None:
            return token

        with self._lock:
            # Double-check after acquiring lock
            if self._token is None:
                self._start_session()
            return self._token

    def refresh(self, stale_token: str) -> str:
        """
        Replace an expired token with a new session.

        If another caller already replaced `stale_token`, its new token is
        returned instead of starting yet another session.
        """
        with self._lock:
            if self._token is None or self._token == stale_token:
                self._token = None
                logger.info("appconfig_session_expired")
                self._start_session()
                logger.info("appconfig_session_refreshed")
            return self._token

    def advance(self, stale_token: str, next_token: str | None) -> None:
        """Swap in the token the source handed out for the next fetch."""
        if not next_token:
            return
        with self._lock:
            if self._token == stale_token:
                self._token = next_token

    def invalidate(self) -> None:
        """Drop the current session. The next call starts a new one."""
        with self._lock:
            self._token = None

    def _start_session(self) -> None:
        # MUST BE CALLED WITH self._lock HELD
        self._token = self._source.start_session()
        logger.info("appconfig_session_started")
