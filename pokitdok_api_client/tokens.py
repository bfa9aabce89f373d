"""
Access token bookkeeping.

The API hands out tokens per OAuth2 scope, so the client keeps one
:class:`Token` per scope in a :class:`TokenStore`.  A token is only
ever handed back for the scope it was issued for.

The store serialises fetches per scope: while one thread is fetching
or refreshing the token for a scope, other threads asking for that
scope wait and then reuse the result instead of fetching again.
Different scopes never block each other.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_SCOPE = "default"
USER_SCHEDULE_SCOPE = "user_schedule"

# Tokens are treated as expired this many seconds before they really are
EXPIRY_MARGIN = 60.0


@dataclass(frozen=True)
class Token:
    scope: str
    value: str
    obtained_at: float = field(default_factory=time.time)
    expires_at: Optional[float] = None

    def is_valid(self, now: Optional[float] = None) -> bool:
        """Return whether the token can still be used.

        Tokens issued without an expiry stay valid until the API
        rejects them.
        """
        if self.expires_at is None:
            return True
        if now is None:
            now = time.time()
        return now < self.expires_at - EXPIRY_MARGIN


Fetcher = Callable[[str], Token]


class TokenStore:
    """Thread-safe map of scope to current :class:`Token`."""

    def __init__(self) -> None:
        self._tokens: Dict[str, Token] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, scope: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(scope)
            if lock is None:
                lock = self._locks[scope] = threading.Lock()
            return lock

    def get(self, scope: str) -> Optional[Token]:
        return self._tokens.get(scope)

    def set(self, token: Token) -> None:
        with self._lock_for(token.scope):
            self._tokens[token.scope] = token

    def invalidate(self, scope: str) -> None:
        with self._lock_for(scope):
            self._tokens.pop(scope, None)

    def _store(self, scope: str, fetch: Fetcher) -> Token:
        token = fetch(scope)
        if token.scope != scope:
            raise ValueError(
                "token issued for scope %r cannot be stored for scope %r" % (token.scope, scope)
            )
        self._tokens[scope] = token
        return token

    def obtain(self, scope: str, fetch: Fetcher) -> Token:
        """Return a valid token for ``scope``, fetching one if needed."""
        token = self._tokens.get(scope)
        if token is not None and token.is_valid():
            return token
        with self._lock_for(scope):
            # Another thread may have fetched while we waited
            token = self._tokens.get(scope)
            if token is not None and token.is_valid():
                return token
            logger.debug("No valid token for scope %r, fetching one", scope)
            return self._store(scope, fetch)

    def refresh(self, scope: str, stale: Optional[Token], fetch: Fetcher) -> Token:
        """Replace ``stale`` with a freshly fetched token.

        If the stored token is no longer ``stale`` another caller has
        already refreshed it, and that token is returned without a
        second fetch.  On fetch failure the scope is left without a
        token.
        """
        with self._lock_for(scope):
            current = self._tokens.get(scope)
            if current is not None and current is not stale and current.is_valid():
                logger.debug("Token for scope %r was already refreshed", scope)
                return current
            self._tokens.pop(scope, None)
            logger.debug("Refreshing token for scope %r", scope)
            return self._store(scope, fetch)

    def __contains__(self, scope: str) -> bool:
        return scope in self._tokens
