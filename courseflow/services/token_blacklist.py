"""Token revocation list.

Access tokens are stateless: once issued they verify until ``exp``.  Logout
has to make a token stop working immediately, so the service keeps the set of
revoked token ids (the ``jti`` claim) and consults it after the signature
check on every authenticated request.

Only revoked tokens are tracked.  Entries are kept in expiry order and every
revoke or lookup first drops the ones whose token would have expired anyway,
so the set stays bounded by the number of logouts within one token lifetime.
The list is per-process.
"""

from __future__ import annotations

import heapq
import threading
import time
from collections.abc import Callable
from typing import Protocol

from courseflow.core.metrics import TOKEN_REVOCATION_CHECKS


class TokenBlacklist(Protocol):
    def revoke(self, jti: str, expires_at: float) -> None:
        """Add a token's JTI to the blacklist until it would have expired."""
        ...

    def is_revoked(self, jti: str) -> bool: ...


class InMemoryTokenBlacklist:
    def __init__(self, *, now: Callable[[], float] = time.time) -> None:
        self._lock = threading.Lock()
        self._now = now
        # jti -> expiry timestamp (Unix seconds)
        self._revoked: dict[str, float] = {}
        # (expiry, jti), soonest first; may hold stale pairs for re-revoked ids
        self._expiries: list[tuple[float, str]] = []

    def _purge(self, now: float) -> None:
        while self._expiries and self._expiries[0][0] < now:
            exp, jti = heapq.heappop(self._expiries)
            if self._revoked.get(jti) == exp:
                del self._revoked[jti]

    def revoke(self, jti: str, expires_at: float) -> None:
        now = self._now()
        with self._lock:
            self._purge(now)
            if expires_at <= now:
                return  # already expired, the signature check rejects it
            self._revoked[jti] = expires_at
            heapq.heappush(self._expiries, (expires_at, jti))

    def is_revoked(self, jti: str) -> bool:
        with self._lock:
            self._purge(self._now())
            revoked = jti in self._revoked
        if not revoked:
            TOKEN_REVOCATION_CHECKS.labels(result="valid").inc()
            return False
        TOKEN_REVOCATION_CHECKS.labels(result="revoked").inc()
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._revoked)
