from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from typing import Protocol

from courseflow.core.errors import Conflict
from courseflow.models.user import User, normalize_email


class UserRepo(Protocol):
    def get_by_id(self, user_id: int) -> User | None: ...
    def get_by_email(self, email: str) -> User | None: ...
    def add(self, user: User) -> User: ...
    def list_all(self) -> list[User]: ...
    def ping(self) -> bool: ...
    def stats(self) -> dict[str, int]: ...


class InMemoryUserRepo:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._by_email: dict[str, User] = {}
        self._by_id: dict[int, User] = {}

    def get_by_id(self, user_id: int) -> User | None:
        return self._by_id.get(user_id)

    def get_by_email(self, email: str) -> User | None:
        return self._by_email.get(normalize_email(email))

    def add(self, user: User) -> User:
        with self._lock:
            if user.email in self._by_email:
                raise Conflict("email already registered")
            stored = replace(user, id=next(self._ids))
            self._by_email[stored.email] = stored
            self._by_id[stored.id] = stored
            return stored

    def list_all(self) -> list[User]:
        return sorted(self._by_id.values(), key=lambda u: u.id)

    def ping(self) -> bool:
        return True

    def stats(self) -> dict[str, int]:
        return {"users": len(self._by_id)}
