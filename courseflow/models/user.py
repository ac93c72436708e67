from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Literal

Role = Literal["student", "admin"]
ROLES: frozenset[str] = frozenset({"student", "admin"})


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass(frozen=True, slots=True)
class User:
    id: int
    email: str
    password_hash: str
    name: str
    role: Role
    created_at: datetime.datetime

    @staticmethod
    def new(
        *,
        email: str,
        password_hash: str,
        name: str,
        created_at: datetime.datetime,
        role: Role = "student",
    ) -> User:
        # id=0 means "not yet stored"; the repo assigns the real id on add().
        return User(
            id=0,
            email=normalize_email(email),
            password_hash=password_hash,
            name=name.strip(),
            role=role,
            created_at=created_at,
        )

    def is_admin(self) -> bool:
        return self.role == "admin"
