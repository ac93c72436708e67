from __future__ import annotations

from dataclasses import dataclass

from courseflow.core.errors import Unauthenticated
from courseflow.models.user import Role, User


@dataclass(frozen=True, slots=True)
class Actor:
    """The identity performing an operation.

    Resolved by AuthN at the transport edge and passed explicitly into every
    façade call.  ``user_id is None`` means anonymous.
    """

    user_id: int | None
    role: Role = "student"

    @staticmethod
    def anonymous() -> Actor:
        return Actor(user_id=None)

    @staticmethod
    def of(user: User) -> Actor:
        return Actor(user_id=user.id, role=user.role)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def is_admin(self) -> bool:
        # Reviewer capability is currently granted to the admin role only.
        return self.is_authenticated and self.role == "admin"

    def owns(self, owner_id: int | None) -> bool:
        return self.user_id is not None and self.user_id == owner_id

    def require_id(self) -> int:
        """The authenticated user's id; anonymous actors raise Unauthenticated."""
        if self.user_id is None:
            raise Unauthenticated()
        return self.user_id
