"""Domain error taxonomy.

Every façade operation ends in exactly one outcome: a returned entity or one
of these exceptions.  The transport maps ``code`` to an HTTP status in
courseflow/api/errors.py; nothing in the core catches and retries them.
"""

from __future__ import annotations

from collections.abc import Iterable


class DomainError(Exception):
    code = "domain_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def details(self) -> dict[str, object]:
        return {}


class ValidationError(DomainError):
    """Malformed or missing input fields."""

    code = "validation_error"

    def __init__(self, errors: dict[str, str]) -> None:
        fields = ", ".join(sorted(errors))
        super().__init__(f"invalid fields: {fields}")
        self.errors = dict(errors)

    def details(self) -> dict[str, object]:
        return {"errors": self.errors}


class InvalidTransition(DomainError):
    """The requested action is not legal from the entity's current state."""

    code = "invalid_transition"

    def __init__(
        self,
        entity: str,
        current: str,
        action: str,
        allowed: Iterable[str] = (),
    ) -> None:
        self.entity = entity
        self.current = current
        self.action = action
        self.allowed = tuple(allowed)
        allowed_txt = ", ".join(self.allowed) or "none"
        super().__init__(
            f"cannot {action} {entity} in state {current!r} (allowed: {allowed_txt})"
        )

    def details(self) -> dict[str, object]:
        return {
            "entity": self.entity,
            "state": self.current,
            "action": self.action,
            "allowed_actions": list(self.allowed),
        }


class Forbidden(DomainError):
    code = "forbidden"

    def __init__(self, message: str = "forbidden") -> None:
        super().__init__(message)


class NotFound(DomainError):
    code = "not_found"

    def __init__(self, entity: str, entity_id: object | None = None) -> None:
        self.entity = entity
        self.entity_id = entity_id
        if entity_id is None:
            super().__init__(f"{entity} not found")
        else:
            super().__init__(f"{entity} {entity_id} not found")


class Conflict(DomainError):
    code = "conflict"


class StoreUnavailable(DomainError):
    """A store collaborator failed.  Surfaced as a server error, never retried."""

    code = "store_unavailable"


class Unauthenticated(DomainError):
    """Missing, expired, revoked or otherwise invalid credential."""

    code = "unauthenticated"

    def __init__(self, message: str = "not authenticated") -> None:
        super().__init__(message)
