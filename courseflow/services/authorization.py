"""Authorization predicate.

One pure decision function consulted by every façade operation:

    authorize(actor, action, resource) -> "allow" | "forbidden" | "not_found"

``resource.owner_id`` is already resolved through the owner chain (a module
or content item carries its course's instructor), so the rules never need to
know which entity type they are looking at.

Rules, first match wins:

  1. anonymous     : only public actions (list_published, read of a public
                      resource)
  2. admin         : reviewer-gated actions, read of and enrollment in
                      anything, direct creation of a course root
  3. owner         : manage what you own and everything beneath it;
                      any authenticated actor may open a new proposal
  4. public        : authenticated non-owners may read, enroll in and leave
                      public resources
  5. deny          : "not_found" for reads and enrollment so existence does
                      not leak, "forbidden" for everything else
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from courseflow.core.errors import Forbidden, NotFound
from courseflow.core.metrics import AUTHZ_DECISIONS
from courseflow.models.actor import Actor

logger = logging.getLogger(__name__)

Decision = Literal["allow", "forbidden", "not_found"]
ResourceKind = Literal["proposal", "course", "module", "content"]

PUBLIC_ACTIONS: frozenset[str] = frozenset({"list_published"})

REVIEWER_ACTIONS: frozenset[str] = frozenset(
    {
        "approve",
        "reject",
        "request_changes",
        "list_all",
        "create_course",
        "list_enrollments",
    }
)

PARTICIPANT_ACTIONS: frozenset[str] = frozenset({"enroll", "unenroll"})

OWNER_ACTIONS: frozenset[str] = frozenset(
    {
        "read",
        "list",
        "create",
        "update",
        "delete",
        "reorder",
        "publish",
        "unpublish",
        "submit",
        "withdraw",
        "create_course",
        "list_enrollments",
        "enroll",
        "unenroll",
    }
)


@dataclass(frozen=True, slots=True)
class Resource:
    kind: ResourceKind
    owner_id: int | None
    public: bool = False
    entity_id: int | None = None

    @staticmethod
    def root(kind: ResourceKind) -> Resource:
        """A resource that does not exist yet (creation of a top-level entity)."""
        return Resource(kind=kind, owner_id=None)

    @property
    def is_root(self) -> bool:
        return self.owner_id is None and self.entity_id is None


def _decide(actor: Actor, action: str, resource: Resource) -> Decision:
    is_read = action in ("read", "list")
    conceals = is_read or action in PARTICIPANT_ACTIONS

    # 1. anonymous
    if not actor.is_authenticated:
        if action in PUBLIC_ACTIONS or (is_read and resource.public):
            return "allow"
        return "not_found" if is_read else "forbidden"

    # 2. admin / reviewer capability
    if actor.is_admin():
        if action in REVIEWER_ACTIONS or conceals:
            return "allow"
        if action == "create" and resource.kind == "course" and resource.is_root:
            return "allow"

    # 3. ownership (transitively through the owner chain)
    if action == "create" and resource.kind == "proposal" and resource.is_root:
        return "allow"
    if actor.owns(resource.owner_id) and action in OWNER_ACTIONS:
        return "allow"

    # 4. public reads and enrollment
    if action in PUBLIC_ACTIONS or (conceals and resource.public):
        return "allow"

    # 5. deny
    return "not_found" if conceals else "forbidden"


def authorize(actor: Actor, action: str, resource: Resource) -> Decision:
    decision = _decide(actor, action, resource)
    AUTHZ_DECISIONS.labels(decision=decision).inc()
    return decision


def require(actor: Actor, action: str, resource: Resource) -> None:
    """Raise the disclosure-appropriate error unless the predicate allows."""
    decision = authorize(actor, action, resource)
    if decision == "allow":
        return

    logger.warning(
        "Access denied: actor=%s action=%s %s=%s decision=%s",
        actor.user_id,
        action,
        resource.kind,
        resource.entity_id,
        decision,
        extra={
            "actor_id": actor.user_id,
            "entity": resource.kind,
            "entity_id": resource.entity_id,
            "action": action,
        },
    )
    if decision == "not_found":
        raise NotFound(resource.kind, resource.entity_id)
    raise Forbidden(f"not allowed to {action} this {resource.kind}")
