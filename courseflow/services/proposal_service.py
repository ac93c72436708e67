"""Proposal façade.

Every mutating operation follows the same shape:

    lock ("proposal", id)
      re-read the current proposal from the store
      authorize the actor against it
      look up the transition for (status, action)
      validate input, apply, persist
    unlock

so two concurrent requests against one proposal observe each other's
result instead of both validating against a stale snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace

from courseflow.core.clock import Clock
from courseflow.core.errors import Conflict, NotFound
from courseflow.models.actor import Actor
from courseflow.models.course import Course
from courseflow.models.proposal import Proposal
from courseflow.repos.course_repo import CourseRepo
from courseflow.repos.proposal_repo import ProposalRepo
from courseflow.services import proposal_lifecycle, validation
from courseflow.services.authorization import Resource, require
from courseflow.services.locks import KeyedLocks
from courseflow.services.proposal_lifecycle import ProposalAction
from courseflow.services.tracking import tracked

logger = logging.getLogger(__name__)


def _resource(proposal: Proposal) -> Resource:
    return Resource(kind="proposal", owner_id=proposal.author_id, entity_id=proposal.id)


class ProposalService:
    def __init__(
        self,
        *,
        proposals: ProposalRepo,
        courses: CourseRepo,
        locks: KeyedLocks,
        clock: Clock,
    ) -> None:
        self._proposals = proposals
        self._courses = courses
        self._locks = locks
        self._clock = clock

    def _current(self, proposal_id: int) -> Proposal:
        current = self._proposals.get(proposal_id)
        if current is None:
            raise NotFound("proposal", proposal_id)
        return current

    def _log(self, actor: Actor, action: str, proposal: Proposal) -> None:
        logger.info(
            "Proposal %s: id=%s status=%s actor=%s",
            action,
            proposal.id,
            proposal.status,
            actor.user_id,
            extra={
                "actor_id": actor.user_id,
                "entity": "proposal",
                "entity_id": proposal.id,
                "action": action,
            },
        )

    # -- reads ---------------------------------------------------------------

    @tracked("proposal", "read")
    def get(self, actor: Actor, proposal: Proposal) -> Proposal:
        require(actor, "read", _resource(proposal))
        return proposal

    @tracked("proposal", "list_all")
    def list_all(self, actor: Actor) -> list[Proposal]:
        require(actor, "list_all", Resource.root("proposal"))
        return self._proposals.list_all()

    @tracked("proposal", "list_mine")
    def list_mine(self, actor: Actor) -> list[Proposal]:
        require(actor, "list", Resource(kind="proposal", owner_id=actor.user_id))
        return self._proposals.list_by_author(actor.require_id())

    # -- author operations ---------------------------------------------------

    @tracked("proposal", "create")
    def create(self, actor: Actor, fields: Mapping[str, object]) -> Proposal:
        require(actor, "create", Resource.root("proposal"))
        author_id = actor.require_id()
        clean = validation.proposal_fields(fields)
        proposal = self._proposals.add(
            Proposal.new(author_id=author_id, fields=clean, now=self._clock.now())
        )
        self._log(actor, "create", proposal)
        return proposal

    @tracked("proposal", "update")
    def update(
        self, actor: Actor, proposal: Proposal, fields: Mapping[str, object]
    ) -> Proposal:
        with self._locks.hold(("proposal", proposal.id)):
            current = self._current(proposal.id)
            require(actor, "update", _resource(current))
            status = proposal_lifecycle.next_status(current.status, "update")
            clean = validation.proposal_fields(fields, partial=True)
            updated = self._proposals.update(
                replace(current, **clean, status=status, updated_at=self._clock.now())
            )
        self._log(actor, "update", updated)
        return updated

    @tracked("proposal", "submit")
    def submit(self, actor: Actor, proposal: Proposal) -> Proposal:
        return self._transition(actor, proposal, "submit")

    @tracked("proposal", "withdraw")
    def withdraw(self, actor: Actor, proposal: Proposal) -> Proposal:
        return self._transition(actor, proposal, "withdraw")

    @tracked("proposal", "delete")
    def delete(self, actor: Actor, proposal: Proposal) -> None:
        with self._locks.hold(("proposal", proposal.id)):
            current = self._current(proposal.id)
            require(actor, "delete", _resource(current))
            proposal_lifecycle.next_status(current.status, "delete")
            self._proposals.delete(current.id)
        self._log(actor, "delete", current)

    # -- review operations ---------------------------------------------------

    @tracked("proposal", "approve")
    def approve(
        self, actor: Actor, proposal: Proposal, notes: str | None = None
    ) -> Proposal:
        return self._review(actor, proposal, "approve", notes)

    @tracked("proposal", "reject")
    def reject(
        self, actor: Actor, proposal: Proposal, notes: str | None = None
    ) -> Proposal:
        return self._review(actor, proposal, "reject", notes)

    @tracked("proposal", "request_changes")
    def request_changes(
        self, actor: Actor, proposal: Proposal, notes: str | None
    ) -> Proposal:
        return self._review(actor, proposal, "request_changes", notes)

    # -- materialization -----------------------------------------------------

    @tracked("proposal", "create_course")
    def create_course(self, actor: Actor, proposal: Proposal) -> Course:
        """Turn an approved proposal into a draft course taught by its author.

        At most one course exists per proposal: a repeated call (including a
        retry after a partial failure) fails with Conflict.
        """
        with self._locks.hold(("proposal", proposal.id)):
            current = self._current(proposal.id)
            require(actor, "create_course", _resource(current))
            proposal_lifecycle.next_status(current.status, "create_course")
            if self._courses.get_by_proposal(current.id) is not None:
                raise Conflict(f"course already created for proposal {current.id}")
            course = self._courses.add(
                Course.from_proposal(current, now=self._clock.now())
            )
        logger.info(
            "Course materialized: course=%s proposal=%s instructor=%s actor=%s",
            course.id,
            current.id,
            course.instructor_id,
            actor.user_id,
            extra={
                "actor_id": actor.user_id,
                "entity": "course",
                "entity_id": course.id,
                "action": "create_course",
            },
        )
        return course

    # -- helpers -------------------------------------------------------------

    def _transition(
        self, actor: Actor, proposal: Proposal, action: ProposalAction
    ) -> Proposal:
        with self._locks.hold(("proposal", proposal.id)):
            current = self._current(proposal.id)
            require(actor, action, _resource(current))
            status = proposal_lifecycle.next_status(current.status, action)
            updated = self._proposals.update(
                replace(current, status=status, updated_at=self._clock.now())
            )
        self._log(actor, action, updated)
        return updated

    def _review(
        self,
        actor: Actor,
        proposal: Proposal,
        action: ProposalAction,
        notes: str | None,
    ) -> Proposal:
        with self._locks.hold(("proposal", proposal.id)):
            current = self._current(proposal.id)
            require(actor, action, _resource(current))
            status = proposal_lifecycle.next_status(current.status, action)
            text = validation.review_notes(action, notes)
            updated = self._proposals.update(
                replace(
                    current,
                    status=status,
                    reviewer_id=actor.user_id,
                    review_notes=text,
                    updated_at=self._clock.now(),
                )
            )
        self._log(actor, action, updated)
        return updated
