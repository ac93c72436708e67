from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Response, status

from courseflow.api.dependencies import CurrentActor, PlatformDep, ProposalDep
from courseflow.api.schemas import CourseOut, ProposalIn, ProposalOut, ReviewIn
from courseflow.models.proposal import Proposal
from courseflow.services.platform import Platform

router = APIRouter(prefix="/v1/proposals", tags=["proposals"])

ProposalStep = Literal["submit", "withdraw", "approve", "reject", "request_changes"]


def _out(platform: Platform, proposal: Proposal) -> ProposalOut:
    # Only an approved proposal can have produced a course.
    materialized = (
        proposal.status == "approved"
        and platform.stores.courses.get_by_proposal(proposal.id) is not None
    )
    return ProposalOut.of(proposal, materialized=materialized)


@router.post("", response_model=ProposalOut, status_code=status.HTTP_201_CREATED)
def create_proposal(
    payload: ProposalIn, actor: CurrentActor, platform: PlatformDep
) -> ProposalOut:
    return _out(platform, platform.proposals.create(actor, payload.supplied()))


@router.get("", response_model=list[ProposalOut])
def list_proposals(actor: CurrentActor, platform: PlatformDep) -> list[ProposalOut]:
    """Every proposal, for reviewers."""
    return [_out(platform, p) for p in platform.proposals.list_all(actor)]


@router.get("/mine", response_model=list[ProposalOut])
def list_my_proposals(actor: CurrentActor, platform: PlatformDep) -> list[ProposalOut]:
    return [_out(platform, p) for p in platform.proposals.list_mine(actor)]


@router.get("/{proposal_id}", response_model=ProposalOut)
def get_proposal(
    actor: CurrentActor, proposal: ProposalDep, platform: PlatformDep
) -> ProposalOut:
    return _out(platform, platform.proposals.get(actor, proposal))


@router.patch("/{proposal_id}", response_model=ProposalOut)
def update_proposal(
    actor: CurrentActor,
    payload: ProposalIn,
    proposal: ProposalDep,
    platform: PlatformDep,
) -> ProposalOut:
    updated = platform.proposals.update(actor, proposal, payload.supplied())
    return _out(platform, updated)


@router.delete("/{proposal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_proposal(
    actor: CurrentActor, proposal: ProposalDep, platform: PlatformDep
) -> Response:
    platform.proposals.delete(actor, proposal)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Registered before the generic action route so it wins the path match.
@router.post(
    "/{proposal_id}/actions/create_course",
    response_model=CourseOut,
    status_code=status.HTTP_201_CREATED,
)
def create_course_from_proposal(
    actor: CurrentActor, proposal: ProposalDep, platform: PlatformDep
) -> CourseOut:
    return CourseOut.of(platform.proposals.create_course(actor, proposal))


@router.post("/{proposal_id}/actions/{action}", response_model=ProposalOut)
def proposal_action(
    actor: CurrentActor,
    action: ProposalStep,
    proposal: ProposalDep,
    platform: PlatformDep,
    payload: ReviewIn | None = None,
) -> ProposalOut:
    service = platform.proposals
    notes = payload.notes if payload else None
    if action == "submit":
        result = service.submit(actor, proposal)
    elif action == "withdraw":
        result = service.withdraw(actor, proposal)
    elif action == "approve":
        result = service.approve(actor, proposal, notes)
    elif action == "reject":
        result = service.reject(actor, proposal, notes)
    else:
        result = service.request_changes(actor, proposal, notes)
    return _out(platform, result)
