"""Proposal review lifecycle.

The transition table below is total: every (status, action) pair is either
listed (and yields the resulting status) or rejected with InvalidTransition.
``None`` as a result means the proposal is removed.

    draft ──submit──▶ submitted ──approve──▶ approved ──create_course──▶ (course)
      ▲                 │  │  └──reject──▶ rejected
      └────withdraw─────┘  └──request_changes──▶ changes_requested
                                                   │
                               submit ◀────────────┘
"""

from __future__ import annotations

from typing import Literal

from courseflow.core.errors import InvalidTransition
from courseflow.models.proposal import ProposalStatus

ProposalAction = Literal[
    "update",
    "submit",
    "withdraw",
    "approve",
    "reject",
    "request_changes",
    "delete",
    "create_course",
]

STATUSES: tuple[ProposalStatus, ...] = (
    "draft",
    "submitted",
    "approved",
    "rejected",
    "changes_requested",
)

ACTIONS: tuple[ProposalAction, ...] = (
    "update",
    "submit",
    "withdraw",
    "approve",
    "reject",
    "request_changes",
    "delete",
    "create_course",
)

TRANSITIONS: dict[tuple[ProposalStatus, ProposalAction], ProposalStatus | None] = {
    ("draft", "update"): "draft",
    ("draft", "submit"): "submitted",
    ("draft", "delete"): None,
    ("changes_requested", "update"): "changes_requested",
    ("changes_requested", "submit"): "submitted",
    ("submitted", "withdraw"): "draft",
    ("submitted", "approve"): "approved",
    ("submitted", "reject"): "rejected",
    ("submitted", "request_changes"): "changes_requested",
    # Materialization leaves the proposal in its historical state.
    ("approved", "create_course"): "approved",
}


def allowed_actions(
    status: ProposalStatus, *, materialized: bool = False
) -> list[ProposalAction]:
    """Actions legal from ``status``.

    A proposal that already has its course no longer offers create_course.
    """
    return [
        action
        for action in ACTIONS
        if (status, action) in TRANSITIONS
        and not (materialized and action == "create_course")
    ]


def next_status(
    status: ProposalStatus, action: ProposalAction
) -> ProposalStatus | None:
    try:
        return TRANSITIONS[(status, action)]
    except KeyError:
        raise InvalidTransition(
            "proposal", status, action, allowed_actions(status)
        ) from None
