"""FastAPI dependencies: the platform, the acting user, and path entities.

Path identifiers are resolved to entities here, before any endpoint body
runs.  A child whose parent chain does not match the URL
(``/courses/1/modules/7`` where module 7 belongs to course 2) is reported
as missing, exactly like an id that does not exist.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from courseflow.core.errors import NotFound, Unauthenticated
from courseflow.models.actor import Actor
from courseflow.models.content import ContentItem
from courseflow.models.course import Course, Module
from courseflow.models.proposal import Proposal
from courseflow.services.platform import Platform

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def get_platform(request: Request) -> Platform:
    return request.app.state.platform


PlatformDep = Annotated[Platform, Depends(get_platform)]
RawToken = Annotated[str | None, Depends(oauth2_scheme)]


def optional_actor(platform: PlatformDep, raw_token: RawToken) -> Actor:
    """The caller, or the anonymous actor when no token was sent.

    A token that is sent but invalid is still rejected with 401.
    """
    if raw_token is None:
        return Actor.anonymous()
    return platform.auth.resolve(raw_token)


def require_actor(
    actor: Annotated[Actor, Depends(optional_actor)],
) -> Actor:
    if not actor.is_authenticated:
        raise Unauthenticated()
    logger.debug("Actor resolved user=%s role=%s", actor.user_id, actor.role)
    return actor


CurrentActor = Annotated[Actor, Depends(require_actor)]
MaybeActor = Annotated[Actor, Depends(optional_actor)]


# ---------------------------------------------------------------------------
# Path entity resolution
# ---------------------------------------------------------------------------


def resolve_proposal(proposal_id: int, platform: PlatformDep) -> Proposal:
    proposal = platform.stores.proposals.get(proposal_id)
    if proposal is None:
        raise NotFound("proposal", proposal_id)
    return proposal


def resolve_course(course_id: int, platform: PlatformDep) -> Course:
    course = platform.stores.courses.get(course_id)
    if course is None:
        raise NotFound("course", course_id)
    return course


def resolve_module(
    module_id: int,
    course: Annotated[Course, Depends(resolve_course)],
    platform: PlatformDep,
) -> Module:
    module = platform.stores.modules.get(module_id)
    if module is None or module.course_id != course.id:
        raise NotFound("module", module_id)
    return module


def resolve_content(
    item_id: int,
    module: Annotated[Module, Depends(resolve_module)],
    platform: PlatformDep,
) -> ContentItem:
    item = platform.stores.contents.get(item_id)
    if item is None or item.module_id != module.id:
        raise NotFound("content", item_id)
    return item


ProposalDep = Annotated[Proposal, Depends(resolve_proposal)]
CourseDep = Annotated[Course, Depends(resolve_course)]
ModuleDep = Annotated[Module, Depends(resolve_module)]
ContentDep = Annotated[ContentItem, Depends(resolve_content)]
