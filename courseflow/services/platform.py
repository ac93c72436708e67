"""Composition root for the workflow engine.

``build_platform`` wires one set of stores into the four façade services and
AuthN.  Nothing here is module-level state: every app instance (and every
test) builds its own platform.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

from sqlalchemy import Engine

from courseflow.core.clock import Clock, SystemClock
from courseflow.db.engine import init_schema, make_engine, make_session_factory
from courseflow.repos.content_repo import ContentRepo, InMemoryContentRepo
from courseflow.repos.course_repo import CourseRepo, InMemoryCourseRepo
from courseflow.repos.enrollment_repo import EnrollmentRepo, InMemoryEnrollmentRepo
from courseflow.repos.module_repo import InMemoryModuleRepo, ModuleRepo
from courseflow.repos.proposal_repo import InMemoryProposalRepo, ProposalRepo
from courseflow.repos.sql_content_repo import SqlContentRepo
from courseflow.repos.sql_course_repo import SqlCourseRepo
from courseflow.repos.sql_enrollment_repo import SqlEnrollmentRepo
from courseflow.repos.sql_module_repo import SqlModuleRepo
from courseflow.repos.sql_proposal_repo import SqlProposalRepo
from courseflow.repos.sql_user_repo import SqlUserRepo
from courseflow.repos.user_repo import InMemoryUserRepo, UserRepo
from courseflow.services.auth_service import AuthN
from courseflow.services.content_service import ContentService
from courseflow.services.course_service import CourseService
from courseflow.services.enrollment_service import EnrollmentService
from courseflow.services.locks import KeyedLocks
from courseflow.services.proposal_service import ProposalService
from courseflow.services.token_blacklist import InMemoryTokenBlacklist

logger = logging.getLogger(__name__)


class Diagnosable(Protocol):
    def ping(self) -> bool: ...
    def stats(self) -> dict[str, int]: ...


@dataclass(frozen=True, slots=True)
class Stores:
    users: UserRepo
    proposals: ProposalRepo
    courses: CourseRepo
    modules: ModuleRepo
    contents: ContentRepo
    enrollments: EnrollmentRepo
    backend: str = "memory"

    def named(self) -> dict[str, Diagnosable]:
        return {
            "users": self.users,
            "proposals": self.proposals,
            "courses": self.courses,
            "modules": self.modules,
            "contents": self.contents,
            "enrollments": self.enrollments,
        }


def in_memory_stores() -> Stores:
    return Stores(
        users=InMemoryUserRepo(),
        proposals=InMemoryProposalRepo(),
        courses=InMemoryCourseRepo(),
        modules=InMemoryModuleRepo(),
        contents=InMemoryContentRepo(),
        enrollments=InMemoryEnrollmentRepo(),
    )


def sql_stores(engine: Engine) -> Stores:
    """SQLAlchemy-backed stores; creates missing tables on the engine."""
    init_schema(engine)
    sessions = make_session_factory(engine)
    return Stores(
        users=SqlUserRepo(sessions),
        proposals=SqlProposalRepo(sessions),
        courses=SqlCourseRepo(sessions),
        modules=SqlModuleRepo(sessions),
        contents=SqlContentRepo(sessions),
        enrollments=SqlEnrollmentRepo(sessions),
        backend="sql",
    )


def stores_from_url(database_url: str | None, *, echo: bool = False) -> Stores:
    if not database_url:
        logger.info("Using in-memory stores")
        return in_memory_stores()
    logger.info("Using SQL stores  dialect=%s", database_url.split(":", 1)[0])
    return sql_stores(make_engine(database_url, echo=echo))


@dataclass(frozen=True, slots=True)
class Platform:
    stores: Stores
    auth: AuthN
    proposals: ProposalService
    courses: CourseService
    content: ContentService
    enrollments: EnrollmentService
    locks: KeyedLocks = field(repr=False, default_factory=KeyedLocks)


def build_platform(
    stores: Stores,
    *,
    clock: Clock | None = None,
    token_ttl_min: int = 15,
) -> Platform:
    clock = clock or SystemClock()
    locks = KeyedLocks()
    return Platform(
        stores=stores,
        locks=locks,
        auth=AuthN(
            users=stores.users,
            blacklist=InMemoryTokenBlacklist(),
            clock=clock,
            token_ttl_min=token_ttl_min,
        ),
        proposals=ProposalService(
            proposals=stores.proposals,
            courses=stores.courses,
            locks=locks,
            clock=clock,
        ),
        courses=CourseService(
            courses=stores.courses,
            modules=stores.modules,
            contents=stores.contents,
            locks=locks,
            clock=clock,
        ),
        content=ContentService(
            modules=stores.modules,
            contents=stores.contents,
            locks=locks,
            clock=clock,
        ),
        enrollments=EnrollmentService(
            courses=stores.courses,
            enrollments=stores.enrollments,
            locks=locks,
            clock=clock,
        ),
    )
