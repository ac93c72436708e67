from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

# Ensure repo root is on sys.path so `import courseflow` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from courseflow.core.clock import FrozenClock  # noqa: E402
from courseflow.core.config import Settings  # noqa: E402
from courseflow.main import create_app  # noqa: E402
from courseflow.models.actor import Actor  # noqa: E402
from courseflow.models.course import Course, Module  # noqa: E402
from courseflow.models.proposal import Proposal  # noqa: E402
from courseflow.services.platform import (  # noqa: E402
    Platform,
    build_platform,
    in_memory_stores,
)

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-password"
PASSWORD = "correct-horse"

PROPOSAL_FIELDS = {
    "title": "Intro to Parsing",
    "summary": "Recursive descent from first principles.",
    "target_audience": "Working programmers",
}


def make_settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "app_env": "test",
        "log_level": "warning",
        "log_json": False,
        "port": 8000,
        "database_url": None,
        "seed_admin_email": ADMIN_EMAIL,
        "seed_admin_password": ADMIN_PASSWORD,
    }
    values.update(overrides)
    return Settings(**values)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Service-level fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def platform(clock: FrozenClock) -> Platform:
    return build_platform(in_memory_stores(), clock=clock)


def make_actor(platform: Platform, email: str, *, role: str = "student") -> Actor:
    name = email.split("@")[0]
    user = platform.auth.register(email, PASSWORD, name, role=role)  # type: ignore[arg-type]
    return Actor.of(user)


@pytest.fixture
def author(platform: Platform) -> Actor:
    return make_actor(platform, "author@example.com")


@pytest.fixture
def stranger(platform: Platform) -> Actor:
    return make_actor(platform, "stranger@example.com")


@pytest.fixture
def admin(platform: Platform) -> Actor:
    return make_actor(platform, "reviewer@example.com", role="admin")


def approved_proposal(platform: Platform, author: Actor, admin: Actor) -> Proposal:
    proposals = platform.proposals
    proposal = proposals.create(author, PROPOSAL_FIELDS)
    proposal = proposals.submit(author, proposal)
    return proposals.approve(admin, proposal)


def draft_course(platform: Platform, author: Actor, admin: Actor) -> Course:
    """A course materialized from an approved proposal; ``author`` teaches it."""
    proposal = approved_proposal(platform, author, admin)
    return platform.proposals.create_course(author, proposal)


def add_modules(
    platform: Platform, actor: Actor, course: Course, count: int
) -> list[Module]:
    return [
        platform.courses.create_module(actor, course, {"title": f"Module {n}"})
        for n in range(count)
    ]


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def app() -> FastAPI:
    return create_app(make_settings(), stores=in_memory_stores(), clock=FrozenClock())


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register(client: TestClient, email: str, name: str = "Test User") -> str:
    resp = client.post(
        "/auth/register",
        json={"name": name, "email": email, "password": PASSWORD},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["accessToken"]


def login(client: TestClient, email: str, password: str) -> str:
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["accessToken"]


@pytest.fixture
def token(client: TestClient) -> str:
    """Token for a freshly registered student (the proposal author)."""
    return register(client, "student@example.com", "Student")


@pytest.fixture
def other_token(client: TestClient) -> str:
    return register(client, "other@example.com", "Other")


@pytest.fixture
def admin_token(client: TestClient) -> str:
    """Token for the seeded admin."""
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


def create_course(client: TestClient, token: str, admin_token: str) -> dict:
    """Drive a proposal through review over HTTP and materialize its course."""
    resp = client.post("/v1/proposals", json=PROPOSAL_FIELDS, headers=auth_header(token))
    assert resp.status_code == 201, resp.text
    pid = resp.json()["id"]
    for action, tok in (("submit", token), ("approve", admin_token)):
        resp = client.post(
            f"/v1/proposals/{pid}/actions/{action}", headers=auth_header(tok)
        )
        assert resp.status_code == 200, resp.text
    resp = client.post(
        f"/v1/proposals/{pid}/actions/create_course", headers=auth_header(token)
    )
    assert resp.status_code == 201, resp.text
    return resp.json()
