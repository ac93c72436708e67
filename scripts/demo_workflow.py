"""Demo: walk a proposal from draft to a published course using TestClient.

Run with:
    python scripts/demo_workflow.py
"""

from __future__ import annotations

from dataclasses import replace

from fastapi.testclient import TestClient

from courseflow.core.config import load_settings
from courseflow.main import create_app
from courseflow.services.platform import in_memory_stores

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-pass-123"
AUTHOR_EMAIL = "author@example.com"
AUTHOR_PASSWORD = "author-pass-123"


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def main() -> None:
    settings = replace(
        load_settings(),
        log_level="warning",
        database_url=None,
        seed_admin_email=ADMIN_EMAIL,
        seed_admin_password=ADMIN_PASSWORD,
    )
    client = TestClient(create_app(settings, stores=in_memory_stores()))

    # ── Step 1: register the author, log in the seeded admin ─────────
    r = client.post(
        "/auth/register",
        json={"name": "Ada", "email": AUTHOR_EMAIL, "password": AUTHOR_PASSWORD},
    )
    author = r.json()["accessToken"]
    print(f"1. POST /auth/register      → {r.status_code}  user={r.json()['user']['id']}")

    r = client.post(
        "/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
    )
    admin = r.json()["accessToken"]
    print(f"   POST /auth/login (admin) → {r.status_code}")

    # ── Step 2: draft and submit a proposal ─────────────────────────
    r = client.post(
        "/v1/proposals",
        json={
            "title": "Intro to Parsing",
            "summary": "Recursive descent from first principles.",
        },
        headers=bearer(author),
    )
    pid = r.json()["id"]
    print(f"2. POST /v1/proposals       → {r.status_code}  status={r.json()['status']}")

    r = client.post(f"/v1/proposals/{pid}/actions/submit", headers=bearer(author))
    print(f"   submit                   → {r.status_code}  status={r.json()['status']}")

    # ── Step 3: review round trip ───────────────────────────────────
    r = client.post(
        f"/v1/proposals/{pid}/actions/request_changes",
        json={"notes": "Please add an outline."},
        headers=bearer(admin),
    )
    print(f"3. request_changes          → {r.status_code}  status={r.json()['status']}")

    client.patch(
        f"/v1/proposals/{pid}",
        json={"outline": "1. Grammars  2. Lexing  3. Parsing"},
        headers=bearer(author),
    )
    client.post(f"/v1/proposals/{pid}/actions/submit", headers=bearer(author))
    r = client.post(f"/v1/proposals/{pid}/actions/approve", headers=bearer(admin))
    print(f"   approve                  → {r.status_code}  status={r.json()['status']}")

    # ── Step 4: materialize the course ──────────────────────────────
    r = client.post(
        f"/v1/proposals/{pid}/actions/create_course", headers=bearer(author)
    )
    cid = r.json()["id"]
    print(f"4. create_course            → {r.status_code}  course={cid}")

    r = client.post(
        f"/v1/proposals/{pid}/actions/create_course", headers=bearer(author)
    )
    print(f"   create_course (replay)   → {r.status_code}  {r.json()['detail']['error']}")

    # ── Step 5: build a module with one lecture ─────────────────────
    r = client.post(
        f"/v1/courses/{cid}/modules", json={"title": "Grammars"}, headers=bearer(author)
    )
    mid = r.json()["id"]
    content_url = f"/v1/courses/{cid}/modules/{mid}/content"
    r = client.post(
        content_url,
        json={"title": "What is a grammar?", "body": "A set of productions."},
        headers=bearer(author),
    )
    item_id = r.json()["id"]
    print(f"5. POST lecture             → {r.status_code}  position={r.json()['position']}")

    client.post(f"{content_url}/{item_id}/publish", headers=bearer(author))
    r = client.post(f"/v1/courses/{cid}/publish", headers=bearer(author))
    print(f"   publish course           → {r.status_code}  status={r.json()['status']}")

    # ── Step 6: anonymous browsing ──────────────────────────────────
    r = client.get("/v1/courses")
    print(f"6. GET  /v1/courses (anon)  → {r.status_code}  {[c['title'] for c in r.json()]}")
    r = client.get(content_url)
    print(f"   GET  content (anon)      → {r.status_code}  {len(r.json())} item(s)")

    # ── Step 7: a student enrolls ───────────────────────────────────
    r = client.post(
        "/auth/register",
        json={"name": "Grace", "email": "grace@example.com", "password": "grace-pass-123"},
    )
    student = r.json()["accessToken"]
    r = client.post(f"/v1/courses/{cid}/enroll", headers=bearer(student))
    print(f"7. POST enroll              → {r.status_code}")
    r = client.post(f"/v1/courses/{cid}/enroll", headers=bearer(student))
    print(f"   POST enroll (replay)     → {r.status_code}  {r.json()['detail']['error']}")
    r = client.get(f"/v1/courses/{cid}/enrollments", headers=bearer(author))
    print(f"   GET  roster (author)     → {r.status_code}  {len(r.json())} student(s)")

    print("\nAll steps completed.")


if __name__ == "__main__":
    main()
