from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import auth_header, create_course


def _add_module(client: TestClient, token: str, course_id: int, title: str) -> dict:
    resp = client.post(
        f"/v1/courses/{course_id}/modules",
        json={"title": title},
        headers=auth_header(token),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_draft_course_hidden_until_published(
    client: TestClient, token: str, other_token: str, admin_token: str
) -> None:
    course = create_course(client, token, admin_token)
    cid = course["id"]

    assert client.get("/v1/courses").json() == []
    assert client.get(f"/v1/courses/{cid}").status_code == 404
    assert client.get(f"/v1/courses/{cid}", headers=auth_header(other_token)).status_code == 404
    assert client.get(f"/v1/courses/{cid}", headers=auth_header(token)).status_code == 200
    assert client.get(f"/v1/courses/{cid}", headers=auth_header(admin_token)).status_code == 200

    resp = client.post(f"/v1/courses/{cid}/publish", headers=auth_header(token))
    assert resp.status_code == 200
    assert resp.json()["status"] == "published"
    assert resp.json()["allowed_actions"] == ["update", "unpublish"]

    assert [c["id"] for c in client.get("/v1/courses").json()] == [cid]
    assert client.get(f"/v1/courses/{cid}").status_code == 200


def test_publish_twice_is_invalid_transition(
    client: TestClient, token: str, admin_token: str
) -> None:
    cid = create_course(client, token, admin_token)["id"]
    client.post(f"/v1/courses/{cid}/publish", headers=auth_header(token))
    resp = client.post(f"/v1/courses/{cid}/publish", headers=auth_header(token))
    assert resp.status_code == 409
    assert resp.json()["detail"]["error"] == "invalid_transition"


def test_only_instructor_can_update(
    client: TestClient, token: str, other_token: str, admin_token: str
) -> None:
    cid = create_course(client, token, admin_token)["id"]
    resp = client.patch(
        f"/v1/courses/{cid}", json={"summary": "Sharper"}, headers=auth_header(token)
    )
    assert resp.status_code == 200
    assert resp.json()["summary"] == "Sharper"

    resp = client.patch(
        f"/v1/courses/{cid}", json={"summary": "Hijack"}, headers=auth_header(other_token)
    )
    assert resp.status_code == 403


def test_direct_creation_is_admin_only(
    client: TestClient, token: str, admin_token: str
) -> None:
    body = {"title": "Compilers", "summary": "From source to machine code."}
    assert client.post("/v1/courses", json=body, headers=auth_header(token)).status_code == 403

    resp = client.post("/v1/courses", json=body, headers=auth_header(admin_token))
    assert resp.status_code == 201
    assert resp.json()["proposal_id"] is None

    mine = client.get("/v1/courses/mine", headers=auth_header(admin_token)).json()
    assert [c["id"] for c in mine] == [resp.json()["id"]]


def test_modules_are_densely_positioned(
    client: TestClient, token: str, admin_token: str
) -> None:
    cid = create_course(client, token, admin_token)["id"]
    ids = [_add_module(client, token, cid, f"Week {n}")["id"] for n in range(3)]

    listed = client.get(f"/v1/courses/{cid}/modules", headers=auth_header(token)).json()
    assert [(m["id"], m["position"]) for m in listed] == list(zip(ids, range(3)))

    resp = client.delete(f"/v1/courses/{cid}/modules/{ids[0]}", headers=auth_header(token))
    assert resp.status_code == 204

    listed = client.get(f"/v1/courses/{cid}/modules", headers=auth_header(token)).json()
    assert [(m["id"], m["position"]) for m in listed] == [(ids[1], 0), (ids[2], 1)]


def test_reorder_modules(client: TestClient, token: str, admin_token: str) -> None:
    cid = create_course(client, token, admin_token)["id"]
    ids = [_add_module(client, token, cid, f"Week {n}")["id"] for n in range(3)]

    resp = client.put(
        f"/v1/courses/{cid}/modules/order",
        json={"ids": list(reversed(ids))},
        headers=auth_header(token),
    )
    assert resp.status_code == 200
    assert [m["id"] for m in resp.json()] == list(reversed(ids))
    assert [m["position"] for m in resp.json()] == [0, 1, 2]


def test_reorder_must_be_a_permutation(
    client: TestClient, token: str, admin_token: str
) -> None:
    cid = create_course(client, token, admin_token)["id"]
    ids = [_add_module(client, token, cid, f"Week {n}")["id"] for n in range(3)]

    for bad in (ids[:2], ids + [ids[0]], [ids[0], ids[1], 9999]):
        resp = client.put(
            f"/v1/courses/{cid}/modules/order",
            json={"ids": bad},
            headers=auth_header(token),
        )
        assert resp.status_code == 409, bad
        assert resp.json()["detail"]["error"] == "conflict"


def test_module_must_belong_to_course(
    client: TestClient, token: str, admin_token: str
) -> None:
    first = create_course(client, token, admin_token)["id"]
    second = create_course(client, token, admin_token)["id"]
    module = _add_module(client, token, first, "Week 1")

    resp = client.get(
        f"/v1/courses/{second}/modules/{module['id']}", headers=auth_header(token)
    )
    assert resp.status_code == 404
    assert resp.json()["detail"]["error"] == "not_found"


def test_module_title_validation(
    client: TestClient, token: str, admin_token: str
) -> None:
    cid = create_course(client, token, admin_token)["id"]
    resp = client.post(
        f"/v1/courses/{cid}/modules", json={"title": "  "}, headers=auth_header(token)
    )
    assert resp.status_code == 422
    assert "title" in resp.json()["detail"]["errors"]


def test_anonymous_can_browse_published_modules(
    client: TestClient, token: str, admin_token: str
) -> None:
    cid = create_course(client, token, admin_token)["id"]
    module = _add_module(client, token, cid, "Week 1")

    assert client.get(f"/v1/courses/{cid}/modules").status_code == 404
    client.post(f"/v1/courses/{cid}/publish", headers=auth_header(token))

    resp = client.get(f"/v1/courses/{cid}/modules/{module['id']}")
    assert resp.status_code == 200
    assert resp.json()["title"] == "Week 1"

    resp = client.post(f"/v1/courses/{cid}/modules", json={"title": "Week 2"})
    assert resp.status_code == 401
