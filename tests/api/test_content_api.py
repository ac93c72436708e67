from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from tests.conftest import auth_header, create_course


@pytest.fixture
def module_url(client: TestClient, token: str, admin_token: str) -> str:
    cid = create_course(client, token, admin_token)["id"]
    resp = client.post(
        f"/v1/courses/{cid}/modules", json={"title": "Week 1"}, headers=auth_header(token)
    )
    assert resp.status_code == 201, resp.text
    return f"/v1/courses/{cid}/modules/{resp.json()['id']}"


def _lecture(client: TestClient, token: str, module_url: str, **fields: object) -> dict:
    body = {"title": "Tokens", "body": "A token is...", **fields}
    resp = client.post(f"{module_url}/content", json=body, headers=auth_header(token))
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_lecture(client: TestClient, token: str, module_url: str) -> None:
    item = _lecture(client, token, module_url, media=["https://example.com/a.mp4"])
    assert item["kind"] == "lecture"
    assert item["position"] == 0
    assert item["published"] is False
    assert item["lecture"] == {
        "title": "Tokens",
        "body": "A token is...",
        "format": "markdown",
        "media": ["https://example.com/a.mp4"],
    }


def test_unknown_format_rejected(client: TestClient, token: str, module_url: str) -> None:
    resp = client.post(
        f"{module_url}/content",
        json={"title": "Tokens", "format": "docx"},
        headers=auth_header(token),
    )
    assert resp.status_code == 422
    assert "format" in resp.json()["detail"]["errors"]


def test_publish_requires_body(client: TestClient, token: str, module_url: str) -> None:
    item = _lecture(client, token, module_url, body="")
    resp = client.post(
        f"{module_url}/content/{item['id']}/publish", headers=auth_header(token)
    )
    assert resp.status_code == 422
    assert "body" in resp.json()["detail"]["errors"]

    client.patch(
        f"{module_url}/content/{item['id']}",
        json={"body": "Now with words."},
        headers=auth_header(token),
    )
    resp = client.post(
        f"{module_url}/content/{item['id']}/publish", headers=auth_header(token)
    )
    assert resp.status_code == 200
    assert resp.json()["published"] is True


def test_published_lecture_cannot_be_blanked(
    client: TestClient, token: str, module_url: str
) -> None:
    item = _lecture(client, token, module_url)
    client.post(f"{module_url}/content/{item['id']}/publish", headers=auth_header(token))
    resp = client.patch(
        f"{module_url}/content/{item['id']}",
        json={"body": "   "},
        headers=auth_header(token),
    )
    assert resp.status_code == 422


def test_visitors_only_see_published_items(
    client: TestClient, token: str, other_token: str, module_url: str
) -> None:
    draft = _lecture(client, token, module_url, title="Draft")
    live = _lecture(client, token, module_url, title="Live")
    client.post(f"{module_url}/content/{live['id']}/publish", headers=auth_header(token))
    course_url = module_url.rsplit("/modules/", 1)[0]
    client.post(f"{course_url}/publish", headers=auth_header(token))

    owner_view = client.get(f"{module_url}/content", headers=auth_header(token)).json()
    assert [i["id"] for i in owner_view] == [draft["id"], live["id"]]

    visitor_view = client.get(f"{module_url}/content", headers=auth_header(other_token)).json()
    assert [i["id"] for i in visitor_view] == [live["id"]]

    assert client.get(f"{module_url}/content/{draft['id']}").status_code == 404
    assert client.get(f"{module_url}/content/{live['id']}").status_code == 200


def test_reorder_and_delete_keep_positions_dense(
    client: TestClient, token: str, module_url: str
) -> None:
    ids = [_lecture(client, token, module_url, title=f"Part {n}")["id"] for n in range(3)]

    resp = client.put(
        f"{module_url}/content/order",
        json={"ids": [ids[2], ids[0], ids[1]]},
        headers=auth_header(token),
    )
    assert resp.status_code == 200
    assert resp.json() == [
        {"id": ids[2], "position": 0},
        {"id": ids[0], "position": 1},
        {"id": ids[1], "position": 2},
    ]

    resp = client.delete(f"{module_url}/content/{ids[2]}", headers=auth_header(token))
    assert resp.status_code == 204

    listed = client.get(f"{module_url}/content", headers=auth_header(token)).json()
    assert [(i["id"], i["position"]) for i in listed] == [(ids[0], 0), (ids[1], 1)]


def test_reorder_rejects_partial_list(
    client: TestClient, token: str, module_url: str
) -> None:
    ids = [_lecture(client, token, module_url, title=f"Part {n}")["id"] for n in range(2)]
    resp = client.put(
        f"{module_url}/content/order", json={"ids": ids[:1]}, headers=auth_header(token)
    )
    assert resp.status_code == 409


def test_stranger_cannot_write(
    client: TestClient, token: str, other_token: str, module_url: str
) -> None:
    item = _lecture(client, token, module_url)
    resp = client.post(
        f"{module_url}/content", json={"title": "Spam"}, headers=auth_header(other_token)
    )
    assert resp.status_code == 403
    resp = client.delete(
        f"{module_url}/content/{item['id']}", headers=auth_header(other_token)
    )
    assert resp.status_code == 403


def test_module_delete_cascades_to_content(
    client: TestClient, token: str, module_url: str
) -> None:
    item = _lecture(client, token, module_url)
    assert client.delete(module_url, headers=auth_header(token)).status_code == 204
    resp = client.get(f"{module_url}/content/{item['id']}", headers=auth_header(token))
    assert resp.status_code == 404
