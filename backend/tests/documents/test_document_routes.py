from uuid import uuid4

from conftest import ADMIN, READER, STRANGER, WRITER, auth_headers_for


async def _create(client, headers, **overrides) -> dict:
    payload = {"title": "Quality Manual", "unit_id": "unit-a", **overrides}
    resp = await client.post("/api/documents/", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_create_document(client, owner_headers):
    data = await _create(client, owner_headers, summary="How we work")
    assert data["title"] == "Quality Manual"
    assert data["status"] == "DRAFT"
    assert data["visibility"] == "INTERNAL"
    assert data["classification"] == "LOW"
    assert data["owner_user_id"] == "u1"
    assert data["current_version_id"] is None
    assert data["row_version"] == 1


async def test_create_requires_permission(client):
    resp = await client.post(
        "/api/documents/",
        json={"title": "Doc", "unit_id": "unit-a"},
        headers=auth_headers_for(WRITER),
    )
    assert resp.status_code == 403


async def test_create_blank_title(client, owner_headers):
    resp = await client.post(
        "/api/documents/", json={"title": " ", "unit_id": "unit-a"}, headers=owner_headers
    )
    assert resp.status_code == 400


async def test_list_documents(client, owner_headers):
    await _create(client, owner_headers, title="Doc 1")
    await _create(client, owner_headers, title="Doc 2", visibility="RESTRICTED")

    resp = await client.get("/api/documents/", headers=owner_headers)
    assert resp.status_code == 200
    assert len(resp.json()) == 2

    resp = await client.get("/api/documents/", headers=auth_headers_for(READER))
    assert [d["title"] for d in resp.json()] == ["Doc 1"]

    resp = await client.get("/api/documents/", params={"q": "doc 2"}, headers=owner_headers)
    assert [d["title"] for d in resp.json()] == ["Doc 2"]


async def test_get_document(client, owner_headers):
    created = await _create(client, owner_headers)
    resp = await client.get(f"/api/documents/{created['id']}", headers=owner_headers)
    assert resp.status_code == 200
    assert resp.json()["title"] == "Quality Manual"


async def test_get_document_forbidden(client, owner_headers):
    created = await _create(client, owner_headers)
    resp = await client.get(f"/api/documents/{created['id']}", headers=auth_headers_for(STRANGER))
    assert resp.status_code == 403


async def test_get_document_not_found(client, owner_headers):
    resp = await client.get(f"/api/documents/{uuid4()}", headers=owner_headers)
    assert resp.status_code == 404


async def test_update_document(client, owner_headers):
    created = await _create(client, owner_headers)
    resp = await client.patch(
        f"/api/documents/{created['id']}",
        json={"title": "New", "expected_row_version": 1},
        headers=owner_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["title"] == "New"
    assert resp.json()["row_version"] == 2


async def test_update_document_conflict(client, owner_headers):
    created = await _create(client, owner_headers)
    url = f"/api/documents/{created['id']}"
    await client.patch(url, json={"title": "A", "expected_row_version": 1}, headers=owner_headers)
    resp = await client.patch(url, json={"title": "B", "expected_row_version": 1}, headers=owner_headers)
    assert resp.status_code == 409


async def test_set_status(client, owner_headers):
    created = await _create(client, owner_headers)
    resp = await client.post(
        f"/api/documents/{created['id']}/status", json={"status": "in_review"}, headers=owner_headers
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "IN_REVIEW"

    timeline = await client.get(f"/api/documents/{created['id']}/timeline", headers=owner_headers)
    assert [e["event_type"] for e in timeline.json()] == ["REVIEW_REQUESTED", "CREATED"]


async def test_set_status_invalid(client, owner_headers):
    created = await _create(client, owner_headers)
    resp = await client.post(
        f"/api/documents/{created['id']}/status", json={"status": "FROZEN"}, headers=owner_headers
    )
    assert resp.status_code == 400


async def test_set_status_forbidden(client, owner_headers):
    created = await _create(client, owner_headers)
    resp = await client.post(
        f"/api/documents/{created['id']}/status",
        json={"status": "PUBLISHED"},
        headers=auth_headers_for(READER),
    )
    assert resp.status_code == 403

    resp = await client.post(
        f"/api/documents/{created['id']}/status",
        json={"status": "PUBLISHED"},
        headers=auth_headers_for(ADMIN),
    )
    assert resp.status_code == 200


async def test_tags_round_trip(client, owner_headers):
    created = await _create(client, owner_headers, tags=["sop", "lab"])
    assert created["tags"] == ["lab", "sop"]
    await _create(client, owner_headers, title="Untagged")

    resp = await client.get("/api/documents/", params={"tag": "lab"}, headers=owner_headers)
    assert [d["id"] for d in resp.json()] == [created["id"]]

    resp = await client.patch(
        f"/api/documents/{created['id']}", json={"tags": ["iso"]}, headers=owner_headers
    )
    assert resp.status_code == 200
    assert resp.json()["tags"] == ["iso"]
