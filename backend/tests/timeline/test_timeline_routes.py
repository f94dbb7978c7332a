from conftest import READER, STRANGER, auth_headers_for


async def _create(client, headers) -> dict:
    resp = await client.post(
        "/api/documents/", json={"title": "Policy", "unit_id": "unit-a"}, headers=headers
    )
    return resp.json()


async def test_list_timeline(client, owner_headers):
    doc = await _create(client, owner_headers)
    resp = await client.get(f"/api/documents/{doc['id']}/timeline", headers=owner_headers)
    assert resp.status_code == 200
    events = resp.json()
    assert len(events) == 1
    assert events[0]["event_type"] == "CREATED"
    assert events[0]["actor_user_id"] == "u1"


async def test_list_timeline_paging_params(client, owner_headers):
    doc = await _create(client, owner_headers)
    url = f"/api/documents/{doc['id']}/timeline"
    assert (await client.get(url, params={"offset": 1}, headers=owner_headers)).json() == []
    assert (await client.get(url, params={"offset": -1}, headers=owner_headers)).status_code == 400


async def test_list_timeline_forbidden(client, owner_headers):
    doc = await _create(client, owner_headers)
    resp = await client.get(f"/api/documents/{doc['id']}/timeline", headers=auth_headers_for(STRANGER))
    assert resp.status_code == 403


async def test_record_manual_event(client, owner_headers):
    doc = await _create(client, owner_headers)
    url = f"/api/documents/{doc['id']}/timeline"

    resp = await client.post(url, json={"event_type": "expired"}, headers=owner_headers)
    assert resp.status_code == 201
    assert resp.json()["notes"] == "EXPIRED event"

    resp = await client.post(url, json={"event_type": "BOGUS"}, headers=owner_headers)
    assert resp.status_code == 400

    resp = await client.post(url, json={"event_type": "EXPIRED"}, headers=auth_headers_for(READER))
    assert resp.status_code == 403


async def test_activity_feed(client, owner_headers):
    doc = await _create(client, owner_headers)
    resp = await client.get("/api/activities", headers=auth_headers_for(READER))
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 1
    activity = data["activities"][0]
    assert activity["document_id"] == doc["id"]
    assert activity["document_title"] == "Policy"
    assert activity["event_type"] == "CREATED"

    resp = await client.get("/api/activities", headers=auth_headers_for(STRANGER))
    assert resp.json()["activities"] == []
