from conftest import READER, STRANGER, auth_headers_for


async def test_add_and_list_comments(client, owner_headers):
    doc = (
        await client.post(
            "/api/documents/", json={"title": "Policy", "unit_id": "unit-a"}, headers=owner_headers
        )
    ).json()
    url = f"/api/documents/{doc['id']}/comments"

    resp = await client.post(url, json={"content": "Looks good"}, headers=auth_headers_for(READER))
    assert resp.status_code == 201
    assert resp.json()["author_user_id"] == READER.id

    assert (await client.post(url, json={"content": ""}, headers=owner_headers)).status_code == 400
    assert (
        await client.post(url, json={"content": "Hi"}, headers=auth_headers_for(STRANGER))
    ).status_code == 403

    listed = await client.get(url, headers=owner_headers)
    assert [c["content"] for c in listed.json()] == ["Looks good"]
