import pytest
from httpx import AsyncClient

PNG_1x1 = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


async def _create(client: AsyncClient, data: dict) -> str:
    response = await client.post("/api/complaints", json=data)
    assert response.status_code == 201
    return response.json()["id"]


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "OK"


@pytest.mark.asyncio
async def test_submit_and_list(client: AsyncClient, complaint_data):
    complaint_data["images"] = [PNG_1x1]
    complaint_id = await _create(client, complaint_data)

    response = await client.get("/api/complaints")

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 1
    assert data[0]["id"] == complaint_id
    assert data[0]["status"] == "pending"
    assert data[0]["support_count"] == 0
    assert data[0]["images"] == [PNG_1x1]
    assert data[0]["comments"] == []


@pytest.mark.asyncio
async def test_submit_blank_title_is_400(client: AsyncClient, complaint_data):
    complaint_data["title"] = "  "

    response = await client.post("/api/complaints", json=complaint_data)

    assert response.status_code == 400
    assert "Title" in response.json()["error"]
    assert (await client.get("/api/complaints")).json() == []


@pytest.mark.asyncio
async def test_submit_rejects_unsupported_image(client: AsyncClient, complaint_data):
    complaint_data["images"] = ["data:application/pdf;base64,JVBERi0x"]

    response = await client.post("/api/complaints", json=complaint_data)

    assert response.status_code == 400
    assert (await client.get("/api/complaints")).json() == []


@pytest.mark.asyncio
async def test_list_filters_by_query(client: AsyncClient, complaint_data):
    await _create(client, complaint_data)
    hostel_id = await _create(
        client, {**complaint_data, "category": "Hostel", "title": "No hot water"}
    )

    response = await client.get("/api/complaints", params={"category": "Hostel"})
    assert [c["id"] for c in response.json()] == [hostel_id]

    response = await client.get("/api/complaints", params={"search": "hot water"})
    assert [c["id"] for c in response.json()] == [hostel_id]

    response = await client.get("/api/complaints", params={"status": "closed"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_get_unknown_complaint_is_404(client: AsyncClient):
    response = await client.get("/api/complaints/nope")

    assert response.status_code == 404
    assert response.json() == {"error": "Complaint not found"}


@pytest.mark.asyncio
async def test_status_update_requires_admin(client: AsyncClient, complaint_data):
    complaint_id = await _create(client, complaint_data)

    response = await client.put(f"/api/complaints/{complaint_id}/status", json={"status": "resolved"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_status_update(client: AsyncClient, auth_headers, complaint_data):
    complaint_id = await _create(client, complaint_data)

    response = await client.put(
        f"/api/complaints/{complaint_id}/status",
        json={"status": "resolved"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "resolved"

    response = await client.put(
        f"/api/complaints/{complaint_id}/status",
        json={"status": "archived"},
        headers=auth_headers,
    )
    assert response.status_code == 400

    response = await client.put(
        "/api/complaints/missing/status",
        json={"status": "resolved"},
        headers=auth_headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_support_toggle_and_check(client: AsyncClient, complaint_data):
    complaint_id = await _create(client, complaint_data)

    response = await client.post(
        f"/api/complaints/{complaint_id}/support", json={"user_identifier": "userA"}
    )
    assert response.json() == {"is_supported": True, "support_count": 1}

    response = await client.get(f"/api/complaints/{complaint_id}/support/userA")
    assert response.json() == {"is_supported": True}

    response = await client.post(
        f"/api/complaints/{complaint_id}/support", json={"user_identifier": "userA"}
    )
    assert response.json() == {"is_supported": False, "support_count": 0}

    response = await client.post("/api/complaints/missing/support", json={"user_identifier": "userA"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_comments(client: AsyncClient, complaint_data):
    complaint_id = await _create(client, complaint_data)

    response = await client.post(
        f"/api/complaints/{complaint_id}/comments", json={"name": "", "text": "Same here"}
    )
    assert response.status_code == 201
    comment_id = response.json()["id"]

    response = await client.post(
        f"/api/complaints/{complaint_id}/comments", json={"name": "A", "text": "   "}
    )
    assert response.status_code == 400

    response = await client.post(
        f"/api/complaints/{complaint_id}/comments", json={"name": "A", "text": "x" * 501}
    )
    assert response.status_code == 422

    complaint = (await client.get(f"/api/complaints/{complaint_id}")).json()
    assert complaint["comments"] == [
        {
            "id": comment_id,
            "name": "Anonymous",
            "text": "Same here",
            "created_at": complaint["comments"][0]["created_at"],
        }
    ]


@pytest.mark.asyncio
async def test_delete_complaint(client: AsyncClient, auth_headers, complaint_data):
    complaint_id = await _create(client, complaint_data)
    await client.post(f"/api/complaints/{complaint_id}/support", json={"user_identifier": "userA"})

    response = await client.delete(f"/api/complaints/{complaint_id}", headers=auth_headers)
    assert response.status_code == 200

    response = await client.delete(f"/api/complaints/{complaint_id}", headers=auth_headers)
    assert response.status_code == 404

    response = await client.get(f"/api/complaints/{complaint_id}/support/userA")
    assert response.json() == {"is_supported": False}


@pytest.mark.asyncio
async def test_categories_crud(client: AsyncClient, auth_headers):
    response = await client.get("/api/categories")
    assert "Campus" in response.json()

    response = await client.post("/api/categories", json={"name": "Labs"}, headers=auth_headers)
    assert response.status_code == 201
    assert response.json()["added"] is True

    response = await client.post("/api/categories", json={"name": "Labs"}, headers=auth_headers)
    assert response.status_code == 409
    assert response.json()["added"] is False
    assert (await client.get("/api/categories")).json().count("Labs") == 1

    response = await client.delete("/api/categories/Transport/Bus", headers=auth_headers)
    assert response.status_code == 200
    assert "Transport/Bus" not in (await client.get("/api/categories")).json()

    response = await client.delete("/api/categories/Transport/Bus", headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_locations_crud(client: AsyncClient, auth_headers):
    response = await client.post("/api/locations", json={"name": "Gym"}, headers=auth_headers)
    assert response.status_code == 201

    response = await client.delete("/api/locations/Main Gate", headers=auth_headers)
    assert response.status_code == 200

    locations = (await client.get("/api/locations")).json()
    assert "Gym" in locations
    assert "Main Gate" not in locations
    assert locations == sorted(locations)


@pytest.mark.asyncio
async def test_stats(client: AsyncClient, auth_headers, complaint_data):
    await _create(client, {**complaint_data, "category": "Campus"})
    await _create(client, {**complaint_data, "category": "Campus"})
    hostel_id = await _create(client, {**complaint_data, "category": "Hostel"})
    await client.put(
        f"/api/complaints/{hostel_id}/status", json={"status": "resolved"}, headers=auth_headers
    )

    stats = (await client.get("/api/stats")).json()

    assert stats["total"] == 3
    assert stats["pending"] == 2
    assert stats["resolved"] == 1
    assert stats["by_category"]["Campus"] == 2
    assert stats["by_category"]["Hostel"] == 1
    assert stats["by_category"]["Others"] == 0
    assert stats["by_location"]["Library"] == 3


@pytest.mark.asyncio
async def test_admin_login(client: AsyncClient):
    response = await client.post(
        "/api/admin/login", json={"username": "Campuz", "password": "wrong"}
    )
    assert response.status_code == 401

    response = await client.post(
        "/api/admin/login", json={"username": "Campuz", "password": "Campuz@001"}
    )
    assert response.status_code == 200
    token = response.json()["access_token"]

    response = await client.get("/api/admin/me", headers={"Authorization": f"Bearer {token}"})
    assert response.json() == {"username": "Campuz"}
