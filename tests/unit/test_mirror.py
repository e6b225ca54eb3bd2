import json
import time

import httpx
import pytest

from client.api_client import CampusApiClient
from client.local_backend import LocalBackend
from client.mirror import ClientStateMirror, MirrorCache
from core.errors import AuthenticationError, NotFound, ValidationError
from storage.local_store import LocalStore

COMPLAINTS = [
    {
        "id": "c-1",
        "title": "Broken fan",
        "status": "pending",
        "category": "Hostel",
        "support_count": 2,
        "images": [],
        "comments": [],
    }
]
STATS = {"total": 1, "pending": 1, "resolved": 0, "by_category": {"Hostel": 1}, "by_location": {}}


class FakeServer:
    """MockTransport handler that can be switched off to simulate an outage"""

    def __init__(self):
        self.up = True
        self.html = False
        self.calls = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append((request.method, request.url.path))
        if not self.up:
            raise httpx.ConnectError("connection refused", request=request)
        if self.html:
            return httpx.Response(200, text="<html>proxy login</html>")

        path = request.url.path
        if path == "/api/complaints" and request.method == "GET":
            return httpx.Response(200, json=COMPLAINTS)
        if path == "/api/stats":
            return httpx.Response(200, json=STATS)
        if path == "/api/categories" and request.method == "GET":
            return httpx.Response(200, json=["Campus", "Hostel"])
        if path == "/api/categories" and request.method == "POST":
            return httpx.Response(409, json={"added": False, "error": "Category already exists"})
        if path == "/api/locations":
            return httpx.Response(200, json=["Library"])
        if path.endswith("/support") and request.method == "POST":
            body = json.loads(request.content)
            return httpx.Response(200, json={"is_supported": bool(body["user_identifier"]), "support_count": 3})
        if path == "/api/complaints/missing":
            return httpx.Response(404, json={"error": "Complaint not found"})
        if path == "/api/complaints" and request.method == "POST":
            return httpx.Response(400, json={"error": "Title is required"})
        return httpx.Response(500, json={"error": "Something went wrong!"})


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def api(server):
    client = CampusApiClient("http://portal.test/api", transport=httpx.MockTransport(server))
    yield client
    client.close()


@pytest.fixture
def cache(tmp_path):
    return MirrorCache(tmp_path / "mirror_cache.json")


def test_refresh_stores_snapshot(api, cache):
    mirror = ClientStateMirror(api, cache, interval=30)

    assert mirror.refresh() is True

    assert mirror.is_stale is False
    assert mirror.complaints == COMPLAINTS
    assert mirror.stats == STATS
    assert mirror.categories == ["Campus", "Hostel"]
    assert cache.load_snapshot()["complaints"] == COMPLAINTS


def test_failed_refresh_keeps_last_snapshot(api, cache, server):
    mirror = ClientStateMirror(api, cache, interval=30)
    mirror.refresh()

    server.up = False
    assert mirror.refresh() is False

    assert mirror.is_stale is True
    assert "connection refused" in mirror.last_error
    assert mirror.complaints == COMPLAINTS


def test_cold_start_offline_uses_cache(api, server, tmp_path):
    path = tmp_path / "mirror_cache.json"
    ClientStateMirror(api, MirrorCache(path)).refresh()

    server.up = False
    mirror = ClientStateMirror(api, MirrorCache(path))

    assert mirror.refresh() is False
    assert mirror.complaints == COMPLAINTS
    assert mirror.stats["total"] == 1


def test_offline_without_cache_is_empty_not_error(api, cache, server):
    server.up = False
    mirror = ClientStateMirror(api, cache)

    assert mirror.refresh() is False
    assert mirror.complaints == []
    assert mirror.stats == {}


def test_user_identifier_is_stable(tmp_path):
    path = tmp_path / "mirror_cache.json"
    first = MirrorCache(path).user_identifier

    assert first
    assert MirrorCache(path).user_identifier == first


def test_toggle_support_sends_user_identifier(api, cache, server):
    mirror = ClientStateMirror(api, cache)

    assert mirror.toggle_support("c-1") is True
    assert ("POST", "/api/complaints/c-1/support") in server.calls


def test_api_errors_map_to_exceptions(api):
    with pytest.raises(NotFound):
        api.get_complaint("missing")
    with pytest.raises(ValidationError):
        api.submit_complaint({"title": ""})
    assert api.add_category("Campus") is False


def test_polling_thread_refreshes(api, cache, server):
    mirror = ClientStateMirror(api, cache, interval=0.05)
    mirror.start()
    try:
        for _ in range(100):
            if len([c for c in server.calls if c[1] == "/api/stats"]) >= 2:
                break
            time.sleep(0.02)
    finally:
        mirror.stop()

    assert len([c for c in server.calls if c[1] == "/api/stats"]) >= 2
    assert mirror.is_stale is False


def test_local_backend_mirror(cache):
    backend = LocalBackend(LocalStore())
    mirror = ClientStateMirror(backend, cache)

    complaint_id = mirror.submit_complaint({"title": "T", "description": "D", "category": "Campus"})
    assert mirror.toggle_support(complaint_id) is True
    mirror.add_comment(complaint_id, None, "+1")

    assert mirror.is_stale is False
    complaint = mirror.complaints[0]
    assert complaint["id"] == complaint_id
    assert complaint["support_count"] == 1
    assert complaint["comments"][0]["name"] == "Anonymous"
    assert isinstance(complaint["created_at"], str)
    assert mirror.stats["by_category"]["Campus"] == 1
    assert mirror.has_supported(complaint_id) is True

    assert backend.login("Campuz", "Campuz@001") is True
    assert backend.add_category("Campus") is False


def test_non_json_body_is_a_failed_refresh(api, cache, server):
    mirror = ClientStateMirror(api, cache)
    mirror.refresh()

    server.html = True
    assert mirror.refresh() is False

    assert mirror.is_stale is True
    assert mirror.complaints == COMPLAINTS


def test_polling_survives_non_json_body(api, cache, server):
    server.html = True
    mirror = ClientStateMirror(api, cache, interval=0.05)
    mirror.start()
    try:
        for _ in range(100):
            if len([c for c in server.calls if c[1] == "/api/complaints"]) >= 3:
                break
            time.sleep(0.02)
        alive = mirror._thread is not None and mirror._thread.is_alive()
    finally:
        mirror.stop()

    assert alive
    assert len([c for c in server.calls if c[1] == "/api/complaints"]) >= 3
    assert mirror.is_stale is True


def test_path_segments_are_escaped():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.raw_path)
        if request.method == "DELETE":
            return httpx.Response(200, json={"message": "deleted"})
        return httpx.Response(200, json={"is_supported": False})

    with CampusApiClient("http://portal.test/api", transport=httpx.MockTransport(handler)) as api:
        assert api.delete_category("Bus?Stop#1") is True
        assert api.has_supported("c-1", "user/A") is False

    assert seen == [
        b"/api/categories/Bus%3FStop%231",
        b"/api/complaints/c-1/support/user%2FA",
    ]


def test_cache_write_leaves_no_temp_file(tmp_path):
    path = tmp_path / "mirror_cache.json"
    cache = MirrorCache(path)
    cache.save_snapshot({"complaints": COMPLAINTS})

    assert json.loads(path.read_text(encoding="utf-8"))["snapshot"]["complaints"] == COMPLAINTS
    assert not (tmp_path / "mirror_cache.json.tmp").exists()


def test_local_backend_admin_gate():
    backend = LocalBackend(LocalStore())
    complaint_id = backend.submit_complaint({"title": "T", "description": "D", "category": "Campus"})

    with pytest.raises(AuthenticationError):
        backend.update_status(complaint_id, "resolved")
    with pytest.raises(AuthenticationError):
        backend.delete_complaint(complaint_id)
    with pytest.raises(AuthenticationError):
        backend.add_category("Labs")
    with pytest.raises(AuthenticationError):
        backend.delete_location("Library")
    assert backend.login("Campuz", "wrong") is False

    assert backend.login("Campuz", "Campuz@001") is True
    backend.update_status(complaint_id, "resolved")
    assert backend.get_complaint(complaint_id)["status"] == "resolved"
    assert backend.add_category("Labs") is True

    backend.logout()
    with pytest.raises(AuthenticationError):
        backend.delete_category("Labs")
