import threading

import pytest

from core.errors import StorageError
from services.complaint_service import ComplaintService
from services.reference_service import category_service
from storage.local_store import JsonSnapshotFile, LocalStore


def test_state_survives_reload(tmp_path):
    path = tmp_path / "local_store.json"
    service = ComplaintService(LocalStore.from_file(path))
    complaint_id = service.submit(
        {"title": "T", "description": "D", "category": "Hostel", "images": ["data:image/png;base64,AAAA"]}
    )
    service.toggle_support(complaint_id, "userA")
    service.add_comment(complaint_id, "", "me too")
    service.update_status(complaint_id, "resolved")
    category_service(service.store).add("Library Services")

    reloaded = ComplaintService(LocalStore.from_file(path))
    complaint = reloaded.get(complaint_id)

    assert complaint["status"] == "resolved"
    assert complaint["support_count"] == 1
    assert complaint["images"] == ["data:image/png;base64,AAAA"]
    assert complaint["comments"][0]["name"] == "Anonymous"
    assert reloaded.has_supported(complaint_id, "userA") is True
    assert "Library Services" in category_service(reloaded.store).list()
    # toggling again after reload still round-trips
    assert reloaded.toggle_support(complaint_id, "userA") is False


def test_corrupt_snapshot_starts_fresh(tmp_path):
    path = tmp_path / "local_store.json"
    path.write_text("{not json", encoding="utf-8")

    assert JsonSnapshotFile(path).load() is None
    assert ComplaintService(LocalStore.from_file(path)).list() == []


def test_failed_snapshot_write_rolls_back_submit():
    def broken_persist(data):
        raise OSError("read-only file system")

    service = ComplaintService(LocalStore(persist=broken_persist))

    with pytest.raises(StorageError):
        service.submit({"title": "T", "description": "D", "category": "Campus"})

    assert service.list() == []


def test_concurrent_toggles_single_row():
    service = ComplaintService(LocalStore())
    complaint_id = service.submit({"title": "T", "description": "D", "category": "Campus"})
    barrier = threading.Barrier(3)
    results = []

    def worker():
        barrier.wait()
        results.append(service.toggle_support(complaint_id, "userA"))

    threads = [threading.Thread(target=worker) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(results) == [False, True, True]
    assert service.support_count(complaint_id) == 1


class FlakySnapshot:
    """persist callable that can be switched to fail"""

    def __init__(self):
        self.fail = False
        self.writes = 0

    def __call__(self, data):
        if self.fail:
            raise OSError("read-only file system")
        self.writes += 1


@pytest.fixture
def flaky():
    return FlakySnapshot()


@pytest.fixture
def flaky_service(flaky):
    return ComplaintService(LocalStore(persist=flaky))


def test_failed_snapshot_write_rolls_back_delete(flaky, flaky_service):
    complaint_id = flaky_service.submit({"title": "T", "description": "D", "category": "Campus"})
    flaky_service.toggle_support(complaint_id, "userA")
    flaky.fail = True

    with pytest.raises(StorageError):
        flaky_service.delete(complaint_id)

    assert flaky_service.get(complaint_id)["support_count"] == 1
    assert flaky_service.has_supported(complaint_id, "userA") is True


def test_failed_snapshot_write_rolls_back_status_support_comment(flaky, flaky_service):
    complaint_id = flaky_service.submit({"title": "T", "description": "D", "category": "Campus"})
    flaky.fail = True

    with pytest.raises(StorageError):
        flaky_service.update_status(complaint_id, "resolved")
    with pytest.raises(StorageError):
        flaky_service.toggle_support(complaint_id, "userA")
    with pytest.raises(StorageError):
        flaky_service.add_comment(complaint_id, "A", "hello")

    complaint = flaky_service.get(complaint_id)
    assert complaint["status"] == "pending"
    assert complaint["support_count"] == 0
    assert complaint["comments"] == []

    # the store keeps working once writes succeed again
    flaky.fail = False
    assert flaky_service.toggle_support(complaint_id, "userA") is True


def test_failed_snapshot_write_rolls_back_vocabulary(flaky, flaky_service):
    categories = category_service(flaky_service.store)
    before = categories.list()
    flaky.fail = True

    with pytest.raises(StorageError):
        categories.add("Labs")
    with pytest.raises(StorageError):
        categories.delete("Hostel")

    assert categories.list() == before
