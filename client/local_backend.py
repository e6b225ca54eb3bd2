# client/local_backend.py
# -*- coding: utf-8 -*-
"""
Local-only backend: same methods as CampusApiClient, but the lifecycle,
vocabulary and stats services run in-process over a LocalStore.

Used when there is no server at all. The invariants (unique support pair,
derived support count, cascade on delete, soft-fail on duplicate names) come
from the same service code the API uses.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from core.config import LOCAL_STORE_PATH
from core.errors import AuthenticationError
from core.security import verify_credentials
from services.complaint_service import ComplaintService
from services.reference_service import category_service, location_service
from services.stats_service import StatsService
from storage.local_store import LocalStore


def _jsonable(value: Any) -> Any:
    # same shape the HTTP API hands out (datetimes as ISO strings)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value


class LocalBackend:

    def __init__(self, store: LocalStore):
        self.store = store
        self.complaints = ComplaintService(store)
        self.categories = category_service(store)
        self.locations = location_service(store)
        self.stats_service = StatsService(store)
        self.is_admin = False

    @classmethod
    def from_file(cls, path: Path = LOCAL_STORE_PATH) -> "LocalBackend":
        return cls(LocalStore.from_file(path))

    def close(self) -> None:
        return None

    # ---------------------------------------------------------
    # admin
    # ---------------------------------------------------------

    def login(self, username: str, password: str) -> bool:
        self.is_admin = verify_credentials(username, password)
        return self.is_admin

    def logout(self) -> None:
        self.is_admin = False

    def _require_admin(self) -> None:
        # same gate the API puts on status, delete and vocabulary edits
        if not self.is_admin:
            raise AuthenticationError("Admin login required")

    # ---------------------------------------------------------
    # complaints
    # ---------------------------------------------------------

    def list_complaints(self, **filters: Optional[str]) -> List[Dict[str, Any]]:
        return _jsonable(self.complaints.list(**filters))

    def get_complaint(self, complaint_id: str) -> Dict[str, Any]:
        return _jsonable(self.complaints.get(complaint_id))

    def submit_complaint(self, data: Dict[str, Any]) -> str:
        return self.complaints.submit(data)

    def update_status(self, complaint_id: str, status: str) -> None:
        self._require_admin()
        self.complaints.update_status(complaint_id, status)

    def delete_complaint(self, complaint_id: str) -> None:
        self._require_admin()
        self.complaints.delete(complaint_id)

    def toggle_support(self, complaint_id: str, user_identifier: str) -> Dict[str, Any]:
        is_supported = self.complaints.toggle_support(complaint_id, user_identifier)
        return {
            "is_supported": is_supported,
            "support_count": self.complaints.support_count(complaint_id),
        }

    def has_supported(self, complaint_id: str, user_identifier: str) -> bool:
        return self.complaints.has_supported(complaint_id, user_identifier)

    def add_comment(self, complaint_id: str, name: Optional[str], text: str) -> str:
        return self.complaints.add_comment(complaint_id, name, text)

    # ---------------------------------------------------------
    # categories / locations
    # ---------------------------------------------------------

    def list_categories(self) -> List[str]:
        return self.categories.list()

    def add_category(self, name: str) -> bool:
        self._require_admin()
        return self.categories.add(name)

    def delete_category(self, name: str) -> bool:
        self._require_admin()
        return self.categories.delete(name)

    def list_locations(self) -> List[str]:
        return self.locations.list()

    def add_location(self, name: str) -> bool:
        self._require_admin()
        return self.locations.add(name)

    def delete_location(self, name: str) -> bool:
        self._require_admin()
        return self.locations.delete(name)

    # ---------------------------------------------------------
    # stats / health
    # ---------------------------------------------------------

    def stats(self) -> Dict[str, Any]:
        return self.stats_service.stats()

    def health(self) -> Dict[str, Any]:
        return {"status": "OK", "database": "local"}
