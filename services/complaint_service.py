# services/complaint_service.py
# -*- coding: utf-8 -*-
"""
Complaint lifecycle: submit / list / get / status / delete / support / comments.

The service only validates and orchestrates; rows are written by whatever
ComplaintStore it was built with (SqlStore per request, or LocalStore in the
local-only client mode).
"""

import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from core.errors import NotFound, ValidationError
from core.logging import logger, log_event
from storage.base import ComplaintStore

PENDING = "pending"
RESOLVED = "resolved"
STATUSES = (PENDING, RESOLVED)

ANONYMOUS = "Anonymous"

# toggles for the same (complaint, user) pair run one at a time in this process;
# the storage-level unique constraint covers other processes
_SUPPORT_LOCK_STRIPES = 64
_support_locks = [threading.Lock() for _ in range(_SUPPORT_LOCK_STRIPES)]


def _support_lock(complaint_id: str, user_identifier: str) -> threading.Lock:
    return _support_locks[hash((complaint_id, user_identifier)) % _SUPPORT_LOCK_STRIPES]


def utcnow() -> datetime:
    # naive UTC, same as what the SQL columns hand back
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _clean(value: Any) -> Optional[str]:
    """Trim a value, None / blank -> None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _required(data: Mapping[str, Any], field: str, label: str) -> str:
    value = _clean(data.get(field))
    if value is None:
        raise ValidationError(f"{label} is required")
    return value


def _matches(complaint: Dict[str, Any], search: str) -> bool:
    needle = search.lower()
    haystack = (
        complaint.get("title") or "",
        complaint.get("description") or "",
        complaint.get("student_name") or "",
    )
    return any(needle in part.lower() for part in haystack)


class ComplaintService:

    def __init__(self, store: ComplaintStore):
        self.store = store

    # ---------------------------------------------------------
    # submit
    # ---------------------------------------------------------

    def submit(self, data: Mapping[str, Any]) -> str:
        """
        Create a complaint from a submission form.

        - title / description / category must be non-blank (ValidationError)
        - status is always `pending`, whatever the caller sent
        - complaint + images are written in one go
        Returns the new complaint id.
        """
        title = _required(data, "title", "Title")
        description = _required(data, "description", "Description")
        category = _required(data, "category", "Category")

        images = data.get("images") or []
        if not isinstance(images, (list, tuple)) or not all(isinstance(i, str) for i in images):
            raise ValidationError("Images must be a list of encoded strings")

        now = utcnow()
        record = {
            "id": str(uuid.uuid4()),
            "student_name": _clean(data.get("student_name")),
            "email": _clean(data.get("email")),
            "title": title,
            "description": description,
            "category": category,
            "location": _clean(data.get("location")),
            "status": PENDING,
            "created_at": now,
            "updated_at": now,
        }

        self.store.insert_complaint(record, list(images))

        logger.info(f"Complaint submitted: {record['id']} ({category}, {len(images)} images)")
        log_event("complaint_submitted", {"complaint_id": record["id"], "category": category})
        return record["id"]

    # ---------------------------------------------------------
    # read
    # ---------------------------------------------------------

    def list(
        self,
        status: Optional[str] = None,
        category: Optional[str] = None,
        location: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Every complaint, newest first, each with images, support_count and
        comments (newest first). Filters are optional and combine with AND.
        """
        status = _clean(status)
        if status is not None and status not in STATUSES:
            raise ValidationError(f"Unknown status: {status}")
        category = _clean(category)
        location = _clean(location)
        search = _clean(search)

        complaints = self.store.fetch_complaints()
        if status:
            complaints = [c for c in complaints if c["status"] == status]
        if category:
            complaints = [c for c in complaints if c["category"] == category]
        if location:
            complaints = [c for c in complaints if c["location"] == location]
        if search:
            complaints = [c for c in complaints if _matches(c, search)]
        return complaints

    def get(self, complaint_id: str) -> Dict[str, Any]:
        complaint = self.store.fetch_complaint(complaint_id)
        if complaint is None:
            raise NotFound("Complaint not found")
        return complaint

    # ---------------------------------------------------------
    # admin actions
    # ---------------------------------------------------------

    def update_status(self, complaint_id: str, new_status: str) -> None:
        new_status = _clean(new_status)
        if new_status not in STATUSES:
            raise ValidationError(
                f"Status must be one of: {', '.join(STATUSES)}"
            )

        if not self.store.update_status(complaint_id, new_status, utcnow()):
            raise NotFound("Complaint not found")

        logger.info(f"Complaint {complaint_id} -> {new_status}")
        log_event("status_updated", {"complaint_id": complaint_id, "status": new_status})

    def delete(self, complaint_id: str) -> None:
        if not self.store.delete_complaint(complaint_id):
            raise NotFound("Complaint not found")

        logger.info(f"Complaint deleted: {complaint_id}")
        log_event("complaint_deleted", {"complaint_id": complaint_id})

    # ---------------------------------------------------------
    # support
    # ---------------------------------------------------------

    def toggle_support(self, complaint_id: str, user_identifier: str) -> bool:
        """True -> now supported, False -> support removed."""
        user_identifier = _clean(user_identifier)
        if user_identifier is None:
            raise ValidationError("User identifier is required")

        with _support_lock(complaint_id, user_identifier):
            now_supported = self.store.toggle_support(complaint_id, user_identifier)

        if now_supported is None:
            raise NotFound("Complaint not found")
        return now_supported

    def has_supported(self, complaint_id: str, user_identifier: str) -> bool:
        user_identifier = _clean(user_identifier)
        if user_identifier is None:
            return False
        return self.store.has_support(complaint_id, user_identifier)

    def support_count(self, complaint_id: str) -> int:
        return self.store.count_support(complaint_id)

    # ---------------------------------------------------------
    # comments
    # ---------------------------------------------------------

    def add_comment(self, complaint_id: str, name: Optional[str], text: Optional[str]) -> str:
        body = _clean(text)
        if body is None:
            raise ValidationError("Comment text is required")

        record = {
            "id": str(uuid.uuid4()),
            "complaint_id": complaint_id,
            "name": _clean(name) or ANONYMOUS,
            "text": body,
            "created_at": utcnow(),
        }
        if not self.store.insert_comment(record):
            raise NotFound("Complaint not found")
        return record["id"]
