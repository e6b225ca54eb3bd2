# storage/base.py
# -*- coding: utf-8 -*-
"""
Storage interface used by the services.

Two adapters implement it:
- storage/sql_store.py   : SQLAlchemy (SQLite / MySQL / PostgreSQL by URL)
- storage/local_store.py : in-memory, persisted through an injected snapshot writer

Complaint records handed back by `fetch_complaints` / `fetch_complaint` all
have the same shape:

    {
        "id", "student_name", "email", "title", "description",
        "category", "location", "status",
        "created_at", "updated_at",          # datetime
        "support_count",                     # derived from the support rows
        "images": [str, ...],                # insertion order
        "comments": [{"id", "name", "text", "created_at"}, ...],  # newest first
    }
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

# vocabulary kinds for the name tables
CATEGORY = "category"
LOCATION = "location"
NAME_KINDS = (CATEGORY, LOCATION)


class ComplaintStore(ABC):

    # ---------------------------------------------------------
    # complaints
    # ---------------------------------------------------------

    @abstractmethod
    def insert_complaint(self, record: Dict[str, Any], images: List[str]) -> None:
        """Write the complaint and all of its images, all or nothing."""

    @abstractmethod
    def fetch_complaints(self) -> List[Dict[str, Any]]:
        """Every complaint, newest first, with images / support_count / comments."""

    @abstractmethod
    def fetch_complaint(self, complaint_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def update_status(self, complaint_id: str, status: str, updated_at: datetime) -> bool:
        """False when no complaint has this id."""

    @abstractmethod
    def delete_complaint(self, complaint_id: str) -> bool:
        """Remove the complaint with its images, comments and support rows."""

    # ---------------------------------------------------------
    # support
    # ---------------------------------------------------------

    @abstractmethod
    def toggle_support(self, complaint_id: str, user_identifier: str) -> Optional[bool]:
        """
        Flip the (complaint, user) support row in one atomic step.

        True  -> the row now exists
        False -> the row was removed
        None  -> no complaint with this id
        """

    @abstractmethod
    def has_support(self, complaint_id: str, user_identifier: str) -> bool:
        ...

    @abstractmethod
    def count_support(self, complaint_id: str) -> int:
        ...

    # ---------------------------------------------------------
    # comments
    # ---------------------------------------------------------

    @abstractmethod
    def insert_comment(self, record: Dict[str, Any]) -> bool:
        """False when the target complaint does not exist."""

    # ---------------------------------------------------------
    # categories / locations
    # ---------------------------------------------------------

    @abstractmethod
    def list_names(self, kind: str) -> List[str]:
        """Names sorted alphabetically."""

    @abstractmethod
    def insert_name(self, kind: str, name: str) -> None:
        """Raises ConflictError when the name already exists."""

    @abstractmethod
    def delete_name(self, kind: str, name: str) -> bool:
        ...

    # ---------------------------------------------------------
    # statistics
    # ---------------------------------------------------------

    @abstractmethod
    def count_by_status(self) -> Dict[str, int]:
        """status -> number of complaints currently in it."""

    @abstractmethod
    def count_by_name(self, kind: str) -> Dict[str, int]:
        """Every known category/location name -> complaints carrying it (0 included)."""

    def ping(self) -> None:
        """Raise StorageError when the backend cannot be reached."""
