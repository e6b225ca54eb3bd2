# services/reference_service.py
# -*- coding: utf-8 -*-
"""
Category / Location vocabularies.

Complaints point at these by value, so deleting a name leaves old complaints
carrying it untouched.
"""

from typing import List, Optional

from core.errors import ConflictError, ValidationError
from core.logging import logger, log_event
from storage.base import CATEGORY, LOCATION, ComplaintStore


class ReferenceService:

    def __init__(self, store: ComplaintStore, kind: str):
        self.store = store
        self.kind = kind

    def list(self) -> List[str]:
        return self.store.list_names(self.kind)

    def add(self, name: Optional[str]) -> bool:
        """False (not an error) when the name is already taken."""
        name = (name or "").strip()
        if not name:
            raise ValidationError(f"{self.kind.capitalize()} name is required")

        try:
            self.store.insert_name(self.kind, name)
        except ConflictError:
            logger.info(f"{self.kind} '{name}' already exists, not added")
            return False

        log_event(f"{self.kind}_added", {"name": name})
        return True

    def delete(self, name: str) -> bool:
        removed = self.store.delete_name(self.kind, name)
        if removed:
            log_event(f"{self.kind}_deleted", {"name": name})
        return removed


def category_service(store: ComplaintStore) -> ReferenceService:
    return ReferenceService(store, CATEGORY)


def location_service(store: ComplaintStore) -> ReferenceService:
    return ReferenceService(store, LOCATION)
