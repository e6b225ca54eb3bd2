# services/stats_service.py
# -*- coding: utf-8 -*-

from typing import Any, Dict

from services.complaint_service import PENDING, RESOLVED
from storage.base import CATEGORY, LOCATION, ComplaintStore


class StatsService:
    """Counts derived from the current complaint rows, recomputed on every call."""

    def __init__(self, store: ComplaintStore):
        self.store = store

    def stats(self) -> Dict[str, Any]:
        by_status = self.store.count_by_status()
        return {
            "total": sum(by_status.values()),
            "pending": by_status.get(PENDING, 0),
            "resolved": by_status.get(RESOLVED, 0),
            # every known name shows up, zero counts included
            "by_category": self.store.count_by_name(CATEGORY),
            "by_location": self.store.count_by_name(LOCATION),
        }
