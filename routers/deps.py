# routers/deps.py
# -*- coding: utf-8 -*-
"""
FastAPI dependencies wiring a request's DB session into the services.

Tests override `get_db` (temporary SQLite) or `get_store` (LocalStore).
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from db.session import get_db
from services.complaint_service import ComplaintService
from services.reference_service import ReferenceService, category_service, location_service
from services.stats_service import StatsService
from storage.base import ComplaintStore
from storage.sql_store import SqlStore


def get_store(db: Session = Depends(get_db)) -> ComplaintStore:
    return SqlStore(db)


def get_complaint_service(store: ComplaintStore = Depends(get_store)) -> ComplaintService:
    return ComplaintService(store)


def get_category_service(store: ComplaintStore = Depends(get_store)) -> ReferenceService:
    return category_service(store)


def get_location_service(store: ComplaintStore = Depends(get_store)) -> ReferenceService:
    return location_service(store)


def get_stats_service(store: ComplaintStore = Depends(get_store)) -> StatsService:
    return StatsService(store)
