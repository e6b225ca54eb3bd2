# db/seed.py
# -*- coding: utf-8 -*-
"""
Table creation + default vocabulary.

Seeding is idempotent: names that already exist are skipped, so this runs on
every startup.
"""

from typing import Iterable, Type

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from db.base import Base
from db.models.category import Category
from db.models.location import Location
# imported so their tables are registered on Base.metadata
from db.models.complaint import Complaint  # noqa: F401
from db.models.complaint_image import ComplaintImage  # noqa: F401
from db.models.comment import Comment  # noqa: F401
from db.models.support import Support  # noqa: F401
from core.logging import logger

DEFAULT_CATEGORIES = [
    "Campus",
    "Hostel",
    "Roadways",
    "Transport/Bus",
    "Others",
]

DEFAULT_LOCATIONS = [
    "Main Campus",
    "Hostel A",
    "Hostel B",
    "Hostel C",
    "Block A",
    "Block B",
    "Block C",
    "Library",
    "Cafeteria",
    "Sports Complex",
    "Auditorium",
    "Parking Area",
    "Main Gate",
    "Administrative Block",
]


def _seed_names(db: Session, model: Type, names: Iterable[str]) -> int:
    existing = set(db.scalars(select(model.name)).all())
    added = 0
    for name in names:
        if name not in existing:
            db.add(model(name=name))
            added += 1
    return added


def init_db(engine: Engine) -> None:
    """Create missing tables and insert the default categories / locations."""
    Base.metadata.create_all(bind=engine)

    with Session(engine) as db:
        added = _seed_names(db, Category, DEFAULT_CATEGORIES)
        added += _seed_names(db, Location, DEFAULT_LOCATIONS)
        db.commit()

    if added:
        logger.info(f"Seeded {added} default categories/locations")
