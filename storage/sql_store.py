# storage/sql_store.py
# -*- coding: utf-8 -*-
"""
SQLAlchemy adapter for ComplaintStore.

One Session per instance (FastAPI gives us one per request). Every write runs
in a single transaction that is rolled back on failure; SQLAlchemy errors are
logged and re-raised as StorageError.
"""

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import delete, func, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from core.errors import ConflictError, PortalError, StorageError
from core.logging import logger
from db.models.category import Category
from db.models.comment import Comment
from db.models.complaint import Complaint
from db.models.complaint_image import ComplaintImage
from db.models.location import Location
from db.models.support import Support
from storage.base import CATEGORY, LOCATION, ComplaintStore

_NAME_MODELS = {
    CATEGORY: Category,
    LOCATION: Location,
}

_NAME_COLUMNS = {
    CATEGORY: Complaint.category,
    LOCATION: Complaint.location,
}

# a concurrent insert of the same support pair makes our insert fail once;
# the retry then sees the other row and removes it
_TOGGLE_ATTEMPTS = 3


def complaint_to_dict(complaint: Complaint, support_count: int) -> Dict[str, Any]:
    return {
        "id": complaint.id,
        "student_name": complaint.student_name,
        "email": complaint.email,
        "title": complaint.title,
        "description": complaint.description,
        "category": complaint.category,
        "location": complaint.location,
        "status": complaint.status,
        "created_at": complaint.created_at,
        "updated_at": complaint.updated_at,
        "support_count": support_count,
        "images": [img.image_data for img in complaint.images],
        "comments": [
            {
                "id": c.id,
                "name": c.name,
                "text": c.text,
                "created_at": c.created_at,
            }
            for c in complaint.comments
        ],
    }


class SqlStore(ComplaintStore):

    def __init__(self, db: Session):
        self.db = db

    # ---------------------------------------------------------
    # transaction helpers
    # ---------------------------------------------------------

    @contextmanager
    def _transaction(self, action: str) -> Iterator[None]:
        try:
            yield
            self.db.commit()
        except PortalError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"[storage] {action} failed: {e}")
            raise StorageError(f"Storage failure during {action}") from e

    @contextmanager
    def _reading(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"[storage] {action} failed: {e}")
            raise StorageError(f"Storage failure during {action}") from e

    def _name_model(self, kind: str):
        try:
            return _NAME_MODELS[kind]
        except KeyError:
            raise ValueError(f"unknown vocabulary kind: {kind}")

    # ---------------------------------------------------------
    # complaints
    # ---------------------------------------------------------

    def insert_complaint(self, record: Dict[str, Any], images: List[str]) -> None:
        with self._transaction("insert_complaint"):
            complaint = Complaint(**record)
            complaint.images = [ComplaintImage(image_data=data) for data in images]
            self.db.add(complaint)

    def _support_counts(self) -> Dict[str, int]:
        rows = self.db.execute(
            select(Support.complaint_id, func.count(Support.id))
            .group_by(Support.complaint_id)
        ).all()
        return {complaint_id: count for complaint_id, count in rows}

    def fetch_complaints(self) -> List[Dict[str, Any]]:
        with self._reading("fetch_complaints"):
            counts = self._support_counts()
            complaints = self.db.scalars(
                select(Complaint)
                .options(selectinload(Complaint.images), selectinload(Complaint.comments))
                .order_by(Complaint.created_at.desc())
            ).all()

            return [complaint_to_dict(c, counts.get(c.id, 0)) for c in complaints]

    def fetch_complaint(self, complaint_id: str) -> Optional[Dict[str, Any]]:
        with self._reading("fetch_complaint"):
            complaint = self.db.scalars(
                select(Complaint)
                .options(selectinload(Complaint.images), selectinload(Complaint.comments))
                .where(Complaint.id == complaint_id)
            ).first()
            if complaint is None:
                return None
            return complaint_to_dict(complaint, self._count_support(complaint_id))

    def update_status(self, complaint_id: str, status: str, updated_at: datetime) -> bool:
        with self._transaction("update_status"):
            complaint = self.db.get(Complaint, complaint_id)
            if complaint is None:
                return False
            if complaint.status != status:
                complaint.status = status
                complaint.updated_at = updated_at
            return True

    def delete_complaint(self, complaint_id: str) -> bool:
        with self._transaction("delete_complaint"):
            complaint = self.db.get(Complaint, complaint_id)
            if complaint is None:
                return False
            # ORM cascade takes images / comments / supports along
            self.db.delete(complaint)
            return True

    # ---------------------------------------------------------
    # support
    # ---------------------------------------------------------

    def _toggle_once(self, complaint_id: str, user_identifier: str) -> Optional[bool]:
        with self._transaction("toggle_support"):
            if self.db.get(Complaint, complaint_id) is None:
                return None

            removed = self.db.execute(
                delete(Support).where(
                    Support.complaint_id == complaint_id,
                    Support.user_identifier == user_identifier,
                )
            )
            if removed.rowcount:
                return False

            # uq_support_pair rejects a duplicate written in the meantime
            self.db.add(Support(complaint_id=complaint_id, user_identifier=user_identifier))
            self.db.flush()
            return True

    def toggle_support(self, complaint_id: str, user_identifier: str) -> Optional[bool]:
        for attempt in range(1, _TOGGLE_ATTEMPTS + 1):
            try:
                return self._toggle_once(complaint_id, user_identifier)
            except StorageError as e:
                if not isinstance(e.__cause__, IntegrityError) or attempt == _TOGGLE_ATTEMPTS:
                    raise
                logger.warning(
                    f"[storage] support pair ({complaint_id}, {user_identifier}) "
                    f"changed concurrently, retrying ({attempt})"
                )
        return None

    def has_support(self, complaint_id: str, user_identifier: str) -> bool:
        with self._reading("has_support"):
            found = self.db.scalars(
                select(Support.id).where(
                    Support.complaint_id == complaint_id,
                    Support.user_identifier == user_identifier,
                )
            ).first()
            return found is not None

    def _count_support(self, complaint_id: str) -> int:
        return self.db.scalar(
            select(func.count(Support.id)).where(Support.complaint_id == complaint_id)
        ) or 0

    def count_support(self, complaint_id: str) -> int:
        with self._reading("count_support"):
            return self._count_support(complaint_id)

    # ---------------------------------------------------------
    # comments
    # ---------------------------------------------------------

    def insert_comment(self, record: Dict[str, Any]) -> bool:
        with self._transaction("insert_comment"):
            if self.db.get(Complaint, record["complaint_id"]) is None:
                return False
            self.db.add(Comment(**record))
            return True

    # ---------------------------------------------------------
    # categories / locations
    # ---------------------------------------------------------

    def list_names(self, kind: str) -> List[str]:
        model = self._name_model(kind)
        with self._reading(f"list_{kind}"):
            return list(self.db.scalars(select(model.name).order_by(model.name)).all())

    def insert_name(self, kind: str, name: str) -> None:
        model = self._name_model(kind)
        try:
            with self._transaction(f"insert_{kind}"):
                exists = self.db.scalars(select(model.id).where(model.name == name)).first()
                if exists is not None:
                    raise ConflictError(f"{kind.capitalize()} already exists")
                self.db.add(model(name=name))
                self.db.flush()
        except StorageError as e:
            # lost a race against another insert of the same name
            if isinstance(e.__cause__, IntegrityError):
                raise ConflictError(f"{kind.capitalize()} already exists") from e
            raise

    def delete_name(self, kind: str, name: str) -> bool:
        model = self._name_model(kind)
        with self._transaction(f"delete_{kind}"):
            result = self.db.execute(delete(model).where(model.name == name))
            return bool(result.rowcount)

    # ---------------------------------------------------------
    # statistics
    # ---------------------------------------------------------

    def count_by_status(self) -> Dict[str, int]:
        with self._reading("count_by_status"):
            rows = self.db.execute(
                select(Complaint.status, func.count(Complaint.id)).group_by(Complaint.status)
            ).all()
            return {status: count for status, count in rows}

    def count_by_name(self, kind: str) -> Dict[str, int]:
        model = self._name_model(kind)
        column = _NAME_COLUMNS[kind]
        with self._reading(f"count_by_{kind}"):
            rows = self.db.execute(
                select(model.name, func.count(Complaint.id))
                .select_from(model)
                .outerjoin(Complaint, column == model.name)
                .group_by(model.name)
                .order_by(model.name)
            ).all()
            return {name: count for name, count in rows}

    def ping(self) -> None:
        with self._reading("ping"):
            self.db.execute(text("SELECT 1"))
