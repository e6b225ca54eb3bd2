# storage/local_store.py
# -*- coding: utf-8 -*-
"""
In-memory ComplaintStore for the local-only client mode.

State lives in one LocalState object; every mutation happens under a single
lock and then hands a JSON-able snapshot to the injected `persist` callable
(JsonSnapshotFile.save in practice). A failed write restores the state it
started from. Shared storage is last-write-wins.

Support is kept as a set of user identifiers per complaint, so the count is
always len(set) and never a separately maintained number.
"""

import copy
import json
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Set

from core.errors import ConflictError, StorageError
from core.logging import logger
from db.seed import DEFAULT_CATEGORIES, DEFAULT_LOCATIONS
from storage.base import CATEGORY, LOCATION, NAME_KINDS, ComplaintStore

_COMPLAINT_FIELDS = (
    "id",
    "student_name",
    "email",
    "title",
    "description",
    "category",
    "location",
    "status",
)


class LocalState:
    """Everything the local backend knows, in plain Python containers."""

    def __init__(self):
        self.complaints: Dict[str, Dict[str, Any]] = {}
        self.images: Dict[str, List[str]] = {}
        self.comments: Dict[str, List[Dict[str, Any]]] = {}
        self.supports: Dict[str, Set[str]] = {}
        self.names: Dict[str, List[str]] = {
            CATEGORY: list(DEFAULT_CATEGORIES),
            LOCATION: list(DEFAULT_LOCATIONS),
        }
        # insertion counter, breaks created_at ties when sorting
        self.seq = 0

    # ---------------------------------------------------------
    # (de)serialization
    # ---------------------------------------------------------

    def to_json(self) -> Dict[str, Any]:
        complaints = []
        for cid, row in self.complaints.items():
            complaints.append(
                {
                    **{k: row[k] for k in _COMPLAINT_FIELDS},
                    "created_at": row["created_at"].isoformat(),
                    "updated_at": row["updated_at"].isoformat(),
                    "seq": row["seq"],
                    "images": list(self.images.get(cid, [])),
                    "comments": [
                        {**c, "created_at": c["created_at"].isoformat()}
                        for c in self.comments.get(cid, [])
                    ],
                    "supported_by": sorted(self.supports.get(cid, set())),
                }
            )
        return {
            "complaints": complaints,
            "categories": list(self.names[CATEGORY]),
            "locations": list(self.names[LOCATION]),
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "LocalState":
        state = cls()
        if "categories" in data:
            state.names[CATEGORY] = list(data["categories"])
        if "locations" in data:
            state.names[LOCATION] = list(data["locations"])

        for item in data.get("complaints", []):
            cid = item["id"]
            state.seq = max(state.seq, int(item.get("seq", 0)))
            state.complaints[cid] = {
                **{k: item.get(k) for k in _COMPLAINT_FIELDS},
                "created_at": datetime.fromisoformat(item["created_at"]),
                "updated_at": datetime.fromisoformat(item["updated_at"]),
                "seq": int(item.get("seq", 0)),
            }
            state.images[cid] = list(item.get("images", []))
            state.comments[cid] = [
                {**c, "created_at": datetime.fromisoformat(c["created_at"])}
                for c in item.get("comments", [])
            ]
            for c in state.comments[cid]:
                state.seq = max(state.seq, int(c.get("seq", 0)))
            state.supports[cid] = set(item.get("supported_by", []))
        return state


class JsonSnapshotFile:
    """Reads / writes a LocalState snapshot as one JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        try:
            with self.path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"[local-store] could not read {self.path}: {e}")
            return None

    def save(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)
        tmp_path.replace(self.path)


class LocalStore(ComplaintStore):

    def __init__(
        self,
        state: Optional[LocalState] = None,
        persist: Optional[Callable[[Dict[str, Any]], None]] = None,
    ):
        self.state = state or LocalState()
        self._persist = persist
        self._lock = threading.RLock()

    @classmethod
    def from_file(cls, path: Path) -> "LocalStore":
        snapshot = JsonSnapshotFile(path)
        data = snapshot.load()
        state = LocalState.from_json(data) if data else LocalState()
        return cls(state=state, persist=snapshot.save)

    def _commit(self) -> None:
        if self._persist is None:
            return
        try:
            self._persist(self.state.to_json())
        except OSError as e:
            logger.error(f"[local-store] snapshot write failed: {e}")
            raise StorageError("Storage failure while saving local snapshot") from e

    @contextmanager
    def _mutating(self) -> Iterator[LocalState]:
        """
        Apply a change to the state and persist it.
        A failed snapshot write restores the state as it was before.
        """
        with self._lock:
            before = copy.deepcopy(self.state)
            yield self.state
            try:
                self._commit()
            except StorageError:
                self.state = before
                raise

    def _names(self, kind: str) -> List[str]:
        if kind not in NAME_KINDS:
            raise ValueError(f"unknown vocabulary kind: {kind}")
        return self.state.names[kind]

    def _view(self, cid: str) -> Dict[str, Any]:
        row = self.state.complaints[cid]
        comments = sorted(
            self.state.comments.get(cid, []),
            key=lambda c: (c["created_at"], c.get("seq", 0)),
            reverse=True,
        )
        return {
            **{k: row[k] for k in _COMPLAINT_FIELDS},
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
            "support_count": len(self.state.supports.get(cid, set())),
            "images": list(self.state.images.get(cid, [])),
            "comments": [
                {k: c[k] for k in ("id", "name", "text", "created_at")}
                for c in comments
            ],
        }

    # ---------------------------------------------------------
    # complaints
    # ---------------------------------------------------------

    def insert_complaint(self, record: Dict[str, Any], images: List[str]) -> None:
        with self._mutating() as state:
            cid = record["id"]
            state.seq += 1
            state.complaints[cid] = {**record, "seq": state.seq}
            state.images[cid] = list(images)
            state.comments[cid] = []
            state.supports[cid] = set()

    def fetch_complaints(self) -> List[Dict[str, Any]]:
        with self._lock:
            ordered = sorted(
                self.state.complaints.values(),
                key=lambda row: (row["created_at"], row["seq"]),
                reverse=True,
            )
            return [self._view(row["id"]) for row in ordered]

    def fetch_complaint(self, complaint_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            if complaint_id not in self.state.complaints:
                return None
            return self._view(complaint_id)

    def update_status(self, complaint_id: str, status: str, updated_at: datetime) -> bool:
        with self._lock:
            row = self.state.complaints.get(complaint_id)
            if row is None:
                return False
            if row["status"] == status:
                return True
            with self._mutating() as state:
                row = state.complaints[complaint_id]
                row["status"] = status
                row["updated_at"] = updated_at
            return True

    def delete_complaint(self, complaint_id: str) -> bool:
        with self._lock:
            if complaint_id not in self.state.complaints:
                return False
            with self._mutating() as state:
                for table in (state.complaints, state.images, state.comments, state.supports):
                    table.pop(complaint_id, None)
            return True

    # ---------------------------------------------------------
    # support
    # ---------------------------------------------------------

    def toggle_support(self, complaint_id: str, user_identifier: str) -> Optional[bool]:
        with self._lock:
            if complaint_id not in self.state.complaints:
                return None
            with self._mutating() as state:
                supporters = state.supports.setdefault(complaint_id, set())
                if user_identifier in supporters:
                    supporters.discard(user_identifier)
                    now_supported = False
                else:
                    supporters.add(user_identifier)
                    now_supported = True
            return now_supported

    def has_support(self, complaint_id: str, user_identifier: str) -> bool:
        with self._lock:
            return user_identifier in self.state.supports.get(complaint_id, set())

    def count_support(self, complaint_id: str) -> int:
        with self._lock:
            return len(self.state.supports.get(complaint_id, set()))

    # ---------------------------------------------------------
    # comments
    # ---------------------------------------------------------

    def insert_comment(self, record: Dict[str, Any]) -> bool:
        with self._lock:
            cid = record["complaint_id"]
            if cid not in self.state.complaints:
                return False
            with self._mutating() as state:
                state.seq += 1
                state.comments.setdefault(cid, []).append(
                    {
                        "id": record["id"],
                        "name": record["name"],
                        "text": record["text"],
                        "created_at": record["created_at"],
                        "seq": state.seq,
                    }
                )
            return True

    # ---------------------------------------------------------
    # categories / locations
    # ---------------------------------------------------------

    def list_names(self, kind: str) -> List[str]:
        with self._lock:
            return sorted(self._names(kind))

    def insert_name(self, kind: str, name: str) -> None:
        with self._lock:
            if name in self._names(kind):
                raise ConflictError(f"{kind.capitalize()} already exists")
            with self._mutating() as state:
                state.names[kind].append(name)

    def delete_name(self, kind: str, name: str) -> bool:
        with self._lock:
            if name not in self._names(kind):
                return False
            with self._mutating() as state:
                state.names[kind].remove(name)
            return True


    # ---------------------------------------------------------
    # statistics
    # ---------------------------------------------------------

    def count_by_status(self) -> Dict[str, int]:
        with self._lock:
            counts: Dict[str, int] = {}
            for row in self.state.complaints.values():
                counts[row["status"]] = counts.get(row["status"], 0) + 1
            return counts

    def count_by_name(self, kind: str) -> Dict[str, int]:
        with self._lock:
            counts = {name: 0 for name in sorted(self._names(kind))}
            for row in self.state.complaints.values():
                value = row.get(kind)
                if value in counts:
                    counts[value] += 1
            return counts

    def ping(self) -> None:
        return None
