# -*- coding: utf-8 -*-
"""
mirror.py

Client-side copy of the portal state, kept fresh by polling.

Role summary
--------------------------------------
1. refresh() pulls complaints / stats / categories / locations from a backend
   (CampusApiClient for the real server, LocalBackend for local-only mode)
2. every good snapshot is written to a local cache file
3. when a refresh fails, the last good snapshot stays (loaded from the cache
   on a cold start), the view is never blanked and nothing is raised
4. start() / stop() run refresh() on a fixed interval in a background thread
5. the per-browser user identifier used for support lives in the same cache

Point to keep in mind:
the mirror holds no invariants of its own, every write goes through the
backend and is followed by a refresh.
"""

import json
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from core.config import MIRROR_CACHE_PATH, POLL_INTERVAL_SECONDS
from core.errors import PortalError
from core.logging import logger


class MirrorCache:
    """
    JSON file standing in for browser local storage.

    {
        "user_identifier": "...",
        "snapshot": {...last good snapshot...}
    }
    """

    def __init__(self, path: Path = MIRROR_CACHE_PATH):
        self.path = Path(path)
        self._data: Dict[str, Any] = self._read()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
            return data if isinstance(data, dict) else {}
        except (OSError, ValueError) as e:
            logger.warning(f"[mirror] cache unreadable, starting empty: {e}")
            return {}

    def _write(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(self._data, f, ensure_ascii=False)
            tmp_path.replace(self.path)
        except OSError as e:
            # the in-memory copy is still good, only persistence is lost
            logger.warning(f"[mirror] cache write failed: {e}")

    @property
    def user_identifier(self) -> str:
        identifier = self._data.get("user_identifier")
        if not identifier:
            identifier = str(uuid.uuid4())
            self._data["user_identifier"] = identifier
            self._write()
        return identifier

    def load_snapshot(self) -> Optional[Dict[str, Any]]:
        return self._data.get("snapshot")

    def save_snapshot(self, snapshot: Dict[str, Any]) -> None:
        self._data["snapshot"] = snapshot
        self._write()


class ClientStateMirror:

    def __init__(
        self,
        backend,
        cache: Optional[MirrorCache] = None,
        interval: float = POLL_INTERVAL_SECONDS,
    ):
        self.backend = backend
        self.cache = cache or MirrorCache()
        self.interval = interval

        # start from whatever was cached last time
        self.snapshot: Optional[Dict[str, Any]] = self.cache.load_snapshot()
        self.is_stale = True
        self.last_error: Optional[str] = None

        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ---------------------------------------------------------
    # refresh
    # ---------------------------------------------------------

    def _fetch(self) -> Dict[str, Any]:
        return {
            "complaints": self.backend.list_complaints(),
            "stats": self.backend.stats(),
            "categories": self.backend.list_categories(),
            "locations": self.backend.list_locations(),
            "fetched_at": datetime.now(timezone.utc).isoformat(),
        }

    def refresh(self) -> bool:
        """
        Pull a new snapshot. True on success.

        On failure the previous snapshot stays in place (or the cached one,
        after a cold start) and is flagged stale.
        """
        try:
            snapshot = self._fetch()
        except (httpx.HTTPError, PortalError, ValueError) as e:
            # ValueError: a 200 whose body is not JSON (proxy or captive portal page)
            with self._lock:
                if self.snapshot is None:
                    self.snapshot = self.cache.load_snapshot()
                self.is_stale = True
                self.last_error = str(e)
            logger.warning(f"[mirror] refresh failed, keeping last snapshot: {e}")
            return False

        with self._lock:
            self.snapshot = snapshot
            self.is_stale = False
            self.last_error = None
        self.cache.save_snapshot(snapshot)
        return True

    # ---------------------------------------------------------
    # polling
    # ---------------------------------------------------------

    def _run(self) -> None:
        self.refresh()
        while not self._stop.wait(self.interval):
            self.refresh()

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="client-mirror", daemon=True)
        self._thread.start()
        logger.info(f"[mirror] polling every {self.interval:g}s")

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self.interval + 5)
            self._thread = None

    # ---------------------------------------------------------
    # read helpers
    # ---------------------------------------------------------

    @property
    def complaints(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list((self.snapshot or {}).get("complaints", []))

    @property
    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return dict((self.snapshot or {}).get("stats", {}))

    @property
    def categories(self) -> List[str]:
        with self._lock:
            return list((self.snapshot or {}).get("categories", []))

    @property
    def locations(self) -> List[str]:
        with self._lock:
            return list((self.snapshot or {}).get("locations", []))

    # ---------------------------------------------------------
    # writes (go to the backend, then refresh)
    # ---------------------------------------------------------

    def submit_complaint(self, data: Dict[str, Any]) -> str:
        complaint_id = self.backend.submit_complaint(data)
        self.refresh()
        return complaint_id

    def toggle_support(self, complaint_id: str) -> bool:
        result = self.backend.toggle_support(complaint_id, self.cache.user_identifier)
        self.refresh()
        return bool(result["is_supported"])

    def has_supported(self, complaint_id: str) -> bool:
        return self.backend.has_supported(complaint_id, self.cache.user_identifier)

    def add_comment(self, complaint_id: str, name: Optional[str], text: str) -> str:
        comment_id = self.backend.add_comment(complaint_id, name, text)
        self.refresh()
        return comment_id
