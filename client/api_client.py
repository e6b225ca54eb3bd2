# client/api_client.py
# -*- coding: utf-8 -*-
"""
Thin httpx client for the portal API, one method per route.

Error responses are turned back into the same exceptions the services raise
(ValidationError / NotFound / ConflictError / AuthenticationError /
StorageError), so callers handle the remote backend and the local backend the
same way. Transport failures surface as httpx.HTTPError.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from core.config import API_BASE_URL
from core.errors import (
    AuthenticationError,
    ConflictError,
    NotFound,
    PortalError,
    StorageError,
    ValidationError,
)

_STATUS_ERRORS = {
    400: ValidationError,
    401: AuthenticationError,
    403: AuthenticationError,
    404: NotFound,
    409: ConflictError,
    422: ValidationError,
}


def _segment(value: str) -> str:
    # encode as a single path segment, reserved characters included
    return quote(str(value), safe="")


def _raise_for_status(res: httpx.Response) -> None:
    if res.is_success:
        return

    try:
        message = res.json().get("error") or res.text
    except ValueError:
        message = res.text

    error_cls = _STATUS_ERRORS.get(res.status_code)
    if error_cls is None:
        error_cls = StorageError if res.status_code >= 500 else PortalError
    raise error_cls(str(message))


class CampusApiClient:

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        timeout: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.http = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )
        self.token: Optional[str] = None

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "CampusApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ---------------------------------------------------------
    # plumbing
    # ---------------------------------------------------------

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        res = self.http.request(method, path, headers=self._headers(), **kwargs)
        _raise_for_status(res)
        return res

    # ---------------------------------------------------------
    # admin
    # ---------------------------------------------------------

    def login(self, username: str, password: str) -> bool:
        try:
            res = self._request(
                "POST",
                "/admin/login",
                json={"username": username, "password": password},
            )
        except AuthenticationError:
            return False
        self.token = res.json()["access_token"]
        return True

    def logout(self) -> None:
        self.token = None

    # ---------------------------------------------------------
    # complaints
    # ---------------------------------------------------------

    def list_complaints(self, **filters: Optional[str]) -> List[Dict[str, Any]]:
        params = {k: v for k, v in filters.items() if v}
        return self._request("GET", "/complaints", params=params).json()

    def get_complaint(self, complaint_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/complaints/{_segment(complaint_id)}").json()

    def submit_complaint(self, data: Dict[str, Any]) -> str:
        return self._request("POST", "/complaints", json=data).json()["id"]

    def update_status(self, complaint_id: str, status: str) -> None:
        self._request("PUT", f"/complaints/{_segment(complaint_id)}/status", json={"status": status})

    def delete_complaint(self, complaint_id: str) -> None:
        self._request("DELETE", f"/complaints/{_segment(complaint_id)}")

    def toggle_support(self, complaint_id: str, user_identifier: str) -> Dict[str, Any]:
        return self._request(
            "POST",
            f"/complaints/{_segment(complaint_id)}/support",
            json={"user_identifier": user_identifier},
        ).json()

    def has_supported(self, complaint_id: str, user_identifier: str) -> bool:
        res = self._request(
            "GET",
            f"/complaints/{_segment(complaint_id)}/support/{_segment(user_identifier)}",
        )
        return bool(res.json()["is_supported"])

    def add_comment(self, complaint_id: str, name: Optional[str], text: str) -> str:
        res = self._request(
            "POST",
            f"/complaints/{_segment(complaint_id)}/comments",
            json={"name": name, "text": text},
        )
        return res.json()["id"]

    # ---------------------------------------------------------
    # categories / locations
    # ---------------------------------------------------------

    def list_categories(self) -> List[str]:
        return self._request("GET", "/categories").json()

    def add_category(self, name: str) -> bool:
        return self._add_name("/categories", name)

    def delete_category(self, name: str) -> bool:
        return self._delete_name("/categories", name)

    def list_locations(self) -> List[str]:
        return self._request("GET", "/locations").json()

    def add_location(self, name: str) -> bool:
        return self._add_name("/locations", name)

    def delete_location(self, name: str) -> bool:
        return self._delete_name("/locations", name)

    def _add_name(self, path: str, name: str) -> bool:
        try:
            self._request("POST", path, json={"name": name})
        except ConflictError:
            return False
        return True

    def _delete_name(self, path: str, name: str) -> bool:
        try:
            self._request("DELETE", f"{path}/{_segment(name)}")
        except NotFound:
            return False
        return True

    # ---------------------------------------------------------
    # stats / health
    # ---------------------------------------------------------

    def stats(self) -> Dict[str, Any]:
        return self._request("GET", "/stats").json()

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health").json()
