"""
Thin HTTP client for the Kempoverse API.

Unwraps the {"data": ...} envelope and turns {"error": ...} responses into
ApiError. Accepts any httpx.Client, so tests can hand it FastAPI's TestClient.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Optional

import httpx


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class KempoverseClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        token: Optional[str] = None,
        http: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ):
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.token = token

    def __enter__(self) -> "KempoverseClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self.http.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        resp = self.http.request(method, path, headers=headers, **kwargs)
        try:
            body = resp.json()
        except ValueError:
            body = {}
        if resp.is_error or (isinstance(body, dict) and body.get("error")):
            message = body.get("error") if isinstance(body, dict) else None
            raise ApiError(resp.status_code, message or resp.reason_phrase)
        return body.get("data")

    # auth
    def login(self, password: str) -> str:
        data = self._request("POST", "/api/auth/login", json={"password": password})
        self.token = data["token"]
        return self.token

    # entries
    def list_entries(
        self,
        *,
        q: Optional[str] = None,
        category: Optional[str] = None,
        tag: Optional[str] = None,
        belt: Optional[str] = None,
    ) -> list[dict]:
        params = {k: v for k, v in {"q": q, "category": category, "tag": tag, "belt": belt}.items() if v}
        return self._request("GET", "/api/entries", params=params)["entries"]

    def get_entry(self, entry_id: str) -> dict:
        return self._request("GET", f"/api/entries/{entry_id}")

    # training sessions
    def create_session(self, duration_minutes: int, categories: Iterable[str]) -> dict:
        body = {"duration_minutes": duration_minutes, "categories": list(categories)}
        return self._request("POST", "/api/training/sessions", json=body)

    def get_session(self, session_id: str) -> dict:
        return self._request("GET", f"/api/training/sessions/{session_id}")

    def list_sessions(self, *, limit: int = 20, offset: int = 0) -> dict:
        return self._request("GET", "/api/training/sessions", params={"limit": limit, "offset": offset})

    def update_session_status(
        self, session_id: str, status: str, completed_at: Optional[datetime] = None
    ) -> dict:
        body: dict[str, Any] = {"status": status}
        if completed_at is not None:
            body["completed_at"] = completed_at.isoformat()
        return self._request("PUT", f"/api/training/sessions/{session_id}", json=body)
