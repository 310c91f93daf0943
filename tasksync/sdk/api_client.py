"""REST client for the TaskSync API."""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode, urlsplit, urlunsplit

import requests

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A non-2xx response, carrying the server's message for inline display."""

    def __init__(self, status_code: int, message: str, kind: Optional[str] = None):
        super().__init__(f"API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.kind = kind


class TaskSyncApiClient:
    """Thin wrapper over the REST surface; remembers the session token."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Any:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        response = self.session.request(
            method,
            f"{self.base_url}{path}",
            json=body,
            headers=headers,
            timeout=self.timeout,
        )

        if not response.ok:
            try:
                data = response.json()
            except ValueError:
                data = {}
            message = data.get("detail") or response.reason or "Request failed"
            logger.debug(f"{method} {path} failed with {response.status_code}: {message}")
            raise ApiError(response.status_code, str(message), data.get("error"))

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------
    def register(self, email: str, password: str, name: Optional[str] = None) -> Dict[str, Any]:
        data = self._request("POST", "/api/auth/register", {"email": email, "password": password, "name": name})
        self.token = data["token"]
        return data["user"]

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/api/auth/login", {"email": email, "password": password})
        self.token = data["token"]
        return data["user"]

    def logout(self):
        self.token = None

    def me(self) -> Dict[str, Any]:
        return self._request("GET", "/api/auth/me")["user"]

    def update_profile(self, name: str) -> Dict[str, Any]:
        return self._request("PUT", "/api/auth/me", {"name": name})["user"]

    def list_users(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/users")["users"]

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------
    def list_tasks(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/tasks")["tasks"]

    def get_task(self, task_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/tasks/{task_id}")["task"]

    def create_task(self, title: str, **fields) -> Dict[str, Any]:
        """Create a task; extra keyword fields use wire names (dueDate, assignedToId)."""
        return self._request("POST", "/api/tasks", {"title": title, **fields})["task"]

    def update_task(self, task_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Send only the keys in ``changes``; a None value clears optional fields."""
        return self._request("PUT", f"/api/tasks/{task_id}", changes)["task"]

    def delete_task(self, task_id: str):
        self._request("DELETE", f"/api/tasks/{task_id}")

    # ------------------------------------------------------------------
    # Realtime
    # ------------------------------------------------------------------
    def websocket_url(self) -> str:
        """URL for the realtime channel with the token as a query parameter."""
        scheme, netloc, path, _, _ = urlsplit(self.base_url)
        ws_scheme = "wss" if scheme == "https" else "ws"
        query = urlencode({"token": self.token}) if self.token else ""
        return urlunsplit((ws_scheme, netloc, f"{path}/ws", query, ""))
