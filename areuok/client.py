"""HTTP client for the areuok API.

The client keeps the last-known device record per id. It is a read-through
cache only: every successful identity-mutating call drops the entry and stores
what the server returned, and uniqueness or cooldown are never decided here.
"""

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


class ApiError(Exception):
    def __init__(self, status_code: int, code: str, payload: Optional[dict] = None) -> None:
        super().__init__(f"{status_code} {code}")
        self.status_code = status_code
        self.code = code
        self.payload = payload or {}


class AreuokClient:
    def __init__(self, base_url: str = "http://localhost:8080", http: Optional[httpx.Client] = None, timeout: float = 10) -> None:
        self._owns_http = http is None
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self._devices: dict[str, dict] = {}

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> "AreuokClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = self.http.request(method, f"{API_PREFIX}{path}", **kwargs)
        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = {}
            code = payload.get("error", "http_error") if isinstance(payload, dict) else "http_error"
            logger.debug("%s %s failed with %s (%s)", method, path, response.status_code, code)
            raise ApiError(response.status_code, code, payload if isinstance(payload, dict) else {})
        return response.json()

    def _remember(self, device: dict) -> dict:
        self._devices[device["device_id"]] = device
        return device

    def invalidate(self, device_id: str) -> None:
        self._devices.pop(device_id, None)

    def cached_device(self, device_id: str) -> Optional[dict]:
        return self._devices.get(device_id)

    # devices

    def register(self, device_name: str, hardware_id: Optional[str] = None, mode: str = "signin") -> dict:
        body = {"device_name": device_name, "hardware_id": hardware_id, "mode": mode}
        return self._remember(self._request("POST", "/devices/register", json=body))

    def get_info(self, device_id: str, refresh: bool = False) -> dict:
        if not refresh and device_id in self._devices:
            return self._devices[device_id]
        return self._remember(self._request("GET", f"/devices/{device_id}"))

    def update_name(self, device_id: str, device_name: str) -> dict:
        device = self._request("PATCH", f"/devices/{device_id}/name", json={"device_name": device_name})
        self.invalidate(device_id)
        return self._remember(device)

    def update_mode(self, device_id: str, mode: str) -> dict:
        device = self._request("PATCH", f"/devices/{device_id}/mode", json={"mode": mode})
        self.invalidate(device_id)
        return self._remember(device)

    def search(self, query: str) -> list[dict]:
        return self._request("GET", "/search/devices", params={"q": query})

    def sign_in(self, device_id: str) -> dict:
        state = self._request("POST", f"/devices/{device_id}/signin")
        # last_seen_at moved on the server
        self.invalidate(device_id)
        return state

    def get_streak(self, device_id: str) -> dict:
        return self._request("GET", f"/devices/{device_id}/streak")

    def signin_history(self, device_id: str) -> list[str]:
        return self._request("GET", f"/devices/{device_id}/signins")["dates"]

    def get_status(self, device_id: str) -> dict:
        return self._request("GET", f"/devices/{device_id}/status")

    # supervision

    def request_supervision(self, supervisor_id: str, target_id: str) -> dict:
        return self._request("POST", "/supervision/request", json={"supervisor_id": supervisor_id, "target_id": target_id})

    def list_pending(self, target_id: str) -> list[dict]:
        return self._request("GET", f"/supervision/pending/{target_id}")

    def list_outgoing(self, supervisor_id: str) -> list[dict]:
        return self._request("GET", f"/supervision/outgoing/{supervisor_id}")

    def accept(self, supervisor_id: str, target_id: str) -> dict:
        return self._request("POST", "/supervision/accept", json={"supervisor_id": supervisor_id, "target_id": target_id})

    def reject(self, supervisor_id: str, target_id: str) -> None:
        self._request("POST", "/supervision/reject", json={"supervisor_id": supervisor_id, "target_id": target_id})

    def cancel(self, supervisor_id: str, target_id: str) -> None:
        self._request("POST", "/supervision/cancel", json={"supervisor_id": supervisor_id, "target_id": target_id})

    def list_relations(self, device_id: str) -> list[dict]:
        return self._request("GET", f"/supervision/list/{device_id}")

    def list_supervisors(self, device_id: str) -> list[dict]:
        return self._request("GET", f"/supervision/supervisors/{device_id}")

    def overview(self, supervisor_id: str) -> dict:
        return self._request("GET", f"/supervision/overview/{supervisor_id}")

    def remove(self, relation_id: str) -> None:
        try:
            self._request("DELETE", f"/supervision/{relation_id}")
        except ApiError as exc:
            # already gone counts as removed
            if exc.status_code != 404:
                raise
