from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ..config.settings import BackendSettings
from ..domain import EventStatus

logger = logging.getLogger(__name__)


class BackendNotConfiguredError(RuntimeError):
    """Raised when the REST backend URL is not configured."""


class BackendRequestError(RuntimeError):
    """Raised when a backend call fails in transport or returns a non-success status."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StatusReadBackError(BackendRequestError):
    """Raised when a status change was applied but the event could not be read back."""

    def __init__(self, message: str, *, event_id: int, status: EventStatus, status_code: Optional[int] = None) -> None:
        super().__init__(message, status_code=status_code)
        self.event_id = event_id
        self.status = status


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return f"Backend responded with HTTP {response.status_code}"


@dataclass
class BackendGateway:
    """Thin wrapper around an ``httpx.AsyncClient`` bound to the portal backend."""

    settings: BackendSettings
    transport: Optional[httpx.AsyncBaseTransport] = None
    _client: Optional[httpx.AsyncClient] = None
    _token: Optional[str] = None

    def __post_init__(self) -> None:
        if self._token is None:
            self._token = self.settings.token

    def ensure_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client
        if not self.settings.is_configured:
            raise BackendNotConfiguredError("Backend settings are missing CURATOR_API_URL.")
        self._client = httpx.AsyncClient(
            base_url=self.settings.base_url,
            timeout=self.settings.timeout_seconds,
            headers={"Content-Type": "application/json"},
            transport=self.transport,
        )
        return self._client

    def set_token(self, token: Optional[str]) -> None:
        self._token = token

    def clear_token(self) -> None:
        self._token = None

    def _headers(self) -> dict[str, str]:
        if not self._token:
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        client = self.ensure_client()
        try:
            response = await client.request(method, path, params=params, json=json, headers=self._headers())
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise BackendRequestError(f"Backend is unreachable: {exc}") from exc
        if response.status_code == 401:
            logger.warning("%s %s rejected as unauthorized", method, path)
        if response.is_error:
            message = _error_message(response)
            logger.warning("%s %s returned %s: %s", method, path, response.status_code, message)
            raise BackendRequestError(message, status_code=response.status_code)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("%s %s returned a non-JSON body: %s", method, path, exc)
            raise BackendRequestError(
                "Backend returned a response that is not JSON", status_code=response.status_code
            ) from exc

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
