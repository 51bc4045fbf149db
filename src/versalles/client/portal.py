"""Async HTTP client for the portal's own API.

Used by the client auth flow. Calls never raise on HTTP or transport
failures; they return a PortalResult the flow turns into a message.
The session cookie lands in the client's cookie jar and is never read
by this code.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


@dataclass
class PortalResult:
    """Outcome of a portal call."""

    ok: bool
    message: Optional[str] = None
    data: Any = None
    status_code: Optional[int] = None
    network_error: bool = False
    violations: list[dict[str, str]] = field(default_factory=list)


class PortalClient:
    """Thin wrapper over httpx.AsyncClient bound to the portal base URL."""

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings, transport=None) -> "PortalClient":
        return cls(settings.portal_url, timeout=settings.portal_timeout, transport=transport)

    @property
    def http(self) -> httpx.AsyncClient:
        return self._http

    @property
    def cookies(self) -> httpx.Cookies:
        return self._http.cookies

    async def close(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "PortalClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _post(self, path: str, payload: dict[str, Any]) -> PortalResult:
        try:
            resp = await self._http.post(path, json=payload)
        except httpx.HTTPError as exc:
            logger.warning(
                "Portal request failed",
                extra={"path": path, "error_type": type(exc).__name__},
            )
            return PortalResult(ok=False, network_error=True)

        try:
            body = resp.json()
        except (json.JSONDecodeError, ValueError):
            body = {}
        if not isinstance(body, dict):
            body = {}

        ok = resp.is_success and body.get("status") == "success"
        return PortalResult(
            ok=ok,
            message=body.get("message") or None,
            data=body.get("data"),
            status_code=resp.status_code,
            violations=body.get("violations") or [],
        )

    async def create_user(self, uid: str, username: str, email: str) -> PortalResult:
        return await self._post("/api/users", {"uid": uid, "username": username, "email": email})

    async def create_session(self, id_token: str) -> PortalResult:
        return await self._post("/api/auth/session", {"idToken": id_token})
