"""Async client for the external identity provider.

Speaks the Firebase Identity Toolkit REST v1 shape. Base URLs are
configurable, so the same client works against the Auth emulator.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from versalles.identity.errors import IdentityProviderError, IdentityProviderUnavailable

logger = logging.getLogger(__name__)

# Refresh tokens that are this close to expiry before handing them out.
TOKEN_EXPIRY_MARGIN = 60


@dataclass
class IdentityCredential:
    """Result of a successful sign-in or sign-up."""

    provider_user_id: str
    email: str
    id_token: str
    refresh_token: str = ""
    expires_at: float = 0.0

    def is_fresh(self, margin: float = TOKEN_EXPIRY_MARGIN) -> bool:
        return time.time() + margin < self.expires_at


@dataclass(frozen=True)
class ProviderIdentity:
    """A verified identity token's subject."""

    provider_user_id: str
    email: str = ""


def _parse_error(resp: httpx.Response) -> IdentityProviderError:
    try:
        message = resp.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return IdentityProviderError(f"HTTP_{resp.status_code}")
    code, _, detail = str(message).partition(":")
    return IdentityProviderError(code.strip(), detail.strip())


class IdentityProviderClient:
    """sign_in / sign_up / verify / refresh / delete against the provider."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://identitytoolkit.googleapis.com",
        securetoken_url: str = "https://securetoken.googleapis.com",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.securetoken_url = securetoken_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings, transport=None) -> "IdentityProviderClient":
        return cls(
            api_key=settings.identity_api_key,
            base_url=settings.identity_base_url,
            securetoken_url=settings.securetoken_base_url,
            timeout=settings.identity_timeout,
            transport=transport,
        )

    def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy-init httpx.AsyncClient."""
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._http

    async def close(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def _post(self, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            resp = await self._get_http_client().post(
                url, params={"key": self.api_key}, **kwargs
            )
        except httpx.HTTPError as exc:
            logger.warning(
                "Identity provider request failed",
                extra={"url": url.split("?", 1)[0], "error_type": type(exc).__name__},
            )
            raise IdentityProviderUnavailable(str(exc)) from exc

        if resp.status_code >= 500:
            raise IdentityProviderUnavailable(f"Provider answered HTTP {resp.status_code}")
        if resp.status_code >= 400:
            raise _parse_error(resp)
        try:
            return resp.json()
        except ValueError as exc:
            raise IdentityProviderUnavailable("Provider returned invalid JSON") from exc

    def _accounts_url(self, action: str) -> str:
        return f"{self.base_url}/v1/accounts:{action}"

    @staticmethod
    def _credential(data: dict[str, Any]) -> IdentityCredential:
        try:
            return IdentityCredential(
                provider_user_id=data["localId"],
                email=data.get("email", ""),
                id_token=data["idToken"],
                refresh_token=data.get("refreshToken", ""),
                expires_at=time.time() + int(data.get("expiresIn", 3600)),
            )
        except (KeyError, ValueError) as exc:
            raise IdentityProviderUnavailable("Provider response is missing fields") from exc

    async def sign_in(self, email: str, password: str) -> IdentityCredential:
        data = await self._post(
            self._accounts_url("signInWithPassword"),
            json={"email": email, "password": password, "returnSecureToken": True},
        )
        return self._credential(data)

    async def sign_up(self, email: str, password: str) -> IdentityCredential:
        data = await self._post(
            self._accounts_url("signUp"),
            json={"email": email, "password": password, "returnSecureToken": True},
        )
        return self._credential(data)

    async def verify_id_token(self, id_token: str) -> ProviderIdentity:
        """Resolve an identity token to its subject; rejects invalid/expired tokens."""
        data = await self._post(self._accounts_url("lookup"), json={"idToken": id_token})
        users = data.get("users") or []
        if not users or not users[0].get("localId"):
            raise IdentityProviderError("USER_NOT_FOUND")
        return ProviderIdentity(
            provider_user_id=users[0]["localId"],
            email=users[0].get("email", ""),
        )

    async def refresh(self, credential: IdentityCredential) -> IdentityCredential:
        data = await self._post(
            f"{self.securetoken_url}/v1/token",
            data={"grant_type": "refresh_token", "refresh_token": credential.refresh_token},
        )
        try:
            credential.id_token = data["id_token"]
            credential.refresh_token = data.get("refresh_token", credential.refresh_token)
            credential.expires_at = time.time() + int(data.get("expires_in", 3600))
        except (KeyError, ValueError) as exc:
            raise IdentityProviderUnavailable("Provider response is missing fields") from exc
        return credential

    async def fresh_id_token(self, credential: IdentityCredential) -> str:
        """Return a token valid for at least TOKEN_EXPIRY_MARGIN seconds."""
        if not credential.is_fresh() and credential.refresh_token:
            await self.refresh(credential)
        return credential.id_token

    async def delete_account(self, id_token: str) -> None:
        await self._post(self._accounts_url("delete"), json={"idToken": id_token})
