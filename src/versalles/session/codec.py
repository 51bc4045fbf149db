"""Encrypted cookie session codec.

The cookie *is* the session: there is no server-side store. A payload is
serialized and signed with a timestamp (itsdangerous), and the signed token
is then encrypted with Fernet so the browser cannot read it. Decoding
reverses both layers and degrades to ``None`` on any failure.
"""

import base64
import hashlib
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from cryptography.fernet import Fernet, InvalidToken
from itsdangerous import BadData, URLSafeTimedSerializer
from starlette.responses import Response

from versalles.common.config import MIN_SECRET_LENGTH
from versalles.common.exceptions import ConfigurationError

SIGNING_SALT = "versalles-session"
_ENCRYPTION_SALT = b"versalles-session-encryption"
_KDF_ITERATIONS = 100_000


@dataclass(frozen=True)
class SessionData:
    """Minimal identity state carried by the cookie."""

    user_id: Optional[str] = None
    is_logged_in: bool = False

    @classmethod
    def for_user(cls, user_id: str) -> "SessionData":
        return cls(user_id=user_id, is_logged_in=True)

    @property
    def is_valid(self) -> bool:
        return self.is_logged_in and bool(self.user_id)

    def to_payload(self) -> dict[str, Any]:
        return {"userId": self.user_id, "isLoggedIn": self.is_logged_in}

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["SessionData"]:
        if not isinstance(payload, dict):
            return None
        user_id = payload.get("userId")
        is_logged_in = payload.get("isLoggedIn")
        if is_logged_in is not True or not isinstance(user_id, str) or not user_id:
            return None
        return cls(user_id=user_id, is_logged_in=True)


@dataclass(frozen=True)
class CookiePolicy:
    """Stable cookie contract; client code never touches this cookie."""

    name: str = "versalles-session"
    secure: bool = True
    httponly: bool = True
    samesite: str = "lax"
    path: str = "/"
    max_age: Optional[int] = None


def _derive_fernet_key(secret: str) -> bytes:
    derived = hashlib.pbkdf2_hmac(
        "sha256",
        secret.encode("utf-8"),
        _ENCRYPTION_SALT,
        _KDF_ITERATIONS,
        dklen=32,
    )
    return base64.urlsafe_b64encode(derived)


class SessionCodec:
    """Bidirectional transform between SessionData and a cookie value."""

    def __init__(
        self,
        secret: str,
        *,
        ttl: Optional[int] = None,
        policy: CookiePolicy | None = None,
    ):
        if not isinstance(secret, str) or len(secret.encode("utf-8")) < MIN_SECRET_LENGTH:
            raise ConfigurationError(
                f"Session secret must be at least {MIN_SECRET_LENGTH} bytes"
            )
        self.ttl = ttl
        self.policy = policy or CookiePolicy()
        self._serializer = URLSafeTimedSerializer(secret, salt=SIGNING_SALT)
        self._fernet = Fernet(_derive_fernet_key(secret))

    @classmethod
    def from_settings(cls, settings) -> "SessionCodec":
        policy = CookiePolicy(
            name=settings.session_cookie_name,
            secure=settings.secure_cookies,
            max_age=settings.session_cookie_max_age,
        )
        return cls(settings.session_secret, ttl=settings.session_ttl, policy=policy)

    def encode(self, data: SessionData) -> str:
        if not data.is_valid:
            raise ValueError("Only logged-in sessions with a user id can be encoded")
        signed = self._serializer.dumps(data.to_payload())
        return self._fernet.encrypt(signed.encode("utf-8")).decode("ascii")

    def decode_issued(
        self, cookie: str | bytes | None
    ) -> Optional[tuple[SessionData, datetime]]:
        """Decode a cookie and return it with its issue time, or None."""
        if not cookie or not isinstance(cookie, (str, bytes)):
            return None
        try:
            signed = self._fernet.decrypt(cookie)
            payload, issued_at = self._serializer.loads(
                signed.decode("utf-8"), max_age=self.ttl, return_timestamp=True
            )
        except (InvalidToken, BadData, ValueError, TypeError):
            return None
        data = SessionData.from_payload(payload)
        if data is None:
            return None
        if issued_at.tzinfo is None:
            issued_at = issued_at.replace(tzinfo=timezone.utc)
        return data, issued_at

    def decode(self, cookie: str | bytes | None) -> Optional[SessionData]:
        """Decode a cookie. Forged, corrupted, expired or missing -> None."""
        decoded = self.decode_issued(cookie)
        return decoded[0] if decoded else None

    # ── Response helpers ──

    def set_cookie(self, response: Response, data: SessionData) -> None:
        response.set_cookie(
            self.policy.name,
            self.encode(data),
            max_age=self.policy.max_age,
            path=self.policy.path,
            secure=self.policy.secure,
            httponly=self.policy.httponly,
            samesite=self.policy.samesite,
        )

    def clear_cookie(self, response: Response) -> None:
        response.delete_cookie(
            self.policy.name,
            path=self.policy.path,
            secure=self.policy.secure,
            httponly=self.policy.httponly,
            samesite=self.policy.samesite,
        )
