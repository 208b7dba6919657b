"""Persistent access-token store scoped per profile.

Stores tokens in ``~/.local/share/vksdk/credentials/<profile>.json`` (XDG)
or the platform-equivalent directory. Files are written atomically with
``0o600`` permissions so that tokens are never world-readable, even
momentarily.

The CLI saves the result of ``vksdk auth exchange`` here; profiles then
refer to it with the ``store:<profile>`` credential source.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field

from vksdk.config import _atomic_write, get_credentials_dir


class TokenEntry(BaseModel):
    """A stored access token plus what the token endpoint said about it.

    Attributes:
        access_token: The token value.
        user_id: The VK user the token was issued for, when reported.
        expires_at: UTC expiry time. ``None`` means the token does not
            expire (VK reports ``expires_in: 0`` for offline tokens).
        metadata: Remaining fields of the token response (e.g. ``email``).
    """

    access_token: str
    user_id: Optional[int] = None
    expires_at: Optional[datetime] = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_token_response(
        cls,
        payload: Mapping[str, Any],
        now: Optional[datetime] = None,
    ) -> TokenEntry:
        """Build an entry from a successful token-endpoint response."""
        now = now or datetime.now(timezone.utc)
        expires_in = payload.get("expires_in")
        expires_at = None
        if expires_in:
            expires_at = now + timedelta(seconds=int(expires_in))
        metadata = {
            key: value
            for key, value in payload.items()
            if key not in ("access_token", "user_id", "expires_in")
        }
        return cls(
            access_token=payload["access_token"],
            user_id=payload.get("user_id"),
            expires_at=expires_at,
            metadata=metadata,
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        expires = self.expires_at
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        return now >= expires


class TokenStore:
    """Read/write the token for a single profile.

    Args:
        profile_name: The profile identifier used to derive the file name.

    Example::

        store = TokenStore("myapp")
        store.save(TokenEntry(access_token="abc", user_id=7))
        assert store.load().access_token == "abc"
    """

    def __init__(self, profile_name: str) -> None:
        self._profile_name = profile_name
        self._path = get_credentials_dir() / f"{profile_name}.json"

    @property
    def path(self) -> Path:
        return self._path

    def save(self, entry: TokenEntry) -> None:
        """Persist *entry* atomically with ``0o600`` permissions."""
        text = json.dumps(entry.model_dump(mode="json"), indent=2) + "\n"
        _atomic_write(self._path, text, mode=0o600)

    def load(self) -> Optional[TokenEntry]:
        """Return the stored entry, or ``None`` if absent or unreadable."""
        if not self._path.is_file():
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            return TokenEntry.model_validate(data)
        except (json.JSONDecodeError, ValueError, OSError):
            return None

    def load_valid(self) -> Optional[TokenEntry]:
        """Return the stored entry unless it is missing or expired."""
        entry = self.load()
        if entry is None or entry.is_expired():
            return None
        return entry

    def is_valid(self) -> bool:
        return self.load_valid() is not None

    def clear(self) -> None:
        """Delete the stored token file. No-op when it is already gone."""
        if self._path.is_file():
            self._path.unlink()
