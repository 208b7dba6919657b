"""Persistent storage for tokens obtained through the authorization flow."""

from vksdk.auth.credential_store import TokenEntry, TokenStore

__all__ = ["TokenEntry", "TokenStore"]
