"""Persisted bearer credential.

The token lives in the YAML user config next to the API settings so it
survives process restarts until logout or a failed verification.
"""

import hashlib
from pathlib import Path
from typing import Optional

from config import get_user_token, set_user_token


def token_fingerprint(token: str) -> str:
    """Short hash used when a token must be referenced in logs."""
    if not token:
        return ""
    return hashlib.sha256(token.encode()).hexdigest()[:12]


class YamlCredentialStore:
    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path

    def load(self) -> Optional[str]:
        return get_user_token(self.path) or None

    def save(self, token: str) -> None:
        set_user_token(token, self.path)

    def clear(self) -> None:
        set_user_token("", self.path)


class MemoryCredentialStore:
    """Process-local store for sessions that must not touch the config file."""

    def __init__(self, token: Optional[str] = None) -> None:
        self._token = token or None

    def load(self) -> Optional[str]:
        return self._token

    def save(self, token: str) -> None:
        self._token = (token or "").strip() or None

    def clear(self) -> None:
        self._token = None


__all__ = ["YamlCredentialStore", "MemoryCredentialStore", "token_fingerprint"]
