"""Application wiring: one session store and one entity cache per client.

``TaskdeckClient.start()`` re-establishes a persisted session (which in turn
populates the cache); ``close()`` tears the cache down so late settlements
become no-ops.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import requests

from application.entity_cache import EntityCache
from application.ports import CredentialStore
from application.session_store import SessionStore
from config import get_api_url, get_request_timeout
from core.user import User
from infrastructure.credential_store import YamlCredentialStore
from infrastructure.remote_gateway import RemoteGateway


class TaskdeckClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        credentials: Optional[CredentialStore] = None,
        http: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        config_path: Optional[Path] = None,
    ) -> None:
        self.gateway = RemoteGateway(
            base_url or get_api_url(config_path),
            http,
            self._current_token,
            timeout=timeout if timeout is not None else get_request_timeout(config_path),
        )
        self.session = SessionStore(self.gateway, credentials or YamlCredentialStore(config_path))
        self.cache = EntityCache(self.gateway, self._current_token)
        self.cache.attach(self.session)

    def _current_token(self) -> Optional[str]:
        return self.session.token

    def start(self) -> Optional[User]:
        return self.session.verify()

    def close(self) -> None:
        self.cache.dispose()

    def __enter__(self) -> "TaskdeckClient":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = ["TaskdeckClient"]
