"""Session store: bearer credential, current user and auth transitions."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from application.operation_state import OperationState
from application.ports import CredentialStore, Gateway
from core.errors import AuthError, RemoteError
from core.user import User
from infrastructure.credential_store import token_fingerprint

logger = logging.getLogger("taskdeck.session")

AuthListener = Callable[[bool], None]


class SessionStore:
    """Owns the credential and the authenticated/unauthenticated state.

    The token is written only here; the gateway and the entity cache read it
    through :attr:`token`. Listeners registered with :meth:`subscribe` are
    called with the new value whenever ``authenticated`` actually changes.
    """

    def __init__(self, gateway: Gateway, credentials: CredentialStore) -> None:
        self.gateway = gateway
        self._credentials = credentials
        self._token: Optional[str] = None
        self._authenticated = False
        self._listeners: List[AuthListener] = []
        self.user: Optional[User] = None
        self.state = OperationState()

    # ---- read-only views -------------------------------------------------

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def authenticated(self) -> bool:
        return self._authenticated

    @property
    def loading(self) -> bool:
        return self.state.loading

    @property
    def error(self) -> Optional[str]:
        return self.state.error

    # ---- subscription ----------------------------------------------------

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_authenticated(self, value: bool) -> None:
        if self._authenticated == value:
            return
        self._authenticated = value
        for listener in list(self._listeners):
            listener(value)

    # ---- credential exchange ---------------------------------------------

    def _exchange(self, path: str, body: Dict[str, Any], default_error: str) -> User:
        with self.state.track(default_error, prefer_detail=True):
            payload = self.gateway.request("POST", path, body)
            if not isinstance(payload, dict):
                raise AuthError("Malformed authentication response")
            token = str(payload.get("token", "") or "").strip()
            if not token:
                raise AuthError("Authentication response did not include a token")
            user = User.from_dict(payload.get("user") or {})
        if self._authenticated and token != self._token:
            # Account switch: listeners drop state bound to the old token first.
            self._set_authenticated(False)
        self._credentials.save(token)
        self._token = token
        self.user = user
        logger.info("Signed in as %s (token %s)", user.email or user.id, token_fingerprint(token))
        self._set_authenticated(True)
        return user

    def login(self, credentials: Dict[str, Any]) -> User:
        return self._exchange("/auth/login", dict(credentials), "Login failed")

    def register(self, profile: Dict[str, Any]) -> User:
        return self._exchange("/auth/register", dict(profile), "Registration failed")

    def login_with_external_identity(self, identity_token: str) -> User:
        return self._exchange("/auth/google", {"idToken": identity_token}, "Google login failed")

    def logout(self) -> None:
        """Discard the local credential. No network call; always succeeds."""
        self._credentials.clear()
        self._token = None
        self.user = None
        self.state.error = None
        self._set_authenticated(False)

    def verify(self) -> Optional[User]:
        """Re-establish a persisted session on start-up.

        An expired or rejected token is an expected outcome, not an error: the
        token is discarded and the store stays unauthenticated without raising
        or recording an error.
        """
        token = self._credentials.load()
        if not token:
            return None
        self._token = token
        with self.state.busy():
            try:
                payload = self.gateway.request("GET", "/auth/me")
                user = User.from_dict(payload or {})
            except (RemoteError, ValueError) as exc:
                logger.info("Stored session discarded: %s", exc)
                self._credentials.clear()
                self._token = None
                self.user = None
                self._set_authenticated(False)
                return None
        self.user = user
        self._set_authenticated(True)
        return user

    # ---- profile ---------------------------------------------------------

    def update_profile(self, fields: Dict[str, Any]) -> User:
        with self.state.track("Profile update failed", prefer_detail=True):
            payload = self.gateway.request("PUT", "/auth/profile", dict(fields))
            user = User.from_dict(payload or {})
        self.user = user
        return user

    def change_password(self, current_password: str, new_password: str) -> Any:
        body = {"currentPassword": current_password, "newPassword": new_password}
        with self.state.track("Password change failed", prefer_detail=True):
            return self.gateway.request("PUT", "/auth/password", body)
