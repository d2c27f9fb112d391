from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Callable, Optional

import requests

from journal.constants import AUTH_SESSION_KEY, NOT_CONFIGURED_MESSAGE
from journal.data.api_client import ApiError, RestClient
from journal.data.storage import KeyValueStorage
from journal.models import AuthResponse, Session

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

AuthCallback = Callable[[str, Optional[Session]], None]


class Subscription:
    def __init__(self, unsubscribe: Callable[[], None] | None = None):
        self._unsubscribe = unsubscribe

    def unsubscribe(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None


class AuthGateway:
    """Email/password auth against the journal backend.

    The current session is kept in the same key-value storage the local store
    uses, so a restarted process picks it up again. Subscribers are called
    synchronously, in subscription order, as soon as the session changes.
    """

    is_configured = True

    def __init__(self, client: RestClient, storage: KeyValueStorage):
        self.client = client
        self.storage = storage
        self._listeners: list[AuthCallback] = []

    async def _call(self, method, path, json_body=None, access_token=None) -> AuthResponse:
        try:
            payload = await asyncio.to_thread(
                self.client.request, method, path, json=json_body, access_token=access_token
            )
        except ApiError as exc:
            logger.warning("Auth request %s %s rejected: %s", method, path, exc.detail)
            return AuthResponse(error=exc.detail)
        except requests.RequestException as exc:
            logger.warning("Auth request %s %s failed: %s", method, path, exc)
            return AuthResponse(error=str(exc))
        return AuthResponse.model_validate(payload or {})

    def _stored_session(self) -> Session | None:
        raw = self.storage.get_item(AUTH_SESSION_KEY)
        if not raw:
            return None
        session = Session.model_validate(json.loads(raw))
        if session.expires_at is not None and session.expires_at <= int(time.time()):
            logger.info("Stored session expired, clearing it")
            self.storage.remove_item(AUTH_SESSION_KEY)
            return None
        return session

    def _set_session(self, session: Session | None, event: str):
        if session is None:
            self.storage.remove_item(AUTH_SESSION_KEY)
        else:
            self.storage.set_item(AUTH_SESSION_KEY, json.dumps(session.model_dump()))
        self._emit(event, session)

    def _emit(self, event, session):
        for callback in list(self._listeners):
            callback(event, session)

    async def sign_up(self, email: str, password: str) -> AuthResponse:
        response = await self._call("POST", "/auth/v1/signup", {"email": email, "password": password})
        if response.session is not None:
            self._set_session(response.session, SIGNED_IN)
        return response

    async def sign_in_with_password(self, email: str, password: str) -> AuthResponse:
        response = await self._call("POST", "/auth/v1/token", {"email": email, "password": password})
        if response.session is not None:
            self._set_session(response.session, SIGNED_IN)
        return response

    async def sign_out(self) -> AuthResponse:
        session = self._stored_session()
        response = AuthResponse()
        if session is not None:
            response = await self._call("POST", "/auth/v1/logout", access_token=session.access_token)
        self._set_session(None, SIGNED_OUT)
        return response

    async def get_session(self) -> AuthResponse:
        session = self._stored_session()
        return AuthResponse(session=session, user=session.user if session else None)

    async def resend_confirmation_email(self, email: str) -> AuthResponse:
        return await self._call("POST", "/auth/v1/resend", {"email": email})

    async def verify_email(self, email: str, token: str) -> AuthResponse:
        response = await self._call("POST", "/auth/v1/verify", {"email": email, "token": token})
        if response.session is not None:
            self._set_session(response.session, SIGNED_IN)
        return response

    def on_auth_state_change(self, callback: AuthCallback) -> Subscription:
        self._listeners.append(callback)

        def _remove():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return Subscription(_remove)


class DisabledAuthGateway:
    """Stand-in used when no backend is configured: same shape, never raises."""

    is_configured = False

    async def sign_up(self, email, password):
        return AuthResponse(error=NOT_CONFIGURED_MESSAGE)

    async def sign_in_with_password(self, email, password):
        return AuthResponse(error=NOT_CONFIGURED_MESSAGE)

    async def sign_out(self):
        return AuthResponse(error=NOT_CONFIGURED_MESSAGE)

    async def get_session(self):
        return AuthResponse(error=NOT_CONFIGURED_MESSAGE)

    async def resend_confirmation_email(self, email):
        return AuthResponse(error=NOT_CONFIGURED_MESSAGE)

    async def verify_email(self, email, token):
        return AuthResponse(error=NOT_CONFIGURED_MESSAGE)

    def on_auth_state_change(self, callback):
        return Subscription()
