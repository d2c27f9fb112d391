from __future__ import annotations

import asyncio
import logging

import requests

from journal.constants import EMPTY_REMOTE_PURPOSE, NEW_REMOTE_PURPOSE, NOT_AUTHENTICATED_MESSAGE
from journal.data.api_client import ApiError, RestClient
from journal.data.base import DataService
from journal.errors import (
    NotAuthenticatedError,
    NotFoundError,
    RemoteStoreError,
    SchemaMismatchError,
    classify_backend_error,
)
from journal.models import EmotionEntry, Lead, Quest, UserProfile

logger = logging.getLogger(__name__)

ENTRIES_TABLE = "entries"
PROFILES_TABLE = "profiles"
QUESTS_TABLE = "quests"
LEADS_TABLE = "leads"

NOT_FOUND_CODE = "not_found"


def _entry_from_row(row: dict) -> EmotionEntry:
    return EmotionEntry(
        date=row["date"],
        emotion=row["emotion"],
        intensity=row["intensity"],
        notes=row.get("notes"),
        image_url=row.get("image_url") or None,
        pnl=row.get("pnl"),
        trading_data=row.get("trading_data") or None,
    )


def _entry_payload(entry: EmotionEntry) -> dict:
    trades = None
    if entry.trading_data is not None:
        trades = [trade.model_dump(exclude_none=True) for trade in entry.trading_data]
    return {
        "emotion": entry.emotion,
        "intensity": entry.intensity,
        "notes": entry.notes,
        "image_url": entry.image_url,
        "pnl": entry.pnl,
        "trading_data": trades,
    }


def _profile_from_row(row: dict, purpose_default: str | None = None) -> UserProfile:
    purpose = row.get("journal_purpose")
    return UserProfile(
        name=row["name"],
        alias=row["alias"],
        picture=row.get("picture") or None,
        journal_purpose=purpose if purpose is not None else purpose_default,
    )


def _quest_from_row(row: dict) -> Quest:
    return Quest(
        id=row["id"],
        text=row["text"],
        completed=bool(row.get("completed")),
        created_at=str(row["created_at"]),
    )


def _default_profile_for(email: str | None) -> UserProfile:
    name = email.split("@")[0] if email else ""
    return UserProfile(
        name=name or "New User",
        alias=email or "No email",
        picture=None,
        journal_purpose=NEW_REMOTE_PURPOSE,
    )


class RemoteDataService(DataService):
    """Journal tables on the backend service, scoped to the signed-in user.

    The backend filters every statement by the user id carried in the access
    token; this adapter only refuses to call it without a session. Backend
    failures are re-raised as RemoteStoreError, or SchemaMismatchError when the
    message points at a missing table, column or constraint.
    """

    is_remote = True

    def __init__(self, client: RestClient, auth):
        self.client = client
        self.auth = auth

    async def _session(self):
        response = await self.auth.get_session()
        if response.session is None:
            raise NotAuthenticatedError(NOT_AUTHENTICATED_MESSAGE)
        return response.session

    async def _request(self, operation, entity, table, method, path, session=None, **kwargs):
        token = session.access_token if session is not None else None
        try:
            return await asyncio.to_thread(self.client.request, method, path, access_token=token, **kwargs)
        except ApiError as exc:
            logger.error("Failed to %s %s: %s", operation, entity, exc.detail)
            problem = classify_backend_error(exc.detail, exc.code, table=table)
            if problem is not None:
                raise SchemaMismatchError(
                    operation, entity, exc.detail, problem, status_code=exc.status_code, code=exc.code
                ) from exc
            raise RemoteStoreError(operation, entity, exc.detail, status_code=exc.status_code, code=exc.code) from exc
        except requests.RequestException as exc:
            logger.error("Failed to %s %s: %s", operation, entity, exc)
            raise RemoteStoreError(operation, entity, str(exc)) from exc

    # Entries

    async def get_entries(self):
        session = await self._session()
        payload = await self._request("fetch", "entries", ENTRIES_TABLE, "GET", "/v1/entries", session=session)
        return {row["date"]: _entry_from_row(row) for row in (payload or {}).get("items", [])}

    async def save_entry(self, entry):
        session = await self._session()
        row = await self._request(
            "save",
            f"entry {entry.date}",
            ENTRIES_TABLE,
            "PUT",
            f"/v1/entries/{entry.date}",
            session=session,
            json=_entry_payload(entry),
        )
        if not row:
            raise RemoteStoreError("save", f"entry {entry.date}", "no data returned from backend")
        return _entry_from_row(row)

    async def delete_entry(self, date):
        session = await self._session()
        await self._request("delete", f"entry {date}", ENTRIES_TABLE, "DELETE", f"/v1/entries/{date}", session=session)

    # Profile

    async def get_profile(self):
        session = await self._session()
        try:
            row = await self._request("fetch", "profile", PROFILES_TABLE, "GET", "/v1/profile", session=session)
        except RemoteStoreError as exc:
            if exc.code != NOT_FOUND_CODE:
                raise
            logger.info("No profile for user %s yet, creating default", session.user.id)
            return await self.save_profile(_default_profile_for(session.user.email))
        return _profile_from_row(row, purpose_default=EMPTY_REMOTE_PURPOSE)

    async def save_profile(self, profile):
        session = await self._session()
        row = await self._request(
            "save",
            "profile",
            PROFILES_TABLE,
            "PUT",
            "/v1/profile",
            session=session,
            json={
                "name": profile.name,
                "alias": profile.alias,
                "picture": profile.picture,
                "journal_purpose": profile.journal_purpose,
            },
        )
        if not row:
            raise RemoteStoreError("save", "profile", "backend did not return the saved profile")
        return _profile_from_row(row)

    # Quests

    async def get_quests(self):
        session = await self._session()
        payload = await self._request("fetch", "quests", QUESTS_TABLE, "GET", "/v1/quests", session=session)
        quests = [_quest_from_row(row) for row in (payload or {}).get("items", [])]
        return sorted(quests, key=lambda quest: quest.created_at)

    async def add_quest(self, text):
        session = await self._session()
        row = await self._request(
            "add", "quest", QUESTS_TABLE, "POST", "/v1/quests", session=session, json={"text": text}
        )
        return _quest_from_row(row)

    async def update_quest_status(self, quest_id, completed):
        session = await self._session()
        try:
            row = await self._request(
                "update",
                f"quest {quest_id}",
                QUESTS_TABLE,
                "PATCH",
                f"/v1/quests/{quest_id}",
                session=session,
                json={"completed": bool(completed)},
            )
        except RemoteStoreError as exc:
            if exc.code == NOT_FOUND_CODE:
                raise NotFoundError(f"Quest {quest_id} not found") from exc
            raise
        return _quest_from_row(row)

    async def delete_quest(self, quest_id):
        session = await self._session()
        await self._request(
            "delete", f"quest {quest_id}", QUESTS_TABLE, "DELETE", f"/v1/quests/{quest_id}", session=session
        )

    # Leads

    async def add_lead(self, email):
        row = await self._request("add", "lead", LEADS_TABLE, "POST", "/v1/leads", json={"email": email})
        return Lead(email=row["email"], created_at=str(row["created_at"]))
