from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from uuid import uuid4

from journal.constants import DEFAULT_LOCAL_PROFILE, ENTRIES_KEY, LEADS_KEY, PROFILE_KEY, QUESTS_KEY
from journal.data.base import DataService
from journal.data.storage import KeyValueStorage
from journal.errors import NotFoundError
from journal.models import EmotionEntry, Lead, Quest, UserProfile

logger = logging.getLogger(__name__)


def _new_id():
    return uuid4().hex


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


class LocalDataService(DataService):
    is_remote = False

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage

    def _load(self, key, default):
        try:
            raw = self.storage.get_item(key)
            return json.loads(raw) if raw else default
        except (OSError, ValueError) as exc:
            logger.error("Failed to read %s from local storage: %s", key, exc)
            raise

    def _store(self, key, payload):
        try:
            self.storage.set_item(key, json.dumps(payload, ensure_ascii=False))
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Failed to write %s to local storage: %s", key, exc)
            raise

    # Entries

    async def get_entries(self):
        payload = self._load(ENTRIES_KEY, {})
        return {day: EmotionEntry.model_validate(item) for day, item in payload.items()}

    async def save_entry(self, entry):
        payload = self._load(ENTRIES_KEY, {})
        payload[entry.date] = entry.to_storage()
        self._store(ENTRIES_KEY, payload)
        return entry

    async def delete_entry(self, date):
        payload = self._load(ENTRIES_KEY, {})
        if date in payload:
            del payload[date]
            self._store(ENTRIES_KEY, payload)

    # Profile

    async def get_profile(self):
        stored = self._load(PROFILE_KEY, None)
        if stored is None:
            return UserProfile.model_validate(DEFAULT_LOCAL_PROFILE)
        profile = dict(stored)
        # Profiles saved before alias/journalPurpose existed.
        if not profile.get("alias"):
            profile["alias"] = DEFAULT_LOCAL_PROFILE["alias"]
        if "journalPurpose" not in profile:
            profile["journalPurpose"] = DEFAULT_LOCAL_PROFILE["journalPurpose"]
        return UserProfile.model_validate(profile)

    async def save_profile(self, profile):
        self._store(PROFILE_KEY, profile.to_storage())
        return profile

    # Quests

    def _load_quests(self):
        return [Quest.model_validate(item) for item in self._load(QUESTS_KEY, [])]

    def _store_quests(self, quests):
        self._store(QUESTS_KEY, [quest.to_storage() for quest in quests])

    async def get_quests(self):
        return sorted(self._load_quests(), key=lambda quest: quest.created_at)

    async def add_quest(self, text):
        quests = self._load_quests()
        quest = Quest(id=_new_id(), text=text, completed=False, created_at=_now_iso())
        quests.append(quest)
        self._store_quests(quests)
        return quest

    async def update_quest_status(self, quest_id, completed):
        quests = self._load_quests()
        for index, quest in enumerate(quests):
            if quest.id == quest_id:
                updated = quest.model_copy(update={"completed": bool(completed)})
                quests[index] = updated
                self._store_quests(quests)
                return updated
        raise NotFoundError(f"Quest {quest_id} not found")

    async def delete_quest(self, quest_id):
        quests = self._load_quests()
        remaining = [quest for quest in quests if quest.id != quest_id]
        if len(remaining) != len(quests):
            self._store_quests(remaining)

    # Leads

    async def add_lead(self, email):
        leads = self._load(LEADS_KEY, [])
        lead = Lead(email=email, created_at=_now_iso())
        leads.append(lead.to_storage())
        self._store(LEADS_KEY, leads)
        return lead
