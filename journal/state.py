from __future__ import annotations

import asyncio
import logging
from datetime import date

from journal.data.base import DataService
from journal.errors import JournalError, SchemaMismatchError
from journal.models import EmotionEntry, UserProfile
from journal.validation import clean_email, clean_quest_text, validate_entry, validate_profile

logger = logging.getLogger(__name__)

LOADING_PROFILE = UserProfile(name="Loading...", alias="...", journal_purpose="Loading purpose...")
ERROR_PROFILE = UserProfile(name="Error", alias="Could not load profile")


class LoadError(JournalError):
    def __init__(self, message: str, problem=None, setup_sql: str | None = None):
        super().__init__(message)
        self.problem = problem
        self.setup_sql = setup_sql


def date_key(day) -> str:
    if isinstance(day, date):
        return day.isoformat()
    return str(day)


class SessionState:
    """Tracks the signed-in session and follows auth state changes."""

    def __init__(self, auth):
        self.auth = auth
        self.session = None
        self.loading = True
        self._subscription = None

    async def start(self):
        if not self.auth.is_configured:
            self.loading = False
            return
        response = await self.auth.get_session()
        self.session = response.session
        self.loading = False
        self._subscription = self.auth.on_auth_state_change(self._on_change)

    def _on_change(self, event, session):
        logger.debug("Auth state changed: %s", event)
        self.session = session
        self.loading = False

    async def sign_out(self):
        response = await self.auth.sign_out()
        if response.error:
            logger.error("Error signing out: %s", response.error)
        return response

    def stop(self):
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None


class JournalState:
    """In-memory view of one user's journal, kept in step with the data service.

    Mutations validate their input, write through the data service, and only
    then update the in-memory copy, so a failed write leaves the view as it was.
    """

    def __init__(self, data: DataService):
        self.data = data
        self.entries: dict[str, EmotionEntry] = {}
        self.quests = []
        self.profile = LOADING_PROFILE
        self.loading = False
        self.error: LoadError | None = None

    def reset(self):
        self.entries = {}
        self.quests = []
        self.profile = LOADING_PROFILE
        self.error = None

    async def load(self, session=None) -> bool:
        if self.data.is_remote and session is None:
            self.reset()
            return False
        self.loading = True
        self.error = None
        try:
            entries, profile, quests = await asyncio.gather(
                self.data.get_entries(),
                self.data.get_profile(),
                self.data.get_quests(),
            )
        except SchemaMismatchError as exc:
            logger.error("Failed to load data: %s", exc)
            self.error = LoadError(exc.title, problem=exc.problem, setup_sql=exc.setup_sql)
            self.profile = ERROR_PROFILE
            raise self.error from exc
        except JournalError as exc:
            logger.error("Failed to load data: %s", exc)
            self.error = LoadError(f"Failed to Load Data: {exc}")
            self.profile = ERROR_PROFILE
            raise self.error from exc
        except Exception as exc:
            logger.exception("Unexpected error loading data")
            self.error = LoadError(f"Failed to Load Data: {exc}")
            self.profile = ERROR_PROFILE
            raise self.error from exc
        finally:
            self.loading = False
        self.entries = entries
        self.profile = profile
        self.quests = quests
        return True

    async def save_entry(self, entry: EmotionEntry) -> EmotionEntry:
        validate_entry(entry)
        saved = await self.data.save_entry(entry)
        self.entries = {**self.entries, saved.date: saved}
        return saved

    async def delete_entry(self, day) -> None:
        key = date_key(day)
        await self.data.delete_entry(key)
        self.entries = {k: v for k, v in self.entries.items() if k != key}

    async def save_profile(self, profile: UserProfile) -> UserProfile:
        validate_profile(profile)
        self.profile = await self.data.save_profile(profile)
        return self.profile

    async def add_quest(self, text: str):
        quest = await self.data.add_quest(clean_quest_text(text))
        self.quests = [*self.quests, quest]
        return quest

    async def toggle_quest(self, quest_id: str, completed: bool):
        updated = await self.data.update_quest_status(quest_id, completed)
        self.quests = [updated if quest.id == quest_id else quest for quest in self.quests]
        return updated

    async def delete_quest(self, quest_id: str) -> None:
        await self.data.delete_quest(quest_id)
        self.quests = [quest for quest in self.quests if quest.id != quest_id]

    async def capture_lead(self, email: str):
        return await self.data.add_lead(clean_email(email))

    def entries_between(self, start, end) -> list[EmotionEntry]:
        start_key, end_key = date_key(start), date_key(end)
        return [self.entries[key] for key in sorted(self.entries) if start_key <= key <= end_key]
