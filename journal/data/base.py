from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List

from journal.models import EmotionEntry, Lead, Quest, UserProfile


class DataService(ABC):
    """Persistence contract shared by the local and remote adapters.

    Adapters store whatever they are handed; range and enum checks belong to
    the caller (see journal.validation).
    """

    is_remote: bool = False

    @abstractmethod
    async def get_entries(self) -> Dict[str, EmotionEntry]:
        ...

    @abstractmethod
    async def save_entry(self, entry: EmotionEntry) -> EmotionEntry:
        ...

    @abstractmethod
    async def delete_entry(self, date: str) -> None:
        ...

    @abstractmethod
    async def get_profile(self) -> UserProfile:
        ...

    @abstractmethod
    async def save_profile(self, profile: UserProfile) -> UserProfile:
        ...

    @abstractmethod
    async def get_quests(self) -> List[Quest]:
        ...

    @abstractmethod
    async def add_quest(self, text: str) -> Quest:
        ...

    @abstractmethod
    async def update_quest_status(self, quest_id: str, completed: bool) -> Quest:
        ...

    @abstractmethod
    async def delete_quest(self, quest_id: str) -> None:
        ...

    @abstractmethod
    async def add_lead(self, email: str) -> Lead:
        ...
