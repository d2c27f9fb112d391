from __future__ import annotations

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from journal.constants import PLACEHOLDER_API_KEY, PLACEHOLDER_API_URL

DEFAULT_STORAGE_PATH = os.path.join(os.path.expanduser("~"), ".deltajournal", "storage.json")


class JournalSettings(BaseSettings):
    api_url: str = Field("", alias="JOURNAL_API_URL")
    api_key: str = Field("", alias="JOURNAL_API_KEY")
    http_timeout: int = Field(10, alias="JOURNAL_HTTP_TIMEOUT")

    gemini_api_key: str | None = Field(None, alias="GEMINI_API_KEY")
    gemini_model: str = Field("gemini-2.5-flash", alias="GEMINI_MODEL")

    storage_path: str = Field(DEFAULT_STORAGE_PATH, alias="JOURNAL_STORAGE_PATH")
    log_level: str = Field("INFO", alias="JOURNAL_LOG_LEVEL")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    @property
    def remote_configured(self) -> bool:
        url = (self.api_url or "").strip()
        key = (self.api_key or "").strip()
        if not url or not key:
            return False
        return url != PLACEHOLDER_API_URL and key != PLACEHOLDER_API_KEY


_settings: JournalSettings | None = None


def get_settings() -> JournalSettings:
    global _settings
    if _settings is None:
        _settings = JournalSettings()
    return _settings
