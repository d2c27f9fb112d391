from __future__ import annotations

import logging

from journal.data.api_client import RestClient
from journal.data.base import DataService
from journal.data.local_store import LocalDataService
from journal.data.remote_store import RemoteDataService
from journal.data.storage import JsonFileStorage, KeyValueStorage
from journal.settings import JournalSettings

logger = logging.getLogger(__name__)


def is_remote_configured(settings: JournalSettings) -> bool:
    return settings.remote_configured


def create_data_service(
    settings: JournalSettings,
    auth=None,
    storage: KeyValueStorage | None = None,
    client: RestClient | None = None,
) -> DataService:
    if is_remote_configured(settings):
        if auth is None:
            raise ValueError("Remote persistence needs an auth gateway")
        logger.info("Using remote persistence at %s", settings.api_url)
        rest_client = client or RestClient(settings.api_url, settings.api_key, timeout=settings.http_timeout)
        return RemoteDataService(rest_client, auth)
    logger.info("Remote backend not configured, using local storage")
    return LocalDataService(storage or JsonFileStorage(settings.storage_path))
