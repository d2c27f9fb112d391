from __future__ import annotations

from dataclasses import dataclass

from journal.auth import AuthGateway, DisabledAuthGateway
from journal.data.api_client import RestClient
from journal.data.base import DataService
from journal.data.selector import create_data_service, is_remote_configured
from journal.data.storage import JsonFileStorage, KeyValueStorage
from journal.logging_config import configure_logging
from journal.services.narration import NarrationService
from journal.settings import JournalSettings, get_settings


@dataclass
class JournalServices:
    settings: JournalSettings
    storage: KeyValueStorage
    auth: AuthGateway | DisabledAuthGateway
    data: DataService
    narration: NarrationService

    @property
    def is_remote(self) -> bool:
        return self.data.is_remote


def build_services(
    settings: JournalSettings | None = None,
    storage: KeyValueStorage | None = None,
    client: RestClient | None = None,
    narration: NarrationService | None = None,
) -> JournalServices:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    storage = storage or JsonFileStorage(settings.storage_path)
    if is_remote_configured(settings):
        client = client or RestClient(settings.api_url, settings.api_key, timeout=settings.http_timeout)
        auth = AuthGateway(client, storage)
    else:
        auth = DisabledAuthGateway()
    data = create_data_service(settings, auth=auth, storage=storage, client=client)
    narration = narration or NarrationService(settings.gemini_api_key, model_name=settings.gemini_model)
    return JournalServices(settings=settings, storage=storage, auth=auth, data=data, narration=narration)
