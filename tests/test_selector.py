import logging
import typing

import pytest

from journal.auth import AuthGateway, DisabledAuthGateway
from journal.context import JournalServices, build_services
from journal.data.local_store import LocalDataService
from journal.data.remote_store import RemoteDataService
from journal.data.selector import create_data_service, is_remote_configured
from journal.services.narration import NarrationService
from journal.settings import JournalSettings


def _settings(url="", key="", **extra):
    return JournalSettings(JOURNAL_API_URL=url, JOURNAL_API_KEY=key, **extra)


@pytest.mark.parametrize(
    "url, key, expected",
    [
        ("", "", False),
        ("YOUR_API_URL", "YOUR_API_KEY", False),
        ("https://api.example.com", "YOUR_API_KEY", False),
        ("https://api.example.com", "", False),
        ("https://api.example.com", "anon-key", True),
    ],
)
def test_remote_needs_real_url_and_key(url, key, expected):
    assert is_remote_configured(_settings(url, key)) is expected


def test_local_mode_when_unconfigured(storage):
    service = create_data_service(_settings(), storage=storage)
    assert isinstance(service, LocalDataService)
    assert service.is_remote is False


def test_remote_mode_requires_auth():
    with pytest.raises(ValueError):
        create_data_service(_settings("https://api.example.com", "anon-key"))


def test_remote_mode_when_configured(fake_client, fake_auth):
    service = create_data_service(_settings("https://api.example.com", "anon-key"), auth=fake_auth, client=fake_client)
    assert isinstance(service, RemoteDataService)
    assert service.is_remote is True


def test_build_services_local(storage):
    services = build_services(_settings(GEMINI_API_KEY=None), storage=storage)
    assert services.is_remote is False
    assert isinstance(services.auth, DisabledAuthGateway)
    assert isinstance(services.narration, NarrationService)
    assert services.data.storage is storage


def test_build_services_remote_shares_client(storage, fake_client):
    services = build_services(_settings("https://api.example.com", "anon-key"), storage=storage, client=fake_client)
    assert services.is_remote is True
    assert isinstance(services.auth, AuthGateway)
    assert services.auth.client is fake_client
    assert services.data.client is fake_client
    assert services.data.auth is services.auth


def test_build_services_applies_log_level(storage):
    build_services(_settings(JOURNAL_LOG_LEVEL="debug"), storage=storage)
    assert logging.getLogger("journal").level == logging.DEBUG
    assert logging.getLogger("urllib3").level == logging.WARNING
    logging.getLogger("journal").setLevel(logging.NOTSET)


def test_services_declare_the_gateway_types():
    hint = typing.get_type_hints(JournalServices)["auth"]
    assert set(typing.get_args(hint)) == {AuthGateway, DisabledAuthGateway}
