import asyncio

import pytest
import requests

from journal.constants import EMPTY_REMOTE_PURPOSE, NEW_REMOTE_PURPOSE
from journal.data.remote_store import RemoteDataService
from journal.errors import (
    NotAuthenticatedError,
    NotFoundError,
    RemoteStoreError,
    SchemaMismatchError,
    SchemaProblemKind,
)
from journal.models import EmotionEntry, Trade, UserProfile


def test_operations_fail_fast_without_a_session(fake_client, signed_out_auth):
    service = RemoteDataService(fake_client, signed_out_auth)

    for call in (
        service.get_entries(),
        service.save_entry(EmotionEntry(date="2024-01-01", emotion="happy", intensity=5)),
        service.delete_entry("2024-01-01"),
        service.get_profile(),
        service.get_quests(),
        service.add_quest("x"),
        service.update_quest_status("q1", True),
        service.delete_quest("q1"),
    ):
        with pytest.raises(NotAuthenticatedError):
            asyncio.run(call)

    assert fake_client.calls == []


def test_save_entry_is_an_upsert(fake_client, fake_auth):
    service = RemoteDataService(fake_client, fake_auth)
    entry = EmotionEntry(
        date="2024-03-10",
        emotion="anxious",
        intensity=8,
        pnl=-40.0,
        trading_data=[Trade(id="t1", type="Short Future", symbol="ES", pnl=-40.0)],
    )

    async def scenario():
        saved = await service.save_entry(entry)
        assert saved == entry
        await service.save_entry(entry.model_copy(update={"intensity": 2}))
        return await service.get_entries()

    entries = asyncio.run(scenario())
    assert list(entries) == ["2024-03-10"]
    assert entries["2024-03-10"].intensity == 2
    assert entries["2024-03-10"].trading_data[0].symbol == "ES"
    assert fake_client.calls[0] == ("PUT", "/v1/entries/2024-03-10")


def test_users_only_see_their_own_rows(fake_client, fake_auth, other_auth):
    alice = RemoteDataService(fake_client, fake_auth)
    bob = RemoteDataService(fake_client, other_auth)

    async def scenario():
        await alice.save_entry(EmotionEntry(date="2024-03-10", emotion="happy", intensity=9))
        quest = await alice.add_quest("Journal daily")
        assert await bob.get_entries() == {}
        assert await bob.get_quests() == []
        with pytest.raises(NotFoundError):
            await bob.update_quest_status(quest.id, True)
        await bob.delete_quest(quest.id)
        return await alice.get_quests()

    quests = asyncio.run(scenario())
    assert [quest.text for quest in quests] == ["Journal daily"]
    assert quests[0].completed is False


def test_missing_profile_is_created_once(fake_client, fake_auth):
    service = RemoteDataService(fake_client, fake_auth)

    first = asyncio.run(service.get_profile())
    assert first == UserProfile(name="alice", alias="alice@example.com", journal_purpose=NEW_REMOTE_PURPOSE)
    assert fake_client.calls == [("GET", "/v1/profile"), ("PUT", "/v1/profile")]

    second = asyncio.run(service.get_profile())
    assert second == first
    assert fake_client.calls[-1] == ("GET", "/v1/profile")
    assert len(fake_client.calls) == 3


def test_profile_without_purpose_gets_a_prompt(fake_client, fake_auth):
    fake_client.profiles["user-a"] = {"id": "user-a", "name": "Alice", "alias": "al", "picture": None, "journal_purpose": None}
    profile = asyncio.run(RemoteDataService(fake_client, fake_auth).get_profile())
    assert profile.journal_purpose == EMPTY_REMOTE_PURPOSE


def test_missing_table_becomes_schema_mismatch(fake_client, fake_auth):
    fake_client.fail_with("GET", "/v1/entries", 500, 'relation "public.entries" does not exist', code="42P01")

    with pytest.raises(SchemaMismatchError) as excinfo:
        asyncio.run(RemoteDataService(fake_client, fake_auth).get_entries())

    err = excinfo.value
    assert err.problem.kind is SchemaProblemKind.MISSING_TABLE
    assert err.problem.table == "entries"
    assert "CREATE TABLE IF NOT EXISTS entries" in err.setup_sql
    assert err.status_code == 500


def test_missing_quest_column_is_reported_against_quests(fake_client, fake_auth):
    fake_client.fail_with("POST", "/v1/quests", 500, "table quests has no column named completed")

    with pytest.raises(SchemaMismatchError) as excinfo:
        asyncio.run(RemoteDataService(fake_client, fake_auth).add_quest("Stretch"))

    assert excinfo.value.problem.kind is SchemaProblemKind.MISSING_COLUMN
    assert excinfo.value.problem.column == "completed"


def test_other_backend_errors_keep_their_detail(fake_client, fake_auth):
    fake_client.fail_with("DELETE", "/v1/entries/2024-01-01", 503, "database is locked")

    with pytest.raises(RemoteStoreError) as excinfo:
        asyncio.run(RemoteDataService(fake_client, fake_auth).delete_entry("2024-01-01"))

    assert not isinstance(excinfo.value, SchemaMismatchError)
    assert excinfo.value.detail == "database is locked"
    assert str(excinfo.value) == "Failed to delete entry 2024-01-01: database is locked"


def test_network_errors_become_store_errors(fake_auth):
    class OfflineClient:
        def request(self, *args, **kwargs):
            raise requests.ConnectionError("connection refused")

    with pytest.raises(RemoteStoreError, match="connection refused"):
        asyncio.run(RemoteDataService(OfflineClient(), fake_auth).get_quests())


def test_quests_sorted_by_creation(fake_client, fake_auth):
    fake_client.quests = {
        "late": {"id": "late", "user_id": "user-a", "text": "b", "completed": 0, "created_at": "2024-05-02T00:00:00+00:00"},
        "early": {"id": "early", "user_id": "user-a", "text": "a", "completed": 1, "created_at": "2024-05-01T00:00:00+00:00"},
    }
    quests = asyncio.run(RemoteDataService(fake_client, fake_auth).get_quests())
    assert [quest.id for quest in quests] == ["early", "late"]
    assert quests[0].completed is True


def test_add_lead_needs_no_session(fake_client, signed_out_auth):
    lead = asyncio.run(RemoteDataService(fake_client, signed_out_auth).add_lead("lead@example.com"))
    assert lead.email == "lead@example.com"
    assert fake_client.leads[0]["email"] == "lead@example.com"


def test_bigint_profile_id_becomes_schema_mismatch(fake_client, fake_auth):
    fake_client.fail_with("GET", "/v1/profile", 400, 'invalid input syntax for type bigint: "abc"', code="22P02")

    with pytest.raises(SchemaMismatchError) as excinfo:
        asyncio.run(RemoteDataService(fake_client, fake_auth).get_profile())

    assert excinfo.value.problem.kind is SchemaProblemKind.COLUMN_TYPE
    assert excinfo.value.problem.table == "profiles"
    assert excinfo.value.problem.column == "id"
    assert ("PUT", "/v1/profile") not in fake_client.calls
