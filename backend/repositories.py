from __future__ import annotations

import json
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import text as sql_text

from backend.db import get_sessionmaker
from backend.schema import ENTRIES_TABLE, LEADS_TABLE, PROFILES_TABLE, QUESTS_TABLE, USERS_TABLE

ENTRY_COLUMNS = ["emotion", "intensity", "notes", "image_url", "pnl", "trading_data"]
ENTRY_SELECT_COLUMNS = ["user_id", "date", *ENTRY_COLUMNS, "updated_at"]
PROFILE_SELECT_COLUMNS = ["id", "name", "alias", "picture", "journal_purpose", "updated_at"]
QUEST_SELECT_COLUMNS = ["id", "user_id", "text", "completed", "created_at"]
USER_SELECT_COLUMNS = [
    "id",
    "email",
    "password_hash",
    "email_confirmed",
    "confirmation_token",
    "token_version",
    "created_at",
]


def _new_id() -> str:
    return uuid4().hex


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _normalize_entry_row(row) -> dict:
    if not row:
        return {}
    payload = dict(row)
    raw_trades = payload.get("trading_data")
    if isinstance(raw_trades, str):
        try:
            payload["trading_data"] = json.loads(raw_trades) if raw_trades else None
        except ValueError:
            payload["trading_data"] = None
    return payload


def _normalize_quest_row(row) -> dict:
    if not row:
        return {}
    payload = dict(row)
    payload["completed"] = bool(payload.get("completed"))
    return payload


# Users


async def get_user_by_email(email: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"SELECT {', '.join(USER_SELECT_COLUMNS)} FROM {USERS_TABLE} WHERE email = :email"),
            {"email": email},
        )).mappings().fetchone()
    return dict(row) if row else None


async def get_user_by_id(user_id: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"SELECT {', '.join(USER_SELECT_COLUMNS)} FROM {USERS_TABLE} WHERE id = :id"),
            {"id": user_id},
        )).mappings().fetchone()
    return dict(row) if row else None


async def create_user(email: str, password_hash: str, confirmed: bool, confirmation_token: str | None) -> dict:
    record = {
        "id": str(uuid4()),
        "email": email,
        "password_hash": password_hash,
        "email_confirmed": int(bool(confirmed)),
        "confirmation_token": confirmation_token,
        "token_version": 0,
        "created_at": _now_iso(),
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {USERS_TABLE}
                ({', '.join(USER_SELECT_COLUMNS)})
                VALUES ({', '.join(f':{col}' for col in USER_SELECT_COLUMNS)})
                """
            ),
            record,
        )
        await session.commit()
    return record


async def set_confirmation_token(user_id: str, token: str | None) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(f"UPDATE {USERS_TABLE} SET confirmation_token = :token WHERE id = :id"),
            {"id": user_id, "token": token},
        )
        await session.commit()


async def confirm_user(user_id: str) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"UPDATE {USERS_TABLE} SET email_confirmed = 1, confirmation_token = NULL WHERE id = :id"
            ),
            {"id": user_id},
        )
        await session.commit()


async def bump_token_version(user_id: str) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"UPDATE {USERS_TABLE} SET token_version = COALESCE(token_version, 0) + 1 WHERE id = :id"
            ),
            {"id": user_id},
        )
        await session.commit()


# Entries


async def list_entries(user_id: str) -> list[dict]:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT {', '.join(ENTRY_SELECT_COLUMNS)}
                FROM {ENTRIES_TABLE}
                WHERE user_id = :user_id
                ORDER BY date
                """
            ),
            {"user_id": user_id},
        )).mappings().all()
    return [_normalize_entry_row(row) for row in rows]


async def get_entry(user_id: str, day_iso: str) -> dict:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"SELECT {', '.join(ENTRY_SELECT_COLUMNS)} FROM {ENTRIES_TABLE} "
                "WHERE user_id = :user_id AND date = :date"
            ),
            {"user_id": user_id, "date": day_iso},
        )).mappings().fetchone()
    return _normalize_entry_row(row)


async def upsert_entry(user_id: str, day_iso: str, fields: dict) -> dict:
    clean = {key: fields.get(key) for key in ENTRY_COLUMNS}
    if clean.get("trading_data") is not None:
        clean["trading_data"] = json.dumps(clean["trading_data"], ensure_ascii=False)
    clean["updated_at"] = _now_iso()
    columns = ["user_id", "date"] + list(clean.keys())
    placeholders = ", ".join([f":{col}" for col in columns])
    updates = ", ".join([f"{col}=EXCLUDED.{col}" for col in clean.keys()])
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {ENTRIES_TABLE} ({', '.join(columns)})
                VALUES ({placeholders})
                ON CONFLICT(user_id, date) DO UPDATE SET {updates}
                """
            ),
            {"user_id": user_id, "date": day_iso, **clean},
        )
        await session.commit()
    return await get_entry(user_id, day_iso)


async def delete_entry(user_id: str, day_iso: str) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(f"DELETE FROM {ENTRIES_TABLE} WHERE user_id = :user_id AND date = :date"),
            {"user_id": user_id, "date": day_iso},
        )
        await session.commit()


# Profiles


async def get_profile(user_id: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"SELECT {', '.join(PROFILE_SELECT_COLUMNS)} FROM {PROFILES_TABLE} WHERE id = :id"),
            {"id": user_id},
        )).mappings().fetchone()
    return dict(row) if row else None


async def upsert_profile(user_id: str, fields: dict) -> dict:
    payload = {
        "id": user_id,
        "name": fields.get("name"),
        "alias": fields.get("alias"),
        "picture": fields.get("picture"),
        "journal_purpose": fields.get("journal_purpose"),
        "updated_at": _now_iso(),
    }
    updates = ", ".join([f"{col}=EXCLUDED.{col}" for col in PROFILE_SELECT_COLUMNS if col != "id"])
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {PROFILES_TABLE} ({', '.join(PROFILE_SELECT_COLUMNS)})
                VALUES ({', '.join(f':{col}' for col in PROFILE_SELECT_COLUMNS)})
                ON CONFLICT(id) DO UPDATE SET {updates}
                """
            ),
            payload,
        )
        await session.commit()
    return await get_profile(user_id) or {}


# Quests


async def list_quests(user_id: str) -> list[dict]:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT {', '.join(QUEST_SELECT_COLUMNS)}
                FROM {QUESTS_TABLE}
                WHERE user_id = :user_id
                ORDER BY created_at ASC
                """
            ),
            {"user_id": user_id},
        )).mappings().all()
    return [_normalize_quest_row(row) for row in rows]


async def get_quest(user_id: str, quest_id: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"SELECT {', '.join(QUEST_SELECT_COLUMNS)} FROM {QUESTS_TABLE} "
                "WHERE id = :id AND user_id = :user_id"
            ),
            {"id": quest_id, "user_id": user_id},
        )).mappings().fetchone()
    return _normalize_quest_row(row) if row else None


async def create_quest(user_id: str, text: str) -> dict:
    record = {
        "id": _new_id(),
        "user_id": user_id,
        "text": text,
        "completed": 0,
        "created_at": _now_iso(),
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {QUESTS_TABLE} ({', '.join(QUEST_SELECT_COLUMNS)})
                VALUES (:id, :user_id, :text, :completed, :created_at)
                """
            ),
            record,
        )
        await session.commit()
    return _normalize_quest_row(record)


async def update_quest_status(user_id: str, quest_id: str, completed: bool) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"UPDATE {QUESTS_TABLE} SET completed = :completed WHERE id = :id AND user_id = :user_id"
            ),
            {"id": quest_id, "user_id": user_id, "completed": int(bool(completed))},
        )
        await session.commit()
    return await get_quest(user_id, quest_id)


async def delete_quest(user_id: str, quest_id: str) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(f"DELETE FROM {QUESTS_TABLE} WHERE id = :id AND user_id = :user_id"),
            {"id": quest_id, "user_id": user_id},
        )
        await session.commit()


# Leads


async def add_lead(email: str) -> dict:
    record = {"id": _new_id(), "email": email, "created_at": _now_iso()}
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(f"INSERT INTO {LEADS_TABLE} (id, email, created_at) VALUES (:id, :email, :created_at)"),
            record,
        )
        await session.commit()
    return record
