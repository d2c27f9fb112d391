from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class Credentials(BaseModel):
    email: str
    password: str


class EmailPayload(BaseModel):
    email: str


class VerifyPayload(BaseModel):
    email: str
    token: str


class EntryUpsert(BaseModel):
    emotion: str
    intensity: int
    notes: Optional[str] = None
    image_url: Optional[str] = None
    pnl: Optional[float] = None
    trading_data: Optional[List[Dict[str, Any]]] = None


class ProfileUpsert(BaseModel):
    name: str
    alias: str
    picture: Optional[str] = None
    journal_purpose: Optional[str] = None


class QuestCreate(BaseModel):
    text: str


class QuestPatch(BaseModel):
    completed: bool
