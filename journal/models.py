from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class JournalModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_storage(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Trade(JournalModel):
    id: str
    type: str
    symbol: str
    pnl: Optional[float] = None
    notes: Optional[str] = None


class EmotionEntry(JournalModel):
    date: str
    emotion: str
    intensity: int
    notes: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    pnl: Optional[float] = None
    trading_data: Optional[List[Trade]] = Field(None, alias="tradingData")


class UserProfile(JournalModel):
    name: str
    alias: str
    picture: Optional[str] = None
    journal_purpose: Optional[str] = Field(None, alias="journalPurpose")


class Quest(JournalModel):
    id: str
    text: str
    completed: bool = False
    created_at: str = Field(..., alias="createdAt")


class Lead(JournalModel):
    email: str
    created_at: str = Field(..., alias="createdAt")


class ReportAnalysis(JournalModel):
    summary: str
    emotion_frequency: str = Field(..., alias="emotionFrequency")
    intensity_trend: str = Field(..., alias="intensityTrend")
    insights: str


class User(JournalModel):
    id: str
    email: Optional[str] = None


class Session(JournalModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: Optional[int] = None
    user: User


class AuthResponse(JournalModel):
    user: Optional[User] = None
    session: Optional[Session] = None
    error: Optional[str] = None

    @property
    def needs_confirmation(self) -> bool:
        return self.error is None and self.user is not None and self.session is None
