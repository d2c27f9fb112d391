from __future__ import annotations

import base64
import re
from datetime import date

from journal.constants import EMOTION_KEYS, INTENSITY_MAX, INTENSITY_MIN, MAX_IMAGE_BYTES, TRADE_TYPES
from journal.errors import ValidationError
from journal.models import EmotionEntry, UserProfile

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[\w/+.-]+);base64,(?P<data>.*)$", re.S)


def parse_iso_date(value: str) -> date:
    try:
        return date.fromisoformat(str(value))
    except ValueError as exc:
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD") from exc


def data_uri_size(uri: str) -> int:
    match = DATA_URI_PATTERN.match(uri or "")
    if not match:
        raise ValidationError("Images must be embedded as base64 data URIs")
    payload = match.group("data")
    try:
        return len(base64.b64decode(payload, validate=True))
    except ValueError as exc:
        raise ValidationError("Image data is not valid base64") from exc


def validate_image(uri: str | None) -> None:
    if not uri:
        return
    if data_uri_size(uri) > MAX_IMAGE_BYTES:
        raise ValidationError("Image must be 2MB or smaller")


def validate_entry(entry: EmotionEntry) -> EmotionEntry:
    parse_iso_date(entry.date)
    if entry.emotion not in EMOTION_KEYS:
        raise ValidationError(f"Unknown emotion {entry.emotion!r}")
    if not INTENSITY_MIN <= entry.intensity <= INTENSITY_MAX:
        raise ValidationError(f"Intensity must be between {INTENSITY_MIN} and {INTENSITY_MAX}")
    validate_image(entry.image_url)
    seen = set()
    for trade in entry.trading_data or []:
        if trade.id in seen:
            raise ValidationError(f"Duplicate trade id {trade.id!r}")
        seen.add(trade.id)
        if trade.type not in TRADE_TYPES:
            raise ValidationError(f"Unknown trade type {trade.type!r}")
        if not trade.symbol.strip():
            raise ValidationError("Trade symbol is required")
    return entry


def validate_profile(profile: UserProfile) -> UserProfile:
    if not profile.name.strip():
        raise ValidationError("Name is required")
    if not profile.alias.strip():
        raise ValidationError("Alias is required")
    validate_image(profile.picture)
    return profile


def clean_quest_text(text: str) -> str:
    clean = " ".join(str(text or "").split())
    if not clean:
        raise ValidationError("Quest text cannot be empty")
    return clean


def clean_email(email: str) -> str:
    clean = str(email or "").strip().lower()
    if not EMAIL_PATTERN.match(clean):
        raise ValidationError("Please enter a valid email address")
    return clean
