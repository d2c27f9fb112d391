from __future__ import annotations

import logging
import secrets

from fastapi import APIRouter, Depends, HTTPException, Response

from backend import repositories
from backend.auth import require_api_key, require_user
from backend.schemas import Credentials, EmailPayload, VerifyPayload
from backend.security import create_access_token, hash_password, verify_password
from backend.settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_api_key)])

MIN_PASSWORD_LENGTH = 6


def _public_user(user: dict) -> dict:
    return {"id": user["id"], "email": user["email"]}


def _normalize_email(raw: str) -> str:
    email = str(raw or "").strip().lower()
    if "@" not in email:
        raise HTTPException(status_code=400, detail="Unable to validate email address: invalid format")
    return email


def _issue_confirmation(email: str) -> str:
    token = secrets.token_urlsafe(24)
    # No mail transport here; operators read the token from the log.
    logger.info("Email confirmation token for %s: %s", email, token)
    return token


@router.post("/auth/v1/signup")
async def sign_up(payload: Credentials):
    email = _normalize_email(payload.email)
    if len(payload.password or "") < MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=400, detail=f"Password should be at least {MIN_PASSWORD_LENGTH} characters")
    if await repositories.get_user_by_email(email):
        raise HTTPException(status_code=400, detail="User already registered")
    settings = get_settings()
    needs_confirmation = settings.require_email_confirmation
    token = _issue_confirmation(email) if needs_confirmation else None
    user = await repositories.create_user(
        email,
        hash_password(payload.password),
        confirmed=not needs_confirmation,
        confirmation_token=token,
    )
    if needs_confirmation:
        return {"user": _public_user(user), "session": None}
    return {"user": _public_user(user), "session": create_access_token(user)}


@router.post("/auth/v1/token")
async def sign_in(payload: Credentials):
    email = _normalize_email(payload.email)
    user = await repositories.get_user_by_email(email)
    if not user or not verify_password(user["password_hash"], payload.password or ""):
        raise HTTPException(status_code=400, detail="Invalid login credentials")
    if not user.get("email_confirmed"):
        raise HTTPException(status_code=400, detail="Email not confirmed")
    return {"user": _public_user(user), "session": create_access_token(user)}


@router.post("/auth/v1/logout", status_code=204)
async def sign_out(user: dict = Depends(require_user)):
    await repositories.bump_token_version(user["id"])
    return Response(status_code=204)


@router.get("/auth/v1/user")
async def current_user(user: dict = Depends(require_user)):
    return {"user": user, "session": None}


@router.post("/auth/v1/resend")
async def resend_confirmation(payload: EmailPayload):
    email = _normalize_email(payload.email)
    user = await repositories.get_user_by_email(email)
    if user and not user.get("email_confirmed"):
        await repositories.set_confirmation_token(user["id"], _issue_confirmation(email))
    return {"user": None, "session": None}


@router.post("/auth/v1/verify")
async def verify_email(payload: VerifyPayload):
    email = _normalize_email(payload.email)
    user = await repositories.get_user_by_email(email)
    if not user or not user.get("confirmation_token") or not secrets.compare_digest(
        user["confirmation_token"], payload.token
    ):
        raise HTTPException(status_code=400, detail="Token has expired or is invalid")
    await repositories.confirm_user(user["id"])
    return {"user": _public_user(user), "session": create_access_token(user)}
