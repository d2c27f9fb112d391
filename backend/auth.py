from __future__ import annotations

from fastapi import Depends, Header, HTTPException

from backend import repositories
from backend.security import InvalidTokenError, decode_access_token
from backend.settings import get_settings


async def require_api_key(apikey: str | None = Header(default=None, alias="apikey")) -> str:
    settings = get_settings()
    if not apikey or apikey != settings.api_key:
        raise HTTPException(status_code=401, detail="Invalid API key")
    return apikey


def bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def require_user(
    authorization: str | None = Header(default=None, alias="Authorization"),
    _api_key: str = Depends(require_api_key),
) -> dict:
    token = bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Missing access token")
    try:
        claims = decode_access_token(token)
    except InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    user = await repositories.get_user_by_id(claims.get("sub") or "")
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    if int(user.get("token_version") or 0) != int(claims.get("ver") or 0):
        raise HTTPException(status_code=401, detail="Session has been revoked")
    return {"id": user["id"], "email": user["email"]}
