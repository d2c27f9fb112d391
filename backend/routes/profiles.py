from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from backend import repositories
from backend.auth import require_user
from backend.schemas import ProfileUpsert

router = APIRouter()


@router.get("/v1/profile")
async def get_profile(user: dict = Depends(require_user)):
    row = await repositories.get_profile(user["id"])
    if not row:
        return JSONResponse(status_code=404, content={"detail": "Profile not found", "code": "not_found"})
    return row


@router.put("/v1/profile")
async def save_profile(payload: ProfileUpsert, user: dict = Depends(require_user)):
    return await repositories.upsert_profile(user["id"], payload.model_dump())
