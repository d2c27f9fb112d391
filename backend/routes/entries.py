from __future__ import annotations

from fastapi import APIRouter, Depends

from backend import repositories
from backend.auth import require_user
from backend.schemas import EntryUpsert

router = APIRouter()


@router.get("/v1/entries")
async def list_entries(user: dict = Depends(require_user)):
    items = await repositories.list_entries(user["id"])
    return {"items": items}


@router.put("/v1/entries/{day}")
async def upsert_entry(day: str, payload: EntryUpsert, user: dict = Depends(require_user)):
    return await repositories.upsert_entry(user["id"], day, payload.model_dump())


@router.delete("/v1/entries/{day}")
async def delete_entry(day: str, user: dict = Depends(require_user)):
    await repositories.delete_entry(user["id"], day)
    return {"ok": True}
