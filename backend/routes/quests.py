from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from backend import repositories
from backend.auth import require_user
from backend.schemas import QuestCreate, QuestPatch

router = APIRouter()


@router.get("/v1/quests")
async def list_quests(user: dict = Depends(require_user)):
    items = await repositories.list_quests(user["id"])
    return {"items": items}


@router.post("/v1/quests")
async def add_quest(payload: QuestCreate, user: dict = Depends(require_user)):
    return await repositories.create_quest(user["id"], payload.text)


@router.patch("/v1/quests/{quest_id}")
async def update_quest(quest_id: str, payload: QuestPatch, user: dict = Depends(require_user)):
    row = await repositories.update_quest_status(user["id"], quest_id, payload.completed)
    if not row:
        return JSONResponse(status_code=404, content={"detail": "Quest not found", "code": "not_found"})
    return row


@router.delete("/v1/quests/{quest_id}")
async def delete_quest(quest_id: str, user: dict = Depends(require_user)):
    await repositories.delete_quest(user["id"], quest_id)
    return {"ok": True}
