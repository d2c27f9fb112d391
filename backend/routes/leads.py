from __future__ import annotations

from fastapi import APIRouter, Depends

from backend import repositories
from backend.auth import require_api_key
from backend.schemas import EmailPayload

router = APIRouter()


# Insert-only: leads are captured before sign-in and never read back here.
@router.post("/v1/leads", status_code=201)
async def add_lead(payload: EmailPayload, _api_key: str = Depends(require_api_key)):
    record = await repositories.add_lead(payload.email.strip().lower())
    return {"email": record["email"], "created_at": record["created_at"]}
