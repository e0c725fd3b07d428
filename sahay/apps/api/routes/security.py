from __future__ import annotations

from typing import Dict, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from sahay.libs.safety import anonymize_text

router = APIRouter(prefix="/api/security", tags=["security"])


class AnonymizeIn(BaseModel):
    text: Optional[str] = None


@router.post("/anonymize")
async def anonymize(payload: AnonymizeIn) -> Dict[str, str]:
    if not payload.text:
        raise HTTPException(status_code=400, detail="Missing text")
    return {"anonymized": anonymize_text(payload.text)}


__all__ = ["router"]
