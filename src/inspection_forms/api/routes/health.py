from __future__ import annotations

import time
from typing import Any, Dict

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> Dict[str, Any]:
    service = request.app.state.form_service
    return {
        "ok": True,
        "service": "inspection-forms",
        "storage": "supabase" if service.remote_configured else "local",
        "degraded": service.degraded,
        "ts": int(time.time() * 1000),
    }
