# movie_api/routes/health.py
from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from movie_api.db.session import get_async_db

log = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


async def ping_db(db: AsyncSession) -> bool:
    try:
        res = await db.execute(text("SELECT 1"))
        return res.scalar() == 1
    except SQLAlchemyError as e:
        log.warning("DB ping failed: %r", e)
        return False


@router.get("/health", summary="Liveness")
async def health() -> Dict[str, Any]:
    return {"ok": True}


@router.get("/ready", summary="Readiness")
async def ready(db: AsyncSession = Depends(get_async_db)):
    ok = await ping_db(db)
    return JSONResponse(status_code=200 if ok else 503, content={"ok": ok, "db": ok})
