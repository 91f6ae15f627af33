"""
Liveness and readiness probes for the BudgetX API.

``/health`` answers as long as the process serves requests. ``/health/db``
also round-trips the budget store, so a deploy can wait until expense
approval is actually able to write.
"""

from typing import Dict

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from budgetx.core.logging import logger
from budgetx.db.session import get_db

router = APIRouter()


@router.get("", response_model=Dict[str, str])
async def liveness() -> Dict[str, str]:
    return {"status": "ok"}


@router.get("/db", response_model=Dict[str, str])
async def readiness(db: AsyncSession = Depends(get_db)) -> Dict[str, str]:
    """
    Report whether the budget store accepts queries.

    Failures are reported in the body with a generic reason; the driver
    error only goes to the log.
    """
    try:
        alive = (await db.execute(text("SELECT 1"))).scalar() == 1
    except SQLAlchemyError as exc:
        logger.error(f"Budget store unreachable: {exc}")
        return {"status": "error", "database": "connection_error"}

    if not alive:
        logger.error("Budget store answered the readiness query with an unexpected value")
        return {"status": "error", "database": "unexpected_result"}
    return {"status": "ok", "database": "connected"}
