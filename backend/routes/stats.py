"""
Aggregate statistics endpoint.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from domain.responses import success_response
from services import stats_service

router = APIRouter(tags=["stats"])


@router.get("/stats")
async def get_stats(db: AsyncSession = Depends(get_db)):
    """Counts by status, total ALGO sent (confirmed only) and success rate."""
    return success_response(await stats_service.compute_stats(db))
