from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession
import logging

from storefront.db.main import get_session
from storefront.errors import AnalyticsUnavailable
from .service import get_dashboard_stats
from .schemas import DashboardStatsResponse

logger = logging.getLogger(__name__)

stats_router = APIRouter()

@stats_router.get("/stats", response_model=DashboardStatsResponse)
async def get_admin_stats(
    session: AsyncSession = Depends(get_session)
) -> DashboardStatsResponse:
    try:
        stats = await get_dashboard_stats(session)
    except Exception as e:
        logger.exception("Admin stats failed")
        raise AnalyticsUnavailable(str(e)) from e

    return DashboardStatsResponse(data=stats)
