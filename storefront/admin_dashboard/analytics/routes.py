from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import Optional
import asyncio
import logging

from storefront.config import Config
from storefront.db.main import get_session
from storefront.errors import AnalyticsUnavailable
from .service import get_analytics
from .schemas import AnalyticsResponse

logger = logging.getLogger(__name__)

analytics_router = APIRouter()

@analytics_router.get("/analytics", response_model=AnalyticsResponse)
async def get_admin_analytics(
    time_range: Optional[str] = Query(None, alias="timeRange", description="7d, 30d, 90d or 1y; anything else means 30d"),
    session: AsyncSession = Depends(get_session)
) -> AnalyticsResponse:
    """
    Get store analytics for the selected range:
    - Revenue, orders, signups, conversion rate and average order value
    - Trend of each against the preceding period of equal length
    - Top 10 products by units sold
    - 10 most recent orders
    - Daily revenue / orders / signups series
    """
    try:
        analytics = await asyncio.wait_for(
            get_analytics(session, time_range),
            timeout=Config.ANALYTICS_TIMEOUT_SECONDS
        )
    except Exception as e:
        logger.exception(f"Admin analytics failed for timeRange={time_range!r}")
        raise AnalyticsUnavailable(str(e)) from e

    return AnalyticsResponse(data=analytics)
