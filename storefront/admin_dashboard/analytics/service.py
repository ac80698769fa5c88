from sqlmodel import select, and_, desc
from sqlmodel.ext.asyncio.session import AsyncSession
from datetime import datetime
from typing import Iterable, List, Optional, Union
import logging
import uuid

from storefront.db.models import Order, Product, User, REVENUE_STATUSES, utcnow
from .metrics import (
    as_utc, resolve_window, compute_metrics, rank_top_sellers,
    join_top_sellers, build_daily_sales,
)
from .schemas import AnalyticsResult, OrderLine, RecentOrder, TimeRange

logger = logging.getLogger(__name__)

RECENT_ORDERS_LIMIT = 10


async def fetch_revenue_orders(session: AsyncSession, start: datetime, end: datetime) -> List[Order]:
    """Revenue-eligible orders created in ``[start, end)``"""
    query = (
        select(Order)
        .where(
            and_(
                Order.created_at >= start,
                Order.created_at < end,
                Order.status.in_(REVENUE_STATUSES)
            )
        )
    )
    result = await session.exec(query)
    return list(result.all())


async def fetch_signups(session: AsyncSession, start: datetime, end: datetime) -> List[User]:
    """Users created in ``[start, end)``"""
    query = (
        select(User)
        .where(
            and_(
                User.created_at >= start,
                User.created_at < end
            )
        )
    )
    result = await session.exec(query)
    return list(result.all())


async def fetch_products(session: AsyncSession, product_uids: Iterable[uuid.UUID]) -> List[Product]:
    product_uids = list(product_uids)
    if not product_uids:
        return []

    result = await session.exec(select(Product).where(Product.uid.in_(product_uids)))
    return list(result.all())


async def fetch_recent_orders(session: AsyncSession, limit: int = RECENT_ORDERS_LIMIT) -> List[Order]:
    """Newest orders system-wide, any status, not limited to the window"""
    query = (
        select(Order)
        .order_by(desc(Order.created_at))
        .limit(limit)
    )
    result = await session.exec(query)
    return list(result.all())


def to_recent_order(order: Order) -> RecentOrder:
    return RecentOrder(
        id=order.uid,
        order_number=order.order_number,
        user_id=order.user_uid,
        status=order.status,
        total=float(order.total or 0),
        items=[
            OrderLine(
                product_id=item.product_uid,
                quantity=item.quantity,
                price=float(item.price or 0)
            )
            for item in order.items
        ],
        created_at=as_utc(order.created_at)
    )


async def get_analytics(
    session: AsyncSession,
    time_range: Union[str, TimeRange, None] = None,
    now: Optional[datetime] = None
) -> AnalyticsResult:
    """Get the admin analytics for the requested range.

    The current window ``[start, now)`` is compared against the window of the
    same length that ends at ``start``. Reads only; any failure propagates.
    """
    window = resolve_window(time_range, now or utcnow())

    # One AsyncSession cannot run statements concurrently, so these go in turn
    orders = await fetch_revenue_orders(session, window.start, window.now)
    users = await fetch_signups(session, window.start, window.now)
    previous_orders = await fetch_revenue_orders(session, window.previous_start, window.start)
    previous_users = await fetch_signups(session, window.previous_start, window.start)

    ranking = rank_top_sellers(orders)
    products = await fetch_products(session, [product_uid for product_uid, _ in ranking])
    top_selling_products = join_top_sellers(ranking, products)

    recent_orders = await fetch_recent_orders(session)

    logger.debug(
        f"Analytics window {window.start.isoformat()} -> {window.now.isoformat()}: "
        f"{len(orders)} orders, {len(users)} signups"
    )

    return AnalyticsResult(
        **compute_metrics(orders, users, previous_orders, previous_users),
        total_products=len(top_selling_products),
        top_selling_products=top_selling_products,
        recent_orders=[to_recent_order(order) for order in recent_orders],
        sales_data=build_daily_sales(window, orders, users)
    )
