from sqlmodel import select, func, and_
from sqlmodel.ext.asyncio.session import AsyncSession
from datetime import datetime
from typing import Optional, Tuple

from storefront.db.models import Category, Order, Product, User, REVENUE_STATUSES, utcnow
from storefront.admin_dashboard.analytics.metrics import as_utc
from .schemas import DashboardStats


def month_bounds(now: datetime) -> Tuple[datetime, datetime]:
    """Start of last calendar month and start of the current one (UTC)."""
    current_month_start = as_utc(now).replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if current_month_start.month == 1:
        last_month_start = current_month_start.replace(year=current_month_start.year - 1, month=12)
    else:
        last_month_start = current_month_start.replace(month=current_month_start.month - 1)
    return last_month_start, current_month_start


def calculate_share_trend(last_month: float, total: float) -> int:
    """Last month's figure as a percentage of everything that came before it."""
    previous = total - last_month
    if previous == 0:
        return 0
    return round(last_month / previous * 100)


async def count_rows(session: AsyncSession, model, *conditions) -> int:
    query = select(func.count()).select_from(model)
    if conditions:
        query = query.where(and_(*conditions))
    result = await session.exec(query)
    return result.first() or 0


async def sum_revenue(session: AsyncSession, *conditions) -> float:
    query = select(func.sum(Order.total)).where(
        and_(Order.status.in_(REVENUE_STATUSES), *conditions)
    )
    result = await session.exec(query)
    return float(result.first() or 0)


async def get_dashboard_stats(session: AsyncSession, now: Optional[datetime] = None) -> DashboardStats:
    last_month_start, current_month_start = month_bounds(now or utcnow())

    def created_last_month(model):
        return and_(model.created_at >= last_month_start, model.created_at < current_month_start)

    total_users = await count_rows(session, User)
    last_month_users = await count_rows(session, User, created_last_month(User))

    total_products = await count_rows(session, Product)
    last_month_products = await count_rows(session, Product, created_last_month(Product))
    featured_products = await count_rows(session, Product, Product.is_featured == True)  # noqa: E712
    on_sale_products = await count_rows(session, Product, Product.is_on_sale == True)  # noqa: E712
    out_of_stock_products = await count_rows(session, Product, Product.stock == 0)

    inventory_result = await session.exec(select(func.sum(Product.price * Product.stock)))
    total_inventory_value = float(inventory_result.first() or 0)

    total_orders = await count_rows(session, Order)
    last_month_orders = await count_rows(session, Order, created_last_month(Order))

    total_revenue = await sum_revenue(session)
    last_month_revenue = await sum_revenue(session, created_last_month(Order))

    total_categories = await count_rows(session, Category)

    return DashboardStats(
        total_users=total_users,
        user_trend=calculate_share_trend(last_month_users, total_users),
        total_products=total_products,
        product_trend=calculate_share_trend(last_month_products, total_products),
        total_inventory_value=round(total_inventory_value),
        featured_products=featured_products,
        on_sale_products=on_sale_products,
        out_of_stock_products=out_of_stock_products,
        total_orders=total_orders,
        order_trend=calculate_share_trend(last_month_orders, total_orders),
        total_revenue=round(total_revenue),
        revenue_trend=calculate_share_trend(last_month_revenue, total_revenue),
        total_categories=total_categories
    )
