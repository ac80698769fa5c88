"""Pure calculations behind the admin analytics endpoint.

Nothing in this module touches the database: every function works on
already-fetched orders, users and products so the aggregation can be
checked without a session.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union
import uuid

from storefront.db.models import Order, Product, User
from .schemas import (
    DEFAULT_TIME_RANGE, DailySales, ProductSummary, TimeRange, TopSellingProduct
)

DAY = timedelta(days=1)
TOP_SELLERS_LIMIT = 10

RANGE_DAYS = {
    TimeRange.LAST_7_DAYS: 7,
    TimeRange.LAST_30_DAYS: 30,
    TimeRange.LAST_90_DAYS: 90,
}


def as_utc(moment: datetime) -> datetime:
    """Naive datetimes are stored as UTC, so tag them rather than convert."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def parse_time_range(token: Union[str, TimeRange, None]) -> TimeRange:
    """Unknown or missing tokens fall back to the default range."""
    try:
        return TimeRange(token)
    except ValueError:
        return DEFAULT_TIME_RANGE


def one_year_before(moment: datetime) -> datetime:
    try:
        return moment.replace(year=moment.year - 1)
    except ValueError:
        # Feb 29 -> Feb 28
        return moment.replace(year=moment.year - 1, day=28)


@dataclass(frozen=True)
class AnalyticsWindow:
    now: datetime
    start: datetime
    previous_start: datetime

    @property
    def duration(self) -> timedelta:
        return self.now - self.start

    @property
    def day_count(self) -> int:
        return math.ceil(self.duration / DAY)


def resolve_window(time_range: Union[str, TimeRange, None], now: datetime) -> AnalyticsWindow:
    """Current window ``[start, now)`` plus the equal-length window before it."""
    now = as_utc(now)
    time_range = parse_time_range(time_range)

    if time_range is TimeRange.LAST_YEAR:
        start = one_year_before(now)
    else:
        start = now - timedelta(days=RANGE_DAYS[time_range])

    return AnalyticsWindow(
        now=now,
        start=start,
        previous_start=start - (now - start),
    )


def calculate_growth(current: float, previous: float) -> float:
    """Percentage change from ``previous`` to ``current``.

    Growth from zero is reported as a flat 100 (or 0 when nothing
    happened in either period) so the result is always finite.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100


@dataclass(frozen=True)
class PeriodTotals:
    revenue: float
    orders: int
    users: int

    @property
    def average_order_value(self) -> float:
        return self.revenue / self.orders if self.orders > 0 else 0.0

    @property
    def conversion_rate(self) -> float:
        return self.orders / self.users * 100 if self.users > 0 else 0.0


def summarize_period(orders: Sequence[Order], users: Sequence[User]) -> PeriodTotals:
    return PeriodTotals(
        revenue=sum(float(order.total or 0) for order in orders),
        orders=len(orders),
        users=len(users),
    )


def compute_metrics(
    current_orders: Sequence[Order],
    current_users: Sequence[User],
    previous_orders: Sequence[Order],
    previous_users: Sequence[User],
) -> dict:
    """Scalar metrics of the current period and their trends against the previous one."""
    current = summarize_period(current_orders, current_users)
    previous = summarize_period(previous_orders, previous_users)

    return {
        "total_revenue": current.revenue,
        "revenue_trend": calculate_growth(current.revenue, previous.revenue),
        "total_orders": current.orders,
        "orders_trend": calculate_growth(current.orders, previous.orders),
        "total_users": current.users,
        "users_trend": calculate_growth(current.users, previous.users),
        "conversion_rate": current.conversion_rate,
        "conversion_trend": calculate_growth(current.conversion_rate, previous.conversion_rate),
        "average_order_value": current.average_order_value,
        "aov_trend": calculate_growth(current.average_order_value, previous.average_order_value),
    }


def _by_sales_then_id(product_uid: uuid.UUID, sales_count: int) -> Tuple[int, str]:
    return (-sales_count, str(product_uid))


def rank_top_sellers(orders: Iterable[Order], limit: int = TOP_SELLERS_LIMIT) -> List[Tuple[uuid.UUID, int]]:
    """Units sold per product, highest first, ties broken by product id."""
    product_sales: Dict[uuid.UUID, int] = {}

    for order in orders:
        for item in order.items:
            product_sales[item.product_uid] = product_sales.get(item.product_uid, 0) + int(item.quantity)

    ranked = sorted(product_sales.items(), key=lambda entry: _by_sales_then_id(*entry))
    return ranked[:limit]


def join_top_sellers(
    ranking: Sequence[Tuple[uuid.UUID, int]],
    products: Iterable[Product],
) -> List[TopSellingProduct]:
    """Attach product records to a ranking.

    Products that no longer exist are dropped. The lookup does not keep
    the ranking order, so the joined rows are sorted again.
    """
    products_by_uid = {product.uid: product for product in products}

    top_products = []
    for product_uid, sales_count in ranking:
        product = products_by_uid.get(product_uid)
        if product is None:
            continue
        top_products.append(TopSellingProduct(
            product=ProductSummary(
                id=product.uid,
                name=product.name,
                price=float(product.price or 0),
                stock=int(product.stock or 0),
            ),
            sales_count=sales_count,
        ))

    top_products.sort(key=lambda row: _by_sales_then_id(row.product.id, row.sales_count))
    return top_products


def bucket_index(window: AnalyticsWindow, moment: datetime) -> Optional[int]:
    moment = as_utc(moment)
    if moment < window.start or moment >= window.now:
        return None
    return (moment - window.start) // DAY


def build_daily_sales(
    window: AnalyticsWindow,
    orders: Iterable[Order],
    users: Iterable[User],
) -> List[DailySales]:
    """Dense per-day series over the window.

    Bucket ``i`` spans ``[start + i days, start + i + 1 days)`` in UTC and is
    labelled with the date it starts on; empty days are kept as zeros.
    """
    buckets = [{"revenue": 0.0, "orders": 0, "users": 0} for _ in range(window.day_count)]

    for order in orders:
        index = bucket_index(window, order.created_at)
        if index is None:
            continue
        buckets[index]["revenue"] += float(order.total or 0)
        buckets[index]["orders"] += 1

    for user in users:
        index = bucket_index(window, user.created_at)
        if index is None:
            continue
        buckets[index]["users"] += 1

    return [
        DailySales(
            date=(window.start + day * DAY).date().isoformat(),
            revenue=bucket["revenue"],
            orders=bucket["orders"],
            users=bucket["users"],
        )
        for day, bucket in enumerate(buckets)
    ]
