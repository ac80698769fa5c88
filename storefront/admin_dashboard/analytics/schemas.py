from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime
from enum import Enum
import uuid

from storefront.db.models import OrderStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TimeRange(str, Enum):
    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    LAST_90_DAYS = "90d"
    LAST_YEAR = "1y"


DEFAULT_TIME_RANGE = TimeRange.LAST_30_DAYS


class ProductSummary(CamelModel):
    id: uuid.UUID
    name: str
    price: float
    stock: int

class TopSellingProduct(CamelModel):
    product: ProductSummary
    sales_count: int

class OrderLine(CamelModel):
    product_id: uuid.UUID
    quantity: int
    price: float

class RecentOrder(CamelModel):
    id: uuid.UUID
    order_number: str
    user_id: Optional[uuid.UUID] = None
    status: OrderStatus
    total: float
    items: List[OrderLine]
    created_at: datetime

class DailySales(CamelModel):
    date: str
    revenue: float
    orders: int
    users: int

class AnalyticsResult(CamelModel):
    total_revenue: float
    revenue_trend: float
    total_orders: int
    orders_trend: float
    total_users: int
    users_trend: float
    total_products: int
    conversion_rate: float
    conversion_trend: float
    average_order_value: float
    aov_trend: float
    top_selling_products: List[TopSellingProduct]
    recent_orders: List[RecentOrder]
    sales_data: List[DailySales]

class AnalyticsResponse(CamelModel):
    success: bool = True
    data: AnalyticsResult
