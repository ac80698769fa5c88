from storefront.admin_dashboard.analytics.schemas import CamelModel

class DashboardStats(CamelModel):
    total_users: int
    user_trend: int
    total_products: int
    product_trend: int
    total_inventory_value: int
    featured_products: int
    on_sale_products: int
    out_of_stock_products: int
    total_orders: int
    order_trend: int
    total_revenue: int
    revenue_trend: int
    total_categories: int

class DashboardStatsResponse(CamelModel):
    success: bool = True
    data: DashboardStats
