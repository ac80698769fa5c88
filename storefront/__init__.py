from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends

from storefront.db.main import init_db
from storefront.auth.dependencies import admin_role_checker

from storefront.admin_dashboard.analytics.routes import analytics_router
from storefront.admin_dashboard.stats.routes import stats_router

from .errors import register_all_errors
from .admin_dashboard.middleware import register_middleware


@asynccontextmanager
async def life_span(app: FastAPI):
    await init_db()
    yield


version = "v1"

app = FastAPI(
    title = "Storefront Admin",
    description = "Admin analytics API for the fashion storefront",
    version = version,
    lifespan = life_span,
)


register_all_errors(app)
register_middleware(app)


app.include_router(analytics_router, prefix="/api/admin", tags=["admin analytics"], dependencies=[Depends(admin_role_checker)])
app.include_router(stats_router, prefix="/api/admin", tags=["admin stats"], dependencies=[Depends(admin_role_checker)])
