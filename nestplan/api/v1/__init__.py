"""V1 API router aggregation."""

from fastapi import APIRouter

from nestplan.api.v1.activity import router as activity_router
from nestplan.api.v1.api_tokens import router as api_tokens_router
from nestplan.api.v1.budgets import router as budgets_router
from nestplan.api.v1.categories import router as categories_router
from nestplan.api.v1.companies import router as companies_router
from nestplan.api.v1.dashboard import router as dashboard_router
from nestplan.api.v1.items import router as items_router
from nestplan.api.v1.rooms import router as rooms_router
from nestplan.api.v1.savings import router as savings_router
from nestplan.api.v1.tasks import router as tasks_router
from nestplan.api.v1.workspaces import router as workspaces_router

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(workspaces_router)
v1_router.include_router(api_tokens_router)
v1_router.include_router(rooms_router)
v1_router.include_router(categories_router)
v1_router.include_router(companies_router)
v1_router.include_router(items_router)
v1_router.include_router(tasks_router)
v1_router.include_router(budgets_router)
v1_router.include_router(savings_router)
v1_router.include_router(dashboard_router)
v1_router.include_router(activity_router)
