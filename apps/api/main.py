"""
Main API router for RentFlow
"""
from fastapi import APIRouter

from apps.api.routers.clients import router as clients_router
from apps.api.routers.orders import router as orders_router
from apps.api.routers.products import router as products_router
from apps.api.routers.reports import router as reports_router
from apps.api.routers.task_rates import router as task_rates_router
from apps.api.routers.violations import router as violations_router
from apps.api.routers.worker_tasks import router as worker_tasks_router
from apps.api.routers.workers import router as workers_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(clients_router)
api_router.include_router(products_router)
api_router.include_router(orders_router)
api_router.include_router(workers_router)
api_router.include_router(worker_tasks_router)
api_router.include_router(task_rates_router)
api_router.include_router(violations_router)
api_router.include_router(reports_router)
