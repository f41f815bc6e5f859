# coastwatch/api/v1/router.py
from fastapi import APIRouter

from coastwatch.api.v1.auth import router as auth_router
from coastwatch.api.v1.users import router as users_router
from coastwatch.api.v1.reports import router as reports_router
from coastwatch.api.v1.alerts import router as alerts_router
from coastwatch.api.v1.dashboard import router as dashboard_router
from coastwatch.api.v1.rpc import router as rpc_router
from coastwatch.api.v1.admin_settings import router as admin_settings_router

api_router = APIRouter()

api_router.include_router(auth_router)
api_router.include_router(users_router)

api_router.include_router(reports_router)
api_router.include_router(alerts_router)
api_router.include_router(dashboard_router)
api_router.include_router(rpc_router)

api_router.include_router(admin_settings_router)
