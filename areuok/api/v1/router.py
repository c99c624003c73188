from fastapi import APIRouter

from areuok.api.v1.endpoints import devices, health, search, supervision

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router)
api_router.include_router(devices.router)
api_router.include_router(search.router)
api_router.include_router(supervision.router)
