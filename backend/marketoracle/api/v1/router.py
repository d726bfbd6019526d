from fastapi import APIRouter

from marketoracle.api.v1.resolution import router as resolution_router
from marketoracle.api.v1.system import router as system_router

api_router = APIRouter()
api_router.include_router(system_router)
api_router.include_router(resolution_router)
