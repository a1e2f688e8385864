from fastapi import APIRouter
from app.api.endpoints import health, oracle

api_router = APIRouter()

# Combine all sub-routers into one
api_router.include_router(health.router)
api_router.include_router(oracle.router)
