"""
API router.
"""
from fastapi import APIRouter
from app.api.endpoints import health, pages, purchases

api_router = APIRouter()

api_router.include_router(pages.router, tags=["pages"])
api_router.include_router(purchases.router, prefix="/api", tags=["purchases"])
api_router.include_router(health.router, tags=["health"])
