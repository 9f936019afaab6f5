"""API router combining all route modules."""

from fastapi import APIRouter

from app.api.v1 import health, subscribe

api_router = APIRouter()

# Liveness probe (no auth)
api_router.include_router(health.router)

# Public signup form target, rate limited per client address
api_router.include_router(subscribe.router)
