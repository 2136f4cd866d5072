"""Root API router for v1 endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from outfitter.api.v1 import admin_contracts, bookings, client_contracts, health, hunts, signature
from outfitter.core.config import get_config

api_router = APIRouter(prefix=get_config().API_PREFIX)
api_router.include_router(health.router)
api_router.include_router(client_contracts.router)
api_router.include_router(bookings.router)
api_router.include_router(admin_contracts.router)
api_router.include_router(hunts.router)
api_router.include_router(signature.router)


def get_api_router() -> APIRouter:
    return api_router
