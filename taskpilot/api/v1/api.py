"""API v1 router."""

from fastapi import APIRouter

from taskpilot.api.v1.endpoints import actions, credentials, listings

api_router = APIRouter()
api_router.include_router(actions.router, prefix="/actions", tags=["actions"])
api_router.include_router(credentials.router, prefix="/credentials", tags=["credentials"])
api_router.include_router(listings.router, tags=["listings"])
